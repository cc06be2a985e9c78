"""
In-memory form of the persisted env file.

Every entry keeps the exact text it was parsed from, line terminator included,
so an unmodified document serializes back to the same bytes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from env_guard.exceptions import ConfigParseError
from env_guard.validation import KEY_PATTERN

logger = logging.getLogger("env_guard.store")
logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class Entry:
    raw: str
    key: Optional[str] = None
    value: Optional[str] = None

    @property
    def is_pair(self) -> bool:
        return self.key is not None

    @property
    def line_ending(self) -> str:
        if self.raw.endswith("\r\n"):
            return "\r\n"
        if self.raw.endswith("\n"):
            return "\n"
        return ""

    @classmethod
    def pair(cls, key: str, value: str, line_ending: str = "\n") -> "Entry":
        return cls(raw=f"{key}={format_value(value)}{line_ending}", key=key, value=value)


class ConfigDocument:
    def __init__(self, entries: Sequence[Entry] = (), path: Optional[str] = None) -> None:
        self._entries: Tuple[Entry, ...] = tuple(entries)
        self.path = path

    @classmethod
    def parse(cls, text: str, path: Optional[str] = None) -> "ConfigDocument":
        source = path or "<string>"
        entries: List[Entry] = []
        for line_no, raw in enumerate(_split_lines(text), start=1):
            body = raw.rstrip("\n")
            if body.endswith("\r"):
                body = body[:-1]
            try:
                parsed = _parse_line(body)
            except ValueError as exc:
                logger.error("Parse error at %s:%d: %s", source, line_no, exc)
                raise ConfigParseError(source, line_no, raw, str(exc)) from None
            if parsed is None:
                entries.append(Entry(raw=raw))
            else:
                entries.append(Entry(raw=raw, key=parsed[0], value=parsed[1]))
        logger.debug("Parsed %s: %d entries", source, len(entries))
        return cls(entries, path)

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return self._entries

    def serialize(self) -> str:
        return "".join(e.raw for e in self._entries)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        # A hand-edited file may repeat a key; the last occurrence wins, as in a shell.
        for entry in reversed(self._entries):
            if entry.key == key:
                return entry.value
        return default

    def keys(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for entry in self._entries:
            if entry.key is not None:
                seen.setdefault(entry.key, None)
        return tuple(seen)

    def as_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for entry in self._entries:
            if entry.key is not None and entry.value is not None:
                out[entry.key] = entry.value
        return out

    def replace_entries(self, entries: Sequence[Entry]) -> "ConfigDocument":
        return ConfigDocument(entries, self.path)

    def __contains__(self, key: object) -> bool:
        return any(e.key == key for e in self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"<ConfigDocument path={self.path!r} entries={len(self._entries)}>"


def parse_document(text: str, path: Optional[str] = None) -> ConfigDocument:
    return ConfigDocument.parse(text, path)


def serialize_document(doc: ConfigDocument) -> str:
    return doc.serialize()


def format_value(value: str) -> str:
    """Render a value for the right-hand side of ``KEY=``, quoting only when needed."""
    if not any(c.isspace() for c in value) and not value.startswith(("'", '"')):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _split_lines(text: str) -> List[str]:
    pieces = text.split("\n")
    lines = [p + "\n" for p in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def _parse_line(body: str) -> Optional[Tuple[str, str]]:
    stripped = body.strip()
    if not stripped or stripped.startswith("#"):
        return None
    name, sep, rest = body.partition("=")
    if not sep:
        raise ValueError("missing '='")
    name = name.strip()
    if not KEY_PATTERN.fullmatch(name):
        raise ValueError(f"invalid key {name!r}")
    return name, _parse_value(rest)


def _parse_value(rest: str) -> str:
    lead = rest.lstrip()
    if lead.startswith('"'):
        out: List[str] = []
        i = 1
        while i < len(lead):
            c = lead[i]
            if c == "\\" and i + 1 < len(lead) and lead[i + 1] in '"\\':
                out.append(lead[i + 1])
                i += 2
                continue
            if c == '"':
                _check_tail(lead[i + 1 :])
                return "".join(out)
            out.append(c)
            i += 1
        raise ValueError("unterminated double quote")
    if lead.startswith("'"):
        end = lead.find("'", 1)
        if end < 0:
            raise ValueError("unterminated single quote")
        _check_tail(lead[end + 1 :])
        return lead[1:end]
    return rest


def _check_tail(tail: str) -> None:
    if tail.strip():
        raise ValueError("unexpected text after closing quote")

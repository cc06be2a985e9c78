from .adaptors import PersistenceAdapterProtocol
from .document import ConfigDocument, Entry, format_value, parse_document, serialize_document
from .manager import EnvFileStore, default_store_path

__all__ = [
    "ConfigDocument",
    "Entry",
    "EnvFileStore",
    "PersistenceAdapterProtocol",
    "default_store_path",
    "format_value",
    "parse_document",
    "serialize_document",
]

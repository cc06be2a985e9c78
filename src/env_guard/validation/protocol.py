from typing import Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class ValidatorProtocol(Protocol):
    def __call__(self, value: str) -> bool:  # False rejects the value
        ...

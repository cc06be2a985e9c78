from typing import ContextManager, Protocol

from typing_extensions import runtime_checkable

from .document import ConfigDocument


@runtime_checkable
class PersistenceAdapterProtocol(Protocol):
    def load(self) -> ConfigDocument: ...

    def save(self, doc: ConfigDocument) -> None: ...

    def transaction(self) -> ContextManager[ConfigDocument]: ...

"""Key/value store protocol: local persistence."""
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Abstract interface for namespaced, synchronous key/value persistence."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> bool: ...

    def remove(self, key: str) -> bool: ...

    def clear(self) -> bool: ...

"""Key-value storage port (in-memory or local filesystem)."""

from __future__ import annotations

from typing import Protocol

from roomplan.storage.local import LocalStorage
from roomplan.storage.memory import MemoryStorage


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def clear(self) -> None:
        ...


__all__ = ["KeyValueStorage", "LocalStorage", "MemoryStorage"]

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from roomplan.editor.document import LayoutDocument
from roomplan.persistence import LayoutStore
from roomplan.schema import GridConfig, LayoutSnapshot


class LayoutSession:
    """The layout served by one API instance, persisted after every edit."""

    def __init__(self, store: LayoutStore, config: GridConfig) -> None:
        self.store = store
        self.base_config = config
        self._lock = threading.Lock()
        self.document = LayoutDocument.load(store, config)

    @contextmanager
    def edit(self) -> Iterator[LayoutDocument]:
        with self._lock:
            yield self.document
            if not self.document.save(self.store):
                logger.warning("Layout changes were applied but not fully persisted")

    def snapshot(self) -> LayoutSnapshot:
        with self._lock:
            return self.store.snapshot()

    def export_layout(self) -> str:
        with self._lock:
            return self.store.export_layout()

    def import_layout(self, text: str) -> bool:
        with self._lock:
            if not self.store.import_layout(text):
                return False
            self.document = LayoutDocument.load(self.store, self.base_config)
            return True


__all__ = ["LayoutSession"]

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .errors import PersistenceError
from .interfaces import KeyValueDocumentStore
from .json_store import atomic_write_json, read_json
from .locks import GLOBAL_PATH_LOCKS

logger = logging.getLogger(__name__)


class DiskJsonDocumentStore(KeyValueDocumentStore):
    """
    Stores a single JSON document on disk at a fixed path.

    - ``read()`` returns None on missing/invalid JSON or a non-object root.
    - ``load()`` always returns a dict (empty dict in those cases).
    - Writes atomically; failures surface as PersistenceError.
    """

    def __init__(self, path: Path, *, debug_log_io: bool = False):
        self._path = path
        self._debug_log_io = debug_log_io

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def read(self) -> dict[str, Any] | None:
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            raw = read_json(self._path)
        if self._debug_log_io:
            logger.info("STORE READ %s: %r", self._path, raw)
        return raw if isinstance(raw, dict) else None

    def load(self) -> dict[str, Any]:
        doc = self.read()
        return doc if doc is not None else {}

    def save(self, doc: dict[str, Any]) -> None:
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            try:
                atomic_write_json(self._path, doc)
            except (OSError, TypeError, ValueError) as e:
                raise PersistenceError(self._path, f"Failed to write store file ({e})") from e
        if self._debug_log_io:
            logger.info("STORE WRITE %s: %r", self._path, doc)

    def load_or_heal(self, fallback: dict[str, Any]) -> dict[str, Any]:
        """
        Load the document; when it is missing or corrupt, rewrite ``fallback`` so later
        readers see a valid file, and return it.
        """
        lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        with lock:
            doc = self.read()
            if doc is not None:
                return doc
            if self.exists():
                logger.warning("STORE READ: %s is corrupt; restoring fallback document", self._path)
            try:
                self.save(fallback)
            except PersistenceError as e:
                logger.warning("STORE HEAL: failed to write %s: %r", self._path, e)
            return fallback

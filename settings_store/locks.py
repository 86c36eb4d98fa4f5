from __future__ import annotations

import threading
from pathlib import Path


class PathLockRegistry:
    """
    Provides a stable lock per normalized file path, so two store instances for the
    same file in one process never interleave a load with a save.

    Entries are never evicted: the registry holds one lock per distinct path opened
    during the process lifetime, which stays small for settings files.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def lock_for(self, path: Path) -> threading.RLock:
        key = str(path.resolve())
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock


GLOBAL_PATH_LOCKS = PathLockRegistry()

from __future__ import annotations

from pathlib import Path


class StoreError(Exception):
    """Base class for every error raised by settings_store."""


class InitializationError(StoreError):
    """The host service or the main-process bridge is not available."""


class PersistenceError(StoreError):
    def __init__(self, path: Path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = path


class ContractViolation(StoreError, TypeError):
    """An argument has the wrong shape (e.g. a non-string key path)."""


class ShellActionError(StoreError):
    pass


class ChangeCallbackError(StoreError):
    """
    One or more change observers raised.

    Every observer is still attempted; the collected exceptions are available on
    ``errors`` in the order they were raised.
    """

    def __init__(self, errors: list[Exception]):
        self.errors = list(errors)
        first = self.errors[0] if self.errors else None
        super().__init__(f"{len(self.errors)} change callback(s) failed; first: {first!r}")

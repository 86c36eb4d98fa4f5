"""
Keeps a store's in-memory cache and its file on disk coherent.

Two policies are supported, chosen per store:

``DISK_AUTHORITATIVE`` (default)
    Every read re-reads the file, and every mutation starts from a fresh disk
    read. External edits and other writers are observed on the next call. The
    old/new pair handed to observers always comes from disk, never from a
    possibly stale cache.

``CACHE_AUTHORITATIVE``
    The file is read once at initialization; after that the cache is ground
    truth and every mutation writes through. Only safe when this instance is
    the sole writer of its file and nobody edits it by hand: external changes
    are never observed and are overwritten by the next mutation.

Under both policies the cache only advances after a successful write, so a
failed write leaves cache and disk agreeing on the previous document.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Mapping

from .disk_store import DiskJsonDocumentStore
from .dot_path import JsonDocument, clone_document, deep_equal
from .locks import GLOBAL_PATH_LOCKS

logger = logging.getLogger(__name__)

Change = Callable[[JsonDocument], JsonDocument]
ExternalChangeHook = Callable[[JsonDocument, JsonDocument], None]


class ConsistencyPolicy(str, Enum):
    DISK_AUTHORITATIVE = "disk"
    CACHE_AUTHORITATIVE = "cache"


def merge_defaults(defaults: Mapping[str, Any], on_disk: Mapping[str, Any]) -> JsonDocument:
    """Per top-level field: disk values win, defaults fill in the fields disk lacks."""
    merged = clone_document(defaults)
    merged.update(clone_document(on_disk))
    return merged


class ConsistencyEngine:
    def __init__(
        self,
        disk: DiskJsonDocumentStore,
        *,
        policy: ConsistencyPolicy | str = ConsistencyPolicy.DISK_AUTHORITATIVE,
        fallback: Mapping[str, Any] | None = None,
        on_external_change: ExternalChangeHook | None = None,
    ):
        self._disk = disk
        self._policy = ConsistencyPolicy(policy)
        self._fallback = clone_document(fallback or {})
        self._on_external_change = on_external_change
        self._cache: JsonDocument = {}

    @property
    def policy(self) -> ConsistencyPolicy:
        return self._policy

    def initialize(self, defaults: Mapping[str, Any] | None = None) -> JsonDocument:
        """
        Read the file once, merge ``defaults`` under it, and make sure the file exists.

        The merged document is written when the file was missing or corrupt, or when
        defaults contributed fields the file did not have.
        """
        with GLOBAL_PATH_LOCKS.lock_for(self._disk.path):
            on_disk = self._disk.read()
            if on_disk is None and self._disk.exists():
                logger.warning("STORE INIT: %s is corrupt; starting from defaults", self._disk.path)
            merged = merge_defaults(defaults or {}, on_disk or {})
            if on_disk is None or not deep_equal(merged, on_disk):
                self._disk.save(merged)
            self._cache = merged
            logger.debug("STORE INIT: %s (%d top-level keys, policy=%s)", self._disk.path, len(merged), self._policy.value)
            return clone_document(merged)

    def snapshot(self) -> JsonDocument:
        """
        The document a read must observe. Callers must not mutate the returned dict.
        """
        if self._policy is ConsistencyPolicy.CACHE_AUTHORITATIVE:
            return self._cache
        return self._refresh()

    def _refresh(self) -> JsonDocument:
        with GLOBAL_PATH_LOCKS.lock_for(self._disk.path):
            on_disk = self._disk.load_or_heal(clone_document(self._fallback))
            if deep_equal(on_disk, self._cache):
                return self._cache
            previous, self._cache = self._cache, on_disk
        logger.debug("STORE REFRESH: %s changed on disk", self._disk.path)
        if self._on_external_change is not None:
            self._on_external_change(clone_document(previous), clone_document(on_disk))
        return self._cache

    def mutate(self, change: Change) -> tuple[JsonDocument, JsonDocument]:
        """
        Apply ``change`` to a copy of the current document and write the result.

        Returns ``(old, new)`` snapshots. Raises PersistenceError (cache untouched) when
        the write fails.
        """
        with GLOBAL_PATH_LOCKS.lock_for(self._disk.path):
            old = self.snapshot()
            new = clone_document(change(clone_document(old)))
            self._disk.save(new)
            self._cache = new
            return clone_document(old), clone_document(new)

    def replace(self, doc: Mapping[str, Any]) -> tuple[JsonDocument, JsonDocument]:
        return self.mutate(lambda _current: dict(doc))

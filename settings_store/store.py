from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import bridge
from .consistency import Change, ConsistencyEngine, ConsistencyPolicy
from .disk_store import DiskJsonDocumentStore
from .dot_path import (
    JsonDocument,
    clone_document,
    delete_property,
    get_property,
    has_property,
    set_property,
)
from .errors import ChangeCallbackError, ContractViolation, ShellActionError
from .host import Host, get_host
from .notify import ChangeNotifier, OnDidAnyChangeCallback, OnDidChangeCallback, Unsubscribe
from .paths import path_provider_for, resolve_store_path
from .settings import get_settings

logger = logging.getLogger(__name__)

_MISSING = object()


class StoreOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    defaults: dict[str, Any] = Field(default_factory=dict)
    name: str = "config"
    cwd: Path | None = None
    watch: bool = True
    consistency: ConsistencyPolicy = ConsistencyPolicy.DISK_AUTHORITATIVE
    file_extension: str = "json"
    dot_notation: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v


class Store:
    """
    Persistent JSON settings with dot-notation access and change observers.

    Construction resolves the file path (through the main-process bridge when
    running as a renderer), then reads the file once, merges ``defaults`` under
    it and writes the result if the file was missing or lacked default fields.

    Every accessor and mutator is synchronous: when ``set``/``delete``/``clear``
    return, the file on disk already holds the new document and observers have
    been called. See ``settings_store.consistency`` for the two cache policies.

    Keys are dot paths (``"window.bounds.width"``); a key that itself contains a
    ``.`` cannot be addressed unless the store is created with
    ``dot_notation=False``.
    """

    def __init__(
        self,
        *,
        defaults: Mapping[str, Any] | None = None,
        name: str = "config",
        cwd: str | Path | None = None,
        watch: bool = True,
        consistency: ConsistencyPolicy | str = ConsistencyPolicy.DISK_AUTHORITATIVE,
        file_extension: str = "json",
        dot_notation: bool = True,
        host: Host | None = None,
    ):
        try:
            self._options = StoreOptions(
                defaults=defaults or {},
                name=name,
                cwd=cwd,
                watch=watch,
                consistency=consistency,
                file_extension=file_extension,
                dot_notation=dot_notation,
            )
        except ValidationError as e:
            raise ContractViolation(f"Invalid store options: {e}") from e

        self._host = host or get_host()
        provider = path_provider_for(self._host)
        self._path = resolve_store_path(
            provider.default_base_dir(),
            name=self._options.name,
            cwd=self._options.cwd,
            file_extension=self._options.file_extension,
        )
        self._project_version = provider.app_version()
        self._defaults: JsonDocument = clone_document(self._options.defaults)
        self._dot = self._options.dot_notation

        self._notifier = ChangeNotifier(dot_notation=self._dot)
        disk = DiskJsonDocumentStore(self._path, debug_log_io=get_settings().debug_log_io)
        self._engine = ConsistencyEngine(
            disk,
            policy=self._options.consistency,
            fallback=self._defaults,
            on_external_change=self._handle_external_change if self._options.watch else None,
        )
        self._engine.initialize(self._defaults)

    def __repr__(self) -> str:
        return f"Store(path={str(self._path)!r}, consistency={self._engine.policy.value!r})"

    # --- identity -------------------------------------------------------

    @property
    def path(self) -> Path:
        return self._path

    @property
    def project_version(self) -> str:
        return self._project_version

    @property
    def consistency(self) -> ConsistencyPolicy:
        return self._engine.policy

    # --- whole document -------------------------------------------------

    @property
    def store(self) -> JsonDocument:
        return clone_document(self._engine.snapshot())

    @store.setter
    def store(self, value: Mapping[str, Any]) -> None:
        if not isinstance(value, Mapping):
            raise ContractViolation(f"Expected store to be a mapping, got {type(value).__name__}")
        self._commit(lambda _current: dict(value))

    @property
    def size(self) -> int:
        return len(self._engine.snapshot())

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        # Top-level pairs of the document as it is right now.
        return iter(list(self.store.items()))

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    # --- field access ---------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        value = get_property(self._engine.snapshot(), key, _MISSING, dot_notation=self._dot)
        if value is _MISSING:
            return default
        return clone_document(value)

    def set(self, key: str | Mapping[str, Any], value: Any = _MISSING) -> None:
        """
        ``set(key, value)`` stores one value; ``set(mapping)`` stores each item by its key path.
        """
        if isinstance(key, Mapping):
            if value is not _MISSING:
                raise ContractViolation("set(mapping) does not take a value argument")
            items = list(key.items())
            for k, _ in items:
                if not isinstance(k, str):
                    raise ContractViolation(f"Expected key to be a string, got {type(k).__name__}")

            def change(doc: JsonDocument) -> JsonDocument:
                for k, v in items:
                    doc = set_property(doc, k, v, dot_notation=self._dot)
                return doc

        elif isinstance(key, str):
            if value is _MISSING:
                raise ContractViolation("set() needs a value; use delete() to remove a key")

            def change(doc: JsonDocument) -> JsonDocument:
                return set_property(doc, key, value, dot_notation=self._dot)

        else:
            raise ContractViolation(f"Expected a key string or a mapping, got {type(key).__name__}")

        self._commit(change)

    def has(self, key: str) -> bool:
        return has_property(self._engine.snapshot(), key, dot_notation=self._dot)

    def delete(self, key: str) -> bool:
        """Remove the field at ``key``; returns whether it was present."""
        if not isinstance(key, str):
            raise ContractViolation(f"Expected key to be a string, got {type(key).__name__}")
        deleted = False

        def change(doc: JsonDocument) -> JsonDocument:
            nonlocal deleted
            doc, deleted = delete_property(doc, key, dot_notation=self._dot)
            return doc

        self._commit(change)
        return deleted

    def clear(self) -> None:
        self._commit(lambda _current: {})

    def reset(self, *keys: str) -> None:
        """Put each key back to its default value, or remove it when it has none."""
        for k in keys:
            if not isinstance(k, str):
                raise ContractViolation(f"Expected key to be a string, got {type(k).__name__}")

        def change(doc: JsonDocument) -> JsonDocument:
            for k in keys:
                if has_property(self._defaults, k, dot_notation=self._dot):
                    doc = set_property(doc, k, get_property(self._defaults, k, dot_notation=self._dot), dot_notation=self._dot)
                else:
                    doc, _ = delete_property(doc, k, dot_notation=self._dot)
            return doc

        self._commit(change)

    # --- observers ------------------------------------------------------

    def on_did_change(self, key: str, callback: OnDidChangeCallback) -> Unsubscribe:
        """Call ``callback(new_value, old_value)`` whenever the value at ``key`` changes."""
        return self._notifier.on_did_change(key, callback)

    def on_did_any_change(self, callback: OnDidAnyChangeCallback) -> Unsubscribe:
        """Call ``callback(new_document, old_document)`` whenever anything changes."""
        return self._notifier.on_did_any_change(callback)

    def _commit(self, change: Change) -> None:
        old, new = self._engine.mutate(change)
        self._notifier.dispatch(old, new)

    def _handle_external_change(self, old: JsonDocument, new: JsonDocument) -> None:
        # Nobody called us for this change, so observer failures are logged, not raised.
        try:
            self._notifier.dispatch(old, new)
        except ChangeCallbackError:
            logger.exception("STORE WATCH: observers failed for external change to %s", self._path)

    # --- shell ----------------------------------------------------------

    async def open_in_editor(self) -> None:
        shell = self._host.shell
        if shell is None:
            raise ShellActionError("Failed to open store file: host has no shell")
        error = await shell.open_path(str(self._path))
        if error:
            raise ShellActionError(f"Failed to open store file: {error}")

    # --- main/renderer bridge -------------------------------------------

    @staticmethod
    def init_renderer(host: Host | None = None) -> dict[str, Any]:
        """Serve the user data directory and app version to renderer processes."""
        return bridge.init_renderer(host)

    @staticmethod
    def cleanup_main() -> None:
        bridge.cleanup_main()

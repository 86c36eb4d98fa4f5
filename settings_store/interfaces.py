from __future__ import annotations

from typing import Any, Callable, Protocol


class KeyValueDocumentStore(Protocol):
    """
    Minimal interface: a single JSON-like document persisted under a key.
    """

    def load(self) -> dict[str, Any]:
        """Load and return the full document (never None)."""
        ...

    def save(self, doc: dict[str, Any]) -> None:
        """Persist the full document atomically."""
        ...


class HostApp(Protocol):
    """Identity/path service of the privileged process."""

    def get_path(self, name: str) -> str: ...
    def is_ready(self) -> bool: ...
    def get_version(self) -> str: ...


class MainChannel(Protocol):
    def register_sync_responder(self, channel: str, handler: Callable[..., Any]) -> None: ...
    def unregister_responder(self, channel: str) -> None: ...


class RendererChannel(Protocol):
    def send_sync(self, channel: str, *args: Any) -> Any: ...


class Shell(Protocol):
    async def open_path(self, path: str) -> str:
        """Open ``path`` with the default application; returns an error message or ''."""
        ...


class PathProvider(Protocol):
    """Where a store's documents live by default, and which app version owns them."""

    def default_base_dir(self) -> str: ...
    def app_version(self) -> str: ...

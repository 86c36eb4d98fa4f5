from __future__ import annotations

import os
from pathlib import Path

from .bridge import fetch_bridge_data
from .errors import InitializationError
from .host import Host
from .interfaces import HostApp, PathProvider, RendererChannel


class DirectPathProvider(PathProvider):
    """Privileged role: asks the host app directly."""

    def __init__(self, app: HostApp | None):
        if app is None:
            raise InitializationError("Host app is not available in the main process")
        if not app.is_ready():
            raise InitializationError("Host app is not ready; cannot resolve the user data directory")
        self._app = app

    def default_base_dir(self) -> str:
        return self._app.get_path("userData")

    def app_version(self) -> str:
        return self._app.get_version()


class BridgePathProvider(PathProvider):
    """Non-privileged role: one synchronous request to the main process, at construction."""

    def __init__(self, channel: RendererChannel | None):
        self._payload = fetch_bridge_data(channel)

    def default_base_dir(self) -> str:
        return self._payload.default_base_dir

    def app_version(self) -> str:
        return self._payload.app_version


def path_provider_for(host: Host) -> PathProvider:
    if host.is_renderer:
        return BridgePathProvider(host.ipc_renderer)
    return DirectPathProvider(host.app)


def resolve_store_path(
    base_dir: str | Path,
    *,
    name: str = "config",
    cwd: str | Path | None = None,
    file_extension: str = "json",
) -> Path:
    """
    Return the absolute path of a store document: ``<base>/<name>.<ext>``.

    An absolute ``cwd`` replaces ``base_dir``; a relative one is joined onto it.
    """
    base = Path(base_dir)
    if cwd is not None and str(cwd) != "":
        cwd_path = Path(cwd).expanduser()
        base = cwd_path if cwd_path.is_absolute() else base / cwd_path
    ext = file_extension.lstrip(".")
    filename = f"{name}.{ext}" if ext else name
    return Path(os.path.abspath(base / filename))

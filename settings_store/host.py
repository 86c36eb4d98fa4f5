"""
Host services a store depends on, and the process role it runs in.

A privileged ("main") process talks to the host app directly. A "renderer"
process has no app handle and must go through the synchronous bridge channel
served by the main process.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
import sys
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv

from .interfaces import HostApp, MainChannel, RendererChannel, Shell
from .settings import ProcessType, Settings, get_settings

logger = logging.getLogger(__name__)


class LocalApp(HostApp):
    """Host identity backed by environment settings."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _user_data_dir(self) -> Path:
        if self._settings.user_data_dir:
            return Path(self._settings.user_data_dir).expanduser()
        return Path.home() / f".{self._settings.app_name}"

    def get_path(self, name: str) -> str:
        if name == "userData":
            return str(self._user_data_dir())
        if name == "home":
            return str(Path.home())
        if name == "temp":
            return tempfile.gettempdir()
        return str(self._user_data_dir() / name)

    def is_ready(self) -> bool:
        return True

    def get_version(self) -> str:
        return self._settings.app_version


class InProcessChannel(MainChannel, RendererChannel):
    """
    Synchronous request/response channel for hosts where both roles share one
    interpreter. ``send_sync`` raises LookupError when nobody answers.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._handlers: dict[str, Callable[..., Any]] = {}

    def register_sync_responder(self, channel: str, handler: Callable[..., Any]) -> None:
        with self._guard:
            self._handlers[channel] = handler

    def unregister_responder(self, channel: str) -> None:
        with self._guard:
            self._handlers.pop(channel, None)

    def has_responder(self, channel: str) -> bool:
        with self._guard:
            return channel in self._handlers

    def send_sync(self, channel: str, *args: Any) -> Any:
        with self._guard:
            handler = self._handlers.get(channel)
        if handler is None:
            raise LookupError(f"No responder registered on channel {channel!r}")
        return handler(*args)


class SystemShell(Shell):
    """Opens files with the platform's default application, off the event loop."""

    async def open_path(self, path: str) -> str:
        return await asyncio.to_thread(self._open_blocking, path)

    @staticmethod
    def _open_blocking(path: str) -> str:
        if not Path(path).exists():
            return f"File does not exist: {path}"
        try:
            if sys.platform.startswith("win"):
                os.startfile(path)  # type: ignore[attr-defined]
            else:
                opener = "open" if sys.platform == "darwin" else "xdg-open"
                subprocess.Popen(
                    [opener, path],
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
        except OSError as e:
            return str(e)
        return ""


@dataclass
class Host:
    process_type: ProcessType = "main"
    app: HostApp | None = None
    ipc_main: MainChannel | None = None
    ipc_renderer: RendererChannel | None = None
    shell: Shell | None = None

    @property
    def is_renderer(self) -> bool:
        return self.process_type == "renderer"


# Both roles of a single-interpreter host share this channel.
GLOBAL_CHANNEL = InProcessChannel()

_HOST: Host | None = None
_HOST_LOCK = threading.Lock()


def default_host(env_file: str = "local.env") -> Host:
    load_dotenv(env_file)
    settings = get_settings()
    is_main = settings.process_type == "main"
    return Host(
        process_type=settings.process_type,
        # Renderers have no direct handle on the host app.
        app=LocalApp(settings) if is_main else None,
        ipc_main=GLOBAL_CHANNEL,
        ipc_renderer=GLOBAL_CHANNEL,
        shell=SystemShell(),
    )


def get_host() -> Host:
    global _HOST
    with _HOST_LOCK:
        if _HOST is None:
            _HOST = default_host()
            logger.debug("HOST: built default host (process_type=%s)", _HOST.process_type)
        return _HOST


def set_host(host: Host) -> Host | None:
    """Install ``host`` as the process-wide host; returns the previous one."""
    global _HOST
    with _HOST_LOCK:
        previous, _HOST = _HOST, host
        return previous


def reset_host() -> None:
    global _HOST
    with _HOST_LOCK:
        _HOST = None

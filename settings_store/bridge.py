"""
Synchronous bridge that lets renderer processes learn the main process's
user data directory and app version.

State machine: Uninitialized --init_renderer()--> Initialized --cleanup_main()--> Uninitialized
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import InitializationError
from .host import Host, get_host
from .interfaces import MainChannel, RendererChannel

logger = logging.getLogger(__name__)

BRIDGE_CHANNEL = "settings-store-get-data"

_NOT_INITIALIZED_HINT = (
    "Call Store.init_renderer() in the main process before creating a Store in a renderer process"
)


class BridgePayload(BaseModel):
    default_base_dir: str
    app_version: str


_lock = threading.Lock()
_payload: BridgePayload | None = None
_registered_on: MainChannel | None = None


def main_payload(host: Host) -> BridgePayload:
    app = host.app
    if app is None or not app.is_ready():
        raise InitializationError("Host app is not available; cannot resolve the user data directory")
    return BridgePayload(default_base_dir=app.get_path("userData"), app_version=app.get_version())


def init_renderer(host: Host | None = None) -> dict[str, Any]:
    """
    Register the bridge responder on the main process channel.

    Idempotent: a second call returns the same payload without registering again.
    """
    global _payload, _registered_on
    with _lock:
        if _payload is not None:
            return _payload.model_dump()

        host = host or get_host()
        if host.is_renderer:
            raise InitializationError("init_renderer() must be called from the main process")
        if host.ipc_main is None:
            raise InitializationError("Host has no main-process channel; cannot serve renderers")

        payload = main_payload(host)

        def _respond(*_args: Any) -> dict[str, Any]:
            return payload.model_dump()

        host.ipc_main.register_sync_responder(BRIDGE_CHANNEL, _respond)
        _payload, _registered_on = payload, host.ipc_main
        logger.info("BRIDGE: serving %s on %r", payload.default_base_dir, BRIDGE_CHANNEL)
        return payload.model_dump()


def cleanup_main() -> None:
    """Remove the bridge responder. No-op when the bridge is not initialized."""
    global _payload, _registered_on
    with _lock:
        if _registered_on is None:
            return
        _registered_on.unregister_responder(BRIDGE_CHANNEL)
        _payload, _registered_on = None, None
        logger.info("BRIDGE: responder on %r removed", BRIDGE_CHANNEL)


def is_initialized() -> bool:
    with _lock:
        return _payload is not None


def fetch_bridge_data(channel: RendererChannel | None) -> BridgePayload:
    if channel is None:
        raise InitializationError(f"Host has no renderer channel. {_NOT_INITIALIZED_HINT}")
    try:
        raw = channel.send_sync(BRIDGE_CHANNEL)
    except Exception as e:
        raise InitializationError(f"Could not get app data from the main process ({e}). {_NOT_INITIALIZED_HINT}") from e
    if raw is None:
        raise InitializationError(f"Main process did not answer on {BRIDGE_CHANNEL!r}. {_NOT_INITIALIZED_HINT}")
    try:
        return BridgePayload.model_validate(raw)
    except ValidationError as e:
        raise InitializationError(f"Malformed app data from the main process. {_NOT_INITIALIZED_HINT}") from e

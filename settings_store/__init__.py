"""
Persistent JSON settings for main/renderer style applications.

A ``Store`` keeps one JSON document per file, gives dot-notation access to
nested fields, and notifies observers synchronously when values change.
"""

from __future__ import annotations

from .bridge import BRIDGE_CHANNEL, BridgePayload, cleanup_main, init_renderer
from .consistency import ConsistencyEngine, ConsistencyPolicy
from .errors import (
    ChangeCallbackError,
    ContractViolation,
    InitializationError,
    PersistenceError,
    ShellActionError,
    StoreError,
)
from .host import Host, InProcessChannel, LocalApp, SystemShell, get_host, reset_host, set_host
from .store import Store, StoreOptions

__all__ = [
    "Store",
    "StoreOptions",
    "ConsistencyEngine",
    "ConsistencyPolicy",
    "Host",
    "LocalApp",
    "InProcessChannel",
    "SystemShell",
    "get_host",
    "set_host",
    "reset_host",
    "BRIDGE_CHANNEL",
    "BridgePayload",
    "init_renderer",
    "cleanup_main",
    "StoreError",
    "InitializationError",
    "PersistenceError",
    "ContractViolation",
    "ShellActionError",
    "ChangeCallbackError",
]

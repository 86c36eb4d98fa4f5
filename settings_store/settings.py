from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

ProcessType = Literal["main", "renderer"]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # Role of the current process
    process_type: ProcessType

    # Host identity
    user_data_dir: str | None
    app_name: str
    app_version: str

    # Debug
    debug_log_io: bool


def get_settings() -> Settings:
    process_type = os.getenv("SETTINGS_STORE_PROCESS_TYPE", "main").strip().lower()
    if process_type not in ("main", "renderer"):
        process_type = "main"

    user_data_dir = os.getenv("SETTINGS_STORE_USER_DATA_DIR", "").strip() or None

    app_name = os.getenv("SETTINGS_STORE_APP_NAME", "settings-store").strip() or "settings-store"
    app_version = os.getenv("SETTINGS_STORE_APP_VERSION", "0.0.0").strip() or "0.0.0"

    debug_log_io = _env_bool("SETTINGS_STORE_DEBUG_LOG_IO", False)

    return Settings(
        process_type=process_type,  # type: ignore[arg-type]
        user_data_dir=user_data_dir,
        app_name=app_name,
        app_version=app_version,
        debug_log_io=debug_log_io,
    )

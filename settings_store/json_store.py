from __future__ import annotations

import json
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing files, empty files, unreadable files, or invalid JSON.
    """
    try:
        if not path.exists():
            return None
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return None
        return json.loads(raw)
    except (OSError, UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.debug("read_json: unreadable %s: %r", path, e)
        return None


def temp_path_for(path: Path) -> Path:
    # <path>.tmp<timestamp><random>, unique per write so concurrent writers never share one.
    return path.with_name(f"{path.name}.tmp{time.time_ns()}{secrets.token_hex(4)}")


def atomic_write_json(path: Path, payload: Any, *, indent: int | str = "\t", sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp sibling then replacing.

    On failure the temp file is removed (best effort) and the original error is re-raised.
    """
    text = json.dumps(payload, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = temp_path_for(path)
    try:
        with tmp_path.open("w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise

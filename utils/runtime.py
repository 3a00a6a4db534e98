"""
utils/runtime.py
----------------
Environment-driven runtime settings. Constants live in utils.constants;
these helpers let an operator override them without code changes.
"""

from __future__ import annotations
import os
import secrets
from datetime import datetime, timezone

from utils.constants import MAX_UPLOAD_BYTES, REPORT_TIMEOUT_SEC

ENV_PREFIX = "TRANSFER_WIZARD_"


def env_flag(name: str) -> bool:
    """Return True iff the environment variable is exactly '1' (trimmed)."""
    return os.environ.get(name, "").strip() == "1"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def max_upload_bytes() -> int:
    """Configured upload ceiling in bytes (TRANSFER_WIZARD_MAX_UPLOAD_BYTES)."""
    return _env_int(ENV_PREFIX + "MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES)


def report_timeout_sec() -> int:
    return _env_int(ENV_PREFIX + "REPORT_TIMEOUT_SEC", REPORT_TIMEOUT_SEC)


def session_slug(default: str | None = None) -> str:
    """
    Read the session slug from env if provided, else return `default`,
    else a fresh <YYMMDD>_<hex> slug.
    """
    env = os.environ.get(ENV_PREFIX + "SLUG")
    if env:
        return env
    if default:
        return default
    return f"{datetime.now(timezone.utc).strftime('%y%m%d')}_{secrets.token_hex(4)}"

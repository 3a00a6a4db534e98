"""utils.time

Pure time helpers. Side-effect free; no Streamlit imports.
"""

from __future__ import annotations

from datetime import datetime, timezone


def now_utc_iso() -> str:
    """UTC timestamp in ISO-8601 without microseconds, with 'Z' suffix."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def today_stamp() -> str:
    """UTC date as YYYY-MM-DD, used in download filename templates."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")

"""
utils/logging.py
Purpose: Append-only JSONL logger for pipeline events (ingress, transform, egress, report).
Scope: Called by services/ingress.py, services/transform.py, services/egress.py,
services/reporting.py and services/pipeline.py.

Acceptance:
- Writes line-delimited JSON (.jsonl) under artifacts/<session_slug>/<session_slug>_<stage>_log.jsonl
- Adds both UTC and local timestamps, schema_version, and optional hashes/details.
- A logging failure (disk full, read-only fs) never propagates into the pipeline.
"""

from __future__ import annotations
import datetime
import io
import json
import os
from typing import Any, Dict, Optional

from utils.constants import ARTIFACTS_DIR, SCHEMA_VERSION

LOCAL_TZ = datetime.datetime.now().astimezone().tzinfo
DEFAULT_LEVEL = "INFO"
STAGES = ("ingress", "transform", "egress", "report", "session")


def _now_ts() -> tuple[str, str]:
    now_utc = datetime.datetime.now(datetime.timezone.utc)
    now_local = now_utc.astimezone(LOCAL_TZ)
    return now_utc.isoformat().replace("+00:00", "Z"), now_local.isoformat()


def _json_safe(obj: Any) -> Any:
    try:
        json.dumps(obj)
        return obj
    except (TypeError, ValueError):
        return str(obj)


def stage_log_path(session_slug: str, stage: str, root: str = ".") -> str:
    """Canonical per-slug JSONL path: artifacts/<slug>/<slug>_<stage>_log.jsonl."""
    stage_norm = (stage or "session").strip().lower()
    if stage_norm not in STAGES:
        raise ValueError(f"Unknown log stage {stage!r}; expected one of {STAGES}")
    fname = f"{session_slug}_{stage_norm}_log.jsonl"
    return os.path.join(root, ARTIFACTS_DIR, session_slug, fname)


def _append_jsonl(path: str, record: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    line = json.dumps(record, separators=(",", ":"), ensure_ascii=False)
    with io.open(path, "a", encoding="utf-8", newline="\n") as f:
        f.write(line + "\n")


def log_event(
    *,
    session_slug: str,
    stage: str,
    event: str,                # e.g., "receive_upload", "download"
    schema_version: str = SCHEMA_VERSION,
    level: str = DEFAULT_LEVEL,
    artifact: Optional[str] = None,
    dataset_hash: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    root: str = ".",
) -> Optional[str]:
    """Append one event; returns the log path, or None if the write failed."""
    ts_utc, ts_local = _now_ts()
    record: Dict[str, Any] = {
        "ts_utc": ts_utc,
        "ts_local": ts_local,
        "stage": stage,
        "event": event,
        "level": level,
        "artifact": artifact,
        "session_slug": session_slug,
        "schema_version": schema_version,
    }
    if dataset_hash:
        record["dataset_hash"] = dataset_hash
    if details:
        record["details"] = {k: _json_safe(v) for k, v in details.items()}
    path = stage_log_path(session_slug, stage, root=root)
    try:
        _append_jsonl(path, record)
    except OSError:
        return None
    return path


def read_events(session_slug: str, stage: str, root: str = ".") -> list[Dict[str, Any]]:
    """Read back a stage log; malformed lines are skipped, a missing file yields []."""
    path = stage_log_path(session_slug, stage, root=root)
    out: list[Dict[str, Any]] = []
    try:
        with io.open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    out.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    except FileNotFoundError:
        return []
    return out

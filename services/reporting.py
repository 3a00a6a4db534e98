"""
services/reporting.py
---------------------
Parameterised HTML report over a TabularArtifact.

Rendering happens in a child Python process (services.report_worker) so a slow
or crashing render cannot stall the Streamlit server process shared by other
users. Inputs travel through a scratch folder that is removed afterwards.
Cancellation is best-effort: on timeout the child is killed and RenderError raised.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from html import escape
from pathlib import Path
from typing import Any, Dict, Optional
import json
import os
import subprocess
import sys

import pandas as pd

from services.artifacts import make_scratch_dir, remove_tree, sha256_bytes
from services.errors import RenderError, ValidationError
from services.profiler import profile_frame, profile_table
from utils.constants import REPORT_MAX_ROWS
from utils.logging import log_event
from utils.runtime import report_timeout_sec
from utils.time import now_utc_iso

PROJECT_ROOT = Path(__file__).resolve().parents[1]
WORKER_MODULE = "services.report_worker"

_STYLE = (
    "body{font-family:sans-serif;margin:2em;}"
    "table{border-collapse:collapse;margin-bottom:1.5em;}"
    "th,td{border:1px solid #ccc;padding:4px 8px;text-align:left;}"
)


@dataclass(frozen=True)
class ReportParams:
    title: str = "Data report"
    n: int = 10
    source_name: str = ""

    def validate(self) -> "ReportParams":
        if not (1 <= int(self.n) <= REPORT_MAX_ROWS):
            raise ValidationError(f"Rows in report must be between 1 and {REPORT_MAX_ROWS}, got {self.n}.")
        if not (self.title or "").strip():
            raise ValidationError("Report title is required.")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def cache_key(self, data_fingerprint: Optional[str]) -> str:
        """Identity of a rendered report: these params over exactly this data."""
        return json.dumps({"params": self.to_dict(), "data": data_fingerprint}, sort_keys=True)


def build_report_html(df: pd.DataFrame, params: ReportParams, generated_utc: Optional[str] = None) -> str:
    """Pure: DataFrame + params -> complete HTML document."""
    params = params.validate()
    profile = profile_table(df)
    summary = profile["table_summary"]
    source = f"<p>Source: <code>{escape(params.source_name)}</code></p>" if params.source_name else ""
    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{escape(params.title)}</title><style>{_STYLE}</style></head><body>"
        f"<h1>{escape(params.title)}</h1>{source}"
        f"<p>Generated {escape(generated_utc or now_utc_iso())}. "
        f"{summary['n_rows']} rows &times; {summary['n_cols']} columns.</p>"
        "<h2>Columns</h2>"
        + profile_frame(profile).to_html(index=False, border=0)
        + f"<h2>First {int(params.n)} rows</h2>"
        + df.head(int(params.n)).to_html(index=False, border=0, na_rep="")
        + "</body></html>\n"
    )


def _worker_env() -> Dict[str, str]:
    env = dict(os.environ)
    existing = env.get("PYTHONPATH")
    env["PYTHONPATH"] = str(PROJECT_ROOT) + (os.pathsep + existing if existing else "")
    return env


def render_report(
    df: pd.DataFrame,
    params: ReportParams,
    *,
    timeout: Optional[float] = None,
    session_slug: str = "dev",
) -> bytes:
    """Render the report in a child process and return the HTML bytes."""
    params = params.validate()
    limit = report_timeout_sec() if timeout is None else timeout
    scratch = make_scratch_dir("transfer_wizard_report_")
    try:
        data_path = scratch / "input.pkl"
        params_path = scratch / "params.json"
        out_path = scratch / "report.html"
        df.to_pickle(data_path)
        params_path.write_text(json.dumps(params.to_dict()), encoding="utf-8")

        cmd = [sys.executable, "-m", WORKER_MODULE, str(data_path), str(params_path), str(out_path)]
        try:
            proc = subprocess.run(
                cmd, capture_output=True, text=True, timeout=limit, cwd=str(PROJECT_ROOT), env=_worker_env(),
            )
        except subprocess.TimeoutExpired as e:
            raise RenderError(f"Report rendering timed out after {limit} seconds.") from e

        if proc.returncode != 0 or not out_path.exists():
            tail = (proc.stderr or "").strip().splitlines()[-1:] or ["no output"]
            raise RenderError(f"Report rendering failed: {tail[0]}")
        html = out_path.read_bytes()
    except RenderError as e:
        log_event(
            session_slug=session_slug,
            stage="report",
            event="render_failed",
            level="ERROR",
            artifact=params.source_name or None,
            details={"reason": str(e), "params": params.to_dict()},
        )
        raise
    finally:
        remove_tree(scratch)

    log_event(
        session_slug=session_slug,
        stage="report",
        event="render_report",
        artifact=params.source_name or None,
        dataset_hash=sha256_bytes(html),
        details={"bytes": len(html), "params": params.to_dict()},
    )
    return html

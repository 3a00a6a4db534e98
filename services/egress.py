"""
services/egress.py
------------------
Build DownloadSpecs and turn them into bytes or published files.

A DownloadSpec is lazy: nothing is serialized and no filename is chosen until
a download is requested. The filename is rendered from the application state
as it is at call time, so a spec built earlier never hands out a stale name.

Completion guarantees:
- to_bytes(): returns only after the writer finished; errors -> RenderError
- materialize(): writes a scratch file beside the target and os.replace()s it;
  on error the scratch file is removed and nothing is published
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional, Union
from urllib.parse import quote
import io

import pandas as pd

from services.artifacts import atomic_publish, safe_child, sha256_file
from services.errors import RenderError, ValidationError
from utils.constants import DOWNLOAD_FORMATS
from utils.logging import log_event
from utils.naming import render_filename
from utils.time import today_stamp

StateSource = Union[Mapping[str, Any], Callable[[], Mapping[str, Any]], None]


@dataclass
class DownloadSpec:
    filename_provider: Callable[[], str]
    content_writer: Callable[[BinaryIO], object]   # return value ignored
    mime_type: str = "application/octet-stream"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": self.mime_type,
            "Content-Disposition": content_disposition(self.filename_provider()),
        }


def content_disposition(filename: str) -> str:
    """attachment; filename="..." plus an RFC 5987 filename* for non-ASCII names."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "download"
    ascii_name = ascii_name.replace("\\", "_").replace('"', "_")
    value = f'attachment; filename="{ascii_name}"'
    if ascii_name != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def _current_state(state: StateSource) -> Dict[str, Any]:
    if state is None:
        return {}
    if callable(state):
        return dict(state())
    return dict(state)


def _filename_provider(name_template: str, state: StateSource, ext: Optional[str]) -> Callable[[], str]:
    def provide() -> str:
        values = _current_state(state)
        values.setdefault("date", today_stamp())
        if ext is not None:
            values["ext"] = ext
        try:
            return render_filename(name_template, values)
        except (KeyError, IndexError, ValueError) as e:
            raise RenderError(f"Cannot build download filename from {name_template!r}: {e}") from e
    return provide


def prepare_download(
    artifact: pd.DataFrame,
    name_template: str,
    state: StateSource = None,
    *,
    fmt: str = "tsv",
) -> DownloadSpec:
    """
    DownloadSpec serializing `artifact` as CSV or TSV (UTF-8, header row, no index).
    `state` is a mapping (read live) or a zero-arg callable returning one.
    """
    if fmt not in DOWNLOAD_FORMATS:
        raise ValidationError(f"Unsupported download format {fmt!r}; expected one of {sorted(DOWNLOAD_FORMATS)}")
    if artifact is None:
        raise ValidationError("Nothing to download.")
    mime, sep = DOWNLOAD_FORMATS[fmt]

    def write(sink: BinaryIO) -> None:
        sink.write(artifact.to_csv(index=False, sep=sep, lineterminator="\n").encode("utf-8"))

    return DownloadSpec(
        filename_provider=_filename_provider(name_template, state, fmt),
        content_writer=write,
        mime_type=mime,
    )


def prepare_bytes_download(
    data: bytes,
    name_template: str,
    state: StateSource = None,
    *,
    mime_type: str = "application/octet-stream",
) -> DownloadSpec:
    """DownloadSpec over already-rendered bytes (e.g., an HTML report)."""
    payload = bytes(data)
    return DownloadSpec(
        filename_provider=_filename_provider(name_template, state, None),
        content_writer=lambda sink: sink.write(payload),
        mime_type=mime_type,
    )


def to_bytes(spec: DownloadSpec) -> bytes:
    buf = io.BytesIO()
    try:
        spec.content_writer(buf)
    except RenderError:
        raise
    except Exception as e:
        raise RenderError(f"Download could not be generated: {e}") from e
    return buf.getvalue()


def materialize(
    spec: DownloadSpec,
    directory: Union[str, Path],
    *,
    session_slug: str = "dev",
) -> Path:
    """
    Publish the download under `directory` with its server-chosen filename.
    Returns the final path; raises RenderError and leaves no partial file on failure.
    """
    filename = spec.filename_provider()
    try:
        target = safe_child(directory, filename)
    except ValueError as e:
        raise RenderError(str(e)) from e

    try:
        size = atomic_publish(target, spec.content_writer)
    except RenderError:
        _log_failure(session_slug, filename)
        raise
    except Exception as e:
        _log_failure(session_slug, filename)
        raise RenderError(f"Download '{filename}' could not be written: {e}") from e

    log_event(
        session_slug=session_slug,
        stage="egress",
        event="download",
        artifact=filename,
        dataset_hash=sha256_file(target),
        details={"bytes": size, "mime": spec.mime_type},
    )
    return target


def _log_failure(session_slug: str, filename: str) -> None:
    log_event(
        session_slug=session_slug,
        stage="egress",
        event="render_failed",
        level="ERROR",
        artifact=filename,
    )

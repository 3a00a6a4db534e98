"""
Ingress service
---------------
Accept an uploaded blob plus client metadata and store it at a location chosen
by the runtime (never by the client).

UploadDescriptor fields:
- original_name: client-supplied filename (metadata only; never a path component)
- declared_size_bytes: client-declared size
- declared_mime_type: client-declared content type (advisory)
- storage_path: ephemeral temp file; invalid after the next upload or session end
- received_utc, sha256: receipt time and content fingerprint

Size limit comes from utils.runtime.max_upload_bytes() unless passed explicitly.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterable, Optional, Union
import os
import re
import tempfile

import pandas as pd

from services.artifacts import sha256_bytes
from services.errors import UploadPending, ValidationError
from utils.constants import UPLOAD_PREFIX
from utils.logging import log_event
from utils.runtime import max_upload_bytes
from utils.time import now_utc_iso

_SAFE_SUFFIX = re.compile(r"^\.[a-z0-9]{1,8}$")


@dataclass(frozen=True)
class UploadDescriptor:
    original_name: str
    declared_size_bytes: int
    declared_mime_type: str
    storage_path: str
    received_utc: str = ""
    sha256: str = ""

    @property
    def extension(self) -> str:
        return Path(self.original_name).suffix.lower()

    def exists(self) -> bool:
        return Path(self.storage_path).is_file()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _fmt_mb(n: int) -> str:
    return f"{n / 1024 / 1024:.2f} MB"


def _check_size(size: int, limit: int, original_name: str) -> None:
    if size > limit:
        raise ValidationError(
            f"File '{original_name}' is too large ({_fmt_mb(size)}). "
            f"Maximum allowed is {_fmt_mb(limit)}."
        )


def _read_capped(data: Union[bytes, bytearray, BinaryIO], limit: int, original_name: str) -> bytes:
    """Read at most limit+1 bytes so oversized streams are rejected without buffering them whole."""
    if isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    else:
        raw = data.read(limit + 1)
        if not isinstance(raw, (bytes, bytearray)):
            raise ValidationError(f"Upload '{original_name}' did not yield bytes.")
        raw = bytes(raw)
    _check_size(len(raw), limit, original_name)
    return raw


def receive_upload(
    data: Union[bytes, bytearray, BinaryIO],
    *,
    original_name: str,
    storage_dir: Union[str, Path],
    declared_size_bytes: Optional[int] = None,
    declared_mime_type: str = "",
    max_bytes: Optional[int] = None,
    session_slug: str = "dev",
) -> UploadDescriptor:
    """
    Validate the upload size and store the bytes under `storage_dir`.

    Raises ValidationError when either the declared or the actual size exceeds
    the limit; nothing is written in that case.
    """
    limit = max_upload_bytes() if max_bytes is None else int(max_bytes)
    name = (original_name or "").strip() or "upload"
    declared = int(declared_size_bytes) if declared_size_bytes is not None else -1
    if declared < -1:
        raise ValidationError(f"Declared size for '{name}' is negative.")

    try:
        if declared >= 0:
            _check_size(declared, limit, name)
        raw = _read_capped(data, limit, name)
    except ValidationError as e:
        log_event(
            session_slug=session_slug,
            stage="ingress",
            event="reject_upload",
            level="WARN",
            artifact=name,
            details={"declared_size_bytes": declared, "limit": limit, "reason": str(e)},
        )
        raise

    suffix = Path(name).suffix.lower()
    if not _SAFE_SUFFIX.match(suffix):
        suffix = ".bin"
    Path(storage_dir).mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=UPLOAD_PREFIX, suffix=suffix, dir=str(storage_dir))
    with os.fdopen(fd, "wb") as f:
        f.write(raw)

    descriptor = UploadDescriptor(
        original_name=name,
        declared_size_bytes=declared if declared >= 0 else len(raw),
        declared_mime_type=declared_mime_type or "",
        storage_path=tmp_name,
        received_utc=now_utc_iso(),
        sha256=sha256_bytes(raw),
    )
    log_event(
        session_slug=session_slug,
        stage="ingress",
        event="receive_upload",
        artifact=name,
        dataset_hash=descriptor.sha256,
        details={"bytes": len(raw), "mime": descriptor.declared_mime_type},
    )
    return descriptor


def require_upload(descriptor: Optional[UploadDescriptor]) -> UploadDescriptor:
    """Return the descriptor, or raise UploadPending if nothing was uploaded yet."""
    if descriptor is None:
        raise UploadPending("No file has been uploaded yet.")
    if not descriptor.exists():
        raise UploadPending(f"Upload '{descriptor.original_name}' is no longer available; upload it again.")
    return descriptor


def discard_upload(descriptor: Optional[UploadDescriptor]) -> None:
    """Remove the ephemeral file behind a superseded descriptor."""
    if descriptor is not None:
        Path(descriptor.storage_path).unlink(missing_ok=True)


def describe_uploads(descriptors: Iterable[UploadDescriptor]) -> pd.DataFrame:
    """Summary table for multi-file uploads: name, size, type, datapath."""
    rows = [
        {
            "name": d.original_name,
            "size": int(d.declared_size_bytes),
            "type": d.declared_mime_type,
            "datapath": d.storage_path,
        }
        for d in descriptors
    ]
    return pd.DataFrame(rows, columns=["name", "size", "type", "datapath"])

"""
Transform service: parse an ingress artifact into a TabularArtifact.

A TabularArtifact is a pandas.DataFrame with unique column names; each column
holds values of one inferred dtype.

The extension allow-list handed to the upload widget is advisory only; parse()
re-validates the extension and the content on the server.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional
import json

import pandas as pd

from services.errors import FormatError, ValidationError
from services.ingress import UploadDescriptor, require_upload
from utils.constants import ALLOWED_EXTENSIONS, DELIMITER_BY_EXTENSION, PREVIEW_ROWS
from utils.logging import log_event

TabularArtifact = pd.DataFrame

_SNIFF_BYTES = 8192


@dataclass(frozen=True)
class ParseOptions:
    delimiter: Optional[str] = None   # None => by extension
    skip_rows: int = 0
    header: bool = True
    preview_rows: int = PREVIEW_ROWS

    def validate(self) -> "ParseOptions":
        if self.delimiter is not None and len(self.delimiter) != 1:
            raise ValidationError(f"Delimiter must be a single character, got {self.delimiter!r}")
        if int(self.skip_rows) < 0:
            raise ValidationError("Rows to skip cannot be negative.")
        if int(self.preview_rows) < 0:
            raise ValidationError("Preview rows cannot be negative.")
        return self

    def fingerprint(self) -> str:
        """Stable key over the options that affect parsing (preview size excluded)."""
        payload = {"delimiter": self.delimiter, "skip_rows": int(self.skip_rows), "header": bool(self.header)}
        return json.dumps(payload, sort_keys=True)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def check_extension(original_name: str, extension: str) -> str:
    if extension not in ALLOWED_EXTENSIONS:
        allowed = " or ".join(ALLOWED_EXTENSIONS)
        raise FormatError(f"Invalid file '{original_name}'; please upload a {allowed} file.")
    return extension


def ensure_unique_columns(df: pd.DataFrame) -> pd.DataFrame:
    dupes = sorted({str(c) for c in df.columns[df.columns.duplicated()]})
    if dupes:
        raise FormatError(f"Duplicate column names: {dupes}")
    return df


def _sniff_binary(path: str, original_name: str) -> None:
    with open(path, "rb") as f:
        head = f.read(_SNIFF_BYTES)
    if b"\x00" in head:
        raise FormatError(f"File '{original_name}' looks binary, not delimited text.")


def parse(
    descriptor: Optional[UploadDescriptor],
    options: Optional[ParseOptions] = None,
    *,
    session_slug: str = "dev",
) -> TabularArtifact:
    """
    Read the upload behind `descriptor` as delimited text.

    Raises UploadPending when there is no upload, FormatError when the
    extension is not allowed or the content does not parse, and
    ValidationError for out-of-range options.
    """
    descriptor = require_upload(descriptor)
    opts = (options or ParseOptions()).validate()
    ext = check_extension(descriptor.original_name, descriptor.extension)
    sep = opts.delimiter or DELIMITER_BY_EXTENSION[ext]

    try:
        _sniff_binary(descriptor.storage_path, descriptor.original_name)
        df = pd.read_csv(
            descriptor.storage_path,
            sep=sep,
            skiprows=int(opts.skip_rows),
            header=0 if opts.header else None,
            encoding="utf-8",
        )
    except FormatError as e:
        _log_failure(session_slug, descriptor, e)
        raise
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        err = FormatError(f"Could not parse '{descriptor.original_name}': {e}")
        _log_failure(session_slug, descriptor, err)
        raise err from e

    if not opts.header:
        df.columns = [f"column_{i + 1}" for i in range(df.shape[1])]
    df.columns = [str(c) for c in df.columns]
    ensure_unique_columns(df)

    log_event(
        session_slug=session_slug,
        stage="transform",
        event="parse",
        artifact=descriptor.original_name,
        dataset_hash=descriptor.sha256,
        details={"rows": int(df.shape[0]), "cols": int(df.shape[1]), "options": opts.to_dict()},
    )
    return df


def _log_failure(session_slug: str, descriptor: UploadDescriptor, err: Exception) -> None:
    log_event(
        session_slug=session_slug,
        stage="transform",
        event="parse_failed",
        level="WARN",
        artifact=descriptor.original_name,
        dataset_hash=descriptor.sha256,
        details={"reason": str(err)},
    )


def preview(df: TabularArtifact, n: int = PREVIEW_ROWS) -> TabularArtifact:
    """First n rows (n >= 0)."""
    if n < 0:
        raise ValidationError("Preview rows cannot be negative.")
    return df.head(n)

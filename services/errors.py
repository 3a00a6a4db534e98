"""
services/errors.py
------------------
Error kinds raised by the transfer pipeline. All derive from TransferError
(a ValueError) and are recovered at the request boundary (ui/blocks.py),
where they are shown in place of the expected output.
"""

from __future__ import annotations


class TransferError(ValueError):
    """Base class for user/actionable pipeline errors."""


class ValidationError(TransferError):
    """Upload or option outside configured limits (size, type, ranges)."""


class FormatError(TransferError):
    """Content does not parse as its declared type."""


class RenderError(TransferError):
    """Serialization or report generation failed; nothing was published."""


class UploadPending(Exception):
    """
    No upload exists yet. Not a failure: callers halt the current run
    (st.stop() in the UI) and wait for the first upload.
    """

"""
UI :: downloads.py

Render a DownloadSpec as a download button.

The bytes are produced by services.egress.to_bytes() on the current run, so
the button only appears once a complete serialization exists; failures are
shown in place of the button.
"""
from __future__ import annotations
from typing import Callable, Optional

import streamlit as st

from services.egress import DownloadSpec, to_bytes
from ui.blocks import guard


def download_button(
    spec_factory: Callable[[], DownloadSpec],
    label: str,
    *,
    key: str,
    help: Optional[str] = None,
) -> bool:
    """Build the spec, serialize it, and show st.download_button. Returns True if clicked."""
    spec = guard(spec_factory)
    if spec is None:
        return False
    filename = guard(spec.filename_provider)
    data = guard(to_bytes, spec) if filename else None
    if data is None:
        return False
    return st.download_button(
        label,
        data=data,
        file_name=filename,
        mime=spec.mime_type,
        key=key,
        help=help,
    )

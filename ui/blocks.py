# ui/blocks.py
"""
Request-boundary helpers shared by screens.
Pipeline errors are recovered here and shown in place of the expected output;
UploadPending halts the run until the user uploads something.
"""
from __future__ import annotations
from typing import Any, Callable, Optional

import streamlit as st

from services.errors import TransferError, UploadPending

_KINDS = {"info": st.info, "warn": st.warning, "error": st.error, "success": st.success}


def status(msg: str, kind: str = "info") -> None:
    _KINDS.get(kind, st.info)(msg)


def guard(fn: Callable[..., Any], *args: Any, pending_msg: Optional[str] = None, **kwargs: Any) -> Any:
    """
    Call fn(*args, **kwargs).
    - UploadPending: show a hint and st.stop() (wait for the first upload)
    - TransferError: show the message and return None
    """
    try:
        return fn(*args, **kwargs)
    except UploadPending as e:
        status(pending_msg or str(e), "info")
        st.stop()
    except TransferError as e:
        status(str(e), "error")
        return None


def reset_button(on_reset: Callable[[], None], key: str) -> bool:
    clicked = st.button("Reset", key=key)
    if clicked:
        on_reset()
        st.rerun()
    return clicked

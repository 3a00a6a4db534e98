"""
state.py

Bridges st.session_state and the pipeline's SessionContext.
Streamlit reruns the whole script on every interaction, so the file widget
reports the same upload again and again; upload signatures let screens
ingest each distinct upload exactly once.
"""

from __future__ import annotations

from typing import Any, MutableMapping, Optional
import hashlib

from services.pipeline import SessionContext

CTX_KEY = "pipeline_ctx"
LAST_UPLOAD_SIG_KEY = "last_upload_sig"
UPLOAD_ERROR_KEY = "upload_error"
UPLOADER_NONCE_KEY = "uploader_nonce"


def get_context(ss: MutableMapping[str, Any], session_slug: Optional[str] = None) -> SessionContext:
    """Return the session's SessionContext, creating it on first use."""
    ctx = ss.get(CTX_KEY)
    if not isinstance(ctx, SessionContext):
        ctx = SessionContext(session_slug or ss.get("session_slug"))
        ss[CTX_KEY] = ctx
        ss["session_slug"] = ctx.session_slug
    return ctx


def uploader_key(ss: MutableMapping[str, Any]) -> str:
    """Widget key of the file uploader; a reset moves to a fresh key so the widget comes back empty."""
    return f"up_file_{int(ss.get(UPLOADER_NONCE_KEY, 0))}"


def reset_context(ss: MutableMapping[str, Any]) -> None:
    """Drop the current upload and derived artifacts; keep the session slug."""
    ctx = ss.get(CTX_KEY)
    if isinstance(ctx, SessionContext):
        ctx.reset()
    ss[UPLOADER_NONCE_KEY] = int(ss.get(UPLOADER_NONCE_KEY, 0)) + 1
    ss[LAST_UPLOAD_SIG_KEY] = None
    ss[UPLOAD_ERROR_KEY] = None


def upload_signature(uploaded: Any) -> Optional[str]:
    """name + size + sha256 of an UploadedFile-like object; None when nothing is selected."""
    if uploaded is None:
        return None
    h = hashlib.sha256(uploaded.getvalue()).hexdigest()
    return f"{getattr(uploaded, 'name', '')}|{getattr(uploaded, 'size', '')}|{h}"


def is_new_upload(ss: MutableMapping[str, Any], uploaded: Any) -> bool:
    """True once per distinct upload; records the signature as seen."""
    sig = upload_signature(uploaded)
    if sig is None or sig == ss.get(LAST_UPLOAD_SIG_KEY):
        return False
    ss[LAST_UPLOAD_SIG_KEY] = sig
    return True

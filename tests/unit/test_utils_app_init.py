"""
tests/unit/test_utils_app_init.py
Ensures init helpers set non-widget defaults, preserve an existing session_slug,
and create the pipeline context.
"""

from pathlib import Path
import streamlit as st

import state
from services.pipeline import SessionContext
from utils.app_init import ensure_artifacts_dir, init_session_state


def _clear():
    ctx = st.session_state.get(state.CTX_KEY)
    if ctx is not None:
        ctx.close()
    st.session_state.clear()


def test_ensure_artifacts_dir(tmp_path: Path):
    target = tmp_path / "artifacts"
    assert not target.exists()
    ensure_artifacts_dir(target)
    assert target.exists() and target.is_dir()

def test_init_session_state_sets_defaults(tmp_path: Path, workdir):
    _clear()
    init_session_state(app_version="0.1.0", artifacts_dir=tmp_path)
    assert st.session_state["app_version"] == "0.1.0"
    assert st.session_state["artifacts_dir"] == str(tmp_path)
    assert st.session_state["current_page"] == "upload"
    assert st.session_state["session_slug"]
    assert isinstance(st.session_state[state.CTX_KEY], SessionContext)
    _clear()

def test_init_session_state_preserves_slug(tmp_path: Path, workdir):
    _clear()
    st.session_state["session_slug"] = "pre_set_slug_123"
    init_session_state(app_version="0.1.0", artifacts_dir=tmp_path)
    assert st.session_state["session_slug"] == "pre_set_slug_123"
    assert st.session_state[state.CTX_KEY].session_slug == "pre_set_slug_123"
    _clear()

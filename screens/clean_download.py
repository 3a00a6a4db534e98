# screens/clean_download.py
import streamlit as st

import state
from services.cleaning import CleanOptions
from ui import blocks
from ui.downloads import download_button
from utils.constants import DEFAULT_NAME_TEMPLATE, DOWNLOAD_FORMATS


def render() -> dict:
    st.header("Clean & Download")
    ctx = state.get_context(st.session_state)
    if blocks.guard(ctx.parsed, pending_msg="Upload a file on the Upload page first.") is None:
        st.stop()

    c1, c2, c3 = st.columns(3)
    with c1:
        rename = st.checkbox("Clean column names", key="cl_rename")
    with c2:
        drop_empty = st.checkbox("Remove empty columns", key="cl_empty")
    with c3:
        drop_constant = st.checkbox("Remove constant columns", key="cl_constant")
    ctx.set_clean_options(CleanOptions(rename=rename, drop_empty=drop_empty, drop_constant=drop_constant))

    result = blocks.guard(ctx.cleaned)
    if result is None:
        st.stop()
    df, diag = result
    if diag["renamed"]:
        st.caption("Renamed: " + ", ".join(f"{a} → {b}" for a, b in diag["renamed"].items()))
    dropped = diag["dropped_empty"] + diag["dropped_constant"]
    if dropped:
        st.caption("Removed: " + ", ".join(dropped))
    st.dataframe(blocks.guard(ctx.preview), use_container_width=True)

    f1, f2 = st.columns([1, 3])
    with f1:
        fmt = st.selectbox("Format", list(DOWNLOAD_FORMATS), index=list(DOWNLOAD_FORMATS).index("tsv"), key="cl_fmt")
    with f2:
        template = st.text_input(
            "Filename template", value=DEFAULT_NAME_TEMPLATE, key="cl_template",
            help="Fields: {stem}, {ext}, {source}, {slug}, {date}",
        )
    download_button(lambda: ctx.download(template, fmt), "Download cleaned data", key="cl_download")

    return {
        "valid_to_proceed": True,
        "payload": {
            "stage": ctx.stage,
            "n_cols_out": diag["n_cols_out"],
            "reset_keys": ["cl_rename", "cl_empty", "cl_constant", "cl_fmt", "cl_template"],
        },
    }

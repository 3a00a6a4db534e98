# screens/upload.py
import streamlit as st

import state
from services.ingress import describe_uploads
from services.transform import ParseOptions
from ui import blocks
from utils.constants import ALLOWED_EXTENSIONS, DELIMITER_CHOICES, PREVIEW_ROWS
from utils.runtime import max_upload_bytes


def render() -> dict:
    st.header("Upload")
    ss = st.session_state
    ctx = state.get_context(ss)
    limit_mb = max_upload_bytes() / 1024 / 1024

    uploaded = st.file_uploader(
        f"Data file ({', '.join(ALLOWED_EXTENSIONS)}; max {limit_mb:.1f} MB)",
        type=[e.lstrip(".") for e in ALLOWED_EXTENSIONS],
        key=state.uploader_key(ss),
    )
    if uploaded is not None and state.is_new_upload(ss, uploaded):
        ss[state.UPLOAD_ERROR_KEY] = None
        if blocks.guard(ctx.receive_file, uploaded) is None:
            ss[state.UPLOAD_ERROR_KEY] = f"'{uploaded.name}' was not accepted."
    if ss.get(state.UPLOAD_ERROR_KEY):
        blocks.status(ss[state.UPLOAD_ERROR_KEY], "warn")

    with st.expander("Parsing options", expanded=False):
        c1, c2, c3, c4 = st.columns(4)
        with c1:
            delim_label = st.selectbox("Delimiter", ["Auto"] + list(DELIMITER_CHOICES), key="up_delim")
        with c2:
            skip = st.number_input("Rows to skip", min_value=0, value=0, step=1, key="up_skip")
        with c3:
            n_preview = st.number_input("Preview rows", min_value=0, value=PREVIEW_ROWS, step=1, key="up_preview")
        with c4:
            has_header = st.checkbox("First row is header", value=True, key="up_header")
    blocks.guard(
        ctx.set_parse_options,
        ParseOptions(
            delimiter=DELIMITER_CHOICES.get(delim_label),
            skip_rows=int(skip),
            header=bool(has_header),
            preview_rows=int(n_preview),
        ),
    )

    if ctx.upload is None:
        blocks.status("Upload a file to begin.", "info")
        st.stop()

    st.dataframe(describe_uploads([ctx.upload]), use_container_width=True, hide_index=True)
    df = blocks.guard(ctx.parsed)
    if df is not None:
        st.caption(f"{df.shape[0]} rows × {df.shape[1]} columns")
        st.dataframe(blocks.guard(ctx.preview), use_container_width=True)

    blocks.reset_button(lambda: state.reset_context(ss), key="up_reset")

    return {
        "valid_to_proceed": df is not None,
        "payload": {
            "stage": ctx.stage,
            "upload": ctx.upload.to_dict(),
            "reset_keys": [state.uploader_key(ss), "up_delim", "up_skip", "up_preview", "up_header"],
        },
    }

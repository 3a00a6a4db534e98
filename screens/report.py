# screens/report.py
import streamlit as st

import state
from services import egress
from services.reporting import ReportParams, render_report
from services.sample_data import list_datasets, load_dataset
from ui import blocks
from ui.downloads import download_button
from utils.constants import REPORT_MAX_ROWS
from utils.naming import slugify
from utils.runtime import report_timeout_sec


def render() -> dict:
    st.header("Report")
    ss = st.session_state
    ctx = state.get_context(ss)

    sources = (["Current upload"] if ctx.upload is not None else []) + [f"Sample: {n}" for n in list_datasets()]
    source = st.selectbox("Data", sources, key="rp_source")
    title = st.text_input("Title", value="Data report", key="rp_title")
    n = st.slider("Rows to include", min_value=1, max_value=REPORT_MAX_ROWS, value=10, key="rp_n")

    if source == "Current upload":
        result = blocks.guard(ctx.cleaned)
        df = result[0] if result else None
        source_name = ctx.upload.original_name
        data_fp = ctx.fingerprint()
    else:
        source_name = source.split(": ", 1)[1]
        df = load_dataset(source_name)
        data_fp = f"sample:{source_name}"
    if df is None:
        st.stop()

    params = ReportParams(title=title, n=int(n), source_name=source_name)
    key = params.cache_key(data_fp)
    if st.button("Generate report", key="rp_generate"):
        with st.spinner(f"Rendering in a separate process (timeout {report_timeout_sec()}s)..."):
            html = blocks.guard(render_report, df, params, session_slug=ctx.session_slug)
        ss["rp_html"] = html
        ss["rp_key"] = key if html else None

    html = ss.get("rp_html")
    if html and ss.get("rp_key") == key:
        st.success("Report ready.")
        download_button(
            lambda: egress.prepare_bytes_download(
                html, "{title}_{date}.html", lambda: {"title": slugify(ss["rp_title"]) or "report"},
                mime_type="text/html",
            ),
            "Download report",
            key="rp_download",
        )
    elif html:
        blocks.status("Inputs changed since the last report; generate it again.", "info")

    return {
        "valid_to_proceed": True,
        "payload": {"params": params.to_dict(), "reset_keys": ["rp_source", "rp_title", "rp_n"]},
    }

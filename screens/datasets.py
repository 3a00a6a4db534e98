# screens/datasets.py
import streamlit as st

from services import egress
from services.sample_data import list_datasets, load_dataset
from ui.downloads import download_button
from utils.constants import PREVIEW_ROWS


def render() -> dict:
    st.header("Sample Datasets")
    name = st.selectbox("Dataset", list_datasets(), key="ds_name")
    df = load_dataset(name)
    st.dataframe(df.head(PREVIEW_ROWS), use_container_width=True)
    download_button(
        lambda: egress.prepare_download(df, "{dataset}.{ext}", lambda: {"dataset": st.session_state["ds_name"]}),
        "Download .tsv",
        key="ds_download",
    )
    return {"valid_to_proceed": True, "payload": {"dataset": name, "reset_keys": ["ds_name"]}}

"""
services/pipeline.py
--------------------
SessionContext: the per-session state of the transfer pipeline, passed
explicitly to each stage (the UI keeps one instance in st.session_state).

Derived values form a small dependency graph of memoized nodes:

    upload ─┐
            ├─> parsed ─┐
    parse_options ──────┘├─> cleaned ─> download
              clean_options ─┘

Each node is keyed by the fingerprints of its inputs, so changing an upstream
input (new upload, different options) makes every downstream node recompute on
next access. Stage progression is forward-only:
no-upload -> has-upload -> transformed -> downloadable. Option changes only
recompute nodes; the stage moves back only on a new upload or a reset.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union
import weakref

import pandas as pd

from services import egress, ingress, transform
from services.artifacts import make_scratch_dir, remove_tree
from services.cleaning import CleanOptions, apply_cleaning
from services.egress import DownloadSpec
from services.ingress import UploadDescriptor
from services.transform import ParseOptions
from utils.constants import DEFAULT_NAME_TEMPLATE
from utils.logging import log_event
from utils.naming import split_name
from utils.runtime import session_slug as default_session_slug

STAGE_NO_UPLOAD = "no-upload"
STAGE_HAS_UPLOAD = "has-upload"
STAGE_TRANSFORMED = "transformed"
STAGE_DOWNLOADABLE = "downloadable"
_STAGE_ORDER = (STAGE_NO_UPLOAD, STAGE_HAS_UPLOAD, STAGE_TRANSFORMED, STAGE_DOWNLOADABLE)


@dataclass
class _Node:
    key: str
    value: Any


class SessionContext:
    """Session-scoped pipeline state: one active upload, current options, memoized artifacts."""

    def __init__(
        self,
        session_slug: Optional[str] = None,
        *,
        storage_dir: Optional[Union[str, Path]] = None,
        max_bytes: Optional[int] = None,
    ) -> None:
        self.session_slug = session_slug or default_session_slug()
        self._owns_storage = storage_dir is None
        self.storage_dir = Path(storage_dir) if storage_dir else make_scratch_dir()
        self.max_bytes = max_bytes
        self.upload: Optional[UploadDescriptor] = None
        self.parse_options = ParseOptions()
        self.clean_options = CleanOptions()
        self._nodes: Dict[str, _Node] = {}
        self._stage = STAGE_NO_UPLOAD
        # owned scratch folder is removed when the context is garbage-collected
        self._cleanup = weakref.finalize(self, remove_tree, self.storage_dir) if self._owns_storage else None

    # ---------- inputs ----------

    def receive(
        self,
        data: Any,
        *,
        original_name: str,
        declared_size_bytes: Optional[int] = None,
        declared_mime_type: str = "",
    ) -> UploadDescriptor:
        """
        Store a new upload and supersede the previous one.
        A rejected upload (ValidationError) leaves the current upload in place.
        """
        descriptor = ingress.receive_upload(
            data,
            original_name=original_name,
            declared_size_bytes=declared_size_bytes,
            declared_mime_type=declared_mime_type,
            storage_dir=self.storage_dir,
            max_bytes=self.max_bytes,
            session_slug=self.session_slug,
        )
        self._supersede(descriptor)
        return descriptor

    def receive_file(self, uploaded: Any) -> UploadDescriptor:
        """Same as receive() for a streamlit UploadedFile-like object."""
        return self.receive(
            uploaded.getvalue(),
            original_name=getattr(uploaded, "name", "") or "",
            declared_size_bytes=getattr(uploaded, "size", None),
            declared_mime_type=getattr(uploaded, "type", "") or "",
        )

    def _supersede(self, descriptor: UploadDescriptor) -> None:
        previous = self.upload
        self.upload = descriptor
        self._nodes.clear()
        self._stage = STAGE_HAS_UPLOAD
        if previous is not None and previous.storage_path != descriptor.storage_path:
            ingress.discard_upload(previous)

    def set_parse_options(self, options: ParseOptions) -> None:
        self.parse_options = options.validate()

    def set_clean_options(self, options: CleanOptions) -> None:
        self.clean_options = options

    # ---------- memoized nodes ----------

    def _memo(self, name: str, key: str, compute: Callable[[], Any]) -> Any:
        node = self._nodes.get(name)
        if node is not None and node.key == key:
            return node.value
        value = compute()
        self._nodes[name] = _Node(key=key, value=value)
        return value

    def _advance(self, stage: str) -> None:
        if _STAGE_ORDER.index(stage) > _STAGE_ORDER.index(self._stage):
            self._stage = stage

    def _parsed_key(self) -> Optional[str]:
        if self.upload is None:
            return None
        return f"{self.upload.sha256}|{self.upload.storage_path}|{self.parse_options.fingerprint()}"

    def _cleaned_key(self) -> Optional[str]:
        base = self._parsed_key()
        return None if base is None else f"{base}|{self.clean_options.fingerprint()}"

    def parsed(self) -> pd.DataFrame:
        """Parsed upload. Raises UploadPending before the first upload. Treat as read-only."""
        upload = ingress.require_upload(self.upload)
        df = self._memo(
            "parsed",
            self._parsed_key() or "",
            lambda: transform.parse(upload, self.parse_options, session_slug=self.session_slug),
        )
        self._advance(STAGE_TRANSFORMED)
        return df

    def cleaned(self) -> Tuple[pd.DataFrame, Dict[str, Any]]:
        """(cleaned_df, diagnostics) for the current clean options. Treat as read-only."""
        def compute() -> Tuple[pd.DataFrame, Dict[str, Any]]:
            df, diag = apply_cleaning(self.parsed(), self.clean_options)
            if self.clean_options.enabled:
                log_event(
                    session_slug=self.session_slug,
                    stage="transform",
                    event="clean",
                    artifact=self.upload.original_name if self.upload else None,
                    dataset_hash=self.upload.sha256 if self.upload else None,
                    details=diag,
                )
            return df, diag

        ingress.require_upload(self.upload)
        result = self._memo("cleaned", self._cleaned_key() or "", compute)
        self._advance(STAGE_DOWNLOADABLE)
        return result

    def fingerprint(self) -> Optional[str]:
        """Identity of the cleaned artifact (upload content + options); None before any upload."""
        return self._cleaned_key()

    def preview(self) -> pd.DataFrame:
        return transform.preview(self.cleaned()[0], int(self.parse_options.preview_rows))

    # ---------- egress ----------

    def filename_state(self) -> Dict[str, Any]:
        """Values available to download filename templates, read at call time."""
        state: Dict[str, Any] = {"slug": self.session_slug}
        if self.upload is not None:
            stem, ext = split_name(self.upload.original_name)
            state.update({"stem": stem or "upload", "ext": ext, "source": self.upload.original_name})
        return state

    def download(self, name_template: str = DEFAULT_NAME_TEMPLATE, fmt: str = "tsv") -> DownloadSpec:
        """DownloadSpec for the cleaned artifact; raises UploadPending before any upload."""
        df, _ = self.cleaned()
        return egress.prepare_download(df, name_template, self.filename_state, fmt=fmt)

    # ---------- lifecycle ----------

    @property
    def stage(self) -> str:
        """Highest stage reached since the current upload arrived."""
        return self._stage

    def reset(self) -> None:
        ingress.discard_upload(self.upload)
        self.upload = None
        self.parse_options = ParseOptions()
        self.clean_options = CleanOptions()
        self._nodes.clear()
        self._stage = STAGE_NO_UPLOAD
        log_event(session_slug=self.session_slug, stage="session", event="reset")

    def close(self) -> None:
        """Reset and remove the scratch folder if this context created it."""
        self.reset()
        if self._cleanup is not None:
            self._cleanup()

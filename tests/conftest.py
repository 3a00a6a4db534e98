
# Ensures the project root is on sys.path so imports like `from services...` work.
# Place this file at: <repo>/tests/conftest.py
import sys
from pathlib import Path

import pytest

# tests/ -> repo root
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from services.pipeline import SessionContext  # noqa: E402


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Isolated cwd so artifacts/ (JSONL logs) lands under tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRANSFER_WIZARD_MAX_UPLOAD_BYTES", raising=False)
    monkeypatch.delenv("TRANSFER_WIZARD_SLUG", raising=False)
    return tmp_path


@pytest.fixture
def storage_dir(workdir):
    d = workdir / "uploads"
    d.mkdir()
    return d


@pytest.fixture
def ctx(storage_dir):
    c = SessionContext("tslug", storage_dir=storage_dir)
    yield c
    c.close()


class FakeUploadedFile:
    """Shape of streamlit's UploadedFile: name, type, size, getvalue()."""

    def __init__(self, name: str, data: bytes, type: str = "text/csv", size=None):
        self.name = name
        self.type = type
        self._data = data
        self.size = len(data) if size is None else size

    def getvalue(self) -> bytes:
        return self._data


@pytest.fixture
def make_uploaded():
    return FakeUploadedFile

import io
from pathlib import Path

import pytest

from services.errors import UploadPending, ValidationError
from services.ingress import describe_uploads, discard_upload, receive_upload, require_upload
from utils.logging import read_events

CSV = b"a,b,c\n1,x,2.5\n2,y,3.5\n"


def test_receive_upload_stores_bytes_at_runtime_chosen_path(storage_dir):
    d = receive_upload(CSV, original_name="../../etc/passwd.csv", storage_dir=storage_dir,
                       declared_mime_type="text/csv", session_slug="tslug")
    p = Path(d.storage_path)
    assert p.read_bytes() == CSV
    assert p.parent == storage_dir
    # client filename never becomes a path component
    assert "passwd" not in p.name and p.suffix == ".csv"
    assert d.original_name == "../../etc/passwd.csv"
    assert d.declared_size_bytes == len(CSV)
    assert d.declared_mime_type == "text/csv"
    assert len(d.sha256) == 64 and d.received_utc.endswith("Z")


def test_receive_upload_accepts_streams(storage_dir):
    d = receive_upload(io.BytesIO(CSV), original_name="s.csv", storage_dir=storage_dir)
    assert Path(d.storage_path).read_bytes() == CSV


@pytest.mark.parametrize("declared, actual", [(11, 5), (None, 11), (5, 11)])
def test_oversized_upload_rejected_and_nothing_written(storage_dir, declared, actual):
    with pytest.raises(ValidationError, match="too large"):
        receive_upload(b"x" * actual, original_name="big.csv", storage_dir=storage_dir,
                       declared_size_bytes=declared, max_bytes=10)
    assert list(storage_dir.iterdir()) == []


def test_limit_is_inclusive(storage_dir):
    d = receive_upload(b"x" * 10, original_name="edge.csv", storage_dir=storage_dir, max_bytes=10)
    assert d.declared_size_bytes == 10


def test_limit_from_environment(storage_dir, monkeypatch):
    monkeypatch.setenv("TRANSFER_WIZARD_MAX_UPLOAD_BYTES", "4")
    with pytest.raises(ValidationError):
        receive_upload(b"12345", original_name="a.csv", storage_dir=storage_dir)


def test_default_limit_is_five_megabytes(storage_dir):
    with pytest.raises(ValidationError):
        receive_upload(b"", original_name="a.csv", storage_dir=storage_dir,
                       declared_size_bytes=5 * 1024 * 1024 + 1)


def test_rejection_is_logged(storage_dir):
    with pytest.raises(ValidationError):
        receive_upload(b"x" * 20, original_name="big.csv", storage_dir=storage_dir,
                       max_bytes=10, session_slug="tslug")
    events = read_events("tslug", "ingress")
    assert events[-1]["event"] == "reject_upload"
    assert events[-1]["level"] == "WARN"


def test_require_upload_waits_for_first_value(storage_dir):
    with pytest.raises(UploadPending):
        require_upload(None)
    d = receive_upload(CSV, original_name="a.csv", storage_dir=storage_dir)
    assert require_upload(d) is d
    discard_upload(d)
    assert not Path(d.storage_path).exists()
    with pytest.raises(UploadPending):
        require_upload(d)


def test_describe_uploads_table(storage_dir):
    ds = [
        receive_upload(CSV, original_name="a.csv", storage_dir=storage_dir, declared_mime_type="text/csv"),
        receive_upload(b"x\ty\n", original_name="b.tsv", storage_dir=storage_dir),
    ]
    table = describe_uploads(ds)
    assert list(table.columns) == ["name", "size", "type", "datapath"]
    assert table["name"].tolist() == ["a.csv", "b.tsv"]
    assert table["size"].tolist() == [len(CSV), 4]
    assert describe_uploads([]).empty

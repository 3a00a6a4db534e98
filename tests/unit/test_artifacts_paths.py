import pytest

from services.artifacts import (
    atomic_publish,
    atomic_write_bytes,
    make_scratch_dir,
    remove_tree,
    safe_child,
    sha256_bytes,
    sha256_file,
)


def test_safe_child(tmp_path):
    assert safe_child(tmp_path, "a.tsv") == (tmp_path / "a.tsv").resolve()
    with pytest.raises(ValueError):
        safe_child(tmp_path, "../a.tsv")
    with pytest.raises(ValueError):
        safe_child(tmp_path, "sub/a.tsv")


def test_atomic_write_and_hash(tmp_path):
    p = tmp_path / "out" / "x.bin"
    assert atomic_write_bytes(p, b"hello") == 5
    assert sha256_file(p) == sha256_bytes(b"hello")


def test_atomic_publish_failure_keeps_old_content(tmp_path):
    p = tmp_path / "x.bin"
    p.write_bytes(b"old")

    def fail(sink):
        sink.write(b"new-but-partial")
        raise OSError("no space left")

    with pytest.raises(OSError):
        atomic_publish(p, fail)
    assert p.read_bytes() == b"old"
    assert [c.name for c in tmp_path.iterdir()] == ["x.bin"]


def test_scratch_dir_lifecycle():
    d = make_scratch_dir()
    (d / "f").write_text("x", encoding="utf-8")
    remove_tree(d)
    assert not d.exists()
    remove_tree(None)

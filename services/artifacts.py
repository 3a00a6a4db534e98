"""
services/artifacts.py
=====================
Filesystem helpers shared by ingress and egress:
- Path safety for published downloads
- Ephemeral scratch folders for uploads
- Atomic publish (scratch file in the target dir, then os.replace)
- SHA256 hashing
"""

from __future__ import annotations
from pathlib import Path
from typing import BinaryIO, Callable, Union
import hashlib
import os
import shutil
import tempfile


Writer = Callable[[BinaryIO], object]


# ---------- paths ----------

def _ensure_dir(p: Path) -> None:
    p.parent.mkdir(parents=True, exist_ok=True)

def safe_child(directory: Union[str, Path], filename: str) -> Path:
    """Resolve `filename` inside `directory`; refuse anything that escapes it."""
    base = Path(directory).resolve()
    target = (base / filename).resolve()
    if target.parent != base:
        raise ValueError(f"Unsafe artifact path outside {base}: {filename!r}")
    return target

def make_scratch_dir(prefix: str = "transfer_wizard_") -> Path:
    """Per-session ephemeral folder under the OS temp dir."""
    return Path(tempfile.mkdtemp(prefix=prefix))

def remove_tree(path: Union[str, Path, None]) -> None:
    if path:
        shutil.rmtree(path, ignore_errors=True)


# ---------- atomic ----------

def atomic_publish(path: Path, writer: Writer) -> int:
    """
    Let `writer` fill a scratch file next to `path`, then publish it with
    os.replace. If `writer` raises, the scratch file is removed and `path`
    is left untouched. Returns the published size in bytes.
    """
    _ensure_dir(path)
    fd, tmp_name = tempfile.mkstemp(prefix=".partial_", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as tmp:
            writer(tmp)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return path.stat().st_size

def atomic_write_bytes(path: Path, data: bytes) -> int:
    return atomic_publish(path, lambda sink: sink.write(data))


# ---------- hashing ----------

def sha256_file(p: Path) -> str:
    h = hashlib.sha256()
    with p.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()

def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

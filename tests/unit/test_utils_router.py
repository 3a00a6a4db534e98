"""
tests/unit/test_utils_router.py
Validates resolve_renderer() returns render() and raises at call-time for modules without one.
"""

from pathlib import Path
import sys
import pytest

from utils.router import resolve_renderer

def _make_pkg(tmp_path: Path, pkg: str, mod: str, body: str):
    """Create a temp package/module with given body and add tmp to sys.path."""
    p = tmp_path / pkg
    p.mkdir(parents=True, exist_ok=True)
    (p / "__init__.py").write_text("", encoding="utf-8")
    (p / f"{mod}.py").write_text(body, encoding="utf-8")
    sys.path.insert(0, str(tmp_path))

def test_resolve_renderer_returns_render(tmp_path: Path):
    _make_pkg(tmp_path, "rpkg1", "m1", "CALLED = []\ndef render():\n    CALLED.append(1)\n")
    fn = resolve_renderer("rpkg1.m1")
    fn()
    import importlib
    assert importlib.import_module("rpkg1.m1").CALLED == [1]

def test_resolve_renderer_ignores_other_names(tmp_path: Path):
    _make_pkg(tmp_path, "rpkg2", "m2", "def main():\n    return None\n")
    fn = resolve_renderer("rpkg2.m2")
    with pytest.raises(RuntimeError, match="render"):
        fn()

def test_resolve_renderer_missing_module():
    with pytest.raises(ModuleNotFoundError):
        resolve_renderer("screens.does_not_exist")

"""
tests/e2e/test_app_get_pages_smoke.py
app.get_pages() returns (key, title, module_name) triples; every module resolves to a render().
"""

import importlib

from utils.router import resolve_renderer


def test_app_exposes_get_pages(monkeypatch):
    monkeypatch.setenv("TRANSFER_WIZARD_APP_IMPORT_ONLY", "1")
    if "app" in importlib.sys.modules:
        del importlib.sys.modules["app"]
    mod = importlib.import_module("app")
    pages = mod.get_pages()

    assert isinstance(pages, list) and len(pages) > 0
    keys = [k for (k, _, _) in pages]
    assert keys[0] == "upload"
    assert len(set(keys)) == len(keys)
    for key, title, module_name in pages:
        assert isinstance(title, str) and title
        renderer = resolve_renderer(module_name)
        assert callable(renderer)
        assert importlib.import_module(module_name).render is renderer

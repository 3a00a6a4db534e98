# utils/router.py
# Resolve a page module to its render() callable.

from __future__ import annotations
import importlib
from typing import Callable


def resolve_renderer(module_name: str) -> Callable[[], object]:
    """
    Import `module_name` and return its `render` callable.
    A module without one yields a renderer that raises when called, so a
    broken page shows an error in place instead of breaking navigation.
    """
    mod = importlib.import_module(module_name)
    fn = getattr(mod, "render", None)
    if callable(fn):
        return fn

    def _missing_renderer() -> None:
        raise RuntimeError(f"Page module '{module_name}' does not define render().")
    return _missing_renderer

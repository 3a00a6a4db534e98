# tests/unit/test_screen_guardrails.py
"""
Screen guardrails:
- AST guard: each screens/*.py must define exactly one function named 'render'
- Disk-write guard: fail if any screens/*.py writes to disk (.to_csv(, json.dump(, open(, etc.)

Persistence belongs to services/ (egress.materialize, artifacts.atomic_publish);
screens only hand bytes to st.download_button.
"""

from __future__ import annotations
import ast
import re
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]
SCREENS_DIR = REPO_ROOT / "screens"

FORBIDDEN_WRITE_PATTERNS = [
    r"\.to_csv\s*\(",
    r"\.to_pickle\s*\(",
    r"json\.dump\s*\(",
    r"\bopen\s*\(",
    r"\.write_(text|bytes)\s*\(",
]

def _iter_screen_py() -> list[Path]:
    return sorted(p.resolve() for p in SCREENS_DIR.glob("*.py") if p.is_file())

def test_screens_exist():
    names = {p.stem for p in _iter_screen_py()}
    assert {"upload", "clean_download", "datasets", "report"} <= names

def test_ast_guard_exactly_one_render_function_in_each_screen():
    offenders = []
    for py in _iter_screen_py():
        tree = ast.parse(py.read_text(encoding="utf-8"), filename=str(py))
        names = [n.name for n in ast.walk(tree) if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef))]
        if names != ["render"]:
            offenders.append((py, f"functions found: {names!r} (expected ['render'])"))
    assert not offenders, "\n".join(f" - {path}: {why}" for path, why in offenders)

def test_disk_write_guard_no_writes_in_screens():
    offenders = []
    for py in _iter_screen_py():
        text = py.read_text(encoding="utf-8")
        for pat in FORBIDDEN_WRITE_PATTERNS:
            if re.search(pat, text):
                offenders.append((py, f"matches pattern: {pat}"))
    assert not offenders, "\n".join(f" - {path}: {why}" for path, why in offenders)

# utils/naming.py
import re
import string
from pathlib import Path
from typing import Any, Mapping, Optional

_slug_re = re.compile(r"[^a-zA-Z0-9\-]+")
_unsafe_filename_re = re.compile(r'[\x00-\x1f\x7f/\\:*?"<>|]+')


def slugify(text: Optional[str]) -> str:
    """Lowercase, replace non-alnum with '-', collapse/trim dashes."""
    text = (text or "").strip().lower()
    text = _slug_re.sub("-", text).strip("-")
    text = re.sub(r"-{2,}", "-", text)
    return text


def safe_filename(name: str, fallback: str = "download") -> str:
    """
    Make a client-facing filename safe to publish:
      - path separators, control chars and reserved characters become '_'
      - leading dots/spaces stripped (no hidden files, no '..')
    Empty results fall back to `fallback`.
    """
    cleaned = _unsafe_filename_re.sub("_", name or "").strip().lstrip(". ")
    cleaned = re.sub(r"_{2,}", "_", cleaned)
    return cleaned or fallback


def split_name(original_name: str) -> tuple[str, str]:
    """('data.CSV') -> ('data', 'csv'). Extension lowercased, without dot."""
    p = Path(original_name or "")
    return p.stem, p.suffix.lower().lstrip(".")


def template_fields(template: str) -> list[str]:
    """Field names referenced by a str.format template, in order ('{{x}}' is a literal)."""
    return [field for _, field, _, _ in string.Formatter().parse(template or "") if field]


def render_filename(template: str, state: Mapping[str, Any]) -> str:
    """
    Render a str.format filename template against `state` and sanitize it.
    Contract:
      "{stem}_clean.{ext}" + {"stem": "sales", "ext": "tsv"} -> "sales_clean.tsv"
    Missing fields raise KeyError naming the field.
    """
    values = {}
    for field in template_fields(template):
        key = field.split(".")[0].split("[")[0]
        if key not in state:
            raise KeyError(f"Filename template field '{key}' has no value")
        values[key] = state[key]
    return safe_filename(template.format(**values))

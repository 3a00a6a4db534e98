# services/cleaning.py
"""
Cleaning steps (pure DataFrame -> DataFrame)
--------------------------------------------
- clean_column_names: snake_case names, de-duplicated with _2, _3, ...
- drop_empty_columns: drop columns where every value is missing
- drop_constant_columns: drop columns with a single distinct value (missing counts as a value)

Each step is independently toggleable and idempotent. The two drops commute;
apply_cleaning renames last, so the order in which options are switched on
never changes the result. Frames with zero rows pass through both drop steps
unchanged.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple
import json
import re
import unicodedata

import pandas as pd

_camel = re.compile(r"([a-z0-9])([A-Z])")
_non_alnum = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class CleanOptions:
    rename: bool = False
    drop_empty: bool = False
    drop_constant: bool = False

    @property
    def enabled(self) -> bool:
        return self.rename or self.drop_empty or self.drop_constant

    def fingerprint(self) -> str:
        return json.dumps(asdict(self), sort_keys=True)


def snake_name(name: Any) -> str:
    """'First Name' / 'firstName' -> 'first_name'; '2024' -> 'x2024'; '' -> 'x'."""
    text = unicodedata.normalize("NFKD", str(name)).encode("ascii", "ignore").decode("ascii")
    text = _camel.sub(r"\1_\2", text).lower()
    text = _non_alnum.sub("_", text).strip("_")
    if not text:
        return "x"
    if text[0].isdigit():
        return f"x{text}"
    return text


def clean_column_names(df: pd.DataFrame) -> pd.DataFrame:
    seen: set[str] = set()
    out: List[str] = []
    for col in df.columns:
        base = snake_name(col)
        name, n = base, 1
        while name in seen:
            n += 1
            name = f"{base}_{n}"
        seen.add(name)
        out.append(name)
    cleaned = df.copy()
    cleaned.columns = out
    return cleaned


def drop_empty_columns(df: pd.DataFrame) -> pd.DataFrame:
    if len(df) == 0:
        return df.copy()
    keep = ~df.isna().all(axis=0)
    return df.loc[:, keep.to_numpy()].copy()


def drop_constant_columns(df: pd.DataFrame) -> pd.DataFrame:
    if len(df) == 0:
        return df.copy()
    keep = [df.iloc[:, i].nunique(dropna=False) > 1 for i in range(df.shape[1])]
    return df.loc[:, keep].copy()


def apply_cleaning(df: pd.DataFrame, options: CleanOptions) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Run the enabled steps and return (cleaned_df, diagnostics).

    Drops run before renaming, so a de-duplication suffix never depends on a
    column that is dropped; the result depends only on which options are on.

    Diagnostics keys:
    - renamed: {old: new} for names that changed
    - dropped_empty / dropped_constant: original column names removed by each step
    - n_cols_in / n_cols_out
    """
    out = df
    renamed: Dict[str, str] = {}
    dropped_empty: List[str] = []
    dropped_constant: List[str] = []

    if options.drop_empty:
        before = list(out.columns)
        out = drop_empty_columns(out)
        dropped_empty = [str(c) for c in before if c not in set(out.columns)]
    if options.drop_constant:
        before = list(out.columns)
        out = drop_constant_columns(out)
        dropped_constant = [str(c) for c in before if c not in set(out.columns)]
    if options.rename:
        before = list(out.columns)
        out = clean_column_names(out)
        renamed = {str(a): b for a, b in zip(before, out.columns) if str(a) != b}

    diag: Dict[str, Any] = {
        "renamed": renamed,
        "dropped_empty": dropped_empty,
        "dropped_constant": dropped_constant,
        "n_cols_in": int(df.shape[1]),
        "n_cols_out": int(out.shape[1]),
    }
    return out, diag

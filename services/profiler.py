"""Column profiler used by the HTML report.
Fields per column:
- column, dtype (pandas dtype name)
- n_missing, pct_missing (0..1)
- n_unique (non-missing)
- example_values (up to utils.constants.EXAMPLE_VALUES)
- value_classification: one of {'empty','constant','high_cardinality','normal'}
"""
from __future__ import annotations
from typing import Any, Dict

import numpy as np
import pandas as pd

from utils.constants import PROF_SAMPLE_CAP, HIGH_CARD_FRAC, EXAMPLE_VALUES


def _classify(n_unique: int, n_missing: int, n: int) -> str:
    if n == 0 or n_missing == n:
        return "empty"
    if n_unique == 1 and n_missing == 0:
        return "constant"
    if (n_unique / max(n, 1)) > HIGH_CARD_FRAC:
        return "high_cardinality"
    return "normal"


def _native(x: Any) -> Any:
    return x.item() if isinstance(x, np.generic) else x


def profile_table(df: pd.DataFrame, sample_cap: int = PROF_SAMPLE_CAP) -> Dict[str, Any]:
    """Return {'table_summary': {...}, 'columns_profile': [...]}; JSON-safe."""
    n_rows, n_cols = df.shape
    sampled = n_rows > sample_cap
    sample = df.sample(sample_cap, random_state=0) if sampled else df

    cols = []
    for col in df.columns:
        s = sample[col]
        n = len(s)
        missing = int(s.isna().sum())
        n_unique = int(s.nunique(dropna=True))
        cols.append({
            "column": str(col),
            "dtype": str(s.dtype),
            "n_missing": missing,
            "pct_missing": (missing / n) if n else 0.0,
            "n_unique": n_unique,
            "example_values": [_native(x) for x in s.dropna().unique()[:EXAMPLE_VALUES]],
            "value_classification": _classify(n_unique, missing, n),
        })

    return {
        "table_summary": {
            "n_rows": int(n_rows),
            "n_cols": int(n_cols),
            "sampled": bool(sampled),
            "n_rows_used": int(len(sample)),
        },
        "columns_profile": cols,
    }


def profile_frame(profile: Dict[str, Any]) -> pd.DataFrame:
    """columns_profile as a DataFrame (examples joined for display)."""
    rows = [dict(c, example_values=", ".join(map(str, c["example_values"]))) for c in profile["columns_profile"]]
    return pd.DataFrame(rows, columns=[
        "column", "dtype", "n_missing", "pct_missing", "n_unique", "example_values", "value_classification",
    ])

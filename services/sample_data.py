"""Built-in sample datasets offered for download (deterministic, seeded)."""
from __future__ import annotations
from typing import Callable, Dict, List

import numpy as np
import pandas as pd

from services.errors import ValidationError

_SEED = 20240901


def _plants(rng: np.random.Generator) -> pd.DataFrame:
    n = 30
    species = np.repeat(["setosa", "versicolor", "virginica"], n // 3)
    return pd.DataFrame({
        "Sepal Length": np.round(rng.normal(5.8, 0.8, n), 1),
        "Sepal Width": np.round(rng.normal(3.0, 0.4, n), 1),
        "Petal Length": np.round(rng.normal(3.8, 1.7, n), 1),
        "Species": species,
    })


def _orders(rng: np.random.Generator) -> pd.DataFrame:
    n = 25
    return pd.DataFrame({
        "orderId": np.arange(1001, 1001 + n),
        "customer": rng.choice(["acme", "globex", "initech", "umbrella"], n),
        "quantity": rng.integers(1, 20, n),
        "unitPrice": np.round(rng.uniform(2.5, 99.0, n), 2),
    })


def _sensor_log(rng: np.random.Generator) -> pd.DataFrame:
    # Includes an all-missing and a constant column to exercise the cleaning toggles.
    n = 20
    return pd.DataFrame({
        "Timestamp": pd.date_range("2024-01-01", periods=n, freq="h").strftime("%Y-%m-%d %H:%M"),
        "Temp (C)": np.round(rng.normal(21.0, 1.5, n), 2),
        "Humidity %": np.round(rng.uniform(30, 60, n), 1),
        "Firmware": ["v1.4.2"] * n,
        "Calibration": [np.nan] * n,
    })


_BUILDERS: Dict[str, Callable[[np.random.Generator], pd.DataFrame]] = {
    "plants": _plants,
    "orders": _orders,
    "sensor_log": _sensor_log,
}


def list_datasets() -> List[str]:
    return sorted(_BUILDERS)


def load_dataset(name: str) -> pd.DataFrame:
    if name not in _BUILDERS:
        raise ValidationError(f"Unknown dataset {name!r}; choose one of {list_datasets()}")
    return _BUILDERS[name](np.random.default_rng(_SEED))

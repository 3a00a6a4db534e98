import pandas as pd
import pytest

from services.errors import ValidationError
from services.sample_data import list_datasets, load_dataset


def test_datasets_are_deterministic():
    for name in list_datasets():
        pd.testing.assert_frame_equal(load_dataset(name), load_dataset(name))
        assert load_dataset(name).columns.is_unique


def test_sensor_log_has_cleanable_columns():
    df = load_dataset("sensor_log")
    assert df["Calibration"].isna().all()
    assert df["Firmware"].nunique() == 1


def test_unknown_dataset():
    with pytest.raises(ValidationError):
        load_dataset("nope")

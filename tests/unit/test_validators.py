import math

import pandas as pd
import pytest

from netviz.services import validators


def test_missing_columns_detects_absent_fields():
    df = pd.DataFrame({"a": [1], "b": [2]})
    missing = validators.missing_columns(df, ["a", "c"])
    assert missing == ["c"]


def test_missing_columns_ignores_case():
    df = pd.DataFrame({"location": ["USA"], "time": [2010], "VALUE": [71.7]})
    assert validators.missing_columns(df, ["LOCATION", "TIME", "Value"]) == []


def test_enforce_dimensions_raises_dataset_too_large():
    df = pd.DataFrame({"a": range(5)})
    with pytest.raises(validators.DatasetTooLarge):
        validators.enforce_dimensions(df, max_rows=4, max_columns=10)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9999", 500),
        ("abc", 150),
        (None, 150),
        (math.nan, 150),
        (math.inf, 150),
        (5, 20),
        ("20", 20),
        (150.9, 150),
        (" 75 ", 75),
    ],
)
def test_clamp_cap(settings, raw, expected):
    assert validators.clamp_cap(raw, settings) == expected


def test_clamp_int_uses_bounds():
    assert validators.clamp_int(0, default=5, lo=1, hi=50, field="top_n") == 1
    assert validators.clamp_int(80, default=5, lo=1, hi=50, field="top_n") == 50
    assert validators.clamp_int("x", default=5, lo=1, hi=50, field="top_n") == 5

# tests/box_plot_widget/conftest.py
"""Pytest configuration and fixtures for box plot widget tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest

from niceboxplot.box_plot_widget.data_view import DataFrameDataView


def pytest_configure() -> None:
    # Ensure niceboxplot is importable when running tests from repo root.
    repo_root = Path(__file__).resolve().parents[2]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def sample_df() -> pd.DataFrame:
    """Three categories; B holds an outlier, C is tiny."""
    return pd.DataFrame({
        "group": ["A"] * 10 + ["B"] * 5 + ["C"] * 2,
        "value": [1, 2, 3, 4, 5, 6, 7, 8, 9, 10] + [1, 2, 2, 3, 100] + [4.0, 6.0],
        "target": [float(i) for i in range(17)],
    })


@pytest.fixture
def sample_view(sample_df: pd.DataFrame) -> DataFrameDataView:
    return DataFrameDataView(sample_df, x_columns=["group"], y_column="value", extra_columns=["target"])

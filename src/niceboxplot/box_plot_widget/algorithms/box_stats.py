"""
Box plot statistics, pure numpy/pandas.

For every category sequence:

  1. Drop missing (non-numeric) observations and sort ascending (stable).
  2. Q1, median and Q3 by linear interpolation between closest ranks
     (numpy's default quantile method).
  3. Whisker bounds at Q1 - k*IQR and Q3 + k*IQR (k = 1.5 by default).
     The reported min/max are the most extreme observations inside the
     bounds, not the bounds themselves. With no observation inside the
     bounds (k = 0 on spread data) min/max collapse onto Q1/Q3.
  4. Observations strictly outside the bounds are outliers.
  5. The average is the mean of all observations, outliers included.

An empty sequence yields a stat whose fields are all NaN and no outliers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

# Column order of box_stats_table().
STATS_COLUMNS = ["min", "Q1", "median", "Q3", "max", "avg", "count", "outlier_count", "all_count"]


@dataclass(frozen=True)
class BoxPlotStat:
    """Five-number summary plus mean for one category."""

    min: float
    q1: float
    median: float
    q3: float
    max: float
    average: float
    count: int = 0          # observations inside the whiskers
    outlier_count: int = 0

    @property
    def all_count(self) -> int:
        return self.count + self.outlier_count

    @property
    def is_empty(self) -> bool:
        return self.all_count == 0

    def five_number_summary(self) -> list[float]:
        return [self.min, self.q1, self.median, self.q3, self.max]

    def value(self, stat: str) -> Optional[float]:
        """Statistic by selector token (min, Q1, median, Q3, max, avg); None for no data.

        Raises:
            KeyError: If the token is not a known statistic.
        """
        v = {
            "min": self.min,
            "Q1": self.q1,
            "median": self.median,
            "Q3": self.q3,
            "max": self.max,
            "avg": self.average,
        }[stat]
        return None if math.isnan(v) else v


EMPTY_STAT = BoxPlotStat(
    min=math.nan, q1=math.nan, median=math.nan, q3=math.nan, max=math.nan, average=math.nan
)


@dataclass(frozen=True)
class OutlierPoint:
    """An observation outside the whiskers of category ``category_index``."""

    category_index: int
    value: float


def _clean(values: Sequence[Optional[float]]) -> np.ndarray:
    s = pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce").dropna()
    arr = s.to_numpy(dtype=float)
    return arr[np.isfinite(arr)]


def compute_box_stat(values: Sequence[Optional[float]], whisker_iqr: float = 1.5) -> tuple[BoxPlotStat, list[float]]:
    """Box statistic and outlier values (ascending) for one category sequence."""
    arr = np.sort(_clean(values), kind="stable")
    if arr.size == 0:
        return EMPTY_STAT, []

    q1, median, q3 = (float(v) for v in np.quantile(arr, [0.25, 0.5, 0.75]))
    reach = whisker_iqr * (q3 - q1)
    low = q1 - reach
    high = q3 + reach

    inside = (arr >= low) & (arr <= high)
    inliers = arr[inside]
    outliers = arr[~inside]
    if inliers.size:
        lo, hi = float(inliers.min()), float(inliers.max())
    else:
        # every observation is outside the whiskers; they collapse onto the box
        lo, hi = q1, q3

    stat = BoxPlotStat(
        min=lo,
        q1=q1,
        median=median,
        q3=q3,
        max=hi,
        average=float(arr.mean()),
        count=int(inliers.size),
        outlier_count=int(outliers.size),
    )
    return stat, [float(v) for v in outliers]


def aggregate(
    sequences: Sequence[Sequence[Optional[float]]],
    whisker_iqr: float = 1.5,
) -> tuple[list[BoxPlotStat], list[OutlierPoint]]:
    """Box statistics per sequence and the outlier points of all sequences.

    Outliers are ordered by category index, then ascending value.
    """
    box_stats: list[BoxPlotStat] = []
    outliers: list[OutlierPoint] = []
    for index, values in enumerate(sequences):
        stat, outlier_values = compute_box_stat(values, whisker_iqr)
        box_stats.append(stat)
        outliers.extend(OutlierPoint(index, v) for v in outlier_values)
    return box_stats, outliers


def box_stats_table(keys: Sequence[str], box_stats: Sequence[BoxPlotStat]) -> pd.DataFrame:
    """Stats table with one row per category (index = category key)."""
    return pd.DataFrame(
        [
            [s.min, s.q1, s.median, s.q3, s.max, s.average, s.count, s.outlier_count, s.all_count]
            for s in box_stats
        ],
        index=pd.Index(list(keys), name="category"),
        columns=STATS_COLUMNS,
    )

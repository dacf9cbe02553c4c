"""Marker and control line derivation.

Two marker-line strategies answer different questions and are kept apart:

- StatisticLineStrategy re-indexes one box statistic per category
  (``line-by-min|Q1|median|Q3|max|avg``), giving a trend of that statistic.
- EnvelopeLineStrategy rescans the box extremes together with every outlier
  of a category and reports the literal min/max (``line-by-min|max|all``).

Every line has one value per category in category order; categories without
data contribute None (a gap).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.algorithms.box_stats import BoxPlotStat, OutlierPoint
from niceboxplot.box_plot_widget.data_view import Axis
from niceboxplot.box_plot_widget.render_state import (
    LINE_PREFIX,
    LineStrategy,
    MarkerLineSelection,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class LineSeries:
    """An auxiliary line aligned to the category axis."""

    name: str
    values: tuple[Optional[float], ...]
    dashed: bool = False
    label_first_only: bool = False


def _gap(v: Optional[float]) -> Optional[float]:
    if v is None or math.isnan(v):
        return None
    return float(v)


class MarkerLineStrategy:
    """Derive marker lines for a parsed selection."""

    kind: LineStrategy

    def derive(
        self,
        selection: MarkerLineSelection,
        box_stats: Sequence[BoxPlotStat],
        outliers: Sequence[OutlierPoint],
    ) -> list[LineSeries]:
        raise NotImplementedError


class StatisticLineStrategy(MarkerLineStrategy):
    """One line whose i-th value is the selected statistic of category i."""

    kind = LineStrategy.STATISTIC

    def derive(
        self,
        selection: MarkerLineSelection,
        box_stats: Sequence[BoxPlotStat],
        outliers: Sequence[OutlierPoint],
    ) -> list[LineSeries]:
        if selection.is_none:
            return []
        try:
            values = tuple(stat.value(selection.stat) for stat in box_stats)
        except KeyError:
            logger.warning(f"Statistic {selection.stat!r} is not a box statistic, no line drawn")
            return []
        return [LineSeries(name=selection.token, values=values)]


class EnvelopeLineStrategy(MarkerLineStrategy):
    """Min and/or max lines over box extremes and outliers of each category."""

    kind = LineStrategy.ENVELOPE

    def envelope(
        self,
        box_stats: Sequence[BoxPlotStat],
        outliers: Sequence[OutlierPoint],
    ) -> tuple[list[Optional[float]], list[Optional[float]]]:
        """Per-category (min, max) over box min/max and outlier values."""
        pools: list[list[float]] = [[] for _ in box_stats]
        for i, stat in enumerate(box_stats):
            pools[i].extend(v for v in (_gap(stat.min), _gap(stat.max)) if v is not None)
        for point in outliers:
            if not 0 <= point.category_index < len(pools):
                continue
            v = _gap(point.value)
            if v is not None:
                pools[point.category_index].append(v)
        line_min = [min(p) if p else None for p in pools]
        line_max = [max(p) if p else None for p in pools]
        return line_min, line_max

    def derive(
        self,
        selection: MarkerLineSelection,
        box_stats: Sequence[BoxPlotStat],
        outliers: Sequence[OutlierPoint],
    ) -> list[LineSeries]:
        if selection.is_none or selection.stat not in ("min", "max", "all"):
            return []
        line_min, line_max = self.envelope(box_stats, outliers)
        lines: list[LineSeries] = []
        if selection.stat in ("min", "all"):
            lines.append(LineSeries(name=f"{LINE_PREFIX}min", values=tuple(line_min)))
        if selection.stat in ("max", "all"):
            lines.append(LineSeries(name=f"{LINE_PREFIX}max", values=tuple(line_max)))
        return lines


_STRATEGIES: dict[LineStrategy, MarkerLineStrategy] = {
    LineStrategy.STATISTIC: StatisticLineStrategy(),
    LineStrategy.ENVELOPE: EnvelopeLineStrategy(),
}


def strategy_for(kind: LineStrategy) -> MarkerLineStrategy:
    return _STRATEGIES[kind]


def derive_marker_lines(
    line: Optional[str],
    kind: LineStrategy,
    box_stats: Sequence[BoxPlotStat],
    outliers: Sequence[OutlierPoint],
) -> list[LineSeries]:
    """Parse the selector token for ``kind`` and derive its lines."""
    selection = MarkerLineSelection.parse(line, kind)
    return strategy_for(kind).derive(selection, box_stats, outliers)


def derive_control_lines(
    axis_values: Mapping[str, Sequence[Optional[float]]],
    axes: Sequence[Axis],
    n_categories: int,
) -> list[LineSeries]:
    """Dashed lines for the extra continuous axes.

    Each axis's row values are laid over the category axis: values beyond
    the last category are dropped, missing positions are gaps.
    """
    display = {a.name: a.display_name or a.name for a in axes}
    lines: list[LineSeries] = []
    for name, values in axis_values.items():
        laid = [_gap(v) for v in list(values)[:n_categories]]
        laid.extend([None] * (n_categories - len(laid)))
        lines.append(
            LineSeries(name=display.get(name, name), values=tuple(laid), dashed=True, label_first_only=True)
        )
    return lines

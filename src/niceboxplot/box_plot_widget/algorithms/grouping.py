"""Partition row measurements by leaf category.

Simple mode collects the value-axis measurement of every row into the
sequence of the row's X leaf. Multi-axis mode additionally collects, for
every other continuous axis, the sequence of that axis's values across all
rows (used for the dashed control lines).

Groups are returned as a list aligned to the flattened leaf order; a leaf
with no rows keeps its position with an empty sequence.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import pandas as pd

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.algorithms.hierarchy import LeafCategory
from niceboxplot.box_plot_widget.data_view import X_AXIS, Y_AXIS, Axis, Row

logger = get_logger(__name__)


@dataclass(frozen=True)
class CategoryGroup:
    """Measurements of one leaf category, in row iteration order (NaN for missing)."""

    key: str
    values: tuple[float, ...]

    @property
    def is_empty(self) -> bool:
        return not self.values


@dataclass(frozen=True)
class GroupedData:
    """Result of multi-axis grouping."""

    groups: list[CategoryGroup]
    axis_values: dict[str, list[Optional[float]]] = field(default_factory=dict)


def _leaf_positions(leaves: Sequence[LeafCategory]) -> dict[int, int]:
    """Map hierarchy leaf index -> position in the flattened list."""
    return {leaf.node.leaf_index: pos for pos, leaf in enumerate(leaves) if leaf.node.leaf_index is not None}


def group_values(
    leaves: Sequence[LeafCategory],
    rows: Sequence[Row],
    *,
    category_axis: str = X_AXIS,
    value_axis: str = Y_AXIS,
) -> list[CategoryGroup]:
    """One CategoryGroup per leaf holding the value-axis measurements of its rows."""
    positions = _leaf_positions(leaves)
    pos_list: list[int] = []
    y_list: list[Optional[float]] = []
    for row in rows:
        pos = positions.get(row.categorical(category_axis).leaf_index)
        if pos is None:
            logger.debug(f"{row} maps to no flattened leaf, skipping")
            continue
        pos_list.append(pos)
        y_list.append(row.continuous(value_axis))

    tmp = pd.DataFrame({"pos": pos_list, "y": pd.to_numeric(pd.Series(y_list, dtype=object), errors="coerce")})
    by_pos = {int(pos): sub["y"].tolist() for pos, sub in tmp.groupby("pos", sort=True)}

    return [
        CategoryGroup(key=leaf.formatted_path, values=tuple(float(v) for v in by_pos.get(pos, [])))
        for pos, leaf in enumerate(leaves)
    ]


def group_by_axes(
    leaves: Sequence[LeafCategory],
    rows: Sequence[Row],
    axes: Sequence[Axis],
    *,
    category_axis: str = X_AXIS,
    value_axis: str = Y_AXIS,
) -> GroupedData:
    """Multi-axis mode: category groups plus per-axis value sequences.

    ``axis_values`` holds one entry per continuous axis other than the value
    axis, in axis order, each with one value per row in row order.
    """
    groups = group_values(leaves, rows, category_axis=category_axis, value_axis=value_axis)
    side_axes = [a.name for a in axes if not a.is_categorical and a.name not in (category_axis, value_axis)]
    axis_values = {name: [row.continuous(name) for row in rows] for name in side_axes}
    return GroupedData(groups=groups, axis_values=axis_values)

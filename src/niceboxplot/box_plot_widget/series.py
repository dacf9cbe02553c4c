"""Series description handed to the chart renderer.

SeriesDescription is an immutable value built once per render pass: the
category axis, one styled box datum per category, the styled outlier points
and any marker/control lines, all aligned to the same category order.

The assembler also guards the color configuration: when the color-by leaves
differ from the X categories the box plots would be meaningless, so the whole
description is replaced by a placeholder carrying only an explanatory text.
"""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Optional, Sequence

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.algorithms.box_stats import BoxPlotStat, OutlierPoint
from niceboxplot.box_plot_widget.algorithms.colors import ColorBinding
from niceboxplot.box_plot_widget.algorithms.hierarchy import LeafCategory
from niceboxplot.box_plot_widget.algorithms.marker_lines import LineSeries
from niceboxplot.box_plot_widget.data_view import DEFAULT_COLOR
from niceboxplot.box_plot_widget.errors import ConfigurationMismatchError
from niceboxplot.box_plot_widget.render_state import Orientation

logger = get_logger(__name__)

ALL_VALUES = "All Values"
PLACEHOLDER_TEXT = (
    "All of the color-by columns have to be selected on either the X-axis or used to trellis by."
)
BOX_FILL_COLOR = "rgba(0, 0, 0, 0)"

# Approximate width of one placeholder character in px.
_CHAR_WIDTH_PX = 7
_PANEL_PADDING_PX = 20


@dataclass(frozen=True)
class BoxDatum:
    """Statistics of one category with its styling."""

    category: str
    stat: BoxPlotStat
    border_color: str
    fill_color: str = BOX_FILL_COLOR


@dataclass(frozen=True)
class OutlierDatum:
    """An outlier point styled with its category's color."""

    category_index: int
    value: float
    color: str


@dataclass(frozen=True)
class SeriesDescription:
    """Everything the renderer needs for one pass."""

    categories: tuple[str, ...] = ()
    boxes: tuple[BoxDatum, ...] = ()
    outliers: tuple[OutlierDatum, ...] = ()
    lines: tuple[LineSeries, ...] = ()
    control_lines: tuple[LineSeries, ...] = ()
    orientation: Orientation = Orientation.VERTICAL
    value_title: str = ""
    placeholder_lines: tuple[str, ...] = field(default=())

    @property
    def is_placeholder(self) -> bool:
        return bool(self.placeholder_lines)


def color_domain(color_is_empty: bool, color_leaves: Sequence[LeafCategory]) -> list[str]:
    """Labels of the color dimension; ['All Values'] when no color is configured."""
    if color_is_empty:
        return [ALL_VALUES]
    return [leaf.formatted_path for leaf in color_leaves]


def check_color_configuration(domain: Sequence[str], categories: Sequence[str]) -> None:
    """Raise unless the color dimension is absent or its leaves equal the categories.

    Raises:
        ConfigurationMismatchError: If color leaves and categories differ.
    """
    if list(domain) == [ALL_VALUES] or list(domain) == list(categories):
        return
    raise ConfigurationMismatchError(domain, categories)


def wrap_placeholder(text: str, panel_width: int) -> tuple[str, ...]:
    """Wrap the placeholder text to the panel width."""
    width = max(10, (panel_width - _PANEL_PADDING_PX) // _CHAR_WIDTH_PX)
    return tuple(textwrap.wrap(text, width=width)) or (text,)


def placeholder_description(panel_width: int) -> SeriesDescription:
    """Empty series with the explanatory text."""
    return SeriesDescription(placeholder_lines=wrap_placeholder(PLACEHOLDER_TEXT, panel_width))


def assemble_series(
    leaves: Sequence[LeafCategory],
    bindings: Sequence[ColorBinding],
    box_stats: Sequence[BoxPlotStat],
    outliers: Sequence[OutlierPoint],
    *,
    lines: Sequence[LineSeries] = (),
    control_lines: Sequence[LineSeries] = (),
    domain: Sequence[str] = (ALL_VALUES,),
    orientation: Orientation = Orientation.VERTICAL,
    value_title: str = "",
    panel_width: int = 600,
    default_color: str = DEFAULT_COLOR,
) -> SeriesDescription:
    """Compose the per-category results into a SeriesDescription.

    Returns the placeholder description when the color guard trips.

    Raises:
        ValueError: If leaves, bindings and box_stats are not the same length.
    """
    categories = tuple(leaf.formatted_path for leaf in leaves)
    if not (len(categories) == len(bindings) == len(box_stats)):
        raise ValueError(
            f"misaligned inputs: categories={len(categories)}, "
            f"bindings={len(bindings)}, box_stats={len(box_stats)}"
        )

    try:
        check_color_configuration(domain, categories)
    except ConfigurationMismatchError as e:
        logger.warning(f"Color configuration not representable, showing placeholder: {e}")
        return placeholder_description(panel_width)

    colors = [b.style_color(default_color) for b in bindings]
    boxes = tuple(
        BoxDatum(category=cat, stat=stat, border_color=color)
        for cat, stat, color in zip(categories, box_stats, colors)
    )
    outlier_data = tuple(
        OutlierDatum(p.category_index, p.value, colors[p.category_index])
        for p in outliers
        if 0 <= p.category_index < len(colors)
    )
    return SeriesDescription(
        categories=categories,
        boxes=boxes,
        outliers=outlier_data,
        lines=tuple(lines),
        control_lines=tuple(control_lines),
        orientation=orientation,
        value_title=value_title,
    )

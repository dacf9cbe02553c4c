"""Render pass for the box plot panel.

A pass reads the data view, runs the statistics pipeline and hands a new
SeriesDescription to the panel, which replaces the displayed figure
wholesale. Every read of the view is an await point; the pass checks for
expiry after reading the hierarchy roots and again before handing over its
result, and an expired view aborts the pass without touching what is shown.

Passes are serialized by the caller (one data view notification at a time);
nothing is cached between passes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.algorithms.box_stats import aggregate, box_stats_table
from niceboxplot.box_plot_widget.algorithms.colors import bind_colors
from niceboxplot.box_plot_widget.algorithms.grouping import group_by_axes
from niceboxplot.box_plot_widget.algorithms.hierarchy import LeafCategory, flatten_hierarchy, flatten_leaves
from niceboxplot.box_plot_widget.algorithms.marker_lines import derive_control_lines, derive_marker_lines
from niceboxplot.box_plot_widget.data_view import COLOR_AXIS, X_AXIS, Y_AXIS, DataFrameDataView
from niceboxplot.box_plot_widget.errors import DataViewError, ExpiredViewError
from niceboxplot.box_plot_widget.render_state import RenderSettings
from niceboxplot.box_plot_widget.series import SeriesDescription, assemble_series, color_domain

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Output of a completed pass.

    Attributes:
        description: Series description for the renderer.
        leaves: Flattened X leaves, indexed like ``description.categories``
            (used to mark the rows of a clicked category).
        stats: Box statistics table, one row per category.
    """

    description: SeriesDescription
    leaves: tuple[LeafCategory, ...]
    stats: pd.DataFrame


async def run_render_pass(view: DataFrameDataView, settings: RenderSettings) -> RenderResult:
    """Compute a full render pass from the data view.

    Raises:
        DataViewError: If the view reports errors.
        ExpiredViewError: If the view expired during the pass.
    """
    errors = await view.get_errors()
    if errors:
        raise DataViewError(errors)

    x_hierarchy = await view.hierarchy(X_AXIS)
    leaves = await flatten_hierarchy(x_hierarchy)

    color_hierarchy = await view.hierarchy(COLOR_AXIS)
    color_root = await color_hierarchy.root()
    if color_root is None:
        raise ExpiredViewError("color hierarchy root is unavailable")
    color_leaves = [] if color_hierarchy.is_empty else flatten_leaves(color_root)

    rows = await view.all_rows()
    axes = await view.axes()

    grouped = group_by_axes(leaves, rows, axes, category_axis=X_AXIS, value_axis=Y_AXIS)
    bindings = bind_colors(leaves, color_is_empty=color_hierarchy.is_empty)
    box_stats, outliers = aggregate([g.values for g in grouped.groups], settings.whisker_iqr)

    lines = derive_marker_lines(settings.line, settings.line_strategy, box_stats, outliers)
    control_lines = (
        derive_control_lines(grouped.axis_values, axes, len(leaves)) if settings.show_control_lines else []
    )
    value_title = next((a.display_name for a in axes if a.name == Y_AXIS), "")

    description = assemble_series(
        leaves,
        bindings,
        box_stats,
        outliers,
        lines=lines,
        control_lines=control_lines,
        domain=color_domain(color_hierarchy.is_empty, color_leaves),
        orientation=settings.orientation,
        value_title=value_title,
        panel_width=settings.panel_width,
    )

    if await view.has_expired():
        raise ExpiredViewError("data view expired before the figure was replaced")

    return RenderResult(
        description=description,
        leaves=tuple(leaves),
        stats=box_stats_table([leaf.formatted_path for leaf in leaves], box_stats),
    )


class BoxPlotRenderer:
    """Runs render passes and routes their outcome to the panel.

    Args:
        on_render: Called with the RenderResult of every completed pass.
        on_errors: Called with the host's error list when the view has errors,
            and with an empty list when a pass completes (hides the overlay).
    """

    def __init__(
        self,
        *,
        on_render: Callable[[RenderResult], None],
        on_errors: Optional[Callable[[list[str]], None]] = None,
    ) -> None:
        self._on_render = on_render
        self._on_errors = on_errors

    async def render(self, view: DataFrameDataView, settings: RenderSettings) -> Optional[RenderResult]:
        """Run one pass; returns None if it was aborted."""
        try:
            result = await run_render_pass(view, settings)
        except DataViewError as e:
            logger.warning(f"Data view has errors, skipping render: {e}")
            if self._on_errors:
                self._on_errors(e.errors)
            return None
        except ExpiredViewError as e:
            logger.debug(f"Render pass aborted: {e}")
            return None

        if self._on_errors:
            self._on_errors([])
        self._on_render(result)
        d = result.description
        logger.info(
            f"Render pass complete: categories={len(d.categories)}, outliers={len(d.outliers)}, "
            f"lines={len(d.lines)}, control_lines={len(d.control_lines)}, placeholder={d.is_placeholder}"
        )
        return result

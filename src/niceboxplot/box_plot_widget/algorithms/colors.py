"""Bind each leaf category to the display colors of its rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from niceboxplot.box_plot_widget.algorithms.hierarchy import LeafCategory
from niceboxplot.box_plot_widget.data_view import COLOR_AXIS, DEFAULT_COLOR


@dataclass(frozen=True)
class ColorBinding:
    """Colors of one leaf category, indexed by color-hierarchy leaf index.

    Slots for color leaves with no row in this category are None.
    """

    formatted_path: str
    colors: tuple[Optional[str], ...]

    @property
    def primary(self) -> Optional[str]:
        """Lowest-index color present, used to style the category's box and outliers."""
        return next((c for c in self.colors if c is not None), None)

    def style_color(self, default: str = DEFAULT_COLOR) -> str:
        return self.primary or default


def bind_colors(
    leaves: Sequence[LeafCategory],
    *,
    color_is_empty: bool,
    color_axis: str = COLOR_AXIS,
) -> list[ColorBinding]:
    """One ColorBinding per leaf, in leaf order.

    Without a color dimension every row writes slot 0. When several rows of a
    leaf share a color index the last one wins.
    """
    bindings: list[ColorBinding] = []
    for leaf in leaves:
        colors: list[Optional[str]] = []
        for row in leaf.rows:
            if color_is_empty:
                index = 0
            else:
                try:
                    index = row.categorical(color_axis).leaf_index
                except ValueError:
                    # row has no color leaf
                    continue
            if index >= len(colors):
                colors.extend([None] * (index + 1 - len(colors)))
            colors[index] = row.color
        bindings.append(ColorBinding(leaf.formatted_path, tuple(colors)))
    return bindings

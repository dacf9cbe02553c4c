"""NiceGUI box plot panel.

Provides BoxPlotController: a Plotly box plot bound to a data view, with a
right-click popout for the marker-line selector and click-to-mark on boxes.

**Public API:**

- **__init__(view, ...)**: Bind a data view; settings come from BoxPlotConfig unless given.
- **build(container=None)**: Build the panel. Call once to render.
- **refresh()**: Run a render pass on the current view (async).
- **set_view(view)**: Replace the data view and run a render pass (async).
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import plotly.graph_objects as go
from nicegui import ui
from nicegui.events import GenericEventArguments

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.box_plot_config import BoxPlotConfig
from niceboxplot.box_plot_widget.data_view import DataFrameDataView
from niceboxplot.box_plot_widget.figure_generator import FigureGenerator
from niceboxplot.box_plot_widget.render_pipeline import BoxPlotRenderer, RenderResult
from niceboxplot.box_plot_widget.render_state import RenderSettings, line_options

logger = get_logger(__name__)

POPOUT_HEADING = "Line Category"


def _category_index_from_click(e: GenericEventArguments) -> Optional[int]:
    """Category index carried in customdata of the first clicked point."""
    points = (e.args or {}).get("points") or []
    if not points:
        return None
    custom = points[0].get("customdata")
    if isinstance(custom, (list, tuple)) and custom:
        custom = custom[0]
    try:
        return int(custom)
    except (TypeError, ValueError):
        return None


class BoxPlotController:
    """Box plot panel for one data view.

    Args:
        view: Data view to render.
        settings: Initial settings; loaded from ``config`` when None.
        config: Persistence for settings; ``BoxPlotConfig.load()`` when None.
        is_editing: Show the marker-line popout on right click.
        on_marking_changed: Called with the marked row indices after a click marks or clears rows.
    """

    def __init__(
        self,
        view: DataFrameDataView,
        *,
        settings: Optional[RenderSettings] = None,
        config: Optional[BoxPlotConfig] = None,
        is_editing: bool = True,
        on_marking_changed: Optional[Callable[[set[int]], None]] = None,
    ) -> None:
        self.view = view
        self._config = config if config is not None else BoxPlotConfig.load()
        self.settings = settings if settings is not None else self._config.get_settings()
        self.is_editing = is_editing
        self._on_marking_changed = on_marking_changed

        self.figure_generator = FigureGenerator()
        self.renderer = BoxPlotRenderer(on_render=self._apply_result, on_errors=self._show_errors)

        self.result: Optional[RenderResult] = None
        self.errors: list[str] = []
        self._plot: Optional[ui.plotly] = None
        self._error_label: Optional[ui.label] = None
        self._radio: Optional[ui.radio] = None

    # -----------------------------
    # UI
    # -----------------------------
    def build(self, container: Optional[ui.element] = None) -> None:
        """Build the error overlay, the plot and the popout inside ``container``."""
        parent = container if container is not None else ui.column().classes("w-full h-full")
        with parent:
            self._error_label = ui.label("").classes("text-red-600 whitespace-pre-line")
            self._error_label.visible = False

            self._plot = ui.plotly(go.Figure().to_dict()).classes("w-full h-full")
            self._plot.on("plotly_click", self._on_plotly_click)
            self._plot.on("plotly_doubleclick", self._on_plotly_doubleclick)

            if self.is_editing:
                with self._plot:
                    with ui.context_menu():
                        ui.label(POPOUT_HEADING).classes("font-semibold px-2")
                        self._radio = ui.radio(
                            line_options(self.settings.line_strategy),
                            value=self.settings.line,
                            on_change=self._on_line_change,
                        )

        if self.result is not None:
            self._apply_result(self.result)

    def _apply_result(self, result: RenderResult) -> None:
        self.result = result
        if self._plot is None:
            return
        self._plot.update_figure(self.figure_generator.make_figure(result.description))
        self._plot.update()

    def _show_errors(self, errors: list[str]) -> None:
        self.errors = list(errors)
        if self._error_label is None or self._plot is None:
            return
        self._error_label.text = "\n".join(self.errors)
        self._error_label.visible = bool(self.errors)
        self._plot.visible = not self.errors

    # -----------------------------
    # Render passes
    # -----------------------------
    async def refresh(self) -> Optional[RenderResult]:
        return await self.renderer.render(self.view, self.settings)

    async def set_view(self, view: DataFrameDataView) -> Optional[RenderResult]:
        self.view = view
        return await self.refresh()

    # -----------------------------
    # Events
    # -----------------------------
    async def _on_line_change(self, e: Any) -> None:
        value = getattr(e, "value", None)
        if not isinstance(value, str) or value == self.settings.line:
            return
        logger.info(f"Marker line selector changed: {self.settings.line!r} -> {value!r}")
        self.settings.line = value
        self._config.set_line(value)
        try:
            self._config.save()
        except OSError:
            logger.warning("Marker line selector could not be persisted; keeping it for this session")
        await self.refresh()

    async def _on_plotly_click(self, e: GenericEventArguments) -> None:
        if self.result is None or self.result.description.is_placeholder:
            return
        index = _category_index_from_click(e)
        if index is None or not 0 <= index < len(self.result.leaves):
            logger.warning(f"Could not resolve a category from plotly click: {e.args}")
            return
        if await self.view.has_expired():
            return
        leaf = self.result.leaves[index]
        # a click replaces the marking with the clicked category's rows
        await self.view.clear_marking()
        for row in leaf.rows:
            row.mark()
        logger.debug(f"Marked {len(leaf.rows)} rows of {leaf.formatted_path!r}")
        if self._on_marking_changed:
            self._on_marking_changed(set(self.view.marked))

    async def _on_plotly_doubleclick(self, e: GenericEventArguments) -> None:
        if await self.view.has_expired():
            return
        await self.view.clear_marking()
        if self._on_marking_changed:
            self._on_marking_changed(set(self.view.marked))

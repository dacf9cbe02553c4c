"""Box plot panel: statistics pipeline, Plotly figure generation and NiceGUI controller."""

from niceboxplot.box_plot_widget.data_view import DataFrameDataView
from niceboxplot.box_plot_widget.render_pipeline import BoxPlotRenderer, RenderResult, run_render_pass
from niceboxplot.box_plot_widget.render_state import LineStrategy, Orientation, RenderSettings

__all__ = [
    "BoxPlotRenderer",
    "DataFrameDataView",
    "LineStrategy",
    "Orientation",
    "RenderResult",
    "RenderSettings",
    "run_render_pass",
]

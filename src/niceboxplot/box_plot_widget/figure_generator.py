"""Plotly figure generation for the box plot panel.

Turns a SeriesDescription into a Plotly figure dictionary for ui.plotly.
Boxes are drawn from the precomputed statistics (q1/median/q3/fences/mean)
so Plotly never recomputes them; outliers are one marker trace; marker and
control lines are line traces over the same category axis.
"""

from __future__ import annotations

from typing import Optional

import plotly.graph_objects as go

from niceboxplot.utils.logging import get_logger
from niceboxplot.box_plot_widget.algorithms.marker_lines import LineSeries
from niceboxplot.box_plot_widget.render_state import Orientation
from niceboxplot.box_plot_widget.series import BoxDatum, SeriesDescription

logger = get_logger(__name__)

OUTLIER_TRACE_NAME = "outlier"
TOOLTIP_BGCOLOR = "#000"


def _fmt(v: Optional[float]) -> str:
    return "" if v is None else f"{v:.4f}"


def _box_hovertemplate(datum: BoxDatum) -> str:
    s = datum.stat
    return (
        f"{datum.category}<br>"
        f"min: {s.min:.4f}<br>"
        f"Q1: {s.q1:.4f}<br>"
        f"median: {s.median:.4f}<br>"
        f"Q3: {s.q3:.4f}<br>"
        f"max: {s.max:.4f}<br>"
        f"avg: {s.average:.4f}<br>"
        f"count: {s.count}<br>"
        f"outlierCount: {s.outlier_count}<br>"
        f"allCount: {s.all_count}<extra></extra>"
    )


class FigureGenerator:
    """Builds Plotly figure dictionaries from SeriesDescription values."""

    def __init__(self, *, font_size: int = 12) -> None:
        self.font_size = font_size

    def make_figure(self, description: SeriesDescription) -> dict:
        """Plotly figure dictionary for a description (placeholder or chart)."""
        if description.is_placeholder:
            return self._figure_placeholder(description)
        result = self._figure_box(description)
        logger.debug(f"Figure generated: {len(result.get('data', []))} traces")
        return result

    def _figure_placeholder(self, description: SeriesDescription) -> dict:
        fig = go.Figure()
        fig.add_annotation(
            text="<br>".join(description.placeholder_lines),
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            showarrow=False,
            font=dict(size=self.font_size),
        )
        fig.update_layout(
            xaxis=dict(visible=False),
            yaxis=dict(visible=False),
            margin=dict(l=10, r=10, t=10, b=10),
            showlegend=False,
        )
        return fig.to_dict()

    def _xy(self, description: SeriesDescription, categories: list, values: list) -> dict:
        """Map category/value lists onto x/y for the configured orientation."""
        if description.orientation == Orientation.HORIZONTAL:
            return dict(x=values, y=categories)
        return dict(x=categories, y=values)

    def _point_hovertemplate(self, description: SeriesDescription, name: str) -> str:
        if description.orientation == Orientation.HORIZONTAL:
            return f"{name}<br>%{{y}}: %{{x:.4f}}<extra></extra>"
        return f"{name}<br>%{{x}}: %{{y:.4f}}<extra></extra>"

    def _figure_box(self, description: SeriesDescription) -> dict:
        horizontal = description.orientation == Orientation.HORIZONTAL
        categories = list(description.categories)
        fig = go.Figure()

        for index, datum in enumerate(description.boxes):
            if datum.stat.is_empty:
                # category stays on the axis with nothing drawn
                continue
            s = datum.stat
            position = dict(y=[datum.category]) if horizontal else dict(x=[datum.category])
            fig.add_trace(go.Box(
                **position,
                q1=[s.q1],
                median=[s.median],
                q3=[s.q3],
                lowerfence=[s.min],
                upperfence=[s.max],
                mean=[s.average],
                name=datum.category,
                orientation="h" if horizontal else "v",
                boxmean=True,
                boxpoints=False,
                fillcolor=datum.fill_color,
                line=dict(color=datum.border_color, width=1.5),
                customdata=[[index]],
                hovertemplate=_box_hovertemplate(datum),
                showlegend=False,
            ))

        if description.outliers:
            fig.add_trace(go.Scatter(
                **self._xy(
                    description,
                    [categories[o.category_index] for o in description.outliers],
                    [o.value for o in description.outliers],
                ),
                mode="markers",
                name=OUTLIER_TRACE_NAME,
                marker=dict(color=[o.color for o in description.outliers], size=6),
                customdata=[[o.category_index] for o in description.outliers],
                hovertemplate=self._point_hovertemplate(description, OUTLIER_TRACE_NAME),
                showlegend=False,
            ))

        for line in description.lines:
            fig.add_trace(self._line_trace(description, line))
        for line in description.control_lines:
            fig.add_trace(self._line_trace(description, line))

        category_axis = dict(
            type="category",
            categoryorder="array",
            categoryarray=categories,
            tickangle=0 if horizontal else -90,
            showgrid=False,
        )
        value_axis = dict(title=description.value_title, showgrid=False, showline=True, zeroline=False)
        fig.update_layout(
            margin=dict(l=40, r=20, t=40, b=80),
            xaxis=value_axis if horizontal else category_axis,
            yaxis=category_axis if horizontal else value_axis,
            showlegend=bool(description.lines or description.control_lines),
            hoverlabel=dict(bgcolor=TOOLTIP_BGCOLOR, font=dict(color="#fff", size=self.font_size)),
            uirevision="keep",
        )
        return fig.to_dict()

    def _line_trace(self, description: SeriesDescription, line: LineSeries) -> go.Scatter:
        if line.label_first_only:
            text = [f"{line.name}: {_fmt(v)}" if i == 0 and v is not None else "" for i, v in enumerate(line.values)]
        else:
            text = [_fmt(v) for v in line.values]
        return go.Scatter(
            **self._xy(description, list(description.categories), list(line.values)),
            mode="lines+text" if line.dashed else "lines+markers+text",
            name=line.name,
            text=text,
            textposition="top center",
            line=dict(dash="dash" if line.dashed else "solid"),
            connectgaps=False,
            hovertemplate=self._point_hovertemplate(description, line.name),
        )

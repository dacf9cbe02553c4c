"""Tests for the async render pass and the renderer callbacks."""

import pandas as pd
import pytest

from niceboxplot.box_plot_widget.data_view import DataFrameDataView
from niceboxplot.box_plot_widget.errors import DataViewError, ExpiredViewError
from niceboxplot.box_plot_widget.render_pipeline import BoxPlotRenderer, run_render_pass
from niceboxplot.box_plot_widget.render_state import LineStrategy, Orientation, RenderSettings


class ExpiringView(DataFrameDataView):
    """Expires while the rows are being read."""

    async def all_rows(self):
        rows = await super().all_rows()
        self.expire()
        return rows


class Recorder:
    def __init__(self):
        self.results = []
        self.errors = []

    def on_render(self, result):
        self.results.append(result)

    def on_errors(self, errors):
        self.errors.append(list(errors))


@pytest.mark.asyncio
async def test_full_pass(sample_view):
    result = await run_render_pass(sample_view, RenderSettings(line="line-by-median"))
    d = result.description

    assert d.categories == ("A", "B", "C")
    assert [b.stat.all_count for b in d.boxes] == [10, 5, 2]
    assert [(o.category_index, o.value) for o in d.outliers] == [(1, 100.0)]
    assert len(d.lines) == 1
    assert d.lines[0].values == (5.5, 2.0, 5.0)
    assert [c.name for c in d.control_lines] == ["target"]
    assert d.control_lines[0].values == (0.0, 1.0, 2.0)
    assert d.value_title == "value"
    assert [leaf.formatted_path for leaf in result.leaves] == ["A", "B", "C"]
    assert result.stats.loc["B", "max"] == 3.0


@pytest.mark.asyncio
async def test_pass_respects_settings(sample_view):
    settings = RenderSettings(
        line="line-by-all",
        line_strategy=LineStrategy.ENVELOPE,
        orientation=Orientation.HORIZONTAL,
        show_control_lines=False,
    )
    d = (await run_render_pass(sample_view, settings)).description
    assert [line.name for line in d.lines] == ["line-by-min", "line-by-max"]
    assert d.lines[1].values == (10.0, 100.0, 6.0)
    assert d.control_lines == ()
    assert d.orientation == Orientation.HORIZONTAL


@pytest.mark.asyncio
async def test_pass_is_idempotent(sample_view):
    settings = RenderSettings(line="line-by-avg")
    first = await run_render_pass(sample_view, settings)
    second = await run_render_pass(sample_view, settings)
    assert first.description == second.description
    pd.testing.assert_frame_equal(first.stats, second.stats)


@pytest.mark.asyncio
async def test_pass_with_view_errors_raises(sample_df):
    view = DataFrameDataView(sample_df, x_columns=["group"], y_column="value", errors=["bad column"])
    with pytest.raises(DataViewError) as exc:
        await run_render_pass(view, RenderSettings())
    assert exc.value.errors == ["bad column"]


@pytest.mark.asyncio
async def test_pass_on_expired_view_raises(sample_view):
    sample_view.expire()
    with pytest.raises(ExpiredViewError):
        await run_render_pass(sample_view, RenderSettings())


@pytest.mark.asyncio
async def test_pass_expiring_midway_raises(sample_df):
    view = ExpiringView(sample_df, x_columns=["group"], y_column="value")
    with pytest.raises(ExpiredViewError):
        await run_render_pass(view, RenderSettings())


@pytest.mark.asyncio
async def test_color_mismatch_gives_placeholder():
    df = pd.DataFrame({
        "group": ["A", "A", "B", "B"],
        "hue": ["A", "C", "A", "C"],
        "value": [1.0, 2.0, 3.0, 4.0],
    })
    view = DataFrameDataView(df, x_columns=["group"], y_column="value", color_columns=["hue"])
    d = (await run_render_pass(view, RenderSettings())).description
    assert d.is_placeholder
    assert d.boxes == ()


@pytest.mark.asyncio
async def test_color_same_as_x_colors_boxes():
    df = pd.DataFrame({"group": ["A", "B", "A"], "value": [1.0, 2.0, 3.0]})
    view = DataFrameDataView(
        df, x_columns=["group"], y_column="value", color_columns=["group"], palette=["#aa0000", "#00aa00"]
    )
    d = (await run_render_pass(view, RenderSettings())).description
    assert not d.is_placeholder
    assert [b.border_color for b in d.boxes] == ["#aa0000", "#00aa00"]


@pytest.mark.asyncio
async def test_renderer_routes_success(sample_view):
    rec = Recorder()
    renderer = BoxPlotRenderer(on_render=rec.on_render, on_errors=rec.on_errors)
    result = await renderer.render(sample_view, RenderSettings())
    assert result is not None
    assert rec.results == [result]
    assert rec.errors == [[]]


@pytest.mark.asyncio
async def test_renderer_routes_errors(sample_view):
    rec = Recorder()
    renderer = BoxPlotRenderer(on_render=rec.on_render, on_errors=rec.on_errors)
    sample_view.set_errors(["first", "second"])
    assert await renderer.render(sample_view, RenderSettings()) is None
    assert rec.results == []
    assert rec.errors == [["first", "second"]]


@pytest.mark.asyncio
async def test_renderer_aborts_silently_on_expiry(sample_df):
    rec = Recorder()
    renderer = BoxPlotRenderer(on_render=rec.on_render, on_errors=rec.on_errors)
    view = ExpiringView(sample_df, x_columns=["group"], y_column="value")
    assert await renderer.render(view, RenderSettings()) is None
    assert rec.results == []
    assert rec.errors == []


@pytest.mark.asyncio
async def test_zero_whisker_reach_renders():
    df = pd.DataFrame({"group": ["A", "A"], "value": [1.0, 10.0]})
    view = DataFrameDataView(df, x_columns=["group"], y_column="value")
    d = (await run_render_pass(view, RenderSettings(line="line-by-max", whisker_iqr=0.0))).description
    assert [o.value for o in d.outliers] == [1.0, 10.0]
    assert d.lines[0].values == (7.75,)

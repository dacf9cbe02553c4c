"""Tests for BoxPlotController with the NiceGUI layer faked."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import pytest

import niceboxplot.box_plot_widget.box_plot_controller as ctrl_mod
from niceboxplot.box_plot_widget.box_plot_config import BoxPlotConfig
from niceboxplot.box_plot_widget.box_plot_controller import BoxPlotController, _category_index_from_click
from niceboxplot.box_plot_widget.render_state import RenderSettings

pytestmark = pytest.mark.requires_nicegui


def _click(customdata: Any) -> SimpleNamespace:
    return SimpleNamespace(args={"points": [{"customdata": customdata}]})


@pytest.fixture
def config(tmp_path) -> BoxPlotConfig:
    """Config in a temp path so tests never touch the user config."""
    return BoxPlotConfig.load(config_path=tmp_path / "box_plot_config_test.json")


@pytest.fixture
def controller(sample_view, config) -> BoxPlotController:
    return BoxPlotController(sample_view, config=config)


@pytest.fixture
def fake_ui(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    fake = MagicMock()
    monkeypatch.setattr(ctrl_mod, "ui", fake, raising=True)
    return fake


@pytest.mark.parametrize(
    "args, expected",
    [
        ({"points": [{"customdata": [2]}]}, 2),
        ({"points": [{"customdata": 1}]}, 1),
        ({"points": [{"customdata": "0"}]}, 0),
        ({"points": [{"customdata": None}]}, None),
        ({"points": []}, None),
        (None, None),
    ],
)
def test_category_index_from_click(args, expected):
    assert _category_index_from_click(SimpleNamespace(args=args)) == expected


def test_settings_come_from_config(sample_view, config):
    config.set_settings(RenderSettings(line="line-by-Q1"))
    controller = BoxPlotController(sample_view, config=config)
    assert controller.settings.line == "line-by-Q1"


@pytest.mark.asyncio
async def test_refresh_without_ui(controller):
    result = await controller.refresh()
    assert result is not None
    assert controller.result is result
    assert controller.errors == []


@pytest.mark.asyncio
async def test_build_then_refresh_updates_plot(controller, fake_ui):
    controller.build()
    fake_plot = fake_ui.plotly.return_value.classes.return_value
    fake_plot.on.assert_any_call("plotly_click", controller._on_plotly_click)
    fake_plot.on.assert_any_call("plotly_doubleclick", controller._on_plotly_doubleclick)
    fake_ui.radio.assert_called_once()

    await controller.refresh()
    fig = fake_plot.update_figure.call_args[0][0]
    assert [t["name"] for t in fig["data"] if t["type"] == "box"] == ["A", "B", "C"]


def test_build_without_editing_has_no_popout(sample_view, config, fake_ui):
    BoxPlotController(sample_view, config=config, is_editing=False).build()
    fake_ui.context_menu.assert_not_called()
    fake_ui.radio.assert_not_called()


@pytest.mark.asyncio
async def test_errors_show_overlay_and_keep_result(controller, sample_view, fake_ui):
    controller.build()
    first = await controller.refresh()
    sample_view.set_errors(["Y axis must be numeric"])
    assert await controller.refresh() is None
    assert controller.errors == ["Y axis must be numeric"]
    assert controller.result is first
    assert controller._error_label.visible is True
    assert controller._plot.visible is False


@pytest.mark.asyncio
async def test_expired_view_keeps_previous_result(controller, sample_view):
    first = await controller.refresh()
    sample_view.expire()
    assert await controller.refresh() is None
    assert controller.result is first


@pytest.mark.asyncio
async def test_line_change_persists_and_rerenders(controller, config):
    await controller.refresh()
    await controller._on_line_change(SimpleNamespace(value="line-by-max"))
    assert controller.settings.line == "line-by-max"
    assert BoxPlotConfig.load(config_path=config.path).get_settings().line == "line-by-max"
    assert [line.name for line in controller.result.description.lines] == ["line-by-max"]


@pytest.mark.asyncio
async def test_line_change_survives_save_failure(controller, config, monkeypatch):
    def _fail() -> None:
        raise OSError("read-only")

    monkeypatch.setattr(config, "save", _fail)
    await controller._on_line_change(SimpleNamespace(value="line-by-avg"))
    assert controller.settings.line == "line-by-avg"
    assert controller.result is not None


@pytest.mark.asyncio
async def test_click_marks_rows_of_category(sample_view, config):
    seen: list[set[int]] = []
    controller = BoxPlotController(sample_view, config=config, on_marking_changed=seen.append)
    await controller.refresh()
    await controller._on_plotly_click(_click([1]))
    assert sample_view.marked == set(range(10, 15))
    assert seen == [set(range(10, 15))]

    await controller._on_plotly_click(_click([2]))
    assert sample_view.marked == {15, 16}


@pytest.mark.asyncio
async def test_click_on_expired_view_does_not_mark(controller, sample_view):
    await controller.refresh()
    sample_view.expire()
    await controller._on_plotly_click(_click([0]))
    assert sample_view.marked == set()


@pytest.mark.asyncio
async def test_click_outside_categories_is_ignored(controller, sample_view):
    await controller.refresh()
    await controller._on_plotly_click(_click([9]))
    await controller._on_plotly_click(SimpleNamespace(args={}))
    assert sample_view.marked == set()


@pytest.mark.asyncio
async def test_doubleclick_clears_marking(sample_view, config):
    seen: list[set[int]] = []
    controller = BoxPlotController(sample_view, config=config, on_marking_changed=seen.append)
    await controller.refresh()
    await controller._on_plotly_click(_click([0]))
    await controller._on_plotly_doubleclick(SimpleNamespace(args={}))
    assert sample_view.marked == set()
    assert seen[-1] == set()


def test_corrupt_settings_file_still_builds_controller(sample_view, tmp_path):
    path = tmp_path / "box_plot_config_test.json"
    path.write_text('{"schema_version": 1, "settings": {"whisker_iqr": "wide"}}', encoding="utf-8")
    controller = BoxPlotController(sample_view, config=BoxPlotConfig.load(config_path=path))
    assert controller.settings.whisker_iqr == 1.5


@pytest.mark.asyncio
async def test_click_replaces_marking_made_by_rows(controller, sample_view):
    await controller.refresh()
    (await sample_view.all_rows())[0].mark()
    await controller._on_plotly_click(_click([2]))
    assert sample_view.marked == {15, 16}

"""Unit tests for series assembly and the color configuration guard."""

import pytest

from niceboxplot.box_plot_widget.algorithms.box_stats import EMPTY_STAT, aggregate
from niceboxplot.box_plot_widget.algorithms.colors import ColorBinding
from niceboxplot.box_plot_widget.algorithms.hierarchy import LeafCategory
from niceboxplot.box_plot_widget.algorithms.marker_lines import LineSeries
from niceboxplot.box_plot_widget.data_view import HierarchyNode
from niceboxplot.box_plot_widget.errors import ConfigurationMismatchError
from niceboxplot.box_plot_widget.render_state import Orientation
from niceboxplot.box_plot_widget.series import (
    ALL_VALUES,
    BOX_FILL_COLOR,
    PLACEHOLDER_TEXT,
    assemble_series,
    check_color_configuration,
    color_domain,
    wrap_placeholder,
)


def _leaves(*keys):
    root = HierarchyNode(None)
    return [LeafCategory(k, (), HierarchyNode(k, parent=root)) for k in keys]


def test_color_domain_without_color_is_all_values():
    assert color_domain(True, []) == [ALL_VALUES]
    assert color_domain(False, _leaves("A", "C")) == ["A", "C"]


@pytest.mark.parametrize(
    "domain, categories",
    [
        (["All Values"], ["A", "B"]),
        (["A", "B"], ["A", "B"]),
        (["All Values"], []),
    ],
)
def test_guard_accepts(domain, categories):
    check_color_configuration(domain, categories)


@pytest.mark.parametrize(
    "domain, categories",
    [
        (["A", "C"], ["A", "B"]),
        (["B", "A"], ["A", "B"]),
        (["A"], ["A", "B"]),
    ],
)
def test_guard_rejects(domain, categories):
    with pytest.raises(ConfigurationMismatchError) as exc:
        check_color_configuration(domain, categories)
    assert exc.value.color_labels == domain
    assert exc.value.category_labels == categories


def test_assemble_styles_boxes_and_outliers():
    leaves = _leaves("A", "B")
    bindings = [ColorBinding("A", ("#ff0000",)), ColorBinding("B", (None, "#00ff00"))]
    box_stats, outliers = aggregate([[1, 2, 3], [1, 2, 2, 3, 100]])
    line = LineSeries("line-by-median", (2.0, 2.0))

    d = assemble_series(
        leaves, bindings, box_stats, outliers,
        lines=[line], domain=["A", "B"], orientation=Orientation.HORIZONTAL, value_title="value",
    )

    assert not d.is_placeholder
    assert d.categories == ("A", "B")
    assert [b.border_color for b in d.boxes] == ["#ff0000", "#00ff00"]
    assert all(b.fill_color == BOX_FILL_COLOR for b in d.boxes)
    assert len(d.outliers) == 1
    assert d.outliers[0].category_index == 1
    assert d.outliers[0].value == 100.0
    assert d.outliers[0].color == "#00ff00"
    assert d.lines == (line,)
    assert d.orientation == Orientation.HORIZONTAL
    assert d.value_title == "value"


def test_assemble_missing_color_uses_default():
    d = assemble_series(
        _leaves("A"), [ColorBinding("A", ())], [EMPTY_STAT], [], default_color="#123456"
    )
    assert d.boxes[0].border_color == "#123456"
    assert d.boxes[0].stat.is_empty


def test_assemble_mismatch_gives_placeholder():
    box_stats, outliers = aggregate([[1, 2, 3], [4, 5, 6]])
    d = assemble_series(
        _leaves("A", "B"),
        [ColorBinding("A", ("#111111",)), ColorBinding("B", ("#222222",))],
        box_stats,
        outliers,
        domain=["A", "C"],
        panel_width=300,
    )
    assert d.is_placeholder
    assert d.categories == ()
    assert d.boxes == ()
    assert d.outliers == ()
    assert " ".join(d.placeholder_lines) == PLACEHOLDER_TEXT


def test_assemble_misaligned_inputs_raise():
    with pytest.raises(ValueError):
        assemble_series(_leaves("A", "B"), [ColorBinding("A", ())], [EMPTY_STAT], [])


def test_wrap_placeholder_to_panel_width():
    narrow = wrap_placeholder(PLACEHOLDER_TEXT, 160)
    wide = wrap_placeholder(PLACEHOLDER_TEXT, 2000)
    assert len(narrow) > 1
    assert all(len(line) <= 20 for line in narrow)
    assert wide == (PLACEHOLDER_TEXT,)


def test_wrap_placeholder_has_minimum_width():
    lines = wrap_placeholder(PLACEHOLDER_TEXT, 0)
    assert all(len(line) <= 10 for line in lines)
    assert " ".join(lines) == PLACEHOLDER_TEXT

"""Data view consumed by the box plot render pass.

The render pass reads its input through a small host API: an error list,
categorical hierarchies for the X and Color axes, the ordered rows and the
axis metadata. Every read is awaitable because a hosting platform answers
these calls asynchronously and may expire the view between two of them.

DataFrameDataView is the in-memory host used by the NiceGUI panel, the demo
and the tests. It builds the hierarchies from pandas columns and owns the
row marking state.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

import pandas as pd
import plotly.colors

from niceboxplot.utils.logging import get_logger

logger = get_logger(__name__)

# Delimiter between hierarchy levels in formatted paths.
PATH_DELIMITER = " » "

# Axis names used by DataFrameDataView.
X_AXIS = "X"
Y_AXIS = "Y"
COLOR_AXIS = "Color"

DEFAULT_PALETTE: list[str] = list(plotly.colors.qualitative.Plotly)
DEFAULT_COLOR = DEFAULT_PALETTE[0]


class AxisKind(Enum):
    """Kind of values an axis carries."""
    CATEGORICAL = "categorical"
    CONTINUOUS = "continuous"


@dataclass(frozen=True)
class Axis:
    """Axis metadata: name, kind and the label shown for it."""

    name: str
    kind: AxisKind
    display_name: str = ""

    @property
    def is_categorical(self) -> bool:
        return self.kind == AxisKind.CATEGORICAL


@dataclass(frozen=True)
class CategoricalValue:
    """A row's value on a categorical axis."""

    formatted: str
    leaf_index: int

    def formatted_value(self) -> str:
        return self.formatted


class Row:
    """One row of the data view.

    Rows are created by the data view; ``mark()`` asks the view to add the row
    to the marking, the row itself stores no marking state.
    """

    def __init__(
        self,
        view: "DataFrameDataView",
        index: int,
        *,
        categorical: dict[str, CategoricalValue],
        continuous: dict[str, Optional[float]],
        color: str,
    ) -> None:
        self._view = view
        self.index = index
        self._categorical = categorical
        self._continuous = continuous
        self._color = color

    def categorical(self, axis_name: str) -> CategoricalValue:
        try:
            return self._categorical[axis_name]
        except KeyError:
            raise ValueError(f"Row has no categorical axis {axis_name!r}") from None

    def continuous(self, axis_name: str) -> Optional[float]:
        try:
            return self._continuous[axis_name]
        except KeyError:
            raise ValueError(f"Row has no continuous axis {axis_name!r}") from None

    @property
    def color(self) -> str:
        """Hex code of the color assigned to this row."""
        return self._color

    def mark(self) -> None:
        self._view.mark_rows([self])

    def __repr__(self) -> str:
        return f"Row(index={self.index})"


class HierarchyNode:
    """Node of a categorical hierarchy.

    ``parent`` is a back-reference only. Leaves own the rows mapped to them;
    inner nodes report the rows of all their leaves.
    """

    def __init__(self, key: Optional[str], parent: Optional["HierarchyNode"] = None) -> None:
        self.key = key
        self.parent = parent
        self.children: list[HierarchyNode] = []
        self.leaf_index: Optional[int] = None
        self._rows: list[Row] = []

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def formatted_path(self) -> str:
        parts: list[str] = []
        node: Optional[HierarchyNode] = self
        while node is not None and node.key:
            parts.append(node.key)
            node = node.parent
        return PATH_DELIMITER.join(reversed(parts))

    def leaves(self) -> list["HierarchyNode"]:
        if self.is_leaf:
            return [self]
        out: list[HierarchyNode] = []
        for child in self.children:
            out.extend(child.leaves())
        return out

    def rows(self) -> list[Row]:
        if self.is_leaf:
            return list(self._rows)
        return [r for leaf in self.leaves() for r in leaf._rows]

    def __repr__(self) -> str:
        return f"HierarchyNode(key={self.key!r}, leaf_index={self.leaf_index})"


class Hierarchy:
    """A categorical hierarchy; ``root()`` returns None once the view has expired."""

    def __init__(self, view: "DataFrameDataView", name: str, root: HierarchyNode, *, is_empty: bool) -> None:
        self._view = view
        self.name = name
        self.is_empty = is_empty
        self._root = root

    async def root(self) -> Optional[HierarchyNode]:
        if self._view.expired:
            return None
        return self._root


def _level_values(df: pd.DataFrame, columns: Sequence[str]) -> list[tuple[str, ...]]:
    """Ordered leaf paths for the given level columns.

    All-categorical columns give the full product of their declared
    categories (empty leaves included); otherwise the observed combinations
    are sorted by their values.
    """
    if all(isinstance(df[c].dtype, pd.CategoricalDtype) for c in columns):
        cats = [[str(v) for v in df[c].cat.categories] for c in columns]
        return list(itertools.product(*cats))
    observed = df[list(columns)].dropna().drop_duplicates()
    try:
        observed = observed.sort_values(list(columns), kind="stable")
    except TypeError:
        # mixed types in a level column
        return sorted(set(observed.astype(str).itertuples(index=False, name=None)))
    return list(observed.astype(str).itertuples(index=False, name=None))


def _row_paths(df: pd.DataFrame, columns: Sequence[str]) -> list[Optional[tuple[str, ...]]]:
    """Per-row leaf path, stringified like _level_values; None where a level is missing."""
    missing = df[list(columns)].isna().any(axis=1).tolist()
    paths = df[list(columns)].astype(str).itertuples(index=False, name=None)
    return [None if m else p for m, p in zip(missing, paths)]


def _build_tree(paths: Iterable[tuple[str, ...]]) -> tuple[HierarchyNode, dict[tuple[str, ...], HierarchyNode]]:
    """Build a hierarchy with one leaf per path; leaf indices follow path order."""
    root = HierarchyNode(None)
    leaf_by_path: dict[tuple[str, ...], HierarchyNode] = {}
    for path in paths:
        node = root
        for key in path:
            child = next((c for c in node.children if c.key == key), None)
            if child is None:
                child = HierarchyNode(key, parent=node)
                node.children.append(child)
            node = child
        leaf_by_path[path] = node
    for i, leaf in enumerate(root.leaves()):
        leaf.leaf_index = i
    return root, leaf_by_path


class DataFrameDataView:
    """In-memory data view over a pandas DataFrame.

    Attributes:
        df: Source dataframe (one row of the view per dataframe row).
        x_columns: Columns forming the X hierarchy, outermost level first.
        y_column: Numeric column plotted on the value axis.
        color_columns: Columns forming the Color hierarchy; empty for a single default color.
        extra_columns: Additional numeric columns exposed as continuous axes.
    """

    def __init__(
        self,
        df: pd.DataFrame,
        *,
        x_columns: Sequence[str],
        y_column: str,
        color_columns: Optional[Sequence[str]] = None,
        extra_columns: Optional[Sequence[str]] = None,
        palette: Optional[Sequence[str]] = None,
        default_color: str = DEFAULT_COLOR,
        errors: Optional[Sequence[str]] = None,
    ) -> None:
        """Build hierarchies and rows from the dataframe.

        Raises:
            ValueError: If a configured column is missing or no X column is given.
        """
        self.df = df
        self.x_columns = list(x_columns)
        self.y_column = y_column
        self.color_columns = list(color_columns or [])
        self.extra_columns = list(extra_columns or [])
        self.palette = list(palette or DEFAULT_PALETTE)
        self.default_color = default_color
        self._errors = list(errors or [])

        if not self.x_columns:
            raise ValueError("x_columns must name at least one column")
        required = [*self.x_columns, y_column, *self.color_columns, *self.extra_columns]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise ValueError(f"df is missing required columns {missing!r}")

        self.expired = False
        self.marked: set[int] = set()
        self._build()

    def _build(self) -> None:
        x_root, x_leaf_by_path = _build_tree(_level_values(self.df, self.x_columns))
        self._x_hierarchy = Hierarchy(self, X_AXIS, x_root, is_empty=False)

        if self.color_columns:
            color_root, color_leaf_by_path = _build_tree(_level_values(self.df, self.color_columns))
        else:
            color_root, color_leaf_by_path = HierarchyNode(None), {}
        self._color_hierarchy = Hierarchy(
            self, COLOR_AXIS, color_root, is_empty=not self.color_columns
        )

        y = pd.to_numeric(self.df[self.y_column], errors="coerce")
        extras = {c: pd.to_numeric(self.df[c], errors="coerce") for c in self.extra_columns}

        x_paths = _row_paths(self.df, self.x_columns)
        c_paths = _row_paths(self.df, self.color_columns) if self.color_columns else [None] * len(self.df)

        self._rows: list[Row] = []
        for pos, (x_path, c_path) in enumerate(zip(x_paths, c_paths)):
            if x_path is None:
                # no X leaf to belong to
                continue
            x_leaf = x_leaf_by_path[x_path]

            categorical = {X_AXIS: CategoricalValue(PATH_DELIMITER.join(x_path), x_leaf.leaf_index)}
            color = self.default_color
            color_leaf = None
            if c_path is not None:
                color_leaf = color_leaf_by_path[c_path]
                categorical[COLOR_AXIS] = CategoricalValue(PATH_DELIMITER.join(c_path), color_leaf.leaf_index)
                color = self.palette[color_leaf.leaf_index % len(self.palette)]

            continuous: dict[str, Optional[float]] = {Y_AXIS: _as_float(y.iloc[pos])}
            for c, series in extras.items():
                continuous[c] = _as_float(series.iloc[pos])

            row = Row(self, len(self._rows), categorical=categorical, continuous=continuous, color=color)
            self._rows.append(row)
            x_leaf._rows.append(row)
            if color_leaf is not None:
                color_leaf._rows.append(row)

        logger.debug(
            f"DataFrameDataView built: rows={len(self._rows)}, "
            f"x_leaves={len(x_root.leaves())}, color_leaves={len(color_leaf_by_path)}"
        )

    # -----------------------------
    # Host API
    # -----------------------------
    async def get_errors(self) -> list[str]:
        return list(self._errors)

    async def hierarchy(self, axis_name: str) -> Hierarchy:
        if axis_name == X_AXIS:
            return self._x_hierarchy
        if axis_name == COLOR_AXIS:
            return self._color_hierarchy
        raise ValueError(f"No hierarchy for axis {axis_name!r}")

    async def all_rows(self) -> list[Row]:
        return list(self._rows)

    async def axes(self) -> list[Axis]:
        axes = [
            Axis(X_AXIS, AxisKind.CATEGORICAL, PATH_DELIMITER.join(self.x_columns)),
            Axis(Y_AXIS, AxisKind.CONTINUOUS, self.y_column),
        ]
        axes.extend(Axis(c, AxisKind.CONTINUOUS, c) for c in self.extra_columns)
        if self.color_columns:
            axes.append(Axis(COLOR_AXIS, AxisKind.CATEGORICAL, PATH_DELIMITER.join(self.color_columns)))
        return axes

    async def has_expired(self) -> bool:
        return self.expired

    async def clear_marking(self) -> None:
        self.marked.clear()

    # -----------------------------
    # Host-side controls
    # -----------------------------
    def expire(self) -> None:
        """Mark the view as expired; hierarchy roots become unavailable."""
        self.expired = True

    def set_errors(self, errors: Sequence[str]) -> None:
        self._errors = list(errors)

    def mark_rows(self, rows: Iterable[Row], *, replace: bool = False) -> None:
        """Add rows to the marking, or make them the whole marking when ``replace``."""
        indices = {r.index for r in rows}
        if replace:
            self.marked = indices
        else:
            self.marked |= indices


def _as_float(value: object) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)

"""Flatten a categorical hierarchy into its ordered leaf categories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from niceboxplot.box_plot_widget.data_view import PATH_DELIMITER, Hierarchy, HierarchyNode, Row
from niceboxplot.box_plot_widget.errors import ExpiredViewError


@dataclass(frozen=True)
class LeafCategory:
    """One plotted category: its display key, the rows mapped to it and its leaf node."""

    formatted_path: str
    rows: tuple[Row, ...]
    node: HierarchyNode


def format_path(node: HierarchyNode) -> str:
    """Join ancestor keys outermost-first, stopping at a root with an empty key."""
    keys: list[str] = []
    current: Optional[HierarchyNode] = node
    while current is not None:
        keys.append(current.key or "")
        parent = current.parent
        if parent is None or not parent.key:
            break
        current = parent
    return PATH_DELIMITER.join(reversed(keys))


def flatten_leaves(root: Optional[HierarchyNode]) -> list[LeafCategory]:
    """Leaves of ``root`` in depth-first, left-to-right order.

    Raises:
        ExpiredViewError: If the root is unavailable.
    """
    if root is None:
        raise ExpiredViewError("hierarchy root is unavailable")
    return [
        LeafCategory(formatted_path=format_path(leaf), rows=tuple(leaf.rows()), node=leaf)
        for leaf in root.leaves()
    ]


async def flatten_hierarchy(hierarchy: Hierarchy) -> list[LeafCategory]:
    """Fetch the hierarchy root and flatten it.

    Raises:
        ExpiredViewError: If the view expired before the root could be read.
    """
    return flatten_leaves(await hierarchy.root())

"""Exceptions raised while running a box plot render pass."""

from __future__ import annotations

from typing import Sequence


class DataViewError(Exception):
    """The host reported errors for the current data view.

    Attributes:
        errors: Error descriptors as returned by ``DataView.get_errors()``.
    """

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "data view error")


class ExpiredViewError(Exception):
    """The data view expired while a render pass was reading from it."""


class ConfigurationMismatchError(Exception):
    """Color-by leaves are not the same as the X-axis categories.

    Attributes:
        color_labels: Formatted paths of the color hierarchy leaves.
        category_labels: Formatted paths of the X hierarchy leaves.
    """

    def __init__(self, color_labels: Sequence[str], category_labels: Sequence[str]) -> None:
        self.color_labels = list(color_labels)
        self.category_labels = list(category_labels)
        super().__init__(
            f"color leaves {self.color_labels} do not match categories {self.category_labels}"
        )

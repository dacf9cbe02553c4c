"""Render settings for the box plot panel.

This module defines the marker-line selector grammar, the line strategy and
orientation enums, and the RenderSettings dataclass that is persisted by
BoxPlotConfig and read once at the start of every render pass.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from niceboxplot.utils.logging import get_logger

logger = get_logger(__name__)

LINE_NONE = "none"
LINE_PREFIX = "line-by-"

# Selectable statistics per strategy, in popout order.
STATISTIC_TOKENS: tuple[str, ...] = ("min", "Q1", "median", "Q3", "max", "avg")
ENVELOPE_TOKENS: tuple[str, ...] = ("min", "max", "all")


class LineStrategy(Enum):
    """How marker lines are derived.

    STATISTIC re-indexes one box statistic per category.
    ENVELOPE recomputes min/max per category from box extremes and outliers.
    """
    STATISTIC = "statistic"
    ENVELOPE = "envelope"


class Orientation(Enum):
    """Direction of the category axis."""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


def tokens_for(strategy: LineStrategy) -> tuple[str, ...]:
    """Statistic tokens accepted after 'line-by-' for a strategy."""
    if strategy == LineStrategy.ENVELOPE:
        return ENVELOPE_TOKENS
    return STATISTIC_TOKENS


@dataclass(frozen=True)
class MarkerLineSelection:
    """Parsed marker-line selector; ``stat`` is None for 'none'."""

    stat: Optional[str] = None

    @property
    def is_none(self) -> bool:
        return self.stat is None

    @property
    def token(self) -> str:
        return LINE_NONE if self.stat is None else f"{LINE_PREFIX}{self.stat}"

    @classmethod
    def parse(cls, value: Optional[str], strategy: LineStrategy = LineStrategy.STATISTIC) -> "MarkerLineSelection":
        """Parse 'none' or 'line-by-<stat>'.

        Tokens that are malformed or name a statistic the strategy does not
        support parse to 'none'.
        """
        if value is None or value == LINE_NONE:
            return cls()
        if not isinstance(value, str) or not value.startswith(LINE_PREFIX):
            logger.warning(f"Unknown marker line selector {value!r}, using {LINE_NONE!r}")
            return cls()
        stat = value[len(LINE_PREFIX):]
        if stat not in tokens_for(strategy):
            logger.warning(
                f"Marker line selector {value!r} is not supported by strategy "
                f"{strategy.value!r}, using {LINE_NONE!r}"
            )
            return cls()
        return cls(stat)


def line_options(strategy: LineStrategy) -> dict[str, str]:
    """Popout radio options (selector token -> label) for a strategy."""
    options = {LINE_NONE: "None"}
    for stat in tokens_for(strategy):
        options[f"{LINE_PREFIX}{stat}"] = f"Line by {stat}"
    return options


def _parse_enum(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} value {value!r}, using {default.value!r}")
        return default


def _parse_number(cast: type, value: Any, default: Any, *, minimum: Any = 0) -> Any:
    """Coerce a persisted number; unparseable, non-finite or below-minimum values give ``default``."""
    try:
        v = cast(value)
        if not math.isfinite(v) or v < minimum:
            raise ValueError(value)
        return v
    except (TypeError, ValueError, OverflowError):
        logger.warning(f"Invalid {cast.__name__} setting {value!r}, using {default!r}")
        return default


@dataclass
class RenderSettings:
    """User-facing properties read at the start of each render pass."""
    line: str = LINE_NONE                               # marker-line selector token
    line_strategy: LineStrategy = LineStrategy.STATISTIC
    orientation: Orientation = Orientation.VERTICAL
    show_control_lines: bool = True                    # dashed lines for extra continuous axes
    whisker_iqr: float = 1.5                           # whisker reach in IQR units
    panel_width: int = 600                             # px, used to wrap the placeholder text

    def selection(self) -> MarkerLineSelection:
        return MarkerLineSelection.parse(self.line, self.line_strategy)

    def to_dict(self) -> dict[str, Any]:
        """Serialize RenderSettings to a JSON-friendly dictionary."""
        return {
            "line": self.line,
            "line_strategy": self.line_strategy.value,
            "orientation": self.orientation.value,
            "show_control_lines": self.show_control_lines,
            "whisker_iqr": self.whisker_iqr,
            "panel_width": self.panel_width,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Deserialize RenderSettings; missing or invalid values fall back to defaults."""
        line = data.get("line", LINE_NONE)
        if not isinstance(line, str):
            line = LINE_NONE
        show_control_lines = data.get("show_control_lines", True)
        if not isinstance(show_control_lines, bool):
            logger.warning(f"Invalid show_control_lines setting {show_control_lines!r}, using True")
            show_control_lines = True
        return cls(
            line=line,
            line_strategy=_parse_enum(
                LineStrategy, data.get("line_strategy", LineStrategy.STATISTIC.value), LineStrategy.STATISTIC
            ),
            orientation=_parse_enum(
                Orientation, data.get("orientation", Orientation.VERTICAL.value), Orientation.VERTICAL
            ),
            show_control_lines=show_control_lines,
            whisker_iqr=_parse_number(float, data.get("whisker_iqr", 1.5), 1.5),
            panel_width=_parse_number(int, data.get("panel_width", 600), 600),
        )

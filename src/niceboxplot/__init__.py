"""
niceboxplot: a NiceGUI box plot panel with marker lines and color binding.

This package provides:
- The box plot statistics pipeline (hierarchy flattening, grouping, box
  statistics, color binding, marker lines)
- BoxPlotController: a NiceGUI/Plotly panel that runs it on a data view
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from niceboxplot.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

import logging

from niceboxplot.utils.logging import configure_logging, get_logger

# NullHandler until an application or demo calls configure_logging().
_logger = logging.getLogger("niceboxplot")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"

"""
Logging utilities for the niceboxplot library.

Library code only ever calls ``get_logger(__name__)``. Applications and demos
call ``configure_logging()`` (or its alias ``setup_logging()``) to get console
output. When niceboxplot is embedded in an application that configures logging,
its records flow to that application's handlers.

niceboxplot does NOT write any log files.

Example Usage
-------------
In library code (render_pipeline.py, series.py, etc.):
    ```python
    from niceboxplot.utils.logging import get_logger
    logger = get_logger(__name__)
    logger.info("render pass complete")
    ```

In standalone demos:
    ```python
    from niceboxplot.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

# Default format for niceboxplot logs
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

LOGGER_NAME = "niceboxplot"
LEVEL_ENV_VAR = "NICEBOXPLOT_LOG_LEVEL"


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging for the niceboxplot logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to NICEBOXPLOT_LOG_LEVEL
        env var, or "INFO" if unset.
    fmt:
        Log message format. Defaults to a standard format.
    datefmt:
        Date format. Defaults to "%Y-%m-%d %H:%M:%S".
    force:
        If True, remove existing handlers before adding new ones (allows
        reconfiguration). If False, skip if a stderr handler is already present.
    """
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    formatter = logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)


setup_logging = configure_logging


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    If name is None, returns the 'niceboxplot' logger.
    Otherwise, returns logging.getLogger(name).
    """
    if name is None:
        name = LOGGER_NAME
    return logging.getLogger(name)

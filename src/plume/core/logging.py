"""Centralized logging configuration for Plume."""

from __future__ import annotations

import logging
import os
from typing import Final

from rich.console import Console
from rich.logging import RichHandler

__all__ = ["console", "configure_logging"]

_LOG_LEVEL_ENV: Final[str] = "PLUME_LOG_LEVEL"
_DEFAULT_LEVEL_NAME: Final[str] = "INFO"

console = Console()


def _resolve_level(level_name: str | None = None) -> int:
    """Return the logging level given explicitly or via environment variable."""

    level_name = (level_name or os.getenv(_LOG_LEVEL_ENV, _DEFAULT_LEVEL_NAME)).upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging(level_name: str | None = None) -> None:
    """Install a single Rich handler on the root logger.

    Calling this more than once only updates the level.
    """

    root_logger = logging.getLogger()

    managed = [
        handler
        for handler in root_logger.handlers
        if isinstance(handler, RichHandler) and getattr(handler, "_plume_managed", False)
    ]
    if not managed:
        root_logger.handlers.clear()
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=False,
            log_time_format="[%Y-%m-%d %H:%M:%S]",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._plume_managed = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)

    root_logger.setLevel(_resolve_level(level_name))
    logging.captureWarnings(True)

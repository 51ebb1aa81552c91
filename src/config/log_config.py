"""Process-wide logging configuration."""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

from src.config.settings import settings


def _to_level(level: str | int, default: int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), default)


def configure_logging(
    level: str | int | None = None,
    module_levels: dict[str, str | int] | None = None,
    silenced_loggers: dict[str, str | int] | None = None,
) -> None:
    """Configure the root logger with a Rich handler writing to stderr.

    Args:
        level: Root level; defaults to ``settings.logging.level``
        module_levels: Per-logger levels, e.g. ``{"src.fetcher": "DEBUG"}``
        silenced_loggers: Noisy third-party loggers and the level to cap them at
    """
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(level or settings.logging.level, logging.WARNING))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, module_level in {**settings.logging.module_levels, **(module_levels or {})}.items():
        logging.getLogger(name).setLevel(_to_level(module_level, logging.INFO))

    silenced = settings.logging.silenced_loggers if silenced_loggers is None else silenced_loggers
    for name, cap in silenced.items():
        logging.getLogger(name).setLevel(_to_level(cap, logging.CRITICAL))

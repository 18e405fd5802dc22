"""Centralized logging configuration for the Exam Bot client."""

from __future__ import annotations

import logging
from logging import Logger
from typing import Iterable


DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


_CONSOLE_HANDLER_NAME = "exam_bot.console"


def _has_console_handler(logger: Logger) -> bool:
    return any(handler.get_name() == _CONSOLE_HANDLER_NAME for handler in logger.handlers)


def configure_logging(level: int = logging.INFO, *, handlers: Iterable[logging.Handler] | None = None) -> Logger:
    """Configure the root logger with sensible defaults."""

    root = logging.getLogger()
    root.setLevel(level)

    if handlers is not None:
        for handler in handlers:
            if handler not in root.handlers:
                root.addHandler(handler)
    elif not _has_console_handler(root):
        console_handler = logging.StreamHandler()
        console_handler.set_name(_CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        root.addHandler(console_handler)

    # httpx logs every request at INFO; the client emits its own HTTP_CALL events.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return root


def resolve_log_level(verbose: bool = False, quiet: bool = False) -> int:
    """Map the console verbosity flags onto a logging level."""

    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


__all__ = ["configure_logging", "resolve_log_level", "DEFAULT_LOG_FORMAT"]

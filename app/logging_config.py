from __future__ import annotations

import logging
import os
import sys

_RESET = "\x1b[0m"
_LEVEL_COLORS = {
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;31m",
}
# httpx logs every request line at INFO, including the email lookup query string.
_QUIET_LOGGERS = ("httpx", "httpcore")


class _ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelname)
        return f"{color}{message}{_RESET}" if color else message


def configure_logging(level: str | None = None) -> None:
    """Log to stderr at ``PANEL_LOG_LEVEL`` (INFO by default); idempotent."""
    level_name = (level or os.getenv("PANEL_LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    if root.handlers:
        return

    handler = logging.StreamHandler()
    formatter_cls = _ColorFormatter if sys.stderr.isatty() and not os.getenv("NO_COLOR") else logging.Formatter
    handler.setFormatter(formatter_cls(fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                                       datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

"""Process-wide logging setup.

Every record carries ``user`` and ``view`` fields; view controllers pass them
through ``extra=log_context(...)`` and everything else gets ``-``.
"""

import logging
import os
from typing import Optional


DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | user=%(user)s view=%(view)s | %(message)s"

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "multipart")


class ViewContextFilter(logging.Filter):
    """Fills ``user``/``view`` on records logged without view context."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        for attr in ("user", "view"):
            if not hasattr(record, attr):
                setattr(record, attr, "-")
        return True


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    resolved_level = getattr(logging, (level or DEFAULT_LEVEL), logging.INFO)

    root = logging.getLogger()
    root.setLevel(resolved_level)
    # Replace handlers so uvicorn reloads do not stack them
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    handler.addFilter(ViewContextFilter())
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def log_context(user: Optional[str] = None, view: Optional[str] = None) -> dict:
    """``extra`` mapping for a record about ``user`` acting on ``view``."""
    return {"user": user or "-", "view": view or "-"}

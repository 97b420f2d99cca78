from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Chatty third-party loggers that drown out widget timings
_NOISY_LOGGERS = ("werkzeug", "urllib3")


def configure_logging(
        level: Optional[Union[int, str]] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure root logger for the dashboard

    Modes:
    - JSON (default), every 'extra={...}' key becomes a JSON field
    - plain text (dev mode)

    Selection Order:
        1) arguments if provided
        2) env vars STATBOARD_LOG_FORMAT ("json" / "plain") and STATBOARD_LOG_LEVEL
        3) default = "json" at INFO
    """
    format_mode = (force_format or os.getenv("STATBOARD_LOG_FORMAT", "json")).lower()

    if level is None:
        level = os.getenv("STATBOARD_LOG_LEVEL", "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if format_mode == "plain":
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    else:
        handler.setFormatter(
            jsonlogger.JsonFormatter(JSON_FORMAT, rename_fields={"levelname": "level", "name": "logger"})
        )

    # Replace any existing handlers to avoid duplicate lines under the Dash reloader
    root.handlers.clear()
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

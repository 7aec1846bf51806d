"""
Logging setup for the planner service and scripts.

The handler/formatter layout lives in `src/flightplanner/config/logging.yaml`; the
level comes from settings (`FLIGHTPLANNER_LOG_LEVEL`) unless a caller passes one.
"""

from __future__ import annotations

import copy
import logging
import logging.config

from flightplanner.config.settings import get_logging_config, get_settings

# Per-request INFO lines from the HTTP client drown out load reports.
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Apply the packaged dictConfig at `level` (default: `app.log_level`)."""
    # The cached config is shared; never mutate it in place.
    config = copy.deepcopy(get_logging_config())
    level = (level or get_settings().app.log_level).upper()

    config.setdefault("root", {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict):
            handler["level"] = level

    logging.config.dictConfig(config)
    if logging.getLevelName(level) != logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

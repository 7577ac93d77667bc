"""
Centralized Logging

Architectural Intent:
- Provides human-readable or structured JSON logging for all henix components
- Centralizes log configuration to avoid scattered print() calls
- Level comes from CLI flags (--verbose, --debug) unless $HENIX_LOG is set
"""

import json
import logging
import os
import sys
from datetime import datetime, UTC

LOG_ENV_VAR = "HENIX_LOG"


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def level_from_env(default: int) -> tuple[int, bool]:
    """Return (level, picked_up) honouring a non-empty $HENIX_LOG."""
    raw = os.environ.get(LOG_ENV_VAR, "").strip()
    if not raw:
        return default, False
    if raw.isdigit():
        return int(raw), True
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level, True
    return default, False


def configure_logging(
    level: int = logging.INFO,
    json_format: bool = False,
) -> None:
    """Configure logging for the henix application.

    Args:
        level: Logging level used when $HENIX_LOG is unset or empty.
        json_format: If True, use JSON structured output. Otherwise human-readable.
    """
    level, picked_up = level_from_env(level)

    root = logging.getLogger("henix")
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    root.addHandler(handler)
    if picked_up:
        root.info("Picked up $%s", LOG_ENV_VAR)

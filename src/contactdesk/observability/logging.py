"""JSON logging for the intake service.

Every record is one JSON object on stdout. Structured context is passed as
``extra={"extra_fields": {...}}`` and merged into the object.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from .correlation import get_correlation_id

_ROOT_LOGGER = "contactdesk"


class JsonFormatter(logging.Formatter):
    """Render a record as JSON, adding the current correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_obj["correlationId"] = correlation_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_obj.update(extra_fields)

        return json.dumps(log_obj, default=str)


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach the JSON handler to the package root logger.

    Safe to call more than once; the handler is only added the first time.
    The level comes from ``level`` or the LOG_LEVEL env var (default INFO).
    """
    root = logging.getLogger(_ROOT_LOGGER)
    resolved = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    root.setLevel(resolved)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.propagate = False

    return root


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the package root.

    Handlers live on the root ``contactdesk`` logger, so module loggers
    only need a name.
    """
    if name != _ROOT_LOGGER and not name.startswith(f"{_ROOT_LOGGER}."):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)

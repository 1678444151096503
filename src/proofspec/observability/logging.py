"""
Logging setup driven by LoggingSettings.

Library modules only call logging.getLogger(__name__); hosts call
configure_logging() once at startup.
"""

import json
import logging
from datetime import datetime, timezone

from proofspec.config import Settings, get_settings


class JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a single handler to the `proofspec` logger."""
    settings = settings or get_settings()
    logger = logging.getLogger("proofspec")
    logger.setLevel(settings.logging.log_level)

    for handler in list(logger.handlers):
        if getattr(handler, "_proofspec", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler._proofspec = True  # type: ignore[attr-defined]
    if settings.logging.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logger.addHandler(handler)
    return logger

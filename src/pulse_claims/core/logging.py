"""Logging configuration for Pulse Claims.

Modules log through ``logging.getLogger(__name__)`` and attach identifiers
with ``extra=``. With ``LOG_JSON`` enabled those fields are emitted as JSON
keys for log aggregation; otherwise a plain text format is used.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class StructuredFormatter(logging.Formatter):
    """JSON formatter that folds ``extra`` fields into the document."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Install a single stream handler on the ``pulse_claims`` logger tree."""
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))

    logger = logging.getLogger("pulse_claims")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level.upper())

"""Optional logging setup for applications embedding the Opayo client.

The library itself only ever calls ``logging.getLogger(__name__)``; nothing is
configured on import. Structured context is attached to records through
``extra=``, so a JSON formatter surfaces it as top-level keys.
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from opayo.core.config import OpayoSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """Attach a stdout handler to the ``opayo`` logger and return it."""

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter(LOG_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    opayo_logger = logging.getLogger("opayo")
    opayo_logger.handlers = [handler]
    opayo_logger.setLevel(level.upper())
    return opayo_logger


def configure_logging_from_settings(settings: OpayoSettings) -> logging.Logger:
    return configure_logging(settings.OPAYO_LOG_LEVEL, settings.OPAYO_LOG_JSON)

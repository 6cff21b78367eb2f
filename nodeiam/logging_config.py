"""
Logging configuration for nodeiam
"""

import logging
import logging.config
import os
from typing import Any, Dict


class MissingSecondaryFilter(logging.Filter):
    """Filter to suppress the per-request missing secondary node records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter out missing secondary node logs from the delegator."""
        if record.name == "nodeiam.modules.iam.delegator" and record.levelno == logging.INFO:
            message = record.getMessage()
            if message.startswith("Secondary IAM node") and "does not exist" in message:
                return False
        return True


def get_logging_config() -> Dict[str, Any]:
    """Get logging configuration, optionally quieting missing secondaries."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    quiet_secondary = os.getenv("IAM_NODE_QUIET_SECONDARY", "false").lower() == "true"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "missing_secondary_filter": {
                "()": MissingSecondaryFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["missing_secondary_filter"] if quiet_secondary else []
            }
        },
        "loggers": {
            "nodeiam": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "INFO",
            "handlers": ["default"]
        }
    }


def configure_logging() -> None:
    """Apply the nodeiam logging configuration."""
    logging.config.dictConfig(get_logging_config())

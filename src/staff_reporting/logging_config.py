"""Logging setup for the web app.

Console output only; deployments collect stdout.
"""

from __future__ import annotations

import logging
import logging.config


def build_logging_config(level: str = "INFO") -> dict:
    level = (level or "INFO").upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "loggers": {
            "staff_reporting": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            "werkzeug": {
                "handlers": ["console"],
                "level": "INFO",
                "propagate": False,
            },
            "mysql.connector": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def configure_logging(level: str = "INFO") -> logging.Logger:
    logging.config.dictConfig(build_logging_config(level))
    logger = logging.getLogger("staff_reporting")
    logger.debug("Logging initialized with level: %s", level)
    return logger

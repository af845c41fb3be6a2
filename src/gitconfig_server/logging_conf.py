# src/gitconfig_server/logging_conf.py
from __future__ import annotations

import logging.config
import os
from typing import Optional


def build_logging_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "basic",
                "level": level,
            },
        },
        "loggers": {
            "": {"handlers": ["console"], "level": level},
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": level, "propagate": False},
            "gitconfig_server": {"handlers": ["console"], "level": level, "propagate": False},
        },
    }


def setup_logging(level: Optional[str] = None) -> dict:
    """Configure logging from LOG_LEVEL (default INFO); returns the dictConfig used."""
    cfg = build_logging_config((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    logging.config.dictConfig(cfg)
    return cfg

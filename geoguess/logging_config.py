"""Root logging set up from the ``LOG_*`` config keys."""

from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from pathlib import Path
from typing import Any, Dict

from flask import Flask

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-7s | %(parent_file)s:%(lineno)-3d | %(message)s"


class ShortPathFilter(logging.Filter):
    """Attach `parent_file` = '<parent>/<filename>' to log records."""

    def filter(self, record) -> bool:
        parent = os.path.basename(os.path.dirname(record.pathname))
        record.parent_file = f"{parent}/{os.path.basename(record.pathname)}"
        return True


def configure_app_logging(app: Flask) -> None:
    """
    Console handler on the root logger, plus a rotating ``LOG_DIR/LOG_FILE``
    when ``LOG_TO_FILE`` is set. Module loggers (``geoguess.*``), werkzeug
    and ``app.logger`` all propagate to these handlers.
    """
    config = app.config
    level_name = str(config.get("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level_name, level = "INFO", logging.INFO

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "filters": ["short_path"],
        }
    }
    if config.get("LOG_TO_FILE", True):
        log_dir = Path(config.get("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "default",
            "filters": ["short_path"],
            "filename": str(log_dir / Path(config.get("LOG_FILE", "app.log")).with_suffix(".log")),
            "maxBytes": int(config.get("LOG_MAX_BYTES", 10 * 1024 * 1024)),
            "backupCount": int(config.get("LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
        }

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"short_path": {"()": ShortPathFilter}},
            "formatters": {
                "default": {
                    "format": config.get("LOG_FORMAT", DEFAULT_FORMAT),
                    "datefmt": config.get("LOG_DATEFMT", "%Y-%m-%d %H:%M:%S"),
                }
            },
            "handlers": handlers,
            # Reduce noisy request logs (dev server)
            "loggers": {"werkzeug": {"level": config.get("WERKZEUG_LOG_LEVEL", "INFO")}},
            "root": {"handlers": list(handlers), "level": level},
        }
    )

    app.logger.setLevel(level)
    app.logger.debug("Logging configured for level %s", level_name)


__all__ = ["configure_app_logging", "ShortPathFilter"]

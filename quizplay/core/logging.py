from pathlib import Path
import logging
import logging.config
import os

from quizplay.core.config import settings

# Loggers that get their own file and stay out of app.log
CHANNELS = ("session", "hints")


def _rotating(filename: Path, level: str) -> dict:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "formatter": "default",
        "level": level,
        "filename": str(filename),
        "maxBytes": 5 * 1024 * 1024,
        "backupCount": 3,
        "encoding": "utf-8",
    }


def configure_logging(log_dir: Path | None = None):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_dir = Path(log_dir or settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = {
        "console": {"class": "logging.StreamHandler", "formatter": "default", "level": level},
        "file": _rotating(log_dir / "app.log", level),
    }
    loggers = {}
    for channel in CHANNELS:
        handlers[f"{channel}_file"] = _rotating(log_dir / f"{channel}.log", level)
        loggers[channel] = {
            "level": level,
            "handlers": ["console", f"{channel}_file"],
            "propagate": False,
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"},
            },
            "handlers": handlers,
            "root": {"level": level, "handlers": ["console", "file"]},
            "loggers": loggers,
        }
    )

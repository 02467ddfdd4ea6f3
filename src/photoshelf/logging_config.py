import logging
from logging import config as logging_config

from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    level: str = "INFO"
    color: bool = True

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")


class ColoredFormatter(logging.Formatter):
    """Logging formatter that colours the level name with ANSI codes."""

    COLOR_MAP = {
        "DEBUG": "\x1b[36m",
        "INFO": "\x1b[32m",
        "WARNING": "\x1b[33m",
        "ERROR": "\x1b[31m",
        "CRITICAL": "\x1b[41m",
    }
    RESET = "\x1b[0m"

    def format(self, record: logging.LogRecord) -> str:
        # the record is shared between handlers, restore the plain level name afterwards
        original_levelname = record.levelname
        color = self.COLOR_MAP.get(original_levelname, "")
        record.levelname = f"{color}{original_levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


def configure_logging(level: str | None = None, color: bool | None = None) -> None:
    """Configure application and uvicorn logging to write to stdout.

    Arguments left as None fall back to ``LOG_LEVEL`` / ``LOG_COLOR``.
    """
    settings = LoggingSettings()
    level = (level or settings.level).upper()
    color = settings.color if color is None else color
    formatter_class = "photoshelf.logging_config.ColoredFormatter" if color else "logging.Formatter"

    default_fmt = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
    access_fmt = "%(asctime)s %(levelname)-5s %(message)s"

    cfg = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"()": formatter_class, "format": default_fmt, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "access": {"()": formatter_class, "format": access_fmt, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "PIL": {"level": "WARNING"},
        },
        "root": {"handlers": ["default"], "level": level},
    }

    logging_config.dictConfig(cfg)


__all__ = ["ColoredFormatter", "LoggingSettings", "configure_logging"]

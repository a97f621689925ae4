"""Logging Setup.

``configure_logging`` installs one stdout handler on the root logger,
emitting JSON lines in production or colored text in development.
"""

import dataclasses
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from taxsaver.logging_config.config import DEFAULT_LOGGING_CONFIG, LogFormat, LoggingConfig, LogLevel
from taxsaver.logging_config.context import get_context_dict

# Attributes passed through ``extra=`` by engine components
RECORD_FIELDS = ("duration_ms", "user_id", "fiscal_year", "extra_data")


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, merged with the operation context."""

    def __init__(self, service_name: str = "taxsaver", include_caller: bool = True):
        super().__init__()
        self.service_name = service_name
        self.include_caller = include_caller

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": self.service_name,
            **get_context_dict(),
        }
        if self.include_caller:
            entry.update(module=record.module, function=record.funcName, line=record.lineno)

        entry.update({key: getattr(record, key) for key in RECORD_FIELDS if hasattr(record, key)})

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line colored output with the operation context in brackets."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{clock} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        ctx = get_context_dict()
        if ctx:
            line += " [" + " ".join(f"{k}={v}" for k, v in ctx.items()) + "]"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _apply_env_overrides(config: LoggingConfig) -> LoggingConfig:
    level = os.environ.get("TAXSAVER_LOG_LEVEL", "").upper()
    if level in LogLevel.__members__:
        config = dataclasses.replace(config, level=LogLevel(level))
    fmt = os.environ.get("TAXSAVER_LOG_FORMAT", "").lower()
    if fmt in {f.value for f in LogFormat}:
        config = dataclasses.replace(config, format=LogFormat(fmt))
    return config


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure the root logger; TAXSAVER_LOG_LEVEL and TAXSAVER_LOG_FORMAT win."""
    config = _apply_env_overrides(config or DEFAULT_LOGGING_CONFIG)

    if config.format == LogFormat.JSON:
        formatter = StructuredFormatter(config.service_name, config.include_caller)
    else:
        formatter = ConsoleFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(config.level.value)

    # SQL echo is controlled by the engine, not the root level
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

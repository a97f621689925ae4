"""Structured Logging & Operation Tracing.

Provides structured JSON logging, operation context propagation,
and performance timing for the TaxSaver engine.
"""

from taxsaver.logging_config.config import LogFormat, LoggingConfig, LogLevel
from taxsaver.logging_config.context import OperationContext, bind_operation, get_context_dict
from taxsaver.logging_config.performance import PerformanceTimer, log_performance
from taxsaver.logging_config.setup import configure_logging

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "OperationContext",
    "PerformanceTimer",
    "bind_operation",
    "configure_logging",
    "get_context_dict",
    "log_performance",
]

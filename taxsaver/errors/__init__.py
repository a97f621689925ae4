"""Engine Error Handling.

Typed exceptions and error codes shared by every TaxSaver component,
so callers can map failures onto their own transport.
"""

from taxsaver.errors.config import (
    ERROR_STATUS_MAP,
    ErrorCode,
    ErrorSeverity,
)
from taxsaver.errors.exceptions import (
    ComputationSkippedError,
    ConfigurationMissingError,
    ExecutionError,
    InvalidStateError,
    NotFoundError,
    TaxSaverError,
    ValidationError,
)

__all__ = [
    # Config
    "ERROR_STATUS_MAP",
    "ErrorCode",
    "ErrorSeverity",
    # Exceptions
    "ComputationSkippedError",
    "ConfigurationMissingError",
    "ExecutionError",
    "InvalidStateError",
    "NotFoundError",
    "TaxSaverError",
    "ValidationError",
]

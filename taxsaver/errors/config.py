"""Error Configuration.

Error codes and severity levels for structured error handling.
"""

from enum import Enum
from typing import Dict


class ErrorCode(Enum):
    """Standardized error codes."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FISCAL_YEAR = "INVALID_FISCAL_YEAR"
    INVALID_STATUS = "INVALID_STATUS"

    # Not found errors (404)
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    HOLDING_NOT_FOUND = "HOLDING_NOT_FOUND"
    RECOMMENDATION_NOT_FOUND = "RECOMMENDATION_NOT_FOUND"
    TRANSACTION_NOT_FOUND = "TRANSACTION_NOT_FOUND"

    # State errors (409)
    INVALID_STATE = "INVALID_STATE"
    ALREADY_EXECUTED = "ALREADY_EXECUTED"
    ALREADY_REVERSED = "ALREADY_REVERSED"

    # Recovered locally, never surfaced to callers
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    COMPUTATION_SKIPPED = "COMPUTATION_SKIPPED"

    # Server errors (500)
    EXECUTION_FAILED = "EXECUTION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(Enum):
    """Error severity levels for logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.INVALID_FISCAL_YEAR: 400,
    ErrorCode.INVALID_STATUS: 400,
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    ErrorCode.HOLDING_NOT_FOUND: 404,
    ErrorCode.RECOMMENDATION_NOT_FOUND: 404,
    ErrorCode.TRANSACTION_NOT_FOUND: 404,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.ALREADY_EXECUTED: 409,
    ErrorCode.ALREADY_REVERSED: 409,
    ErrorCode.CONFIGURATION_MISSING: 500,
    ErrorCode.COMPUTATION_SKIPPED: 422,
    ErrorCode.EXECUTION_FAILED: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}

ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.VALIDATION_ERROR: ErrorSeverity.LOW,
    ErrorCode.INVALID_FISCAL_YEAR: ErrorSeverity.LOW,
    ErrorCode.INVALID_STATUS: ErrorSeverity.LOW,
    ErrorCode.RESOURCE_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.HOLDING_NOT_FOUND: ErrorSeverity.MEDIUM,
    ErrorCode.RECOMMENDATION_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.TRANSACTION_NOT_FOUND: ErrorSeverity.LOW,
    ErrorCode.INVALID_STATE: ErrorSeverity.MEDIUM,
    ErrorCode.ALREADY_EXECUTED: ErrorSeverity.MEDIUM,
    ErrorCode.ALREADY_REVERSED: ErrorSeverity.MEDIUM,
    ErrorCode.CONFIGURATION_MISSING: ErrorSeverity.LOW,
    ErrorCode.COMPUTATION_SKIPPED: ErrorSeverity.LOW,
    ErrorCode.EXECUTION_FAILED: ErrorSeverity.HIGH,
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
}

"""Custom Exception Hierarchy.

Typed exceptions carrying an ErrorCode and the matching status code, so a
single handler can catch the whole hierarchy.
"""

from typing import Any, Dict, List, Optional

from taxsaver.errors.config import ERROR_SEVERITY_MAP, ERROR_STATUS_MAP, ErrorCode, ErrorSeverity


class TaxSaverError(Exception):
    """Base exception for all TaxSaver engine errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = ERROR_STATUS_MAP.get(error_code, 500)
        self.details = details or []

    @property
    def severity(self) -> ErrorSeverity:
        return ERROR_SEVERITY_MAP.get(self.error_code, ErrorSeverity.HIGH)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code.value,
            "message": self.message,
            "status_code": self.status_code,
            "details": self.details,
        }


class ValidationError(TaxSaverError):
    """Raised when an input fails validation."""

    def __init__(
        self,
        message: str = "Validation failed",
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        field: Optional[str] = None,
    ):
        details = [{"field": field, "issue": message}] if field else None
        super().__init__(message, error_code, details)


class NotFoundError(TaxSaverError):
    """Raised when a holding, recommendation or transaction is absent or not owned by the caller."""

    def __init__(
        self,
        message: str = "Resource not found",
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
    ):
        details = []
        if resource_type or resource_id:
            details = [{"resource_type": resource_type, "resource_id": resource_id}]
        super().__init__(message, error_code, details)


class InvalidStateError(TaxSaverError):
    """Raised when a transition is attempted from a non-pending state."""

    def __init__(
        self,
        message: str = "Invalid state transition",
        error_code: ErrorCode = ErrorCode.INVALID_STATE,
        current_state: Optional[str] = None,
    ):
        details = [{"current_state": current_state}] if current_state else None
        super().__init__(message, error_code, details)
        self.current_state = current_state


class ConfigurationMissingError(TaxSaverError):
    """Raised by the configuration store on a read-miss; recovered with defaults."""

    def __init__(self, fiscal_year: str):
        super().__init__(
            f"No tax configuration for FY {fiscal_year}",
            ErrorCode.CONFIGURATION_MISSING,
            [{"fiscal_year": fiscal_year}],
        )
        self.fiscal_year = fiscal_year


class ComputationSkippedError(TaxSaverError):
    """Raised when a single holding cannot be priced or classified."""

    def __init__(self, holding_id: str, reason: str):
        super().__init__(
            f"Skipped holding {holding_id}: {reason}",
            ErrorCode.COMPUTATION_SKIPPED,
            [{"holding_id": holding_id, "reason": reason}],
        )
        self.holding_id = holding_id
        self.reason = reason


class ExecutionError(TaxSaverError):
    """Raised when the recommendation execution unit fails and is rolled back."""

    def __init__(self, message: str = "Recommendation execution failed"):
        super().__init__(message, ErrorCode.EXECUTION_FAILED)

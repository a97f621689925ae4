"""Operation Context.

Tags every log line emitted while an engine operation runs with the
operation name, its id, the user and the fiscal year, via contextvars.
Nested operations (carry-forward closing a year calls calculate_tax)
share the outer operation id.
"""

import functools
import inspect
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


_operation_id_var: ContextVar[str] = ContextVar("operation_id", default="")
_operation_var: ContextVar[str] = ContextVar("operation", default="")
_user_id_var: ContextVar[str] = ContextVar("user_id", default="")
_fiscal_year_var: ContextVar[str] = ContextVar("fiscal_year", default="")


def new_operation_id() -> str:
    return uuid.uuid4().hex[:16]


def get_operation_id() -> str:
    return _operation_id_var.get()


def get_user_id() -> str:
    return _user_id_var.get()


def get_fiscal_year() -> str:
    return _fiscal_year_var.get()


def get_context_dict() -> dict[str, str]:
    """Non-empty context values, keyed the way log entries name them."""
    values = {
        "operation_id": _operation_id_var.get(),
        "operation": _operation_var.get(),
        "user_id": _user_id_var.get(),
        "fiscal_year": _fiscal_year_var.get(),
    }
    return {key: value for key, value in values.items() if value}


@dataclass
class OperationContext:
    """Context manager binding one engine operation to the log context.

    Example:
        with OperationContext("calculate_tax", user_id="user_1", fiscal_year="2024-25"):
            calculator.calculate_tax("user_1", "2024-25")
    """

    operation: str
    user_id: str = ""
    fiscal_year: str = ""
    operation_id: str = ""
    _started: float = field(default=0.0, repr=False)
    _tokens: list = field(default_factory=list, repr=False)

    def __enter__(self) -> "OperationContext":
        self.operation_id = self.operation_id or get_operation_id() or new_operation_id()
        self._started = time.perf_counter()
        self._tokens = [
            (_operation_id_var, _operation_id_var.set(self.operation_id)),
            (_operation_var, _operation_var.set(self.operation)),
            (_user_id_var, _user_id_var.set(self.user_id or get_user_id())),
            (_fiscal_year_var, _fiscal_year_var.set(self.fiscal_year or get_fiscal_year())),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._started) * 1000


def bind_operation(operation: Optional[str] = None) -> Callable:
    """Decorator running a method inside an OperationContext.

    ``user_id`` and ``fiscal_year`` are read from the call's arguments
    when the method takes them.
    """

    def decorator(func: Callable) -> Callable:
        name = operation or func.__name__
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            arguments = signature.bind_partial(*args, **kwargs).arguments
            with OperationContext(
                name,
                user_id=arguments.get("user_id") or "",
                fiscal_year=arguments.get("fiscal_year") or "",
            ):
                return func(*args, **kwargs)

        return wrapper

    return decorator

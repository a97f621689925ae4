"""Tests for structured logging and performance timing."""

import json
import logging
import sys
import time

import pytest

from taxsaver.logging_config.config import LogFormat, LoggingConfig, LogLevel
from taxsaver.logging_config.context import (
    OperationContext,
    bind_operation,
    get_context_dict,
    get_operation_id,
    get_user_id,
    new_operation_id,
)
from taxsaver.logging_config.performance import PerformanceTimer, log_performance
from taxsaver.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
)
from taxsaver.settings import Settings


def make_record(msg="test", level=logging.INFO, name="test", lineno=1, exc_info=None):
    return logging.LogRecord(
        name=name, level=level, pathname="test.py",
        lineno=lineno, msg=msg, args=(), exc_info=exc_info,
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, (StructuredFormatter, ConsoleFormatter)):
            root.removeHandler(handler)
    root.setLevel(level)


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON
        assert config.include_caller is True
        assert config.slow_threshold_ms == 500.0
        assert config.service_name == "taxsaver"

    def test_from_settings(self):
        config = LoggingConfig.from_settings(Settings(log_level="debug", log_format="console"))
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.CONSOLE

    def test_from_settings_ignores_unknown_values(self):
        config = LoggingConfig.from_settings(Settings(log_level="chatty", log_format="xml"))
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.JSON


class TestOperationContext:
    """Tests for operation context binding."""

    def test_new_operation_id_unique(self):
        ids = {new_operation_id() for _ in range(100)}
        assert len(ids) == 100

    def test_context_sets_and_clears_values(self):
        with OperationContext("calculate_tax", user_id="user-1", fiscal_year="2024-25") as ctx:
            assert get_context_dict() == {
                "operation_id": ctx.operation_id,
                "operation": "calculate_tax",
                "user_id": "user-1",
                "fiscal_year": "2024-25",
            }
        assert get_context_dict() == {}

    def test_nested_context_inherits_id_and_user(self):
        with OperationContext("record_carry_forward", user_id="user-1", fiscal_year="2023-24") as outer:
            with OperationContext("calculate_tax") as inner:
                assert inner.operation_id == outer.operation_id
                assert get_user_id() == "user-1"
                assert get_context_dict()["fiscal_year"] == "2023-24"
                assert get_context_dict()["operation"] == "calculate_tax"
            assert get_context_dict()["operation"] == "record_carry_forward"
        assert get_operation_id() == ""

    def test_context_reset_on_exception(self):
        with pytest.raises(ValueError):
            with OperationContext("execute_recommendation", user_id="user-1"):
                raise ValueError("boom")
        assert get_context_dict() == {}

    def test_elapsed_ms(self):
        with OperationContext("generate_recommendations") as ctx:
            time.sleep(0.01)
            assert ctx.elapsed_ms >= 10

    def test_bind_operation_reads_arguments(self):
        @bind_operation()
        def calculate_tax(user_id, fiscal_year=None):
            return get_context_dict()

        ctx = calculate_tax("user-7", fiscal_year="2024-25")

        assert ctx["operation"] == "calculate_tax"
        assert ctx["user_id"] == "user-7"
        assert ctx["fiscal_year"] == "2024-25"

    def test_bind_operation_skips_missing_arguments(self):
        @bind_operation("seed")
        def seed(configuration):
            return get_context_dict()

        ctx = seed(object())

        assert ctx["operation"] == "seed"
        assert "user_id" not in ctx
        assert "fiscal_year" not in ctx


class TestStructuredFormatter:
    """Tests for JSON structured log formatting."""

    def test_formats_as_json(self):
        parsed = json.loads(StructuredFormatter().format(make_record("hello world")))
        assert parsed["message"] == "hello world"
        assert parsed["level"] == "INFO"
        assert parsed["service"] == "taxsaver"
        assert "timestamp" in parsed

    def test_caller_info_toggle(self):
        with_caller = json.loads(StructuredFormatter(include_caller=True).format(make_record(lineno=42)))
        without = json.loads(StructuredFormatter(include_caller=False).format(make_record(lineno=42)))
        assert with_caller["line"] == 42
        assert "line" not in without

    def test_includes_operation_context(self):
        with OperationContext("calculate_tax", user_id="user-9", fiscal_year="2024-25") as ctx:
            parsed = json.loads(StructuredFormatter().format(make_record()))
        assert parsed["operation_id"] == ctx.operation_id
        assert parsed["operation"] == "calculate_tax"
        assert parsed["user_id"] == "user-9"
        assert parsed["fiscal_year"] == "2024-25"

    def test_includes_engine_extras(self):
        record = make_record()
        record.duration_ms = 42.5
        record.user_id = "user-1"
        record.fiscal_year = "2024-25"
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["duration_ms"] == 42.5
        assert parsed["user_id"] == "user-1"
        assert parsed["fiscal_year"] == "2024-25"

    def test_formats_exception(self):
        try:
            raise ValueError("bad price")
        except ValueError:
            record = make_record("failed", level=logging.ERROR, exc_info=sys.exc_info())
        parsed = json.loads(StructuredFormatter().format(record))
        assert parsed["exception"]["type"] == "ValueError"
        assert "bad price" in parsed["exception"]["message"]


class TestConsoleFormatter:
    """Tests for colored console log formatting."""

    def test_formats_readable_output(self):
        output = ConsoleFormatter().format(make_record("hello", name="taxsaver.tax"))
        assert "taxsaver.tax" in output
        assert "hello" in output

    def test_includes_context_info(self):
        with OperationContext("execute_recommendation", user_id="abc"):
            output = ConsoleFormatter().format(make_record())
        assert "operation=execute_recommendation" in output
        assert "user_id=abc" in output

    def test_has_color_codes(self):
        output = ConsoleFormatter().format(make_record(level=logging.ERROR))
        assert "\033[31m" in output


class TestConfigureLogging:
    """Tests for the configure_logging setup function."""

    def test_json_format(self):
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_console_format(self):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    def test_sets_log_level(self):
        configure_logging(LoggingConfig(level=LogLevel.DEBUG))
        assert logging.getLogger().level == logging.DEBUG

    def test_quiets_sqlalchemy(self):
        configure_logging()
        assert logging.getLogger("sqlalchemy").level >= logging.WARNING

    def test_env_var_override_level(self, monkeypatch):
        monkeypatch.setenv("TAXSAVER_LOG_LEVEL", "debug")
        configure_logging(LoggingConfig(level=LogLevel.ERROR))
        assert logging.getLogger().level == logging.DEBUG

    def test_env_var_override_format(self, monkeypatch):
        monkeypatch.setenv("TAXSAVER_LOG_FORMAT", "CONSOLE")
        configure_logging(LoggingConfig(format=LogFormat.JSON))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

class TestPerformanceLogging:
    """Tests for performance timing decorator and context manager."""

    def test_log_performance_returns_result(self):
        @log_performance(threshold_ms=10000)
        def fast_func():
            return 42

        assert fast_func() == 42

    def test_log_performance_preserves_name(self):
        @log_performance()
        def my_function():
            """My docstring."""

        assert my_function.__name__ == "my_function"
        assert my_function.__doc__ == "My docstring."

    def test_slow_call_logged_as_warning(self, caplog):
        @log_performance(threshold_ms=0)
        def slow_func():
            return "ok"

        with caplog.at_level(logging.DEBUG):
            slow_func()
        assert any("Slow operation" in r.getMessage() for r in caplog.records)

    def test_log_performance_with_exception(self, caplog):
        @log_performance(threshold_ms=10000)
        def failing_func():
            raise ValueError("test error")

        with pytest.raises(ValueError, match="test error"):
            failing_func()
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_performance_timer(self):
        with PerformanceTimer("calculate_tax", threshold_ms=10000) as timer:
            time.sleep(0.01)
        assert timer.duration_ms >= 10

    def test_performance_timer_with_exception(self):
        with pytest.raises(ValueError):
            with PerformanceTimer("execute_recommendation") as timer:
                raise ValueError("oops")
        assert timer.duration_ms >= 0

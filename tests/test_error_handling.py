"""
Tests for error handling utilities.
"""

import pytest

from gitflow_hooks.utils.error_handling import (
    CommandFailure,
    CommandTimeout,
    ConfigParseError,
    ErrorCategory,
    ErrorInfo,
    ErrorSeverity,
    ErrorTracker,
    HookError,
    ValidationFailure,
    get_error_tracker,
    with_error_handling,
)


class TestHookErrors:
    """Test cases for the error taxonomy."""

    def test_config_parse_error(self):
        error = ConfigParseError(3, "pre-commit:x", "expected 6 fields, found 2")

        assert isinstance(error, HookError)
        assert error.category is ErrorCategory.CONFIGURATION
        assert error.line_number == 3
        assert str(error) == "line 3: expected 6 fields, found 2: 'pre-commit:x'"

    def test_validation_failure(self):
        failure = ValidationFailure(
            "Too many commits",
            "'feat-PROJ-1-x' is 7 commits ahead",
            details={"commits": "7"},
            suggestions=["git rebase -i develop"],
        )

        assert failure.category is ErrorCategory.VALIDATION
        assert failure.rule == "Too many commits"
        assert failure.details == {"commits": "7"}
        assert failure.suggestions == ["git rebase -i develop"]
        assert str(failure).startswith("Too many commits: ")

    def test_validation_failure_defaults(self):
        failure = ValidationFailure("Rule", "Message")

        assert failure.details == {}
        assert failure.suggestions == []

    def test_command_errors(self):
        assert "timed out after 30s" in str(CommandTimeout("Unit tests", 30))
        assert "exit code 2" in str(CommandFailure("Lint", 2))
        assert CommandTimeout("x", 1).category is ErrorCategory.COMMAND


class TestErrorTracker:
    """Test cases for ErrorTracker."""

    def test_record_error(self):
        """Test error recording."""
        tracker = ErrorTracker()

        error_info = tracker.record_error(
            component="test_component",
            category=ErrorCategory.GIT,
            severity=ErrorSeverity.HIGH,
            message="Test error message",
            context={"key": "value"},
        )

        assert isinstance(error_info, ErrorInfo)
        assert error_info.component == "test_component"
        assert error_info.category == ErrorCategory.GIT
        assert error_info.severity == ErrorSeverity.HIGH
        assert error_info.message == "Test error message"
        assert error_info.context == {"key": "value"}

        assert len(tracker.errors) == 1
        assert tracker.errors[0] == error_info

    def test_record_error_with_exception(self):
        """Test error recording with exception."""
        tracker = ErrorTracker()

        try:
            raise ValueError("Test exception")
        except ValueError as e:
            error_info = tracker.record_error(
                component="test_component",
                category=ErrorCategory.CONFIGURATION,
                severity=ErrorSeverity.MEDIUM,
                message="Validation failed",
                exception=e,
            )

        assert error_info.exception_type == "ValueError"
        assert "Test exception" in error_info.traceback

    def test_error_counts(self):
        """Test error count tracking."""
        tracker = ErrorTracker()

        for i in range(3):
            tracker.record_error(
                component="test_component",
                category=ErrorCategory.GIT,
                severity=ErrorSeverity.LOW,
                message=f"Error {i}",
            )

        tracker.record_error(
            component="test_component",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            message="Parse error",
        )

        assert tracker.error_counts["test_component.git.low"] == 3
        assert tracker.error_counts["test_component.configuration.high"] == 1

    def test_get_error_stats_and_filter(self):
        """Test error statistics and category filtering."""
        tracker = ErrorTracker()
        tracker.record_error("comp1", ErrorCategory.GIT, ErrorSeverity.HIGH, "Error 1")
        tracker.record_error("comp2", ErrorCategory.COMMAND, ErrorSeverity.LOW, "Error 2")

        stats = tracker.get_error_stats()

        assert stats["total_errors"] == 2
        assert stats["category_breakdown"]["git"] == 1
        assert stats["category_breakdown"]["command"] == 1
        assert [e.message for e in tracker.get_errors(ErrorCategory.GIT)] == ["Error 1"]

    def test_max_errors(self):
        tracker = ErrorTracker(max_errors=2)
        for i in range(3):
            tracker.record_error("c", ErrorCategory.GIT, ErrorSeverity.LOW, f"Error {i}")

        assert [e.message for e in tracker.errors] == ["Error 1", "Error 2"]

    def test_clear(self):
        tracker = ErrorTracker()
        tracker.record_error("c", ErrorCategory.GIT, ErrorSeverity.LOW, "x")

        tracker.clear()

        assert tracker.errors == []
        assert tracker.error_counts == {}

    def test_get_error_tracker_singleton(self):
        assert get_error_tracker() is get_error_tracker()


class TestWithErrorHandling:
    """Test cases for with_error_handling decorator."""

    @pytest.mark.asyncio
    async def test_successful_async_function(self):
        """Test error handling decorator with successful async function."""

        @with_error_handling(component="test", category=ErrorCategory.GIT, severity=ErrorSeverity.LOW)
        async def test_function():
            return "success"

        result = await test_function()
        assert result == "success"

    @pytest.mark.asyncio
    async def test_failing_async_function_with_suppression(self):
        """Test error handling decorator with failing async function and suppression."""

        @with_error_handling(
            component="test",
            category=ErrorCategory.GIT,
            severity=ErrorSeverity.LOW,
            fallback_value="fallback",
            suppress_exceptions=True,
        )
        async def failing_function():
            raise Exception("Test failure")

        result = await failing_function()
        assert result == "fallback"
        assert get_error_tracker().get_errors(ErrorCategory.GIT)[0].context == {
            "function": "failing_function"
        }

    @pytest.mark.asyncio
    async def test_failing_async_function_without_suppression(self):
        """Test error handling decorator with failing async function without suppression."""

        @with_error_handling(component="test", category=ErrorCategory.GIT, severity=ErrorSeverity.LOW)
        async def failing_function():
            raise ValueError("Test failure")

        with pytest.raises(ValueError):
            await failing_function()

        assert len(get_error_tracker().errors) == 1

    def test_sync_function_error_handling(self):
        """Test error handling decorator with synchronous function."""

        @with_error_handling(
            component="test",
            category=ErrorCategory.SYSTEM,
            severity=ErrorSeverity.MEDIUM,
            fallback_value="fallback",
            suppress_exceptions=True,
        )
        def failing_sync_function():
            raise Exception("Sync failure")

        result = failing_sync_function()
        assert result == "fallback"

    def test_wraps_preserves_name(self):
        @with_error_handling(component="test", category=ErrorCategory.SYSTEM)
        def named():
            return 1

        assert named.__name__ == "named"
        assert named() == 1

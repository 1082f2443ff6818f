"""
Error handling utilities for the Git Flow hooks.

This module defines the error taxonomy used across the package, an error
tracker that collects recoverable problems for the end-of-run report, and
a decorator for degrading gracefully at the seams where a failure means
"unknown" rather than "violation".
"""

import asyncio
import functools
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .logging import get_logger


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    COMMAND = "command"
    GIT = "git"
    SYSTEM = "system"


class HookError(Exception):
    """Base class for errors raised by the hooks."""

    category = ErrorCategory.SYSTEM


class ConfigParseError(HookError):
    """A malformed line in ``commands.conf``. The line is skipped."""

    category = ErrorCategory.CONFIGURATION

    def __init__(self, line_number: int, line: str, reason: str):
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")


class ValidationFailure(HookError):
    """
    A Git Flow rule was violated.

    Carries the violated rule, the concrete values involved and at least
    one remediation command sequence for the user.
    """

    category = ErrorCategory.VALIDATION

    def __init__(
        self,
        rule: str,
        message: str,
        details: Optional[Dict[str, str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.rule = rule
        self.message = message
        self.details = details or {}
        self.suggestions = suggestions or []
        super().__init__(f"{rule}: {message}")


class CommandTimeout(HookError):
    """A configured command exceeded its timeout."""

    category = ErrorCategory.COMMAND

    def __init__(self, description: str, timeout_seconds: int):
        self.description = description
        self.timeout_seconds = timeout_seconds
        super().__init__(f"{description} timed out after {timeout_seconds}s")


class CommandFailure(HookError):
    """A configured command exited non-zero."""

    category = ErrorCategory.COMMAND

    def __init__(self, description: str, exit_code: Optional[int]):
        self.description = description
        self.exit_code = exit_code
        super().__init__(f"{description} failed with exit code {exit_code}")


@dataclass
class ErrorInfo:
    """Information about an error occurrence."""

    timestamp: datetime
    component: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    exception_type: str
    traceback: str
    context: Dict[str, Any] = field(default_factory=dict)


class ErrorTracker:
    """
    Collects errors recorded during one hook run.
    """

    def __init__(self, max_errors: int = 1000):
        self.max_errors = max_errors
        self.errors: List[ErrorInfo] = []
        self.error_counts: Dict[str, int] = {}
        self.logger = get_logger("error_tracker")

    def record_error(
        self,
        component: str,
        category: ErrorCategory,
        severity: ErrorSeverity,
        message: str,
        exception: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ErrorInfo:
        """
        Record an error occurrence.

        Args:
            component: Component where error occurred
            category: Error category
            severity: Error severity
            message: Error message
            exception: Exception object if available
            context: Additional context information

        Returns:
            ErrorInfo object
        """
        error_info = ErrorInfo(
            timestamp=datetime.now(),
            component=component,
            category=category,
            severity=severity,
            message=message,
            exception_type=type(exception).__name__ if exception else "Unknown",
            traceback=traceback.format_exc() if exception else "",
            context=context or {},
        )

        self.errors.append(error_info)
        if len(self.errors) > self.max_errors:
            self.errors.pop(0)

        error_key = f"{component}.{category.value}.{severity.value}"
        self.error_counts[error_key] = self.error_counts.get(error_key, 0) + 1

        self.logger.error(
            f"Error recorded in {component}: {message}",
            extra={"category": category.value, "severity": severity.value},
        )

        return error_info

    def get_errors(self, category: Optional[ErrorCategory] = None) -> List[ErrorInfo]:
        """Get recorded errors, optionally filtered by category."""
        if category is None:
            return list(self.errors)
        return [e for e in self.errors if e.category == category]

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": len(self.errors),
            "error_counts": self.error_counts.copy(),
            "category_breakdown": {
                category.value: len([e for e in self.errors if e.category == category])
                for category in ErrorCategory
            },
        }

    def clear(self):
        self.errors.clear()
        self.error_counts.clear()


# Global error tracker instance
_error_tracker: Optional[ErrorTracker] = None


def get_error_tracker() -> ErrorTracker:
    """Get global error tracker instance."""
    global _error_tracker
    if _error_tracker is None:
        _error_tracker = ErrorTracker()
    return _error_tracker


def with_error_handling(
    component: str,
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    fallback_value: Any = None,
    suppress_exceptions: bool = False,
):
    """
    Decorator that records errors and optionally replaces them with a
    fallback value.

    Args:
        component: Component name
        category: Error category
        severity: Error severity
        fallback_value: Value to return on failure
        suppress_exceptions: Whether to suppress exceptions
    """

    def decorator(func: Callable) -> Callable:
        def handle(e: Exception):
            get_error_tracker().record_error(
                component=component,
                category=category,
                severity=severity,
                message=f"Error in {func.__name__}: {str(e)}",
                exception=e,
                context={"function": func.__name__},
            )
            if suppress_exceptions:
                get_logger(component).warning(
                    f"Suppressing exception in {func.__name__}: {str(e)}"
                )
                return fallback_value
            raise e

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                return handle(e)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                return handle(e)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator

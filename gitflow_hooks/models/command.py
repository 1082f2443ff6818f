"""
Command execution data models.

This module defines the declarative command specification read from
``commands.conf`` and the per-command and aggregate execution results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

STAGED_PLACEHOLDER = "{staged}"

SUPPORTED_HOOKS = (
    "pre-commit",
    "prepare-commit-msg",
    "commit-msg",
    "post-commit",
    "pre-push",
    "post-checkout",
    "post-rewrite",
    "applypatch-msg",
)


class ExecutionMode(Enum):
    """How a work list is executed."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class Outcome(Enum):
    """Classification of a single command run."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    FAILURE = "failure"


@dataclass(frozen=True)
class CommandSpec:
    """One configured command for a hook."""

    hook: str
    priority: int
    mandatory: bool
    timeout_seconds: int
    command_template: str
    description: str
    line_number: int = 0

    @property
    def uses_staged_files(self) -> bool:
        return STAGED_PLACEHOLDER in self.command_template

    def validate(self) -> bool:
        """Validate command specification data."""
        if not self.hook:
            raise ValueError("hook cannot be empty")

        if self.hook not in SUPPORTED_HOOKS:
            raise ValueError(f"hook must be one of: {', '.join(SUPPORTED_HOOKS)}")

        if not isinstance(self.priority, int):
            raise ValueError("priority must be an integer")

        if not isinstance(self.mandatory, bool):
            raise ValueError("mandatory must be a boolean")

        if not isinstance(self.timeout_seconds, int) or self.timeout_seconds <= 0:
            raise ValueError("timeout must be a positive integer")

        if not self.command_template.strip():
            raise ValueError("command cannot be empty")

        return True


@dataclass
class ExecutionResult:
    """Result of running one command."""

    spec: CommandSpec
    outcome: Outcome
    exit_code: Optional[int]
    duration_seconds: float
    captured_output: str = ""
    command: str = ""

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def blocks(self) -> bool:
        """A non-successful mandatory command blocks the Git operation."""
        return self.spec.mandatory and not self.succeeded

    def summary(self) -> str:
        if self.outcome is Outcome.SUCCESS:
            return f"{self.spec.description} ({self.duration_seconds:.0f}s)"
        if self.outcome is Outcome.TIMEOUT:
            return (
                f"{self.spec.description} "
                f"(TIMEOUT after {self.spec.timeout_seconds}s)"
            )
        return f"{self.spec.description} (exit code: {self.exit_code})"


@dataclass
class AggregateResult:
    """Pass/fail verdict over a set of execution results."""

    overall_success: bool
    passed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    results: List[ExecutionResult] = field(default_factory=list)

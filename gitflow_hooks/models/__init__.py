"""
Data models for the Git Flow hooks.

This module contains the data classes and enumerations used throughout
the package for branches, commit messages, command specifications,
execution results and configuration.
"""

from .branch import BranchType, OriginPolicy
from .command import (
    AggregateResult,
    CommandSpec,
    ExecutionMode,
    ExecutionResult,
    Outcome,
)
from .commit import CommitMessage, CommitMessageKind
from .config import HookContext, HookSettings
from .git import MergeInfo

__all__ = [
    "BranchType",
    "OriginPolicy",
    "CommandSpec",
    "ExecutionMode",
    "ExecutionResult",
    "Outcome",
    "AggregateResult",
    "CommitMessage",
    "CommitMessageKind",
    "HookSettings",
    "HookContext",
    "MergeInfo",
]

"""
Core components for the Git Flow hooks.

This module contains the components that classify branches, apply the
Git Flow tables, inspect merge history, validate commit messages and
parse, run and aggregate the configured hook commands.
"""

from .branch_classifier import BranchClassifier
from .command_executor import CommandExecutor
from .command_parser import CommandConfigParser
from .commit_validator import CommitMessageValidator
from .git_agent import GitAgent
from .merge_introspector import MergeIntrospector
from .result_aggregator import Remediator, aggregate

__all__ = [
    "BranchClassifier",
    "CommitMessageValidator",
    "MergeIntrospector",
    "CommandConfigParser",
    "CommandExecutor",
    "GitAgent",
    "Remediator",
    "aggregate",
]

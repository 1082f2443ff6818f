"""
Protocol interfaces for the Git Flow hooks.

This module defines the protocol interfaces that establish the
boundaries between the validation engine, the command runner and Git,
and enable dependency injection (tests substitute fake repositories).
"""

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from .models.command import CommandSpec, ExecutionMode, ExecutionResult


class IGitRepository(Protocol):
    """Protocol for the Git queries the hooks depend on."""

    def git_dir(self) -> Path:
        """Absolute path of the git directory."""
        ...

    def current_branch(self) -> str:
        """Current branch name."""
        ...

    def is_detached(self) -> bool:
        """Whether HEAD points at a commit rather than a branch."""
        ...

    def previous_branch(self) -> Optional[str]:
        """Branch checked out before the current one."""
        ...

    def reflog_length(self, branch: str) -> int:
        """Number of reflog entries of a local branch."""
        ...

    def list_branches(self, pattern: str) -> List[str]:
        """Local branches matching a glob pattern."""
        ...

    def changed_files(self, commit_range: str) -> List[str]:
        """Files changed in a commit range."""
        ...

    def config_get(self, key: str) -> Optional[str]:
        """Value of a git config key, or None when unset."""
        ...

    def rev_parse_verify(self, ref: str) -> Optional[str]:
        """Resolve a ref to a commit SHA."""
        ...

    def parents(self, sha: str) -> Optional[List[str]]:
        """Parent SHAs of a commit."""
        ...

    def is_merge_commit(self, sha: str) -> bool:
        """Whether a commit has two or more parents."""
        ...

    def commit_message(self, sha: str) -> Optional[str]:
        """Full message of a commit."""
        ...

    def merges_in_range(self, base: str, head: str = "HEAD") -> List[str]:
        """Merge commits reachable from head but not from base."""
        ...

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Whether ``ancestor`` is reachable from ``descendant``."""
        ...

    def count_commits_ahead(self, base: str, head: str = "HEAD") -> Optional[int]:
        """Number of commits in ``base..head``."""
        ...

    def staged_files(self) -> List[str]:
        """Files currently staged in the index."""
        ...

    def modified_files(self) -> List[str]:
        """Tracked files modified in the working tree."""
        ...

    def stage_files(self, files: Optional[List[str]] = None) -> bool:
        """Stage files for commit."""
        ...


class ICommandExecutor(Protocol):
    """Protocol for running configured hook commands."""

    async def run(
        self,
        work_list: List["CommandSpec"],
        mode: "ExecutionMode",
        max_parallel: int = 4,
    ) -> List["ExecutionResult"]:
        """Run a work list and return one result per executed command."""
        ...

"""
Git access component for the hooks.

This module provides the GitAgent class, the only place that shells out
to ``git``. Every other component asks it yes/no questions about the
repository (ancestry, parents, merge messages, staged files) and stays
free of subprocess handling.
"""

import subprocess
from pathlib import Path
from typing import List, Optional

from ..interfaces import IGitRepository
from ..utils.error_handling import ErrorCategory, ErrorSeverity, with_error_handling
from ..utils.logging import get_logger

logger = get_logger("git.agent")

GIT_TIMEOUT = 30


class GitAgent(IGitRepository):
    """
    Git adapter used by the validation engine and the command runner.

    Queries that fail (unknown ref, no such commit) return None, False or
    an empty list instead of raising, so callers can treat them as
    "cannot determine".
    """

    def __init__(self, repo_path: Optional[str] = None):
        """
        Initialize GitAgent with repository path.

        Args:
            repo_path: Path to git repository. Defaults to current directory.
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self._validate_git_repo()

    @classmethod
    def discover(cls, start: Optional[str] = None) -> "GitAgent":
        """Locate the work tree containing ``start`` and return an agent for it."""
        cwd = Path(start) if start else Path.cwd()
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT,
        )
        if result.returncode != 0:
            raise ValueError(f"No git repository found at {cwd}")
        return cls(result.stdout.strip())

    def _validate_git_repo(self) -> None:
        """Validate that the path contains a git repository."""
        git_dir = self.repo_path / ".git"
        if not git_dir.exists():
            raise ValueError(f"No git repository found at {self.repo_path}")

    def _run_git_command(self, command: List[str]) -> subprocess.CompletedProcess:
        """
        Run a git command and return the result.

        Args:
            command: Git command as list of strings

        Returns:
            CompletedProcess result
        """
        full_command = ["git"] + command
        logger.trace(f"Running git command: {' '.join(full_command)}")

        try:
            return subprocess.run(
                full_command,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Git command timed out: {' '.join(full_command)}")
            raise
        except Exception as e:
            logger.error(f"Error running git command: {e}")
            raise

    def _output(self, command: List[str]) -> Optional[str]:
        """Stripped stdout of a git command, or None if it failed."""
        result = self._run_git_command(command)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def _null_separated(self, command: List[str]) -> List[str]:
        result = self._run_git_command(command)
        if result.returncode != 0:
            return []
        return [name for name in result.stdout.split("\0") if name]

    # Repository layout

    def git_dir(self) -> Path:
        """Absolute path of the git directory (``.git`` or a worktree gitdir)."""
        output = self._output(["rev-parse", "--git-dir"])
        if not output:
            return self.repo_path / ".git"
        path = Path(output)
        return path if path.is_absolute() else self.repo_path / path

    # Branches and refs

    def current_branch(self) -> str:
        """Current branch name, the short SHA when detached, else ``DETACHED``."""
        branch = self._output(["symbolic-ref", "--short", "HEAD"])
        if branch:
            return branch
        sha = self._output(["rev-parse", "--short", "HEAD"])
        return sha or "DETACHED"

    def is_detached(self) -> bool:
        return self._output(["symbolic-ref", "--short", "HEAD"]) is None

    def rev_parse_verify(self, ref: str) -> Optional[str]:
        """Full SHA of ``ref`` or None if it does not resolve."""
        return self._output(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])

    def previous_branch(self) -> Optional[str]:
        """Branch checked out before the current one (``@{-1}``)."""
        name = self._output(["rev-parse", "--abbrev-ref", "@{-1}"])
        return name if name and name != "HEAD" else None

    def reflog_length(self, branch: str) -> int:
        """Number of reflog entries of a local branch; 1 right after creation."""
        output = self._output(["reflog", "show", "--format=%H", f"refs/heads/{branch}"])
        return len(output.splitlines()) if output else 0

    def branch_exists(self, branch: str) -> bool:
        result = self._run_git_command(
            ["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"]
        )
        return result.returncode == 0

    def list_branches(self, pattern: str) -> List[str]:
        output = self._output(["branch", "--list", pattern, "--format=%(refname:short)"])
        if not output:
            return []
        return [line.strip() for line in output.splitlines() if line.strip()]

    # Configuration

    @with_error_handling(
        component="git.agent",
        category=ErrorCategory.GIT,
        severity=ErrorSeverity.LOW,
        fallback_value=None,
        suppress_exceptions=True,
    )
    def config_get(self, key: str) -> Optional[str]:
        """Value of a git config key, or None when unset."""
        value = self._output(["config", "--get", key])
        return value if value else None

    # Commits and history

    @with_error_handling(
        component="git.agent",
        category=ErrorCategory.GIT,
        severity=ErrorSeverity.LOW,
        fallback_value=None,
        suppress_exceptions=True,
    )
    def parents(self, sha: str) -> Optional[List[str]]:
        """Parent SHAs of a commit, None if the commit cannot be read."""
        output = self._output(["rev-list", "--parents", "-n", "1", sha])
        if output is None:
            return None
        return output.split()[1:]

    def is_merge_commit(self, sha: str) -> bool:
        parents = self.parents(sha)
        return parents is not None and len(parents) >= 2

    def commit_message(self, sha: str) -> Optional[str]:
        result = self._run_git_command(["log", "--format=%B", "-n", "1", sha])
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def merges_in_range(self, base: str, head: str = "HEAD") -> List[str]:
        output = self._output(["rev-list", "--merges", f"{base}..{head}"])
        if not output:
            return []
        return output.splitlines()

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self._run_git_command(["merge-base", "--is-ancestor", ancestor, descendant])
        return result.returncode == 0

    def count_commits_ahead(self, base: str, head: str = "HEAD") -> Optional[int]:
        """Number of commits in ``base..head``; None if ``base`` does not exist."""
        if self.rev_parse_verify(base) is None:
            return None
        output = self._output(["rev-list", "--count", f"{base}..{head}"])
        if output is None:
            return None
        return int(output)

    def changed_files(self, commit_range: str) -> List[str]:
        return self._null_separated(["diff", "--name-only", "-z", commit_range])

    # Index and working tree

    def staged_files(self) -> List[str]:
        """Files added, copied, modified or renamed in the index."""
        return self._null_separated(
            ["diff", "--cached", "--name-only", "--diff-filter=ACMR", "-z"]
        )

    def modified_files(self) -> List[str]:
        """Tracked files with unstaged modifications in the working tree."""
        return self._null_separated(["diff", "--name-only", "-z"])

    def stage_files(self, files: Optional[List[str]] = None) -> bool:
        """
        Stage files for commit.

        Args:
            files: List of files to stage. If None, stages all changes.

        Returns:
            True if staging successful, False otherwise
        """
        if files is None:
            result = self._run_git_command(["add", "."])
        else:
            result = self._run_git_command(["add", "--"] + files)

        if result.returncode == 0:
            logger.info(f"Successfully staged files: {files or 'all changes'}")
            return True

        logger.error(f"Failed to stage files: {result.stderr.strip()}")
        return False

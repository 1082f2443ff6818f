"""
Configuration models for the hooks.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..utils.logging import LogLevel

BYPASS_WARNING_STYLES = ["compact", "full", "once"]


@dataclass
class HookSettings:
    """Resolved settings for one hook invocation."""

    max_commits: int = 5
    auto_add_after_fix: bool = False
    parallel_execution: bool = False
    max_parallel: int = 4
    bypass_hooks: bool = False
    allow_direct_protected: bool = False
    bypass_warning_style: str = "compact"
    # None accepts any descriptive subject on release branches
    release_message_verbs: Optional[List[str]] = None
    protected_branches: List[str] = field(default_factory=lambda: ["main", "develop"])
    commands_file: Optional[str] = None
    log_level: str = "INFO"

    def validate(self) -> bool:
        """Validate settings values."""
        if not isinstance(self.max_commits, int) or self.max_commits < 1:
            raise ValueError("max_commits must be a positive integer")

        if not isinstance(self.max_parallel, int) or self.max_parallel < 1:
            raise ValueError("max_parallel must be a positive integer")

        if self.bypass_warning_style not in BYPASS_WARNING_STYLES:
            raise ValueError(
                f"bypass_warning_style must be one of: {BYPASS_WARNING_STYLES}"
            )

        if self.release_message_verbs is not None:
            if not self.release_message_verbs:
                raise ValueError("release_message_verbs cannot be an empty list")
            if not all(isinstance(verb, str) and verb for verb in self.release_message_verbs):
                raise ValueError("release_message_verbs must be non-empty strings")

        if self.log_level.upper() not in [level.value for level in LogLevel]:
            raise ValueError(f"Invalid log level: {self.log_level}")

        return True


@dataclass
class HookContext:
    """
    Everything a hook run needs, built once per invocation.

    Components receive this explicitly instead of looking up the
    repository root or settings on their own.
    """

    hook_name: str
    repo_root: Path
    git_dir: Path
    settings: HookSettings
    commands_file: Path

    @property
    def log_dir(self) -> Path:
        return self.git_dir / "hooks-logs"

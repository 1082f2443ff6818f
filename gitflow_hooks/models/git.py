"""
Git repository data models.

This module defines data models describing repository commits
as seen by the hooks: merge commits found in a range.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class MergeInfo:
    """A merge commit and what could be learned from its message."""

    sha: str
    first_parent: Optional[str]
    source_branch: Optional[str]
    message: str = ""

    @property
    def source_known(self) -> bool:
        return self.source_branch is not None

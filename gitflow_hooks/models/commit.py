"""
Commit message models.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CommitMessageKind(Enum):
    """Classification of a commit message subject."""

    MERGE = "merge"
    REVERT = "revert"
    CONVENTIONAL = "conventional"
    RELEASE_TASK = "release_task"
    INVALID = "invalid"


@dataclass
class CommitMessage:
    """A classified commit message subject."""

    subject: str
    kind: CommitMessageKind
    type: Optional[str] = None
    jira_id: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.kind is not CommitMessageKind.INVALID

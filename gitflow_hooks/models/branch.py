"""
Branch classification models.
"""

from enum import Enum


class BranchType(Enum):
    """Git Flow branch types."""

    MAIN = "main"
    DEVELOP = "develop"
    RELEASE = "release"
    HOTFIX = "hotfix"
    FEATURE = "feature"
    BUGFIX = "bugfix"
    SUPPORT = "support"
    UNKNOWN = "unknown"

    @property
    def is_long_lived(self) -> bool:
        """Main and develop are the permanent branches."""
        return self in (BranchType.MAIN, BranchType.DEVELOP)


class OriginPolicy(Enum):
    """Whether new branches may be created from a branch type."""

    ALLOWED = "allowed"
    BLOCKED = "blocked"
    UNUSUAL = "unusual"

"""Branch classifier mapping branch names to Git Flow branch types."""

import re
from typing import List, Optional, Pattern, Tuple

from ..models.branch import BranchType

JIRA_ID_PATTERN = r"[A-Z]{2,10}-[0-9]+"
DEFAULT_JIRA_ID = "PROJ-123"


class BranchClassifier:
    """Classifies branch names using anchored patterns per branch type."""

    # Evaluation order matters: long-lived and release patterns come first
    BRANCH_PATTERNS: List[Tuple[BranchType, str]] = [
        (BranchType.MAIN, r"^main$"),
        (BranchType.DEVELOP, r"^develop$"),
        (BranchType.RELEASE, r"^release-[0-9]+(\.[0-9]+)*(-[a-zA-Z0-9._-]+)?$"),
        (BranchType.FEATURE, rf"^(feat|feature)-{JIRA_ID_PATTERN}-[a-z0-9-]+$"),
        (BranchType.BUGFIX, rf"^(bugfix|fix)-{JIRA_ID_PATTERN}-[a-z0-9-]+$"),
        (BranchType.HOTFIX, rf"^hotfix-{JIRA_ID_PATTERN}-[a-z0-9-]+$"),
        (
            BranchType.SUPPORT,
            r"^(build|chore|ci|docs|techdebt|perf|refactor|revert|style|test)"
            rf"-{JIRA_ID_PATTERN}-[a-z0-9-]+$",
        ),
    ]

    def __init__(self):
        self.branch_regexes: List[Tuple[BranchType, Pattern[str]]] = [
            (branch_type, re.compile(pattern)) for branch_type, pattern in self.BRANCH_PATTERNS
        ]
        self.jira_regex = re.compile(rf"({JIRA_ID_PATTERN})")

    def classify(self, name: str) -> BranchType:
        """Branch type of ``name``; UNKNOWN when no pattern matches."""
        for branch_type, regex in self.branch_regexes:
            if regex.match(name):
                return branch_type
        return BranchType.UNKNOWN

    def is_valid_branch_name(self, name: str) -> bool:
        return self.classify(name) is not BranchType.UNKNOWN

    def extract_jira_id(self, text: str) -> Optional[str]:
        match = self.jira_regex.search(text)
        return match.group(1) if match else None

    def branch_examples(self, current_branch: str, jira_id: Optional[str] = None) -> List[str]:
        """Valid branch names to suggest, based on where the user currently is."""
        jira_id = jira_id or DEFAULT_JIRA_ID
        branch_type = self.classify(current_branch)

        if branch_type.is_long_lived:
            return [
                f"feat-{jira_id}-add-user-authentication",
                f"bugfix-{jira_id}-fix-memory-leak",
                f"hotfix-{jira_id}-patch-security-vulnerability",
            ]
        if branch_type is BranchType.RELEASE:
            return [
                f"hotfix-{jira_id}-critical-production-fix",
                f"bugfix-{jira_id}-release-blocker",
            ]
        return [
            f"feat-{jira_id}-implement-new-feature",
            f"fix-{jira_id}-resolve-critical-bug",
            f"docs-{jira_id}-update-documentation",
        ]


_classifier = BranchClassifier()


def classify(name: str) -> BranchType:
    """Classify a branch name with the shared classifier."""
    return _classifier.classify(name)


def extract_jira_id(text: str) -> Optional[str]:
    return _classifier.extract_jira_id(text)

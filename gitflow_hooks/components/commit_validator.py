"""Commit message validation with branch-aware rules."""

import re
from typing import List, Optional

from ..models.branch import BranchType
from ..models.commit import CommitMessage, CommitMessageKind
from .branch_classifier import DEFAULT_JIRA_ID, classify

STRICT_TYPES = [
    "feat",
    "fix",
    "chore",
    "break",
    "tests",
    "docs",
    "style",
    "refactor",
    "test",
    "hotfix",
]

RELEASE_TYPES = [
    "feat",
    "fix",
    "chore",
    "break",
    "tests",
    "docs",
    "style",
    "refactor",
    "perf",
    "build",
    "ci",
    "release",
    "version",
]


def message_subject(message: str) -> str:
    """First non-comment, non-blank line of a commit message."""
    for line in message.splitlines():
        if line.startswith("#"):
            continue
        if line.strip():
            return line.rstrip()
    return ""


class CommitMessageValidator:
    """
    Classifies commit message subjects.

    Outside release branches the subject must be ``type: JIRA-123 text``.
    Release branches also accept ``type: text`` and plain descriptive
    subjects ("Bump version to 1.2.0"). When ``release_verbs`` is given,
    descriptive subjects must start with one of those verbs.
    """

    def __init__(self, release_verbs: Optional[List[str]] = None):
        self.release_verbs = list(release_verbs) if release_verbs else None

        strict_types = "|".join(STRICT_TYPES)
        release_types = "|".join(RELEASE_TYPES)
        self.strict_regex = re.compile(
            rf"^(?P<type>{strict_types}): (?P<jira>[A-Z]{{2,10}}-[0-9]+) (?P<desc>\S.*)$"
        )
        self.release_regex = re.compile(rf"^(?P<type>{release_types}):\s(?P<desc>\S.*)$")
        if self.release_verbs:
            verbs = "|".join(re.escape(verb) for verb in self.release_verbs)
            self.descriptive_regex = re.compile(rf"^({verbs})\b")
        else:
            self.descriptive_regex = re.compile(r"^\S")

    def classify(self, message: str, branch_type: BranchType = BranchType.UNKNOWN) -> CommitMessage:
        """Classify a message subject under the rules for ``branch_type``."""
        subject = message_subject(message)

        if subject.startswith("Merge"):
            return CommitMessage(subject, CommitMessageKind.MERGE)
        if subject.startswith("Revert"):
            return CommitMessage(subject, CommitMessageKind.REVERT)

        match = self.strict_regex.match(subject)
        if match:
            return CommitMessage(
                subject,
                CommitMessageKind.CONVENTIONAL,
                type=match.group("type"),
                jira_id=match.group("jira"),
                description=match.group("desc"),
            )

        if branch_type is BranchType.RELEASE:
            match = self.release_regex.match(subject)
            if match:
                return CommitMessage(
                    subject,
                    CommitMessageKind.CONVENTIONAL,
                    type=match.group("type"),
                    description=match.group("desc"),
                )
            if self.descriptive_regex.match(subject):
                return CommitMessage(subject, CommitMessageKind.RELEASE_TASK, description=subject)

        return CommitMessage(subject, CommitMessageKind.INVALID)

    def validate(self, message: str) -> bool:
        """Strict validation; a ticket id is always required."""
        return self.classify(message).is_valid

    def validate_for_branch(self, message: str, branch: str) -> bool:
        return self.classify(message, classify(branch)).is_valid

    @staticmethod
    def examples(jira_id: Optional[str] = None) -> List[str]:
        jira_id = jira_id or DEFAULT_JIRA_ID
        return [
            f"feat: {jira_id} Add user authentication system",
            f"fix: {jira_id} Resolve memory leak in data processor",
            f"chore: {jira_id} Update dependencies to latest versions",
            f"break: {jira_id} Remove deprecated API endpoints",
            f"tests: {jira_id} Add integration tests for payment module",
        ]

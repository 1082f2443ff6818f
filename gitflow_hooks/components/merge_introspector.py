"""
Merge commit introspection.

This module provides the MergeIntrospector class which answers questions
about merge commits: whether a commit is a merge, which branch it merged,
whether the merge follows Git Flow, and whether a range contains foxtrot
merges.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Pattern

from ..interfaces import IGitRepository
from ..models.git import MergeInfo
from ..utils.logging import get_logger
from .branch_classifier import classify
from .gitflow_rules import allowed_merge_targets

logger = get_logger("merge.introspector")

REMOTE_PREFIX = "refs/remotes/origin/"


def _strip_remote_prefix(name: str) -> str:
    return name[len(REMOTE_PREFIX):] if name.startswith(REMOTE_PREFIX) else name


def _strip_user_prefix(name: str) -> str:
    return name.split("/", 1)[1] if "/" in name else name


@dataclass(frozen=True)
class ExtractionRule:
    """A named pattern that pulls the source branch out of a merge message."""

    name: str
    pattern: Pattern[str]
    clean: Callable[[str], str] = lambda name: name

    def extract(self, message: str) -> Optional[str]:
        match = self.pattern.search(message)
        if not match:
            return None
        return self.clean(match.group(1)) or None


# Tried in order; "merge-into" is broader than "merge-branch" and must come after it
EXTRACTION_RULES: List[ExtractionRule] = [
    ExtractionRule(
        "merge-branch",
        re.compile(r"Merge\s+branch\s+['\"]([^'\"]+)['\"]"),
    ),
    ExtractionRule(
        "merge-into",
        re.compile(r"Merge\s+([a-zA-Z0-9._/-]+)\s+(?:into|to)\b"),
    ),
    ExtractionRule(
        "remote-tracking",
        re.compile(r"Merge\s+remote-tracking\s+branch\s+['\"]([^'\"]+)['\"]"),
        _strip_remote_prefix,
    ),
    ExtractionRule(
        "pull-request",
        re.compile(r"Merge\s+pull\s+request\s+#[0-9]+\s+from\s+([a-zA-Z0-9._/-]+)"),
        _strip_user_prefix,
    ),
]


def extract_source_branch(message: str) -> Optional[str]:
    """
    Source branch named in a merge commit message.

    Returns None when no rule matches; callers treat that as "cannot
    determine", not as a violation.
    """
    for rule in EXTRACTION_RULES:
        source = rule.extract(message)
        if source:
            logger.trace(f"Merge source '{source}' extracted by rule {rule.name}")
            return source
    return None


class MergeIntrospector:
    """Merge-commit queries backed by a Git repository."""

    def __init__(self, repository: IGitRepository):
        self.repository = repository

    def is_merge_commit(self, sha: str) -> bool:
        return self.repository.is_merge_commit(sha)

    def extract_source_branch(self, message: str) -> Optional[str]:
        return extract_source_branch(message)

    def merge_info(self, sha: str) -> Optional[MergeInfo]:
        """Describe a merge commit, or None if ``sha`` is not a merge."""
        parents = self.repository.parents(sha)
        if not parents or len(parents) < 2:
            return None

        message = self.repository.commit_message(sha) or ""
        return MergeInfo(
            sha=sha,
            first_parent=parents[0],
            source_branch=extract_source_branch(message) if message else None,
            message=message,
        )

    def is_gitflow_merge(self, target_branch: str, sha: str) -> bool:
        """
        Whether ``sha`` is a merge into ``target_branch`` that Git Flow allows.

        False when the commit is not a merge or its source branch cannot be
        determined from the message.
        """
        info = self.merge_info(sha)
        if info is None or not info.source_known:
            return False

        source_type = classify(info.source_branch)
        target_type = classify(target_branch)
        allowed = target_type in allowed_merge_targets(source_type)
        logger.debug(
            f"Merge {sha[:8]}: {info.source_branch} ({source_type.value}) -> "
            f"{target_branch} ({target_type.value}) allowed={allowed}"
        )
        return allowed

    def merges_in_range(self, base: str, head: str = "HEAD") -> List[MergeInfo]:
        merges = []
        for sha in self.repository.merges_in_range(base, head):
            info = self.merge_info(sha)
            if info is not None:
                merges.append(info)
        return merges

    def find_foxtrot_merges(self, base: str, head: str = "HEAD") -> List[str]:
        """Merge commits in ``base..head`` whose first parent is not on ``base``."""
        foxtrots = []
        for sha in self.repository.merges_in_range(base, head):
            parents = self.repository.parents(sha)
            if not parents:
                continue
            if not self.repository.is_ancestor(parents[0], base):
                foxtrots.append(sha)
        return foxtrots

    def has_foxtrot_merge(self, base: str, head: str = "HEAD") -> bool:
        return bool(self.find_foxtrot_merges(base, head))

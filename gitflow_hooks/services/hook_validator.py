"""
Per-hook Git Flow validations.

This module provides the HookValidator service that the orchestrator
calls at each Git lifecycle point. It combines the branch classifier,
the Git Flow decision tables, the merge introspector and the commit
message validator, and raises ValidationFailure with concrete values and
remediation commands when a rule is violated. Problems that should not
block the operation are collected as warnings.
"""

import fnmatch
from dataclasses import dataclass
from typing import List, Optional

from ..components.branch_classifier import BranchClassifier
from ..components.commit_validator import CommitMessageValidator, message_subject
from ..components.gitflow_rules import (
    can_originate_branches,
    describe_allowed_bases,
    describe_merge_targets,
    is_merge_allowed,
    is_valid_origin,
    required_base,
)
from ..components.merge_introspector import MergeIntrospector
from ..interfaces import IGitRepository
from ..models.branch import BranchType, OriginPolicy
from ..models.commit import CommitMessage
from ..models.config import HookSettings
from ..utils.error_handling import ValidationFailure
from ..utils.logging import get_logger

ZERO_SHA = "0" * 40

LOCKFILES = [
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "Gemfile.lock",
    "Pipfile.lock",
    "poetry.lock",
    "requirements.txt",
    "Cargo.lock",
    "go.sum",
    "composer.lock",
]

IAC_PATTERNS = [
    "*.tf",
    "*.tfvars",
    "*terraform.tfstate*",
    "*.yaml",
    "*.yml",
    "*Dockerfile*",
    "*docker-compose*",
    "*.tf.json",
]

CICD_PATTERNS = [
    ".github/workflows/*",
    ".gitlab-ci.yml",
    ".travis.yml",
    ".circleci/*",
    "*Jenkinsfile*",
    "*azure-pipelines*",
    "*buildspec.yml",
]

# Commit type suggested in the message template, per branch prefix
PREFIX_COMMIT_TYPES = {
    "feat": "feat",
    "feature": "feat",
    "bugfix": "fix",
    "fix": "fix",
    "hotfix": "hotfix",
    "docs": "docs",
    "style": "style",
    "refactor": "refactor",
    "test": "test",
}


@dataclass
class PushedRef:
    """One line of pre-push input."""

    local_ref: str
    local_sha: str
    remote_ref: str
    remote_sha: str

    @property
    def is_delete(self) -> bool:
        return self.local_sha == ZERO_SHA

    @property
    def branch(self) -> Optional[str]:
        prefix = "refs/heads/"
        return self.local_ref[len(prefix):] if self.local_ref.startswith(prefix) else None


def parse_pre_push_input(text: str) -> List[PushedRef]:
    refs = []
    for line in text.splitlines():
        parts = line.split()
        if len(parts) == 4:
            refs.append(PushedRef(*parts))
    return refs


class HookValidator:
    """Git Flow rule checks for each supported hook."""

    def __init__(self, repository: IGitRepository, settings: HookSettings, hook_name: str):
        self.repository = repository
        self.settings = settings
        self.hook_name = hook_name
        self.classifier = BranchClassifier()
        self.introspector = MergeIntrospector(repository)
        self.message_validator = CommitMessageValidator(settings.release_message_verbs)
        self.warnings: List[str] = []
        self.logger = get_logger("hook.validator", {"hook": hook_name})

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        self.logger.warning(message)

    # Branch helpers

    def resolve_base_branch(self, branch: str) -> Optional[str]:
        """
        Base branch of ``branch``.

        ``branch.<name>.base`` wins; otherwise the required base of the
        branch type. Long-lived branches have no base; unclassified
        branches are assumed to come from develop.
        """
        configured = self.repository.config_get(f"branch.{branch}.base")
        if configured:
            return configured

        branch_type = self.classifier.classify(branch)
        if branch_type.is_long_lived:
            return None
        base_type = required_base(branch_type)
        return (base_type or BranchType.DEVELOP).value

    def _jira_id(self, branch: str) -> Optional[str]:
        return self.classifier.extract_jira_id(branch)

    # Individual rules

    def check_protected_branch(self, branch: str, action: str = "commit") -> None:
        if branch not in self.settings.protected_branches:
            return

        if self.settings.allow_direct_protected:
            self.warn(f"Direct {action} to protected branch '{branch}' allowed by ALLOW_DIRECT_PROTECTED=1")
            return

        raise ValidationFailure(
            "Protected branch",
            f"Direct {action} to '{branch}' is not allowed; changes reach it through merges.",
            details={"branch": branch, "protected": ", ".join(self.settings.protected_branches)},
            suggestions=[
                "Move your work to a feature branch:",
                "  git stash",
                "  git checkout -b feat-PROJ-123-short-description",
                "  git stash pop",
            ],
        )

    def check_branch_name(self, branch: str) -> BranchType:
        branch_type = self.classifier.classify(branch)
        if branch_type is not BranchType.UNKNOWN:
            return branch_type

        examples = self.classifier.branch_examples(branch, self._jira_id(branch))
        raise ValidationFailure(
            "Invalid branch name",
            f"'{branch}' does not follow the Git Flow naming convention.",
            details={
                "branch": branch,
                "expected": "<type>-<JIRA-ID>-<description>, release-<version>, main or develop",
            },
            suggestions=["Rename the branch, e.g.:"]
            + [f"  git branch -m {branch} {example}" for example in examples[:1]]
            + ["Valid names:"]
            + [f"  {example}" for example in examples],
        )

    def check_commit_message(self, message: str, branch: str) -> CommitMessage:
        branch_type = self.classifier.classify(branch)
        parsed = self.message_validator.classify(message, branch_type)
        if parsed.is_valid:
            return parsed

        jira_id = self._jira_id(branch)
        if branch_type is BranchType.RELEASE:
            expected = "<type>: [JIRA-ID] <description> or a descriptive subject"
        else:
            expected = "<type>: <JIRA-ID> <description>"

        raise ValidationFailure(
            "Invalid commit message",
            f"The commit message does not match the format required on '{branch}'.",
            details={
                "message": parsed.subject or "(empty)",
                "branch": branch,
                "expected": expected,
            },
            suggestions=["Examples:"]
            + [f"  {example}" for example in CommitMessageValidator.examples(jira_id)]
            + ["Retry with:", f"  git commit -m \"feat: {jira_id or 'PROJ-123'} Describe the change\""],
        )

    def check_branch_origin(self, branch: str, base_branch: str) -> None:
        if is_valid_origin(branch, base_branch):
            return

        branch_type = self.classifier.classify(branch)
        required = describe_allowed_bases(branch_type)
        raise ValidationFailure(
            "Wrong base branch",
            f"{branch_type.value.capitalize()} branches must be created from {required}.",
            details={"branch": branch, "actual base": base_branch, "required base": required},
            suggestions=[
                "Recreate the branch from the correct base:",
                f"  git checkout {required}",
                "  git pull",
                f"  git checkout -b {branch}-new",
                f"  git cherry-pick {base_branch}..{branch}",
            ],
        )

    def check_branch_creation(self, previous_branch: str, new_branch: str) -> None:
        """A new branch was created while ``previous_branch`` was checked out."""
        previous_type = self.classifier.classify(previous_branch)
        policy = can_originate_branches(previous_type)

        if policy is OriginPolicy.BLOCKED:
            raise ValidationFailure(
                "Branching from a terminal branch",
                f"New branches cannot be created from {previous_type.value} branches; "
                f"commit directly on '{previous_branch}' instead.",
                details={"current branch": previous_branch, "new branch": new_branch},
                suggestions=[
                    "Delete the new branch and commit on the release/hotfix branch:",
                    f"  git checkout {previous_branch}",
                    f"  git branch -D {new_branch}",
                ],
            )

        new_type = self.check_branch_name(new_branch)

        if policy is OriginPolicy.UNUSUAL:
            # Dependent work; the required base is not enforced
            self.warn(
                f"Branch '{new_branch}' was created from {previous_type.value} branch "
                f"'{previous_branch}'; this usually means dependent work"
            )
        else:
            configured = self.repository.config_get(f"branch.{new_branch}.base")
            self.check_branch_origin(new_branch, configured or previous_branch)

        if new_type is BranchType.HOTFIX:
            releases = self.repository.list_branches("release-*")
            if releases:
                self.warn(
                    f"Active release branch(es) {', '.join(releases)}: finish '{new_branch}' into main "
                    "and develop, then cherry-pick the fix into the release branch"
                )

    def check_merge_destination(self, source_branch: str, target_branch: str) -> None:
        if is_merge_allowed(source_branch, target_branch):
            return

        source_type = self.classifier.classify(source_branch)
        raise ValidationFailure(
            "Merge not allowed",
            f"{source_type.value.capitalize()} branches may only be merged into "
            f"{describe_merge_targets(source_type)}.",
            details={"source": source_branch, "target": target_branch},
            suggestions=[
                "Undo the merge and merge into the correct branch:",
                "  git reset --hard ORIG_HEAD",
            ],
        )

    def check_commit_count(self, branch: str, base: str) -> None:
        ahead = self.repository.count_commits_ahead(base, branch)
        if ahead is None:
            self.warn(f"Base branch '{base}' not found; commit count not checked")
            return

        if ahead <= self.settings.max_commits:
            return

        raise ValidationFailure(
            "Too many commits",
            f"'{branch}' is {ahead} commits ahead of '{base}' "
            f"(maximum {self.settings.max_commits}).",
            details={"branch": branch, "base": base, "commits": str(ahead),
                     "max": str(self.settings.max_commits)},
            suggestions=[
                "Squash your commits:",
                f"  git rebase -i {base}",
                "Or raise the limit:",
                f"  git config hooks.maxCommits {ahead}",
            ],
        )

    def check_history(self, branch: str, base: str) -> None:
        """No foxtrot merges, and identifiable merges follow the merge table."""
        if self.repository.rev_parse_verify(base) is None:
            self.warn(f"Base branch '{base}' not found; history not checked")
            return

        foxtrots = self.introspector.find_foxtrot_merges(base, branch)
        if foxtrots:
            raise ValidationFailure(
                "Foxtrot merge",
                f"Merge commit(s) on '{branch}' have a first parent outside '{base}'.",
                details={"branch": branch, "base": base,
                         "merges": ", ".join(sha[:8] for sha in foxtrots)},
                suggestions=[
                    "Rebase onto the base branch instead of merging it in:",
                    f"  git fetch origin {base}",
                    f"  git rebase origin/{base}",
                ],
            )

        for merge in self.introspector.merges_in_range(base, branch):
            if not merge.source_known:
                self.logger.debug(f"Merge {merge.sha[:8]}: source branch unknown, not checked")
                continue
            self.check_merge_destination(merge.source_branch, branch)

    def detect_sensitive_changes(self, commit_range: str) -> List[str]:
        """Warn about dependency, infrastructure and CI/CD file changes."""
        changed = self.repository.changed_files(commit_range)
        found = []

        lockfiles = [path for path in changed if path in LOCKFILES]
        if lockfiles:
            found.append(f"Dependency lockfiles changed: {', '.join(lockfiles)}")
        if any(fnmatch.fnmatch(path, pattern) for path in changed for pattern in IAC_PATTERNS):
            found.append("Infrastructure-as-code files changed")
        if any(fnmatch.fnmatch(path, pattern) for path in changed for pattern in CICD_PATTERNS):
            found.append("CI/CD configuration changed")

        for message in found:
            self.warn(message)
        return found

    # Hook entry points

    def validate_pre_commit(self) -> None:
        if self.repository.is_detached():
            self.logger.info("Detached HEAD, skipping branch checks")
            return

        branch = self.repository.current_branch()
        self.check_protected_branch(branch, "commit")
        if branch in self.settings.protected_branches:
            return
        self.check_branch_name(branch)

    def validate_commit_msg(self, message: str) -> CommitMessage:
        branch = self.repository.current_branch()
        return self.check_commit_message(message, branch)

    def prepare_commit_message(self, message: str, source: str = "") -> Optional[str]:
        """Template for an empty message, or None to leave it untouched."""
        if source or message_subject(message):
            return None

        branch = self.repository.current_branch()
        jira_id = self._jira_id(branch)
        if not jira_id:
            return None

        prefix = branch.split("-", 1)[0]
        commit_type = PREFIX_COMMIT_TYPES.get(prefix, "chore")
        return f"{commit_type}: {jira_id} {message}"

    def validate_post_checkout(self, previous_head: str, new_head: str, branch_checkout: bool) -> None:
        if not branch_checkout or self.repository.is_detached():
            return

        branch = self.repository.current_branch()
        previous = self.repository.previous_branch()
        created = previous_head == new_head and self.repository.reflog_length(branch) <= 1

        if not created or previous is None or previous == branch:
            return

        self.logger.info(f"Branch '{branch}' created from '{previous}'")
        self.check_branch_creation(previous, branch)

    def validate_pre_push(self, push_input: str = "") -> None:
        refs = parse_pre_push_input(push_input)
        if refs:
            # Deletions and tags carry nothing to validate
            branches = [ref.branch for ref in refs if ref.branch and not ref.is_delete]
        else:
            branches = [self.repository.current_branch()]

        for branch in branches:
            self.validate_pushed_branch(branch)

    def validate_pushed_branch(self, branch: str) -> None:
        if branch in self.settings.protected_branches:
            self.check_protected_branch(branch, "push")
            return

        branch_type = self.check_branch_name(branch)
        base = self.resolve_base_branch(branch)
        if base is None:
            return

        if branch_type is not BranchType.RELEASE:
            self.check_commit_count(branch, base)
        self.check_history(branch, base)
        self.detect_sensitive_changes(f"{base}...{branch}")

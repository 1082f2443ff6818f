"""
Tests for the per-hook Git Flow validations.
"""

import pytest

from gitflow_hooks.models.config import HookSettings
from gitflow_hooks.services.hook_validator import (
    ZERO_SHA,
    HookValidator,
    parse_pre_push_input,
)
from gitflow_hooks.utils.error_handling import ValidationFailure

from repository_fixtures import FakeRepository


def make_validator(repo, hook_name="pre-commit", **settings):
    return HookValidator(repo, HookSettings(**settings), hook_name)


@pytest.fixture
def repo():
    return FakeRepository()


class TestBaseResolution:
    """Test cases for resolve_base_branch."""

    @pytest.mark.parametrize(
        "branch,base",
        [
            ("feat-PROJ-1-x", "develop"),
            ("bugfix-PROJ-1-x", "develop"),
            ("chore-PROJ-1-x", "develop"),
            ("release-1.0", "develop"),
            ("hotfix-PROJ-1-x", "main"),
            ("main", None),
            ("develop", None),
            ("odd-name", "develop"),
        ],
    )
    def test_table_defaults(self, repo, branch, base):
        assert make_validator(repo).resolve_base_branch(branch) == base

    def test_git_config_override(self, repo):
        repo.config["branch.feat-PROJ-1-x.base"] = "feat-PROJ-0-parent"

        assert make_validator(repo).resolve_base_branch("feat-PROJ-1-x") == "feat-PROJ-0-parent"


class TestPreCommit:
    """Test cases for pre-commit validation."""

    def test_valid_feature_branch(self, repo):
        make_validator(repo).validate_pre_commit()

    @pytest.mark.parametrize("branch", ["main", "develop"])
    def test_protected_branch_rejected(self, repo, branch):
        repo.branch = branch

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(repo).validate_pre_commit()

        failure = exc_info.value
        assert failure.rule == "Protected branch"
        assert failure.details["branch"] == branch
        assert any("git stash" in line for line in failure.suggestions)

    def test_protected_branch_allowed_by_override(self, repo):
        repo.branch = "main"
        validator = make_validator(repo, allow_direct_protected=True)

        validator.validate_pre_commit()

        assert any("ALLOW_DIRECT_PROTECTED" in warning for warning in validator.warnings)

    def test_invalid_branch_name(self, repo):
        repo.branch = "my-feature"

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(repo).validate_pre_commit()

        failure = exc_info.value
        assert failure.rule == "Invalid branch name"
        assert failure.details["branch"] == "my-feature"
        assert any(line.strip().startswith("git branch -m my-feature") for line in failure.suggestions)

    def test_invalid_name_examples_keep_jira_id(self, repo):
        repo.branch = "Feature-SHOP-12-Stuff"

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(repo).validate_pre_commit()

        assert any("SHOP-12" in line for line in exc_info.value.suggestions)

    def test_detached_head_allowed(self, repo):
        repo.branch = "abc1234"
        repo.detached = True

        make_validator(repo).validate_pre_commit()


class TestCommitMessages:
    """Test cases for commit-msg and prepare-commit-msg."""

    def test_valid_message(self, repo):
        parsed = make_validator(repo, "commit-msg").validate_commit_msg("feat: PROJ-1 Add login\n")

        assert parsed.jira_id == "PROJ-1"

    def test_invalid_message(self, repo):
        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(repo, "commit-msg").validate_commit_msg("just a note\n")

        failure = exc_info.value
        assert failure.rule == "Invalid commit message"
        assert failure.details["message"] == "just a note"
        assert any("PROJ-123" in line for line in failure.suggestions)

    def test_release_branch_accepts_descriptive(self, repo):
        repo.branch = "release-1.0"

        make_validator(repo, "commit-msg").validate_commit_msg("just a note")

    def test_release_verbs_setting(self, repo):
        repo.branch = "release-1.0"
        validator = make_validator(repo, "commit-msg", release_message_verbs=["Bump"])

        validator.validate_commit_msg("Bump version")
        with pytest.raises(ValidationFailure):
            validator.validate_commit_msg("just a note")

    @pytest.mark.parametrize(
        "branch,expected",
        [
            ("feat-PROJ-1-x", "feat: PROJ-1 "),
            ("bugfix-PROJ-2-x", "fix: PROJ-2 "),
            ("fix-PROJ-2-x", "fix: PROJ-2 "),
            ("hotfix-OPS-3-x", "hotfix: OPS-3 "),
            ("docs-PROJ-4-x", "docs: PROJ-4 "),
            ("ci-PROJ-5-x", "chore: PROJ-5 "),
        ],
    )
    def test_prepare_template(self, repo, branch, expected):
        repo.branch = branch

        template = make_validator(repo, "prepare-commit-msg").prepare_commit_message("")

        assert template == expected

    def test_prepare_keeps_comment_lines(self, repo):
        template = make_validator(repo, "prepare-commit-msg").prepare_commit_message(
            "\n# Please enter the commit message\n"
        )

        assert template.startswith("feat: PROJ-123 \n")
        assert "# Please enter the commit message" in template

    @pytest.mark.parametrize("source", ["message", "merge", "commit"])
    def test_prepare_skipped_with_source(self, repo, source):
        assert make_validator(repo).prepare_commit_message("", source) is None

    def test_prepare_skipped_when_message_present(self, repo):
        assert make_validator(repo).prepare_commit_message("feat: PROJ-1 Done") is None

    def test_prepare_skipped_without_jira_id(self, repo):
        repo.branch = "release-1.0"

        assert make_validator(repo).prepare_commit_message("") is None


class TestPostCheckout:
    """Test cases for branch creation checks."""

    def created(self, repo, previous, new):
        repo.previous = previous
        repo.branch = new
        repo.reflog[new] = 1

    @pytest.mark.parametrize("previous", ["release-1.0", "hotfix-OPS-1-x"])
    def test_branching_from_terminal_branch_rejected(self, repo, previous):
        """Test creation is rejected regardless of the new branch's name."""
        for new in ["feat-PROJ-1-x", "whatever"]:
            self.created(repo, previous, new)

            with pytest.raises(ValidationFailure) as exc_info:
                make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", True)

            assert exc_info.value.rule == "Branching from a terminal branch"
            assert any(f"git branch -D {new}" in line for line in exc_info.value.suggestions)

    def test_feature_from_develop(self, repo):
        self.created(repo, "develop", "feat-PROJ-1-x")
        validator = make_validator(repo, "post-checkout")

        validator.validate_post_checkout("a1", "a1", True)

        assert validator.warnings == []

    def test_feature_from_main_rejected(self, repo):
        self.created(repo, "main", "feat-PROJ-1-x")

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", True)

        failure = exc_info.value
        assert failure.rule == "Wrong base branch"
        assert failure.details["required base"] == "develop"
        assert failure.details["actual base"] == "main"

    def test_hotfix_from_main(self, repo):
        self.created(repo, "main", "hotfix-OPS-2-y")

        make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", True)

    def test_hotfix_warns_about_active_release(self, repo):
        self.created(repo, "main", "hotfix-OPS-2-y")
        repo.branches = ["release-1.0"]
        validator = make_validator(repo, "post-checkout")

        validator.validate_post_checkout("a1", "a1", True)

        warning = next(w for w in validator.warnings if "release-1.0" in w)
        assert "cherry-pick" in warning
        assert "merge 'hotfix-OPS-2-y' into the release" not in warning

    def test_branch_from_feature_warns(self, repo):
        self.created(repo, "feat-PROJ-1-x", "feat-PROJ-2-dependent")
        validator = make_validator(repo, "post-checkout")

        validator.validate_post_checkout("a1", "a1", True)

        assert len(validator.warnings) == 1
        assert "dependent work" in validator.warnings[0]

    def test_invalid_new_name_rejected(self, repo):
        self.created(repo, "develop", "my-branch")

        with pytest.raises(ValidationFailure, match="Invalid branch name"):
            make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", True)

    def test_switching_existing_branch_ignored(self, repo):
        self.created(repo, "release-1.0", "feat-PROJ-1-x")

        make_validator(repo, "post-checkout").validate_post_checkout("a1", "b2", True)

    def test_existing_branch_with_history_ignored(self, repo):
        self.created(repo, "release-1.0", "feat-PROJ-1-x")
        repo.reflog["feat-PROJ-1-x"] = 4

        make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", True)

    def test_file_checkout_ignored(self, repo):
        self.created(repo, "release-1.0", "whatever")

        make_validator(repo, "post-checkout").validate_post_checkout("a1", "a1", False)


class TestPrePush:
    """Test cases for pre-push validation."""

    @pytest.fixture
    def push_repo(self, repo):
        """
        main:    m0
        develop: m0 - d1
        feature: d1 - f1 - f2
        """
        repo.add_commit("m0")
        repo.add_commit("d1", ["m0"])
        repo.add_commit("f1", ["d1"], "feat: PROJ-123 One")
        repo.add_commit("f2", ["f1"], "feat: PROJ-123 Two")
        repo.refs.update({"main": "m0", "develop": "d1", "feat-PROJ-123-login": "f2"})
        repo.ahead["develop..feat-PROJ-123-login"] = 2
        return repo

    def test_clean_push(self, push_repo):
        make_validator(push_repo, "pre-push").validate_pre_push("")

    def test_too_many_commits(self, push_repo):
        push_repo.ahead["develop..feat-PROJ-123-login"] = 7

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(push_repo, "pre-push").validate_pre_push("")

        failure = exc_info.value
        assert failure.rule == "Too many commits"
        assert failure.details["commits"] == "7"
        assert failure.details["max"] == "5"
        assert "  git rebase -i develop" in failure.suggestions

    def test_max_commits_setting(self, push_repo):
        push_repo.ahead["develop..feat-PROJ-123-login"] = 7

        make_validator(push_repo, "pre-push", max_commits=10).validate_pre_push("")

    def test_release_branches_skip_commit_count(self, push_repo):
        push_repo.branch = "release-1.0"
        push_repo.ahead["develop..release-1.0"] = 40

        make_validator(push_repo, "pre-push").validate_pre_push("")

    def test_missing_base_warns(self, push_repo):
        push_repo.refs.pop("develop")
        push_repo.commits.pop("develop", None)
        validator = make_validator(push_repo, "pre-push")

        validator.validate_pre_push("")

        assert any("'develop' not found" in warning for warning in validator.warnings)

    def test_foxtrot_merge_rejected(self, push_repo):
        push_repo.add_commit("mx", ["f2", "d1"], "Merge branch 'develop' into feat-PROJ-123-login")
        push_repo.range_merges["develop..feat-PROJ-123-login"] = ["mx"]

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(push_repo, "pre-push").validate_pre_push("")

        assert exc_info.value.rule == "Foxtrot merge"
        assert "mx" in exc_info.value.details["merges"]

    def test_merge_from_wrong_source_rejected(self, push_repo):
        """Test a non-foxtrot merge whose source may not target this branch."""
        push_repo.add_commit("h1", ["d1"], "fix: OPS-1 Patch")
        push_repo.add_commit("mx", ["d1", "h1"], "Merge branch 'feat-PROJ-9-other' into feat-PROJ-123-login")
        push_repo.range_merges["develop..feat-PROJ-123-login"] = ["mx"]

        with pytest.raises(ValidationFailure) as exc_info:
            make_validator(push_repo, "pre-push").validate_pre_push("")

        assert exc_info.value.rule == "Merge not allowed"
        assert exc_info.value.details == {
            "source": "feat-PROJ-9-other",
            "target": "feat-PROJ-123-login",
        }

    def test_merge_with_unknown_source_is_only_logged(self, push_repo):
        push_repo.add_commit("mx", ["d1", "f1"], "Squash of several things")
        push_repo.range_merges["develop..feat-PROJ-123-login"] = ["mx"]

        make_validator(push_repo, "pre-push").validate_pre_push("")

    def test_pushed_refs_from_stdin(self, push_repo):
        push_repo.branch = "develop"
        stdin = f"refs/heads/feat-PROJ-123-login f2 refs/heads/feat-PROJ-123-login {ZERO_SHA}\n"

        make_validator(push_repo, "pre-push").validate_pre_push(stdin)

    def test_push_to_protected_branch_rejected(self, push_repo):
        stdin = f"refs/heads/main m0 refs/heads/main {ZERO_SHA}\n"

        with pytest.raises(ValidationFailure, match="Protected branch"):
            make_validator(push_repo, "pre-push").validate_pre_push(stdin)

    def test_push_to_protected_branch_allowed_by_override(self, push_repo):
        stdin = f"refs/heads/main m0 refs/heads/main {ZERO_SHA}\n"

        make_validator(push_repo, "pre-push", allow_direct_protected=True).validate_pre_push(stdin)

    def test_branch_deletion_ignored(self, push_repo):
        push_repo.branch = "develop"
        stdin = f"(delete) {ZERO_SHA} refs/heads/my-old-branch abc\n"

        make_validator(push_repo, "pre-push").validate_pre_push(stdin)

    def test_invalid_branch_name_rejected(self, push_repo):
        push_repo.branch = "wip"

        with pytest.raises(ValidationFailure, match="Invalid branch name"):
            make_validator(push_repo, "pre-push").validate_pre_push("")

    def test_sensitive_change_warnings(self, push_repo):
        push_repo.changed["develop...feat-PROJ-123-login"] = [
            "poetry.lock",
            "infra/main.tf",
            ".github/workflows/ci.yml",
            "src/app.py",
        ]
        validator = make_validator(push_repo, "pre-push")

        validator.validate_pre_push("")

        assert validator.warnings == [
            "Dependency lockfiles changed: poetry.lock",
            "Infrastructure-as-code files changed",
            "CI/CD configuration changed",
        ]


class TestPrePushInput:
    """Test cases for parsing pre-push stdin."""

    def test_parse(self):
        refs = parse_pre_push_input(
            "refs/heads/a 111 refs/heads/a 222\n"
            f"(delete) {ZERO_SHA} refs/heads/b 333\n"
            "garbage\n"
        )

        assert [ref.branch for ref in refs] == ["a", None]
        assert [ref.is_delete for ref in refs] == [False, True]

    def test_tags_have_no_branch(self):
        (ref,) = parse_pre_push_input("refs/tags/v1 111 refs/tags/v1 222")

        assert ref.branch is None

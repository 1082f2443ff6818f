"""
Unit tests for the branch classifier.
"""

import pytest

from gitflow_hooks.components.branch_classifier import (
    BranchClassifier,
    classify,
    extract_jira_id,
)
from gitflow_hooks.models.branch import BranchType


class TestBranchClassifier:
    """Test cases for BranchClassifier."""

    @pytest.fixture
    def classifier(self):
        return BranchClassifier()

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("main", BranchType.MAIN),
            ("develop", BranchType.DEVELOP),
            ("release-1.2.0", BranchType.RELEASE),
            ("release-2", BranchType.RELEASE),
            ("release-1.0-rc.1", BranchType.RELEASE),
            ("feat-PROJ-123-add-login", BranchType.FEATURE),
            ("feature-AB-1-x", BranchType.FEATURE),
            ("bugfix-PROJ-9-null-check", BranchType.BUGFIX),
            ("fix-PROJ-9-null-check", BranchType.BUGFIX),
            ("hotfix-OPS-42-patch-cve", BranchType.HOTFIX),
            ("chore-PROJ-7-bump-deps", BranchType.SUPPORT),
            ("docs-PROJ-7-readme", BranchType.SUPPORT),
            ("techdebt-PROJ-7-cleanup", BranchType.SUPPORT),
        ],
    )
    def test_classify_valid_names(self, classifier, name, expected):
        """Test each Git Flow branch type is recognised."""
        assert classifier.classify(name) is expected

    @pytest.mark.parametrize(
        "name",
        [
            "master",
            "main2",
            "my-feature",
            "feat-proj-123-lowercase-ticket",
            "feat-PROJ-123-Upper-Description",
            "feat-PROJ-123",
            "release-v1.0",
            "hotfix-A-1-too-short-project",
            "wip-PROJ-1-stuff",
            "",
        ],
    )
    def test_classify_unknown_names(self, classifier, name):
        """Test names outside the convention fall back to UNKNOWN."""
        assert classifier.classify(name) is BranchType.UNKNOWN
        assert classifier.is_valid_branch_name(name) is False

    def test_classify_is_deterministic(self, classifier):
        """Test classification of the same name is stable."""
        for name in ["main", "release-1.0", "feat-PROJ-1-x", "anything"]:
            assert classifier.classify(name) is classifier.classify(name)

    def test_long_lived_patterns_are_anchored(self, classifier):
        """Test main and develop only match exactly."""
        assert classifier.classify("develop-PROJ-1-x") is BranchType.UNKNOWN
        assert classifier.classify("xmain") is BranchType.UNKNOWN

    def test_extract_jira_id(self, classifier):
        """Test the first ticket id is extracted."""
        assert classifier.extract_jira_id("feat-PROJ-123-add-login") == "PROJ-123"
        assert classifier.extract_jira_id("fix: AB-1 and CD-2") == "AB-1"
        assert classifier.extract_jira_id("release-1.0") is None

    def test_branch_examples_use_jira_id(self, classifier):
        """Test suggested names carry the given ticket id."""
        examples = classifier.branch_examples("develop", "SHOP-7")

        assert examples
        assert all("SHOP-7" in example for example in examples)
        assert all(classifier.is_valid_branch_name(example) for example in examples)

    def test_branch_examples_default_jira_id(self, classifier):
        """Test suggested names default to a placeholder ticket."""
        examples = classifier.branch_examples("my-branch")

        assert all("PROJ-123" in example for example in examples)
        assert all(classifier.is_valid_branch_name(example) for example in examples)

    def test_module_level_helpers(self):
        """Test the shared-instance helpers."""
        assert classify("hotfix-OPS-1-x") is BranchType.HOTFIX
        assert extract_jira_id("bugfix-OPS-77-y") == "OPS-77"

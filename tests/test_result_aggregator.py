"""
Unit tests for result aggregation and remediation.
"""

from gitflow_hooks.components.result_aggregator import Remediator, RemediationReport, aggregate
from gitflow_hooks.models.command import Outcome

from repository_fixtures import FakeRepository, make_result, make_spec


class TestAggregate:
    """Test cases for aggregate()."""

    def test_all_passed(self):
        results = [make_result(make_spec("A")), make_result(make_spec("B"))]

        summary = aggregate(results)

        assert summary.overall_success is True
        assert summary.passed == ["A", "B"]
        assert summary.failed == []

    def test_optional_failure_does_not_fail_run(self):
        results = [
            make_result(make_spec("A")),
            make_result(make_spec("Docs", mandatory=False), Outcome.FAILURE, 1),
        ]

        summary = aggregate(results)

        assert summary.overall_success is True
        assert summary.failed == ["Docs"]

    def test_mandatory_timeout_fails_run(self):
        results = [make_result(make_spec("Slow", mandatory=True), Outcome.TIMEOUT, None)]

        summary = aggregate(results)

        assert summary.overall_success is False
        assert summary.failed == ["Slow"]

    def test_empty(self):
        summary = aggregate([])

        assert summary.overall_success is True
        assert summary.results == []


class TestRemediator:
    """Test cases for Remediator."""

    def test_nothing_modified(self):
        repo = FakeRepository()

        report = Remediator(repo, auto_add=True).remediate()

        assert report.modified_files == []
        assert repo.stage_calls == []

    def test_auto_add_restages_each_file(self):
        repo = FakeRepository()
        repo.modified = ["a.py", "b.py"]

        report = Remediator(repo, auto_add=True).remediate()

        assert repo.stage_calls == [["a.py"], ["b.py"]]
        assert report.restaged_files == ["a.py", "b.py"]
        assert report.unstaged_files == []

    def test_auto_add_disabled_reports_only(self):
        repo = FakeRepository()
        repo.modified = ["a.py"]

        report = Remediator(repo, auto_add=False).remediate()

        assert repo.stage_calls == []
        assert report.unstaged_files == ["a.py"]
        assert report.auto_add_enabled is False
        assert Remediator.ENABLE_HINT == "git config hooks.autoAddAfterFix true"

    def test_failed_restage_is_reported(self):
        repo = FakeRepository()
        repo.modified = ["a.py"]
        repo.stage_result = False

        report = Remediator(repo, auto_add=True).remediate()

        assert report.restaged_files == []
        assert report.unstaged_files == ["a.py"]

    def test_report_defaults(self):
        report = RemediationReport()

        assert report.unstaged_files == []

"""
Result aggregation and auto-fix remediation.

The aggregator turns per-command results into a single verdict. The
remediator runs once after a successful pre-commit: commands such as
formatters may have rewritten files, which are then either re-staged or
reported, depending on ``hooks.autoAddAfterFix``.
"""

from dataclasses import dataclass, field
from typing import List

from ..interfaces import IGitRepository
from ..models.command import AggregateResult, ExecutionResult
from ..utils.logging import get_logger


def aggregate(results: List[ExecutionResult]) -> AggregateResult:
    """
    Split results into passed and failed descriptions.

    Overall success is False iff a mandatory command did not succeed;
    optional failures are listed but never fail the run.
    """
    passed = [r.spec.description for r in results if r.succeeded]
    failed = [r.spec.description for r in results if not r.succeeded]
    overall_success = not any(r.blocks for r in results)

    return AggregateResult(
        overall_success=overall_success,
        passed=passed,
        failed=failed,
        results=list(results),
    )


@dataclass
class RemediationReport:
    """What the remediator found and did."""

    modified_files: List[str] = field(default_factory=list)
    restaged_files: List[str] = field(default_factory=list)
    auto_add_enabled: bool = False

    @property
    def unstaged_files(self) -> List[str]:
        return [f for f in self.modified_files if f not in self.restaged_files]


class Remediator:
    """Re-stages files modified by fixer commands."""

    ENABLE_HINT = "git config hooks.autoAddAfterFix true"

    def __init__(self, repository: IGitRepository, auto_add: bool, hook_name: str = "pre-commit"):
        self.repository = repository
        self.auto_add = auto_add
        self.logger = get_logger("remediator", {"hook": hook_name})

    def remediate(self) -> RemediationReport:
        """Single best-effort pass over working-tree modifications."""
        report = RemediationReport(auto_add_enabled=self.auto_add)
        report.modified_files = self.repository.modified_files()

        if not report.modified_files:
            return report

        self.logger.info("Files modified by commands")

        if not self.auto_add:
            self.logger.warning(
                f"{len(report.modified_files)} file(s) modified but auto-staging is disabled"
            )
            return report

        for path in report.modified_files:
            if self.repository.stage_files([path]):
                report.restaged_files.append(path)
                self.logger.info(f"Re-staged: {path}")
            else:
                self.logger.warning(f"Could not re-stage: {path}")

        return report

"""
Hook orchestrator for the Git Flow hooks.

This module provides the central coordination point for one hook
invocation: it resolves settings, configures the audit log, runs the Git
Flow validations for the hook, executes the configured commands and
reports the verdict as an exit code.
"""

import os
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .components.command_executor import CommandExecutor
from .components.command_parser import CommandConfigParser
from .components.git_agent import GitAgent
from .components.result_aggregator import Remediator, aggregate
from .interfaces import IGitRepository
from .models.command import SUPPORTED_HOOKS, AggregateResult, ExecutionMode, ExecutionResult
from .models.config import HookContext
from .services.config_manager import ConfigurationManager
from .services.hook_validator import HookValidator
from .utils.error_handling import ValidationFailure, get_error_tracker
from .utils.logging import get_log_file, get_logger, setup_logging

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

BYPASS_MARKER_PREFIX = ".bypass-warned-"

# Git command each hook guards, for the bypass hint
HOOK_GIT_COMMANDS = {
    "pre-commit": "git commit",
    "prepare-commit-msg": "git commit",
    "commit-msg": "git commit",
    "post-commit": "git commit",
    "pre-push": "git push",
    "post-checkout": "git checkout",
    "post-rewrite": "git rebase",
    "applypatch-msg": "git am",
}


def current_user(environ=None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get("USER") or environ.get("USERNAME") or "unknown"


class HookOrchestrator:
    """
    Runs one Git hook end to end.

    The flow is: bypass check, Git Flow validations, command execution,
    remediation (pre-commit only), report. Output for the user goes to
    ``stream``; the full record goes to the audit log.
    """

    def __init__(
        self,
        repository: Optional[IGitRepository] = None,
        repo_path: Optional[str] = None,
        settings_path: Optional[str] = None,
        commands_file: Optional[str] = None,
        log_level: Optional[str] = None,
        environ=None,
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize the hook orchestrator.

        Args:
            repository: Git access. If None, discovered from ``repo_path``
            repo_path: Any path inside the work tree; defaults to the cwd
            settings_path: Explicit YAML settings file
            commands_file: Explicit ``commands.conf``; overrides settings
            log_level: Audit log level; overrides settings
            environ: Environment mapping; defaults to ``os.environ``
            stream: Where user-facing output is printed; defaults to stderr
        """
        self.repository = repository or GitAgent.discover(repo_path)
        self.repo_root = Path(getattr(self.repository, "repo_path", repo_path or Path.cwd()))
        self.settings_path = settings_path
        self.commands_file = commands_file
        self.log_level = log_level
        self.environ = os.environ if environ is None else environ
        self.stream = stream or sys.stderr
        self.logger = get_logger("orchestrator")
        self.context: Optional[HookContext] = None

    def _print(self, message: str = "") -> None:
        print(message, file=self.stream)

    # Run

    async def run(self, hook_name: str, args: Optional[List[str]] = None, stdin_text: str = "") -> int:
        """
        Run ``hook_name`` with the arguments Git passed to the hook.

        Returns:
            0 when the Git operation may proceed, 1 otherwise
        """
        args = list(args or [])
        if hook_name not in SUPPORTED_HOOKS:
            self._print(f"❌ Unsupported hook: {hook_name}")
            return EXIT_FAILURE

        try:
            self.context = ConfigurationManager(
                self.repository, self.repo_root, self.settings_path, self.environ
            ).build_context(hook_name, self.commands_file)
        except ValueError as e:
            self._print(f"❌ Invalid hook configuration: {e}")
            return EXIT_FAILURE

        settings = self.context.settings
        setup_logging(self.context.log_dir, self.log_level or settings.log_level, hook_name)
        self.logger = self.logger.bind(hook=hook_name)
        self.logger.info(f"Hook started: {hook_name} {' '.join(args)}".rstrip())

        if settings.bypass_hooks:
            self.logger.warning(f"Hooks bypassed by {current_user(self.environ)} (BYPASS_HOOKS=1)")
            self._show_bypass_banner(settings.bypass_warning_style)
            return EXIT_SUCCESS

        validator = HookValidator(self.repository, settings, hook_name)
        try:
            self._run_validations(validator, hook_name, args, stdin_text)
        except ValidationFailure as failure:
            self.logger.error(f"{failure.rule}: {failure.message}")
            self._report_validation_failure(failure)
            return EXIT_FAILURE
        finally:
            for warning in validator.warnings:
                self._print(f"⚠️  {warning}")

        summary = await self._run_commands()
        if summary is None:
            return EXIT_SUCCESS

        if summary.overall_success and hook_name == "pre-commit":
            self._remediate()

        return self._report_commands(summary)

    def _run_validations(
        self, validator: HookValidator, hook_name: str, args: List[str], stdin_text: str
    ) -> None:
        if hook_name == "pre-commit":
            validator.validate_pre_commit()

        elif hook_name == "commit-msg" and args:
            validator.validate_commit_msg(Path(args[0]).read_text(encoding="utf-8"))

        elif hook_name == "prepare-commit-msg" and args:
            message_file = Path(args[0])
            source = args[1] if len(args) > 1 else ""
            template = validator.prepare_commit_message(
                message_file.read_text(encoding="utf-8"), source
            )
            if template is not None:
                message_file.write_text(template, encoding="utf-8")
                self.logger.info(f"Commit message template: {template.splitlines()[0]}")

        elif hook_name == "post-checkout" and len(args) >= 3:
            validator.validate_post_checkout(args[0], args[1], args[2] == "1")

        elif hook_name == "pre-push":
            validator.validate_pre_push(stdin_text)

    # Commands

    async def _run_commands(self) -> Optional[AggregateResult]:
        """Run the hook's configured commands; None if there are none."""
        context = self.context
        parser = CommandConfigParser()
        work_list = parser.load(context.commands_file, context.hook_name)

        for error in parser.errors:
            self._print(f"⚠️  Skipped malformed line in {context.commands_file.name}: {error}")

        if not work_list:
            self.logger.debug(f"No commands configured for {context.hook_name}")
            return None

        settings = context.settings
        mode = ExecutionMode.PARALLEL if settings.parallel_execution else ExecutionMode.SEQUENTIAL
        self._print(f"🔄 Running {len(work_list)} {context.hook_name} command(s) ({mode.value})")

        executor = CommandExecutor(
            repository=self.repository,
            cwd=context.repo_root,
            hook_name=context.hook_name,
            on_result=self._print_result,
        )
        results = await executor.run(work_list, mode, settings.max_parallel)
        return aggregate(results)

    def _print_result(self, result: ExecutionResult) -> None:
        if result.succeeded:
            self._print(f"  ✅ {result.summary()}")
            return

        icon = "❌" if result.spec.mandatory else "⚠️ "
        suffix = "" if result.spec.mandatory else " [optional]"
        self._print(f"  {icon} {result.summary()}{suffix}")

    def _remediate(self) -> None:
        context = self.context
        report = Remediator(
            self.repository, context.settings.auto_add_after_fix, context.hook_name
        ).remediate()

        if not report.modified_files:
            return

        self._print("📝 Files modified by commands:")
        for path in report.restaged_files:
            self._print(f"  ✅ re-staged {path}")
        for path in report.unstaged_files:
            self._print(f"  ⚠️  {path}")

        if report.unstaged_files and not report.auto_add_enabled:
            self._print("Review and stage them yourself, or enable automatic staging:")
            self._print(f"  {Remediator.ENABLE_HINT}")

    # Reporting

    def _bypass_hint(self) -> str:
        command = HOOK_GIT_COMMANDS.get(self.context.hook_name, "git")
        return f"BYPASS_HOOKS=1 {command} ..."

    def _print_footer(self) -> None:
        self._print(f"To bypass (emergencies only): {self._bypass_hint()}")
        log_file = get_log_file()
        if log_file:
            self._print(f"Log: {log_file}")

    def _report_validation_failure(self, failure: ValidationFailure) -> None:
        self._print()
        self._print(f"❌ {failure.rule}")
        self._print(f"   {failure.message}")
        for name, value in failure.details.items():
            self._print(f"   {name}: {value}")

        if failure.suggestions:
            self._print()
            for line in failure.suggestions:
                self._print(f"   {line}")

        self._print()
        self._print_footer()

    def _report_commands(self, summary: AggregateResult) -> int:
        tracked = get_error_tracker().get_error_stats()
        if tracked.get("total_errors"):
            self.logger.debug(f"Recorded errors: {tracked}")

        if summary.overall_success:
            optional_failures = len(summary.failed)
            message = f"✅ {len(summary.passed)} command(s) passed"
            if optional_failures:
                message += f", {optional_failures} optional command(s) failed"
            self._print(message)
            self.logger.info(f"Hook finished: {self.context.hook_name} passed")
            return EXIT_SUCCESS

        self._print()
        self._print(f"❌ {self.context.hook_name} failed")
        self._print("Failed:")
        for description in summary.failed:
            self._print(f"  - {description}")
        if summary.passed:
            self._print("Passed:")
            for description in summary.passed:
                self._print(f"  - {description}")
        self._print()
        self._print_footer()

        self.logger.error(f"Hook finished: {self.context.hook_name} failed")
        return EXIT_FAILURE

    def _show_bypass_banner(self, style: str) -> None:
        if style == "once":
            marker = self.context.git_dir / f"{BYPASS_MARKER_PREFIX}{os.getppid()}"
            if marker.exists():
                return
            try:
                marker.touch()
            except OSError as e:
                self.logger.debug(f"Could not write bypass marker {marker}: {e}")
            style = "full"

        if style == "compact":
            self._print(f"⚠️  Git hooks bypassed (BYPASS_HOOKS=1) for {self.context.hook_name}")
            return

        self._print("=" * 60)
        self._print("⚠️  GIT HOOKS BYPASSED")
        self._print("=" * 60)
        self._print(f"Hook:  {self.context.hook_name}")
        self._print(f"User:  {current_user(self.environ)}")
        self._print("Branch naming, commit message and Git Flow checks are skipped,")
        self._print("and no configured commands are run.")
        self._print("Unset BYPASS_HOOKS to re-enable them.")
        self._print("=" * 60)

"""
Command execution engine for hook commands.

This module provides the CommandExecutor class which runs a work list of
CommandSpecs as OS subprocesses, either one at a time (stopping at the
first mandatory failure) or in priority tiers with bounded concurrency.
Every command gets its own deadline; when it expires the command's whole
process group receives SIGTERM, then SIGKILL after a grace period.

Failures are returned as ExecutionResult values, never raised, so a
batch can always be aggregated.
"""

import asyncio
import os
import shlex
import signal
import subprocess
import tempfile
import time
from itertools import groupby
from pathlib import Path
from typing import Callable, List, Optional

from ..interfaces import ICommandExecutor, IGitRepository
from ..models.command import (
    STAGED_PLACEHOLDER,
    CommandSpec,
    ExecutionMode,
    ExecutionResult,
    Outcome,
)
from ..utils.error_handling import (
    CommandFailure,
    CommandTimeout,
    ErrorSeverity,
    get_error_tracker,
)
from ..utils.logging import get_logger

GRACE_PERIOD_SECONDS = 1.0
DEFAULT_MAX_PARALLEL = 4
SPAWN_FAILURE_EXIT_CODE = 127

ResultCallback = Callable[[ExecutionResult], None]


def quote_paths(paths: List[str]) -> str:
    """Space-joined list of individually shell-quoted paths."""
    return " ".join(shlex.quote(path) for path in paths)


class CommandExecutor(ICommandExecutor):
    """Runs configured hook commands with timeouts."""

    def __init__(
        self,
        repository: Optional[IGitRepository] = None,
        cwd: Optional[Path] = None,
        hook_name: str = "UNKNOWN",
        grace_period: float = GRACE_PERIOD_SECONDS,
        on_result: Optional[ResultCallback] = None,
    ):
        """
        Initialize the executor.

        Args:
            repository: Source of the staged file list for ``{staged}``
            cwd: Working directory for commands (the repository root)
            hook_name: Hook the commands run for, used in log records
            grace_period: Seconds between SIGTERM and SIGKILL on timeout
            on_result: Called with each result as soon as it is available
        """
        self.repository = repository
        self.cwd = Path(cwd) if cwd else None
        self.hook_name = hook_name
        self.grace_period = grace_period
        self.on_result = on_result
        self.logger = get_logger("command.executor", {"hook": hook_name})

    def expand_command(self, template: str) -> str:
        """Replace ``{staged}`` with the quoted list of staged files."""
        if STAGED_PLACEHOLDER not in template:
            return template

        staged = self.repository.staged_files() if self.repository else []
        return template.replace(STAGED_PLACEHOLDER, quote_paths(staged))

    async def run(
        self,
        work_list: List[CommandSpec],
        mode: ExecutionMode,
        max_parallel: int = DEFAULT_MAX_PARALLEL,
    ) -> List[ExecutionResult]:
        """Run a work list and return one result per executed command."""
        if not work_list:
            return []

        self.logger.info(f"Executing {len(work_list)} command(s) in {mode.value} mode")
        if mode is ExecutionMode.PARALLEL:
            return await self.run_parallel(work_list, max_parallel)
        return await self.run_sequential(work_list)

    async def run_sequential(self, work_list: List[CommandSpec]) -> List[ExecutionResult]:
        """Run commands in order, stopping at the first blocking failure."""
        results = []
        for spec in work_list:
            result = await self.execute(spec)
            results.append(result)
            if result.blocks:
                skipped = len(work_list) - len(results)
                if skipped:
                    self.logger.warning(
                        f"Mandatory command failed, skipping {skipped} remaining command(s)"
                    )
                break
        return results

    async def run_parallel(
        self, work_list: List[CommandSpec], max_parallel: int = DEFAULT_MAX_PARALLEL
    ) -> List[ExecutionResult]:
        """
        Run each priority tier concurrently, tiers in ascending order.

        At most ``max_parallel`` commands run at once. Every command is run
        to completion regardless of sibling failures.
        """
        semaphore = asyncio.Semaphore(max(1, max_parallel))

        async def bounded(spec: CommandSpec) -> ExecutionResult:
            async with semaphore:
                return await self.execute(spec)

        results: List[ExecutionResult] = []
        ordered = sorted(work_list, key=lambda spec: spec.priority)
        for priority, tier in groupby(ordered, key=lambda spec: spec.priority):
            tier_specs = list(tier)
            self.logger.debug(f"Launching priority {priority} tier of {len(tier_specs)} command(s)")
            results.extend(await asyncio.gather(*(bounded(spec) for spec in tier_specs)))
        return results

    async def execute(self, spec: CommandSpec) -> ExecutionResult:
        """Run a single command under its timeout."""
        start = time.monotonic()
        self.logger.info(f"Executing: {spec.description}")

        try:
            command = self.expand_command(spec.command_template)
            outcome, exit_code, output = await self._run_process(command, spec.timeout_seconds)
        except Exception as e:
            self.logger.error(f"Could not run {spec.description}: {e}", exc_info=True)
            command = spec.command_template
            outcome, exit_code, output = Outcome.FAILURE, SPAWN_FAILURE_EXIT_CODE, str(e)

        result = ExecutionResult(
            spec=spec,
            outcome=outcome,
            exit_code=exit_code,
            duration_seconds=time.monotonic() - start,
            captured_output=output,
            command=command,
        )
        self._log_result(result)

        if self.on_result:
            self.on_result(result)
        return result

    async def _run_process(self, command: str, timeout: int):
        """Spawn ``command`` in a shell; return (outcome, exit code, output)."""
        spawn_options = {}
        if os.name == "posix":
            # Own process group, so a timeout can signal the shell and its children
            spawn_options["start_new_session"] = True

        with tempfile.TemporaryFile() as output_file:
            process = await asyncio.create_subprocess_shell(
                command,
                stdin=subprocess.DEVNULL,
                stdout=output_file,
                stderr=subprocess.STDOUT,
                cwd=str(self.cwd) if self.cwd else None,
                **spawn_options,
            )

            try:
                exit_code = await asyncio.wait_for(process.wait(), timeout=timeout)
                outcome = Outcome.SUCCESS if exit_code == 0 else Outcome.FAILURE
            except asyncio.TimeoutError:
                await self._terminate(process)
                outcome, exit_code = Outcome.TIMEOUT, None
            except BaseException:
                await self._terminate(process)
                raise

            output_file.seek(0)
            output = output_file.read().decode("utf-8", errors="replace")

        return outcome, exit_code, output

    def _signal(self, process: asyncio.subprocess.Process, sig: int) -> None:
        try:
            if os.name == "posix":
                os.killpg(process.pid, sig)
            elif sig == signal.SIGTERM:
                process.terminate()
            else:
                process.kill()
        except (ProcessLookupError, PermissionError):
            # Group already gone
            pass

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """SIGTERM, wait out the grace period, then SIGKILL whatever is left."""
        self._signal(process, signal.SIGTERM)
        try:
            await asyncio.wait_for(process.wait(), timeout=self.grace_period)
        except asyncio.TimeoutError:
            pass
        self._signal(process, getattr(signal, "SIGKILL", signal.SIGTERM))
        await process.wait()

    def _log_result(self, result: ExecutionResult) -> None:
        description = result.spec.description
        duration = f"{result.duration_seconds:.0f}s"

        if result.outcome is Outcome.SUCCESS:
            self.logger.info(f"Success: {description} ({duration})")
            return

        if result.outcome is Outcome.TIMEOUT:
            self.logger.error(f"Timeout: {description} after {result.spec.timeout_seconds}s")
            error = CommandTimeout(description, result.spec.timeout_seconds)
        else:
            self.logger.error(f"Failed: {description} (exit code: {result.exit_code})")
            error = CommandFailure(description, result.exit_code)

        # Only mandatory commands escalate to a blocking failure
        get_error_tracker().record_error(
            component="command.executor",
            category=error.category,
            severity=ErrorSeverity.HIGH if result.spec.mandatory else ErrorSeverity.LOW,
            message=str(error),
            context={"hook": self.hook_name, "mandatory": result.spec.mandatory},
        )

        if result.captured_output.strip():
            self.logger.error(f"Output: {result.captured_output.rstrip()}")

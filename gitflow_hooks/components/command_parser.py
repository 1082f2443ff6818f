"""
Parser for the declarative hook command configuration.

Each non-comment line of ``commands.conf`` describes one command::

    HOOK:PRIORITY:MANDATORY:TIMEOUT:COMMAND:DESCRIPTION
    pre-commit:1:true:30:ruff check {staged}:Lint staged files

Malformed lines are reported and skipped; they never abort the parse.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..models.command import CommandSpec
from ..utils.error_handling import (
    ConfigParseError,
    ErrorCategory,
    ErrorSeverity,
    ErrorTracker,
    get_error_tracker,
)
from ..utils.logging import get_logger

FIELD_COUNT = 6
BOOLEAN_VALUES = {"true": True, "false": False}


class CommandConfigParser:
    """Turns ``commands.conf`` text into an ordered work list for one hook."""

    def __init__(self, error_tracker: Optional[ErrorTracker] = None):
        self.error_tracker = error_tracker or get_error_tracker()
        self.logger = get_logger("command.parser")
        self.errors: List[ConfigParseError] = []

    def parse_line(self, line: str, line_number: int) -> CommandSpec:
        """
        Parse one configuration line.

        Raises:
            ConfigParseError: If the line does not have six valid fields.
        """
        # The description is the last field and may itself contain ":"
        fields = line.split(":", FIELD_COUNT - 1)
        if len(fields) != FIELD_COUNT:
            raise ConfigParseError(
                line_number, line, f"expected {FIELD_COUNT} fields, found {len(fields)}"
            )

        hook, priority, mandatory, timeout, command, description = (
            field.strip() for field in fields
        )

        try:
            priority_value = int(priority)
        except ValueError:
            raise ConfigParseError(line_number, line, f"priority is not an integer: {priority!r}")

        if mandatory.lower() not in BOOLEAN_VALUES:
            raise ConfigParseError(line_number, line, f"mandatory must be true or false: {mandatory!r}")

        try:
            timeout_value = int(timeout)
        except ValueError:
            raise ConfigParseError(line_number, line, f"timeout is not an integer: {timeout!r}")

        spec = CommandSpec(
            hook=hook,
            priority=priority_value,
            mandatory=BOOLEAN_VALUES[mandatory.lower()],
            timeout_seconds=timeout_value,
            command_template=command,
            description=description or command,
            line_number=line_number,
        )

        try:
            spec.validate()
        except ValueError as e:
            raise ConfigParseError(line_number, line, str(e))

        return spec

    def _report(self, error: ConfigParseError, hook_name: str) -> None:
        self.errors.append(error)
        self.logger.warning(f"Skipping malformed command line {error}", extra={"hook": hook_name})
        self.error_tracker.record_error(
            component="command.parser",
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.LOW,
            message=str(error),
            exception=error,
            context={"line_number": error.line_number},
        )

    def parse(self, config_text: str, hook_name: str) -> List[CommandSpec]:
        """
        Parse configuration text and return the commands for ``hook_name``.

        Commands are ordered by ascending priority; equal priorities keep
        their file order.
        """
        matching: List[Tuple[int, CommandSpec]] = []

        for line_number, raw_line in enumerate(config_text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            try:
                spec = self.parse_line(line, line_number)
            except ConfigParseError as e:
                self._report(e, hook_name)
                continue

            if spec.hook == hook_name:
                matching.append((line_number, spec))

        # sorted() is stable, so ties keep file order
        work_list = [spec for _, spec in sorted(matching, key=lambda item: item[1].priority)]
        self.logger.debug(
            f"Parsed {len(work_list)} command(s) for {hook_name}", extra={"hook": hook_name}
        )
        return work_list

    def load(self, path: Union[str, Path], hook_name: str) -> List[CommandSpec]:
        """Read and parse a configuration file; a missing file yields no commands."""
        config_path = Path(path)
        if not config_path.is_file():
            self.logger.debug(f"No commands file at {config_path}", extra={"hook": hook_name})
            return []

        return self.parse(config_path.read_text(encoding="utf-8"), hook_name)

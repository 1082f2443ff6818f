"""
Audit logging utilities for the Git Flow hooks.

This module configures the ``gitflow_hooks`` logger tree. Every record is
appended to a daily audit log inside the repository's git directory in the
form ``[timestamp] [LEVEL] [hook-name] message``. Several hook processes
may write to the same file at once (two terminals committing together),
so each write is wrapped in an advisory lock where the platform has one.
"""

import logging
import sys
import traceback
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

AUDIT_FORMAT = "[%(asctime)s] [%(levelname)s] [%(hook)s] %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "gitflow_hooks"


class LogLevel(Enum):
    """Log levels written to the audit log."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _level_value(level: str) -> int:
    if level.upper() == "TRACE":
        return TRACE
    return getattr(logging, level.upper())


class HookNameFilter(logging.Filter):
    """Make sure every record carries a hook name for the formatter."""

    def __init__(self, default_hook: str = "UNKNOWN"):
        super().__init__()
        self.default_hook = default_hook

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "hook", None):
            record.hook = self.default_hook
        return True


class AuditLogHandler(logging.FileHandler):
    """
    Append-only file handler that takes an exclusive ``flock`` on a
    sibling ``.lock`` file around each write.

    Without ``fcntl`` the line is appended directly; interleaving is then
    possible but a write never fails the hook.
    """

    def __init__(self, filename: Path):
        super().__init__(str(filename), mode="a", encoding="utf-8", delay=True)
        self.lock_path = f"{self.baseFilename}.lock"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + "\n"
            self._append(line)
        except Exception:
            self.handleError(record)

    def _append(self, line: str) -> None:
        if fcntl is None:
            with open(self.baseFilename, "a", encoding="utf-8") as log_file:
                log_file.write(line)
            return

        with open(self.lock_path, "a") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                with open(self.baseFilename, "a", encoding="utf-8") as log_file:
                    log_file.write(line)
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)


class ComponentLogger:
    """
    Logger for a package component.

    Attaches the hook name (and any extra context) to every record so the
    audit line can be attributed to the hook that produced it.
    """

    def __init__(self, component_name: str, extra_context: Optional[Dict[str, Any]] = None):
        """
        Initialize component logger.

        Args:
            component_name: Name of the component (e.g., 'command.executor')
            extra_context: Additional context; ``hook`` names the running hook
        """
        self.component_name = component_name
        self.extra_context = extra_context or {}
        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component_name}")

    def _build_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Merge component context with per-call context."""
        data = {"component": self.component_name, **self.extra_context}
        if extra:
            data.update(extra)
        return data

    def trace(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.log(TRACE, message, extra=self._build_extra(extra))

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.debug(message, extra=self._build_extra(extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.info(message, extra=self._build_extra(extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.logger.warning(message, extra=self._build_extra(extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
        with_trace: bool = False,
    ):
        """Log error message, optionally followed by the call stack at TRACE."""
        self.logger.error(message, extra=self._build_extra(extra), exc_info=exc_info)
        if with_trace:
            self.trace("Stack trace:", extra)
            for frame in traceback.format_stack()[:-1]:
                self.trace("  " + frame.strip().replace("\n", " | "), extra)

    def bind(self, **context: Any) -> "ComponentLogger":
        """Return a logger for the same component with added context."""
        return ComponentLogger(self.component_name, {**self.extra_context, **context})


class LoggingManager:
    """
    Centralized logging configuration.

    The audit log lives at ``<log_dir>/hook-YYYY-MM-DD.log``. A console
    handler on stderr is only installed when ``console_level`` is given,
    because hook output shown to the user is printed separately.
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        log_level: str = "INFO",
        hook_name: str = "UNKNOWN",
        console_level: Optional[str] = None,
    ):
        """
        Initialize logging manager.

        Args:
            log_dir: Directory for the audit log; None disables file logging
            log_level: Minimum level written to the audit log
            hook_name: Hook name used for records that do not carry one
            console_level: Level for stderr output, or None for no console
        """
        self.log_dir = Path(log_dir) if log_dir else None
        self.log_level = _level_value(log_level)
        self.hook_name = hook_name
        self.console_level = console_level
        self.log_file: Optional[Path] = None
        self.component_loggers: Dict[str, ComponentLogger] = {}

        self._setup_logging()

    def _setup_logging(self):
        formatter = logging.Formatter(AUDIT_FORMAT, datefmt=TIMESTAMP_FORMAT)
        hook_filter = HookNameFilter(self.hook_name)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(self.log_level)
        root_logger.propagate = False

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        if self.log_dir is not None:
            try:
                self.log_dir.mkdir(parents=True, exist_ok=True)
            except OSError:
                # Logging must never block a Git operation
                self.log_dir = None

        if self.log_dir is not None:
            self.log_file = self.log_dir / f"hook-{datetime.now():%Y-%m-%d}.log"
            file_handler = AuditLogHandler(self.log_file)
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(hook_filter)
            root_logger.addHandler(file_handler)

        if self.console_level:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(_level_value(self.console_level))
            console_handler.setFormatter(formatter)
            console_handler.addFilter(hook_filter)
            root_logger.addHandler(console_handler)

        if not root_logger.handlers:
            root_logger.addHandler(logging.NullHandler())

    def get_component_logger(
        self, component_name: str, extra_context: Optional[Dict[str, Any]] = None
    ) -> ComponentLogger:
        """Get or create a component logger."""
        cache_key = f"{component_name}_{hash(str(extra_context))}"

        if cache_key not in self.component_loggers:
            self.component_loggers[cache_key] = ComponentLogger(component_name, extra_context)

        return self.component_loggers[cache_key]


# Global logging manager instance
_logging_manager: Optional[LoggingManager] = None


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: str = "INFO",
    hook_name: str = "UNKNOWN",
    console_level: Optional[str] = None,
) -> LoggingManager:
    """
    Setup global logging configuration.

    Returns:
        LoggingManager instance
    """
    global _logging_manager
    _logging_manager = LoggingManager(log_dir, log_level, hook_name, console_level)
    return _logging_manager


def get_logger(component_name: str, extra_context: Optional[Dict[str, Any]] = None) -> ComponentLogger:
    """
    Get a component logger.

    Args:
        component_name: Name of the component
        extra_context: Additional context for all log messages

    Returns:
        ComponentLogger instance
    """
    if _logging_manager is None:
        return ComponentLogger(component_name, extra_context)

    return _logging_manager.get_component_logger(component_name, extra_context)


def get_log_file() -> Optional[Path]:
    """Path of the active audit log, if file logging is enabled."""
    if _logging_manager is None:
        return None
    return _logging_manager.log_file

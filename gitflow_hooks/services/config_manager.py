"""
Configuration management for the Git Flow hooks.

Settings are resolved once per hook invocation, later sources winning:

1. built-in defaults (``HookSettings``)
2. optional ``.githooks/hooks.yaml`` (``${VAR}`` values expanded)
3. ``hooks.*`` git config keys
4. ``BYPASS_HOOKS`` / ``ALLOW_DIRECT_PROTECTED`` environment variables
"""

import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..interfaces import IGitRepository
from ..models.config import HookContext, HookSettings
from ..utils.logging import get_logger

HOOKS_DIR_NAME = ".githooks"
COMMANDS_FILE_NAME = "commands.conf"
SETTINGS_FILE_NAMES = ["hooks.yaml", "hooks.yml"]

# setting name -> (git config key, value kind)
GIT_CONFIG_KEYS = {
    "max_commits": ("hooks.maxCommits", "int"),
    "auto_add_after_fix": ("hooks.autoAddAfterFix", "bool"),
    "parallel_execution": ("hooks.parallelExecution", "bool"),
    "max_parallel": ("hooks.maxParallel", "int"),
    "bypass_warning_style": ("hooks.bypassWarningStyle", "str"),
    "release_message_verbs": ("hooks.releaseMessageVerbs", "list"),
    "commands_file": ("hooks.commandsFile", "str"),
    "log_level": ("hooks.logLevel", "str"),
}

TRUE_VALUES = {"true", "yes", "on", "1"}
FALSE_VALUES = {"false", "no", "off", "0", ""}


class ConfigurationManager:
    """Resolves HookSettings and builds the per-invocation HookContext."""

    def __init__(
        self,
        repository: IGitRepository,
        repo_root: Path,
        settings_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the configuration manager.

        Args:
            repository: Git access used for ``git config`` lookups
            repo_root: Root of the work tree
            settings_path: Explicit YAML settings file. If None, looks in .githooks/
            environ: Environment mapping; defaults to ``os.environ``
        """
        self.repository = repository
        self.repo_root = Path(repo_root)
        self.settings_path = Path(settings_path) if settings_path else self._find_settings_file()
        self.environ = os.environ if environ is None else environ
        self.logger = get_logger("config.manager")

    def _find_settings_file(self) -> Optional[Path]:
        """Find the settings file in the hooks directory, if there is one."""
        for name in SETTINGS_FILE_NAMES:
            candidate = self.repo_root / HOOKS_DIR_NAME / name
            if candidate.is_file():
                return candidate
        return None

    def load_settings(self) -> HookSettings:
        """
        Resolve settings from all sources.

        Raises:
            ValueError: If any source holds an invalid value.
        """
        settings = HookSettings()

        file_values = self._load_settings_file()
        self._apply(settings, file_values, source=str(self.settings_path))

        git_values = {}
        for name, (key, kind) in GIT_CONFIG_KEYS.items():
            raw = self.repository.config_get(key)
            if raw is not None:
                git_values[name] = self._coerce(raw, kind, key)
        self._apply(settings, git_values, source="git config")

        if self.environ.get("BYPASS_HOOKS") == "1":
            settings.bypass_hooks = True
        if self.environ.get("ALLOW_DIRECT_PROTECTED") == "1":
            settings.allow_direct_protected = True

        settings.validate()
        return settings

    def _load_settings_file(self) -> Dict[str, Any]:
        if self.settings_path is None:
            return {}
        if not self.settings_path.is_file():
            raise ValueError(f"Settings file not found: {self.settings_path}")

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                raw_settings = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in settings file: {e}")

        if not isinstance(raw_settings, dict):
            raise ValueError(f"Settings file must contain a mapping: {self.settings_path}")

        return self._expand_env_vars(raw_settings)

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ``${VAR_NAME}`` values."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                env_value = self.environ.get(var_name)
                if env_value is None:
                    raise ValueError(f"Environment variable '{var_name}' not found")
                return env_value
            return obj
        else:
            return obj

    def _coerce(self, raw: str, kind: str, key: str) -> Any:
        value = raw.strip()
        if kind == "int":
            try:
                return int(value)
            except ValueError:
                raise ValueError(f"{key} must be an integer, got {raw!r}")
        if kind == "bool":
            if value.lower() in TRUE_VALUES:
                return True
            if value.lower() in FALSE_VALUES:
                return False
            raise ValueError(f"{key} must be true or false, got {raw!r}")
        if kind == "list":
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def _apply(self, settings: HookSettings, values: Dict[str, Any], source: str) -> None:
        known = {f.name for f in fields(HookSettings)}
        for name, value in values.items():
            if name not in known:
                self.logger.warning(f"Ignoring unknown setting '{name}' from {source}")
                continue
            setattr(settings, name, value)

    def commands_file(self, settings: HookSettings) -> Path:
        if settings.commands_file:
            path = Path(settings.commands_file)
            return path if path.is_absolute() else self.repo_root / path
        return self.repo_root / HOOKS_DIR_NAME / COMMANDS_FILE_NAME

    def build_context(self, hook_name: str, commands_file: Optional[str] = None) -> HookContext:
        """Build the context object shared by every component in this run."""
        settings = self.load_settings()
        return HookContext(
            hook_name=hook_name,
            repo_root=self.repo_root,
            git_dir=self.repository.git_dir(),
            settings=settings,
            commands_file=Path(commands_file) if commands_file else self.commands_file(settings),
        )

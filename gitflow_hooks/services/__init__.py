"""
Service layer for the Git Flow hooks.

This module contains the services that resolve hook settings and apply
the per-hook Git Flow validations.
"""

from .config_manager import ConfigurationManager
from .hook_validator import HookValidator

__all__ = [
    "ConfigurationManager",
    "HookValidator",
]

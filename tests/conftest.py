"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Git Flow hooks test suite.
"""

import os
import tempfile
from pathlib import Path

import pytest

from gitflow_hooks.models.config import HookContext, HookSettings
from gitflow_hooks.utils.error_handling import get_error_tracker
from gitflow_hooks.utils.logging import setup_logging

from repository_fixtures import FakeRepository, run_git


# Test data fixtures
@pytest.fixture
def fake_repo(tmp_path):
    """Create an in-memory repository for testing."""
    git_dir = tmp_path / ".git"
    git_dir.mkdir()
    return FakeRepository(git_dir=git_dir)


@pytest.fixture
def sample_settings():
    """Create default HookSettings for testing."""
    return HookSettings()


@pytest.fixture
def sample_context(tmp_path, sample_settings):
    """Create a HookContext rooted in a temporary directory."""
    return HookContext(
        hook_name="pre-commit",
        repo_root=tmp_path,
        git_dir=tmp_path / ".git",
        settings=sample_settings,
        commands_file=tmp_path / ".githooks" / "commands.conf",
    )


@pytest.fixture
def sample_commands_conf():
    """Sample commands.conf content."""
    return "\n".join(
        [
            "# HOOK:PRIORITY:MANDATORY:TIMEOUT:COMMAND:DESCRIPTION",
            "pre-commit:2:true:30:pytest -q:Unit tests",
            "pre-commit:1:true:30:ruff check {staged}:Lint",
            "",
            "pre-commit:2:false:30:mypy .:Type check",
            "pre-push:1:true:60:pytest:Full test suite",
        ]
    )


# Temporary directory fixtures
@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_git_repo(temp_dir):
    """Create a real git repository with one commit on develop."""
    run_git(temp_dir, "init", "-q")
    run_git(temp_dir, "config", "user.email", "dev@example.com")
    run_git(temp_dir, "config", "user.name", "Dev")
    run_git(temp_dir, "config", "commit.gpgsign", "false")
    run_git(temp_dir, "checkout", "-q", "-b", "main")
    (temp_dir / "README.md").write_text("readme\n")
    run_git(temp_dir, "add", "README.md")
    run_git(temp_dir, "commit", "-q", "-m", "chore: PROJ-1 Initial commit")
    run_git(temp_dir, "checkout", "-q", "-b", "develop")
    return temp_dir


# Environment fixtures
@pytest.fixture
def clean_env():
    """Environment without hook overrides."""
    env = {key: value for key, value in os.environ.items()
           if key not in ("BYPASS_HOOKS", "ALLOW_DIRECT_PROTECTED")}
    return env


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach audit log handlers installed by a test."""
    yield
    setup_logging()


@pytest.fixture(autouse=True)
def reset_error_tracker():
    """Start every test with an empty error tracker."""
    get_error_tracker().clear()
    yield
    get_error_tracker().clear()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add unit marker to all tests by default
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)

        # Add slow marker to tests that spawn processes or git repositories
        if "timeout" in item.name.lower() or "integration" in item.name.lower():
            item.add_marker(pytest.mark.slow)

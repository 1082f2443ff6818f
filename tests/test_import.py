"""Test basic package imports."""


def test_package_import():
    """Test that the main package can be imported."""
    import gitflow_hooks

    assert gitflow_hooks.__version__ == "1.0.0"


def test_main_module_import():
    """Test that main modules can be imported."""
    from gitflow_hooks import interfaces, main, orchestrator

    assert callable(main.main)
    assert orchestrator.HookOrchestrator
    assert interfaces.IGitRepository


def test_models_import():
    """Test that model modules can be imported."""
    from gitflow_hooks.models import branch, command, commit, config, git

    assert command.SUPPORTED_HOOKS[0] == "pre-commit"


def test_components_import():
    from gitflow_hooks.components import BranchClassifier, CommandExecutor, GitAgent

    assert BranchClassifier and CommandExecutor and GitAgent

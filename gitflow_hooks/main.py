"""
Main entry point for the Git Flow hooks.

Hook scripts in ``.git/hooks`` call this with the hook name followed by
the arguments Git passed to the hook::

    gitflow-hooks pre-commit
    gitflow-hooks commit-msg .git/COMMIT_EDITMSG
    gitflow-hooks classify feat-PROJ-123-login
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from .components.branch_classifier import BranchClassifier
from .components.command_parser import CommandConfigParser
from .components.git_agent import GitAgent
from .components.gitflow_rules import (
    allowed_merge_targets,
    can_originate_branches,
    required_base,
)
from .models.branch import BranchType
from .models.command import SUPPORTED_HOOKS
from .orchestrator import EXIT_FAILURE, EXIT_SUCCESS, HookOrchestrator
from .services.config_manager import ConfigurationManager
from .utils.logging import LogLevel


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitflow-hooks",
        description="Git Flow branch rules and configured commands for Git hooks.",
    )
    parser.add_argument("--repo", help="Path inside the repository (default: current directory)")
    parser.add_argument("--config", help="commands.conf to use instead of .githooks/commands.conf")
    parser.add_argument("--settings", help="YAML settings file instead of .githooks/hooks.yaml")
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        type=str.upper,
        help="Audit log level (default: hooks.logLevel or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<hook-name|command>")
    subparsers.required = True

    for hook in SUPPORTED_HOOKS:
        hook_parser = subparsers.add_parser(hook, help=f"Run the {hook} hook")
        hook_parser.add_argument("hook_args", nargs="*", help="Arguments passed by Git")

    classify_parser = subparsers.add_parser("classify", help="Show the Git Flow type of a branch")
    classify_parser.add_argument("branch")

    list_parser = subparsers.add_parser("list-commands", help="Show the commands configured for a hook")
    list_parser.add_argument("hook", choices=SUPPORTED_HOOKS)

    return parser


def classify_command(branch: str) -> int:
    branch_type = BranchClassifier().classify(branch)
    base = required_base(branch_type)
    targets = sorted(target.value for target in allowed_merge_targets(branch_type))

    print(f"Branch:        {branch}")
    print(f"Type:          {branch_type.value}")
    print(f"Base:          {base.value if base else '-'}")
    print(f"Merges into:   {', '.join(targets) or '-'}")
    print(f"New branches:  {can_originate_branches(branch_type).value}")
    return EXIT_SUCCESS if branch_type is not BranchType.UNKNOWN else EXIT_FAILURE


def list_commands(args: argparse.Namespace) -> int:
    repository = GitAgent.discover(args.repo)
    manager = ConfigurationManager(repository, repository.repo_path, args.settings)
    commands_file = args.config or manager.commands_file(manager.load_settings())

    parser = CommandConfigParser()
    work_list = parser.load(commands_file, args.hook)

    for error in parser.errors:
        print(f"⚠️  Skipped malformed line: {error}", file=sys.stderr)

    if not work_list:
        print(f"No commands configured for {args.hook} in {commands_file}")
        return EXIT_SUCCESS

    for spec in work_list:
        kind = "mandatory" if spec.mandatory else "optional"
        print(f"{spec.priority:>3}  {kind:<9}  {spec.timeout_seconds:>4}s  {spec.description}: {spec.command_template}")
    return EXIT_SUCCESS


async def run_hook(args: argparse.Namespace, stdin_text: str = "") -> int:
    orchestrator = HookOrchestrator(
        repo_path=args.repo,
        settings_path=args.settings,
        commands_file=args.config,
        log_level=args.log_level,
    )
    return await orchestrator.run(args.command, args.hook_args, stdin_text)


def read_stdin(hook_name: str) -> str:
    """Ref lines Git writes to pre-push stdin."""
    if hook_name != "pre-push" or sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read()


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    try:
        if args.command == "classify":
            return classify_command(args.branch)
        if args.command == "list-commands":
            return list_commands(args)
        return asyncio.run(run_hook(args, read_stdin(args.command)))
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())

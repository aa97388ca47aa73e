"""
Main entry point for modeguard.
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .constants import (
    APP_DESCRIPTION,
    APP_NAME,
    APP_VERSION,
    EXIT_ALLOWED,
    EXIT_DENIED,
    EXIT_PATH_VIOLATION,
    EXIT_USAGE_ERROR,
)

if TYPE_CHECKING:
    from .modes.schema import ModeConfig
    from .state import ModeState


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=APP_DESCRIPTION
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {APP_VERSION}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    modes_parser = subparsers.add_parser("modes", help="List the resolved mode set")
    modes_parser.add_argument("--state", type=str, help="Path to a mode state JSON file")

    show_parser = subparsers.add_parser("show", help="Show one mode with its effective prompts")
    show_parser.add_argument("slug", help="Mode slug")
    show_parser.add_argument("--state", type=str, help="Path to a mode state JSON file")
    show_parser.add_argument(
        "--cwd",
        type=str,
        help="Workspace directory; adds global instructions and rule files"
    )
    show_parser.add_argument("--language", type=str, help="Preferred language")

    check_parser = subparsers.add_parser("check", help="Check whether a tool may be used")
    check_parser.add_argument("tool", help="Tool name")
    check_parser.add_argument("--mode", type=str, help="Mode slug (default: state mode)")
    check_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Tool call parameter (repeatable)"
    )
    check_parser.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="TOOL",
        help="Disable a tool (repeatable)"
    )
    check_parser.add_argument(
        "--no-tools",
        action="store_true",
        help="Disable every tool that is not always available"
    )
    check_parser.add_argument(
        "--experiment",
        action="append",
        default=[],
        metavar="ID",
        help="Enable an experiment (repeatable)"
    )
    check_parser.add_argument("--state", type=str, help="Path to a mode state JSON file")

    return parser.parse_args(argv)


def setup_logging(verbose: bool, console: Console) -> None:
    """Route log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def parse_params(pairs: Sequence[str]) -> dict[str, Any]:
    """Parse KEY=VALUE pairs into a parameter mapping.

    Raises:
        ValueError: If a pair has no '=' or an empty key.
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid parameter '{pair}', expected KEY=VALUE")
        params[key] = value
    return params


def load_state(path: Optional[str]) -> "ModeState":
    """Load a mode state file, or return the default state.

    Raises:
        StateError: If the file content is invalid.
        OSError: If the file cannot be read.
    """
    from .state import ModeState, import_state

    if not path:
        return ModeState()
    return import_state(Path(path).read_text(encoding="utf-8"))


def _groups_text(mode: "ModeConfig") -> str:
    from .modes.schema import get_group_name, get_group_options

    parts = []
    for entry in mode.groups:
        name = get_group_name(entry).value
        options = get_group_options(entry)
        if options is not None and options.file_regex:
            parts.append(f"{name} ({options.file_regex})")
        else:
            parts.append(name)
    return ", ".join(parts) if parts else "none"


def cmd_modes(args: argparse.Namespace, console: Console) -> int:
    """Print the resolved mode set."""
    from .modes.manager import ModeManager

    manager = ModeManager.from_state(load_state(args.state))

    table = Table(title="Modes")
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Groups")
    table.add_column("Source", style="dim")

    for mode in manager.list_modes():
        table.add_row(
            mode.slug,
            mode.name,
            _groups_text(mode),
            "custom" if manager.is_custom(mode.slug) else "built-in",
        )

    console.print(table)
    return EXIT_ALLOWED


def cmd_show(args: argparse.Namespace, console: Console) -> int:
    """Print one mode with its effective role, instructions and tools."""
    from .modes.manager import ModeManager
    from .modes.registry import ModeContextOptions, ModeNotFoundError

    manager = ModeManager.from_state(load_state(args.state))

    try:
        manager.get_config(args.slug)
    except ModeNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_USAGE_ERROR

    options = None
    if args.cwd:
        options = ModeContextOptions(cwd=args.cwd, language=args.language)

    mode = asyncio.run(manager.resolve(args.slug, options=options))

    console.print(f"[bold]{escape(mode.name)}[/bold] ({escape(mode.slug)})")
    console.print(f"Groups: {_groups_text(mode)}", markup=False)
    console.print(f"Tools: {', '.join(manager.tools_for(mode.slug))}", markup=False)
    console.print()
    console.print("[bold]Role definition[/bold]")
    console.print(mode.role_definition, markup=False)
    if mode.custom_instructions:
        console.print()
        console.print("[bold]Custom instructions[/bold]")
        console.print(mode.custom_instructions, markup=False)
    return EXIT_ALLOWED


def cmd_check(args: argparse.Namespace, console: Console) -> int:
    """Check one tool call and map the decision to an exit status."""
    from .modes.manager import ModeManager
    from .permissions.resolver import Allowed, PathViolation

    state = load_state(args.state)
    experiments = dict(state.experiments)
    for experiment in args.experiment:
        experiments[experiment] = True

    manager = ModeManager(
        custom_modes=state.custom_modes,
        custom_mode_prompts=state.custom_mode_prompts,
        experiments=experiments,
    )

    try:
        params = parse_params(args.param)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return EXIT_USAGE_ERROR

    requirements: Any = None
    if args.no_tools:
        requirements = False
    elif args.disable:
        requirements = {tool: False for tool in args.disable}

    slug = args.mode or state.mode
    decision = manager.check(args.tool, slug, tool_params=params, tool_requirements=requirements)

    if isinstance(decision, Allowed):
        group = decision.group.value if decision.group else "always available"
        console.print(f"[green]allowed[/green] {escape(args.tool)} in {escape(slug)} ({group})")
        return EXIT_ALLOWED

    if isinstance(decision, PathViolation):
        console.print(f"[yellow]violation[/yellow] {escape(str(decision.to_error()))}")
        return EXIT_PATH_VIOLATION

    console.print(f"[red]denied[/red] {escape(args.tool)} in {escape(slug)} ({decision.reason.value})")
    return EXIT_DENIED


COMMANDS = {
    "modes": cmd_modes,
    "show": cmd_show,
    "check": cmd_check,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    from .modes.schema import ModeValidationError
    from .state import StateError

    args = parse_args(argv)
    console = Console()
    setup_logging(args.verbose, console)

    try:
        return COMMANDS[args.command](args, console)
    except (StateError, ModeValidationError) as e:
        console.print(f"[red]Invalid state:[/red] {escape(str(e))}")
        return EXIT_USAGE_ERROR
    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return EXIT_USAGE_ERROR


if __name__ == "__main__":
    sys.exit(main())

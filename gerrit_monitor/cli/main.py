"""Main CLI entry point for gerrit-monitor."""

import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..cache import get_cache_dir, load_results, log_file, save_results
from ..description import Description
from ..instances import InstanceConfig
from .init_config import init_config


def setup_logging(verbose: bool = False) -> None:
    """Log to a file in the cache directory, and to stderr when verbose.

    Does nothing when the root logger is already configured.
    """
    if logging.root.handlers:
        return

    get_cache_dir().mkdir(parents=True, exist_ok=True)

    handlers: list[logging.Handler] = [logging.FileHandler(log_file(), mode="a")]
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
    )


def cmd_status(args: argparse.Namespace, console: Console) -> int:
    from ..report import render

    if args.offline:
        results = load_results()
        if results is None:
            console.print("[red]No cached results. Run without --offline first.[/]")
            return 1
    else:
        import trio

        from ..gerrit_client import fetch_all

        instances = InstanceConfig.load(args.config).enabled_instances()
        if not instances:
            console.print("[yellow]No enabled Gerrit instances configured.[/]")
            return 1

        with console.status(f"Fetching {len(instances)} Gerrit instance(s)..."):
            results, errors = trio.run(fetch_all, instances, args.detailed)

        for host, error in errors.items():
            console.print(f"[red]{host}:[/] {error}")
        if errors and not results.results:
            return 1
        save_results(results)

    render(results, console)
    return 0


def cmd_instances(args: argparse.Namespace, console: Console) -> int:
    config = InstanceConfig.load(args.config)
    for instance in config.instances:
        state = "[green]enabled[/]" if instance.enabled else "[dim]disabled[/]"
        console.print(f"{instance.name}  {instance.host}  {state}")
    return 0


def cmd_describe(args: argparse.Namespace, console: Console) -> int:
    text = args.file.read_text() if args.file else sys.stdin.read()
    description = Description(text)

    console.print(description.message, markup=False, highlight=False)
    if description.attributes:
        console.print()
        for key, value in description.attributes:
            console.print(f"[bold]{key}[/]:{escape(value)}", highlight=False)
    return 0


def cmd_init(args: argparse.Namespace, console: Console) -> int:
    try:
        init_config(args.output, force=args.force)
    except FileExistsError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1
    return 0


def main():
    """Main CLI entry point for gerrit-monitor."""
    parser = argparse.ArgumentParser(
        prog="gerrit-monitor",
        description="Show the Gerrit changelists that need your attention",
        epilog="Run 'gerrit-monitor <command> --help' for more information on a command.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Also log debug output to stderr")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # status command - fetch and categorize CLs
    status_parser = subparsers.add_parser(
        "status",
        help="Fetch open CLs and show the ones needing attention",
        description="Query every enabled Gerrit instance and group CLs by the attention they need.",
    )
    status_parser.add_argument(
        "--detailed",
        "-d",
        action="store_true",
        help="Also fetch author names and commit messages",
    )
    status_parser.add_argument(
        "--offline",
        action="store_true",
        help="Show the last fetched results instead of querying Gerrit",
    )
    status_parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Instance config file (default: gerrit-monitor.yaml)",
    )

    # instances command - list configured hosts
    instances_parser = subparsers.add_parser("instances", help="List configured Gerrit instances")
    instances_parser.add_argument("--config", "-c", type=Path, default=None, help="Instance config file")

    # describe command - parse a commit message
    describe_parser = subparsers.add_parser(
        "describe",
        help="Split a commit message into body and trailers",
    )
    describe_parser.add_argument(
        "file",
        type=Path,
        nargs="?",
        default=None,
        help="File containing the commit message (default: stdin)",
    )

    # init command - generate config
    init_parser = subparsers.add_parser("init", help="Generate gerrit-monitor.yaml")
    init_parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("gerrit-monitor.yaml"),
        help="Output file path (default: gerrit-monitor.yaml)",
    )
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    setup_logging(args.verbose)
    console = Console()

    commands = {
        "status": cmd_status,
        "instances": cmd_instances,
        "describe": cmd_describe,
        "init": cmd_init,
    }
    sys.exit(commands[args.command](args, console))


if __name__ == "__main__":
    main()

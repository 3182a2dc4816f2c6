import argparse
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from . import daemon, service
from .constants import APP_NAME, CONFIG_FILE
from .errors import CommandFailed
from .repository import ChangeDecision, detect_changes, is_absent_or_empty

logger = logging.getLogger(APP_NAME)
console = Console()


def show_config(config_path: Path) -> None:
    """Prints the resolved deployment target as a table."""
    target = daemon.load_target(config_path)

    table = Table(title=f"Git Relay ({config_path})", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("repo_path", str(target.repo_path))
    table.add_row("remote_url", target.remote_url)
    table.add_row("branch", target.branch)
    table.add_row("interval", f"{target.interval} ms")
    table.add_row("remote_name", target.remote_name)
    table.add_row("build_descriptor", target.build_descriptor)
    table.add_row("install_command", " ".join(target.install_command))
    table.add_row("build_command", " ".join(target.build_command))
    table.add_row("log file", str(target.log_config.file or "-"))

    console.print(table)


def check_changes(config_path: Path) -> None:
    """Reports whether the remote has advanced, without deploying."""
    target = daemon.load_target(config_path)

    if is_absent_or_empty(target.repo_path):
        console.print(
            f"[yellow]{target.repo_path} is absent or empty. "
            "The agent will clone it on start.[/yellow]"
        )
        return

    try:
        with console.status(f"Fetching {target.branch}...", spinner="dots"):
            decision = detect_changes(
                target.repo_path,
                target.remote_url,
                target.branch,
                target.remote_name,
            )
    except CommandFailed as e:
        console.print(f"[bold red]ERROR:[/bold red] {e.command}: {e}")
        sys.exit(1)

    if decision is ChangeDecision.CHANGES_DETECTED:
        console.print("[bold cyan]Changes detected.[/bold cyan] A deploy is pending.")
    elif decision is ChangeDecision.NO_CHANGES:
        console.print("[green]Up to date.[/green]")
    else:
        console.print(f"[yellow]Repository missing: {target.repo_path}[/yellow]")


def main() -> None:
    """Main entry point for the Git Relay CLI."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Keep a local clone deployed from its remote branch.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=CONFIG_FILE,
        help=f"Path to the configuration file (default: ./{CONFIG_FILE})",
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Start the deployment agent")
    run_parser.add_argument(
        "--daemon",
        action="store_true",
        help="Log to stderr (for service managers) instead of stdout",
    )
    subparsers.add_parser("now", help="Run a single poll cycle and exit")
    subparsers.add_parser("check", help="Report pending changes without deploying")
    subparsers.add_parser("config", help="Show the resolved configuration")
    subparsers.add_parser(
        "install-service", help="Install the agent as a systemd user service"
    )
    subparsers.add_parser("uninstall-service", help="Remove the systemd service")

    args = parser.parse_args()

    # Handle Subcommands
    if args.command == "now":
        event = daemon.run_once(args.config)
        console.print(f"Cycle finished: [bold]{event.value}[/bold]")
        return
    elif args.command == "check":
        check_changes(args.config)
        return
    elif args.command == "config":
        show_config(args.config)
        return
    elif args.command == "install-service":
        # Validate before handing the path to systemd.
        daemon.load_target(args.config)
        with console.status("Installing service...", spinner="dots"):
            service.install(args.config)
        return
    elif args.command == "uninstall-service":
        with console.status("Uninstalling service...", spinner="dots"):
            service.uninstall()
        return

    # Default Action: run the agent in the foreground.
    daemon.main(args.config, interactive=not getattr(args, "daemon", False))


if __name__ == "__main__":
    main()

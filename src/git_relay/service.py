import shutil
import subprocess
import sys
from pathlib import Path

from rich.console import Console

from .constants import APP_LABEL, LOG_FILE

console = Console()


def get_executable() -> str:
    """Locates the installed CLI executable in the system path.

    Returns:
        str: The absolute path to the 'git-relay' executable.

    Raises:
        SystemExit: If the executable is not found in the PATH.
    """
    exe = shutil.which("git-relay")
    if not exe:
        console.print(
            "[bold red]ERROR:[/bold red] Could not find 'git-relay'. "
            "Ensure the package is installed."
        )
        sys.exit(1)
    return exe


def get_unit_path() -> Path:
    """Resolves the systemd user unit path.

    Returns:
        Path: The path of the .service file.

    Raises:
        NotImplementedError: If called on a platform without systemd.
    """
    if sys.platform.startswith("linux"):
        return Path.home() / f".config/systemd/user/{APP_LABEL}.service"

    raise NotImplementedError("Service installation is only supported on Linux.")


def render_unit(executable: str, config_path: Path, log_path: Path) -> str:
    """Builds the systemd unit text for a long-running agent.

    Args:
        executable (str): The path to the 'git-relay' executable.
        config_path (Path): The absolute configuration file path.
        log_path (Path): Where stdout/stderr of the agent are appended.

    Returns:
        str: The unit file contents.
    """
    return f"""[Unit]
Description=Git Relay Deployment Agent
After=network-online.target

[Service]
Type=simple
WorkingDirectory={config_path.parent}
ExecStart={executable} --config {config_path} run --daemon
Restart=on-failure
RestartSec=30
StandardOutput=append:{log_path}
StandardError=append:{log_path}

[Install]
WantedBy=default.target
"""


def install(config_path: Path) -> None:
    """Installs and starts the agent as a systemd user service.

    Args:
        config_path (Path): The configuration file the service will load.
    """
    exe = get_executable()
    unit_path = get_unit_path()
    config_path = config_path.resolve()

    unit_path.parent.mkdir(parents=True, exist_ok=True)
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(unit_path, "w") as f:
        f.write(render_unit(exe, config_path, LOG_FILE))

    subprocess.run(["systemctl", "--user", "daemon-reload"], check=True)
    subprocess.run(
        ["systemctl", "--user", "enable", "--now", unit_path.name], check=True
    )
    console.print(
        f"[bold green]SUCCESS:[/bold green] Relay service active.\n"
        f"Check status: systemctl --user status {unit_path.name}"
    )


def uninstall() -> None:
    """Stops the systemd user service and removes its unit file."""
    unit_path = get_unit_path()
    subprocess.run(
        ["systemctl", "--user", "disable", "--now", unit_path.name],
        stderr=subprocess.DEVNULL,
    )
    if unit_path.exists():
        unit_path.unlink()

    subprocess.run(["systemctl", "--user", "daemon-reload"])
    console.print("[bold green]SUCCESS:[/bold green] Service uninstalled.")

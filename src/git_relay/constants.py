import logging
import os
from pathlib import Path

"""Global constants and path definitions for Git Relay.

This module defines application identifiers, the default configuration
location, the state directory layout (XDG where applicable) and the default
build tooling used by the deployer.
"""

# --- Identity ---
APP_NAME = "git-relay"
"""str: The human-readable application name, also used as the logger name."""

APP_LABEL = "com.gitrelay.agent"
"""str: The reverse-DNS style identifier used for service unit names."""

# --- Paths ---
_XDG_STATE = os.environ.get("XDG_STATE_HOME")
_BASE_STATE = Path(_XDG_STATE) if _XDG_STATE else Path.home() / ".local/state"

STATE_DIR = _BASE_STATE / "git-relay"
"""Path: The directory for runtime state data (service logs)."""

LOG_FILE = STATE_DIR / "agent.log"
"""Path: The log file used by the installed service unit."""

CONFIG_FILE = Path("config.toml")
"""Path: The configuration file read when no --config is given (relative to cwd)."""

# --- Deployment Defaults ---
DEFAULT_REMOTE = "origin"
"""str: The remote fetched from and diffed against."""

BUILD_DESCRIPTOR = "package.json"
"""str: The manifest whose presence triggers dependency install and build."""

INSTALL_COMMAND = ["npm", "install"]
"""list[str]: The dependency installation command."""

BUILD_COMMAND = ["npm", "run", "build"]
"""list[str]: The build command."""

# --- Logging ---
SUCCESS = 25
"""int: Custom log level between INFO and WARNING for completed deployments."""

logging.addLevelName(SUCCESS, "SUCCESS")

DEFAULT_MAX_LOG_SIZE = 5 * 1024 * 1024
"""int: Max bytes for the log file before rotation."""

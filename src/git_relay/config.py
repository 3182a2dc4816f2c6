import logging
import re
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .constants import (
    APP_NAME,
    BUILD_COMMAND,
    BUILD_DESCRIPTOR,
    DEFAULT_MAX_LOG_SIZE,
    DEFAULT_REMOTE,
    INSTALL_COMMAND,
)
from .errors import ConfigError

logger = logging.getLogger(APP_NAME)

REQUIRED_KEYS = ("repo_path", "remote_url", "interval", "branch")
"""tuple[str, ...]: Keys every configuration file must provide."""

KEY_ALIASES = {
    "repoPath": "repo_path",
    "remoteRepo": "remote_url",
    "remoteUrl": "remote_url",
}
"""dict[str, str]: Legacy camelCase keys mapped to their canonical names."""


def parse_size(value: int | str) -> int:
    """Converts human-readable size strings (e.g., '100MB') to bytes."""
    if isinstance(value, int):
        return value
    match = re.match(r"^(\d+(?:\.\d+)?)\s*([kmg]b?)$", str(value).strip().lower())
    if not match:
        raise ValueError(f"Invalid size format '{value}'")
    num, unit = float(match.group(1)), match.group(2)
    multiplier = {
        "k": 1024,
        "kb": 1024,
        "m": 1024**2,
        "mb": 1024**2,
        "g": 1024**3,
        "gb": 1024**3,
    }
    return int(num * multiplier[unit])


def parse_interval(value: int | str) -> int:
    """Converts an interval to milliseconds.

    Integers are taken as milliseconds. Strings may carry a unit
    (e.g., '500ms', '30s', '5 min', '1hr').
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid interval '{value}'")
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return int(text)
    match = re.match(r"^(\d+(?:\.\d+)?)\s*(ms|s|sec|m|min|h|hr)s?$", text)
    if not match:
        raise ValueError(f"Invalid interval format '{value}'")
    num, unit = float(match.group(1)), match.group(2)
    multiplier = {
        "ms": 1,
        "s": 1000,
        "sec": 1000,
        "m": 60_000,
        "min": 60_000,
        "h": 3_600_000,
        "hr": 3_600_000,
    }
    return int(num * multiplier[unit])


def _parse_command(key: str, value: Any) -> list[str]:
    """Accepts a command as a list of strings or a whitespace-separated string."""
    if isinstance(value, str):
        parts = value.split()
    elif isinstance(value, list) and all(isinstance(v, str) for v in value):
        parts = list(value)
    else:
        raise ConfigError(f"'{key}' must be a string or a list of strings")
    if not parts:
        raise ConfigError(f"'{key}' must not be empty")
    return parts


@dataclass(frozen=True)
class LoggingConfig:
    """Log output settings.

    Attributes:
        file (Path | None): Optional log file, rotated when it grows too large.
        max_size (int): Max bytes for the log file before rotation.
    """

    file: Path | None = None
    max_size: int = DEFAULT_MAX_LOG_SIZE


@dataclass(frozen=True)
class DeploymentTarget:
    """The single repository this agent keeps deployed.

    Created once at startup and never mutated.

    Attributes:
        repo_path (Path): The local clone.
        remote_url (str): The URL cloned from.
        branch (str): The branch tracked on the remote.
        interval (int): Milliseconds to wait between poll cycles.
        remote_name (str): The remote name fetched from.
        build_descriptor (str): The manifest gating install and build.
        install_command (list[str]): The dependency install command.
        build_command (list[str]): The build command.
        log_config (LoggingConfig): Log output settings.
    """

    repo_path: Path
    remote_url: str
    branch: str
    interval: int
    remote_name: str = DEFAULT_REMOTE
    build_descriptor: str = BUILD_DESCRIPTOR
    install_command: list[str] = field(default_factory=lambda: list(INSTALL_COMMAND))
    build_command: list[str] = field(default_factory=lambda: list(BUILD_COMMAND))
    log_config: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def interval_seconds(self) -> float:
        """float: The poll interval in seconds."""
        return self.interval / 1000

    @classmethod
    def load(cls, path: Path) -> "DeploymentTarget":
        """Reads and validates a configuration file.

        TOML is the native format. Files ending in '.yaml' or '.yml' are read
        with PyYAML.

        Args:
            path (Path): The configuration file.

        Returns:
            DeploymentTarget: The validated target.

        Raises:
            ConfigError: If the file is missing, unparsable or invalid.
        """
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        try:
            if path.suffix in (".yaml", ".yml"):
                with open(path, "r") as f:
                    data = yaml.safe_load(f)
            else:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Config syntax error in {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Config syntax error in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Could not read config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        return cls.from_dict(data, base_dir=path.parent)

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], base_dir: Path | None = None
    ) -> "DeploymentTarget":
        """Builds a target from an already-parsed mapping.

        Args:
            data (dict[str, Any]): The raw configuration values.
            base_dir (Path | None, optional):   Directory that relative paths
                                                resolve against. Defaults to
                                                the current directory.

        Returns:
            DeploymentTarget: The validated target.

        Raises:
            ConfigError: If a required field is missing or a value is invalid.
        """
        values = {KEY_ALIASES.get(k, k): v for k, v in data.items()}
        log_section = values.pop("logging", None) or {}

        # 1. Catch and warn about typos / unknown keys
        valid_keys = {f.name for f in fields(cls)} - {"log_config"}
        invalid_keys = set(values) - valid_keys
        if invalid_keys:
            logger.warning(
                f"Unknown config keys: {', '.join(sorted(invalid_keys))}. Ignoring."
            )

        # 2. Required fields (None or empty counts as missing)
        missing = [k for k in REQUIRED_KEYS if values.get(k) in (None, "")]
        if missing:
            raise ConfigError(f"Missing required config fields: {', '.join(missing)}")

        try:
            interval = parse_interval(values["interval"])
        except ValueError as e:
            raise ConfigError(f"Config error in interval: {e}") from e
        if interval <= 0:
            raise ConfigError(f"interval must be positive, got {interval}")

        repo_path = Path(str(values["repo_path"])).expanduser()
        if not repo_path.is_absolute() and base_dir is not None:
            repo_path = base_dir / repo_path

        kwargs: dict[str, Any] = {
            "repo_path": repo_path,
            "remote_url": str(values["remote_url"]),
            "branch": str(values["branch"]),
            "interval": interval,
        }
        if "remote_name" in values:
            kwargs["remote_name"] = str(values["remote_name"])
        if "build_descriptor" in values:
            kwargs["build_descriptor"] = str(values["build_descriptor"])
        for key in ("install_command", "build_command"):
            if key in values:
                kwargs[key] = _parse_command(key, values[key])

        kwargs["log_config"] = cls._parse_logging(log_section)
        return cls(**kwargs)

    @staticmethod
    def _parse_logging(section: Any) -> LoggingConfig:
        """Parses the optional [logging] table, falling back to defaults on bad values."""
        if not isinstance(section, dict):
            logger.warning("Config error in [logging]: expected a table. Ignoring.")
            return LoggingConfig()

        unknown = set(section) - {"file", "max_size"}
        if unknown:
            logger.warning(
                f"Unknown config keys in [logging]: {', '.join(sorted(unknown))}. "
                "Ignoring."
            )

        log_file = section.get("file")
        max_size = DEFAULT_MAX_LOG_SIZE
        if "max_size" in section:
            try:
                max_size = parse_size(section["max_size"])
            except ValueError as e:
                logger.warning(
                    f"Config error in [logging].max_size: {e}. Falling back to default."
                )
        return LoggingConfig(
            file=Path(log_file).expanduser() if log_file else None,
            max_size=max_size,
        )

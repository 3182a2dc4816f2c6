import enum
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from types import FrameType

from rich.console import Console

from .config import DeploymentTarget, LoggingConfig
from .constants import APP_NAME, CONFIG_FILE
from .deployer import Deployer
from .errors import CommandFailed, ConfigError
from .git_wrapper import GitRepo
from .repository import ChangeDecision, detect_changes, is_absent_or_empty
from .timer import IntervalTimer

logger = logging.getLogger(APP_NAME)
logger.setLevel(logging.INFO)

err_console = Console(stderr=True)


class SyncState(enum.Enum):
    """States of the synchronization loop."""

    BOOTSTRAPPING = "bootstrapping"
    POLLING = "polling"
    DEPLOYING = "deploying"


class SyncEvent(enum.Enum):
    """Outcomes that drive the synchronization loop between states."""

    REPO_READY = "repo-ready"
    CLONED = "cloned"
    CHANGES_DETECTED = "changes-detected"
    REPOSITORY_MISSING = "repository-missing"
    NO_CHANGES = "no-changes"
    POLL_FAILED = "poll-failed"
    DEPLOYED = "deployed"


TRANSITIONS: dict[tuple[SyncState, SyncEvent], SyncState] = {
    (SyncState.BOOTSTRAPPING, SyncEvent.REPO_READY): SyncState.POLLING,
    (SyncState.BOOTSTRAPPING, SyncEvent.CLONED): SyncState.DEPLOYING,
    (SyncState.POLLING, SyncEvent.CHANGES_DETECTED): SyncState.DEPLOYING,
    (SyncState.POLLING, SyncEvent.REPOSITORY_MISSING): SyncState.DEPLOYING,
    (SyncState.POLLING, SyncEvent.NO_CHANGES): SyncState.POLLING,
    (SyncState.POLLING, SyncEvent.POLL_FAILED): SyncState.POLLING,
    (SyncState.DEPLOYING, SyncEvent.DEPLOYED): SyncState.POLLING,
}
"""dict: The complete transition table of the synchronization loop."""

_DECISION_EVENTS = {
    ChangeDecision.REPOSITORY_MISSING: SyncEvent.REPOSITORY_MISSING,
    ChangeDecision.CHANGES_DETECTED: SyncEvent.CHANGES_DETECTED,
    ChangeDecision.NO_CHANGES: SyncEvent.NO_CHANGES,
}


def transition(state: SyncState, event: SyncEvent) -> SyncState:
    """Returns the state that follows `state` when `event` occurs.

    Args:
        state (SyncState): The current state.
        event (SyncEvent): The observed event.

    Returns:
        SyncState: The next state.

    Raises:
        ValueError: If the event is not valid in the given state.
    """
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise ValueError(
            f"Invalid transition: {event.value} in state {state.value}"
        ) from None


class Syncer:
    """Keeps one local clone in sync with its remote branch.

    The syncer bootstraps the clone, then runs poll cycles separated by a
    fixed, cancellable wait. Detection failures are logged and absorbed so the
    loop runs until `stop` is called or the process ends.

    Attributes:
        target (DeploymentTarget): The configured deployment target.
        deployer (Deployer): Performs pull and build.
        timer (IntervalTimer): The wait between poll cycles.
        state (SyncState): The current state.
    """

    def __init__(
        self,
        target: DeploymentTarget,
        deployer: Deployer | None = None,
        timer: IntervalTimer | None = None,
    ):
        self.target = target
        self.deployer = deployer or Deployer(target)
        self.timer = timer or IntervalTimer(target.interval_seconds)
        self.state = SyncState.BOOTSTRAPPING

    def _advance(self, event: SyncEvent) -> None:
        """Applies `event`, running the deployment when it enters DEPLOYING."""
        previous = self.state
        self.state = transition(self.state, event)
        logger.debug(f"STATE {previous.value} -> {self.state.value} ({event.value})")

        if self.state is SyncState.DEPLOYING:
            self.deployer.deploy(self.target.repo_path)
            self._advance(SyncEvent.DEPLOYED)

    def _clone(self) -> None:
        """Clones the remote branch into the target path.

        Raises:
            CommandFailed: If git clone fails.
        """
        t = self.target
        logger.warning(f"Cloning {t.remote_url} ({t.branch}) into {t.repo_path}...")
        GitRepo.clone(t.remote_url, t.repo_path, t.branch, t.remote_name)
        logger.info("Clone complete.")

    def bootstrap(self) -> None:
        """Ensures the clone exists, cloning and deploying once if it does not.

        Raises:
            CommandFailed: If the initial clone fails. This is fatal.
        """
        self.state = SyncState.BOOTSTRAPPING
        if is_absent_or_empty(self.target.repo_path):
            self._clone()
            self._advance(SyncEvent.CLONED)
        else:
            self._advance(SyncEvent.REPO_READY)

    def run_cycle(self) -> SyncEvent:
        """Runs one detection pass and deploys if needed.

        A missing repository is re-cloned and deployed without checking for
        changes in the same cycle. Any failure while detecting or re-cloning
        is logged and the loop stays in POLLING.

        Returns:
            SyncEvent: The event this cycle produced.

        Raises:
            RuntimeError: If called before `bootstrap`.
        """
        if self.state is not SyncState.POLLING:
            raise RuntimeError(f"Cannot poll in state {self.state.value}")

        t = self.target
        try:
            decision = detect_changes(
                t.repo_path, t.remote_url, t.branch, t.remote_name
            )
            if decision is ChangeDecision.REPOSITORY_MISSING:
                self._clone()
        except CommandFailed as e:
            logger.error(f"{e.command} failed: {e}")
            event = SyncEvent.POLL_FAILED
        except Exception as e:
            logger.exception(f"LOOP ERROR: {e}")
            event = SyncEvent.POLL_FAILED
        else:
            event = _DECISION_EVENTS[decision]

        self._advance(event)
        return event

    def run(self) -> None:
        """Bootstraps, then polls until stopped.

        Raises:
            CommandFailed: If the bootstrap clone fails.
        """
        self.bootstrap()
        while not self.timer.cancelled:
            self.run_cycle()
            logger.info("Waiting for next check...")
            if not self.timer.wait():
                break
        logger.info("Shutdown requested. Stopped.")

    def stop(self) -> None:
        """Requests shutdown. The current cycle finishes; the wait is cut short.

        Safe to call from a signal handler: it only cancels the timer.
        """
        self.timer.cancel()


LOG_FORMATTER = logging.Formatter(
    "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
)


def setup_logging(interactive: bool) -> None:
    """Configures the console side of the logging subsystem.

    Called before the configuration is read, so warnings raised while loading
    it are already formatted.

    Args:
        interactive (bool): If True, logs to stdout, otherwise to stderr.
    """
    logging.addLevelName(logging.WARNING, "WARN")

    stream_handler = logging.StreamHandler(
        sys.stdout if interactive else sys.stderr
    )
    stream_handler.setFormatter(LOG_FORMATTER)
    logger.addHandler(stream_handler)


def attach_log_file(settings: LoggingConfig) -> None:
    """Adds the rotating log file from the loaded configuration, if any.

    Args:
        settings (LoggingConfig): Log file and rotation settings.
    """
    if not settings.file:
        return

    settings.file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.file,
        maxBytes=settings.max_size,
        backupCount=5,
    )
    file_handler.setFormatter(LOG_FORMATTER)
    logger.addHandler(file_handler)


def log_target(target: DeploymentTarget) -> None:
    """Logs the loaded configuration."""
    logger.info("Configuration loaded:")
    logger.info(f"     - Local path : {target.repo_path}")
    logger.info(f"     - Remote URL : {target.remote_url}")
    logger.info(f"     - Interval   : {target.interval} ms")
    logger.info(f"     - Branch     : {target.branch}")


def load_target(config_path: Path) -> DeploymentTarget:
    """Loads the target, exiting with status 1 on a configuration error.

    Args:
        config_path (Path): The configuration file.

    Returns:
        DeploymentTarget: The validated target.
    """
    try:
        return DeploymentTarget.load(config_path)
    except ConfigError as e:
        err_console.print(f"[bold red]FATAL:[/bold red] Failed to load config: {e}")
        sys.exit(1)


def main(config_path: Path = CONFIG_FILE, interactive: bool = False) -> None:
    """The main daemon entry point.

    Loads configuration, installs signal handlers for graceful shutdown and
    runs the syncer until stopped.

    Args:
        config_path (Path, optional): The configuration file.
        interactive (bool, optional):   Whether to log to stdout instead of
                                        stderr. Defaults to False.
    """
    setup_logging(interactive)
    target = load_target(config_path)
    attach_log_file(target.log_config)
    log_target(target)

    syncer = Syncer(target)

    def shutdown_handler(_signum: int, _frame: FrameType | None) -> None:
        syncer.stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    try:
        syncer.run()
    except CommandFailed as e:
        logger.critical(f"Initial clone failed: {e}")
        sys.exit(1)


def run_once(config_path: Path = CONFIG_FILE) -> SyncEvent:
    """Bootstraps if needed and runs a single poll cycle.

    Args:
        config_path (Path, optional): The configuration file.

    Returns:
        SyncEvent: The event produced by the poll cycle.
    """
    setup_logging(interactive=True)
    target = load_target(config_path)
    attach_log_file(target.log_config)

    syncer = Syncer(target)
    try:
        syncer.bootstrap()
    except CommandFailed as e:
        logger.critical(f"Initial clone failed: {e}")
        sys.exit(1)
    return syncer.run_cycle()


if __name__ == "__main__":
    main()

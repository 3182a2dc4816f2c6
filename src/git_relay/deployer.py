import logging
from collections.abc import Callable
from pathlib import Path

from . import runner
from .config import DeploymentTarget
from .constants import APP_NAME, SUCCESS
from .errors import CommandFailed, DeployFailed
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)


class Deployer:
    """Pulls the latest commits and rebuilds the working copy.

    The deployer is a hard error boundary: a failed pull, install or build is
    logged and swallowed so the polling loop keeps running.

    Attributes:
        target (DeploymentTarget): The configured deployment target.
    """

    def __init__(self, target: DeploymentTarget):
        self.target = target

    def deploy(self, path: Path | None = None) -> None:
        """Runs one deployment against `path` (defaults to the target's repo).

        Args:
            path (Path | None, optional): The repository root.
        """
        path = path or self.target.repo_path
        try:
            self._deploy(path)
        except DeployFailed as e:
            logger.error(f"Deploy failed: {e}")
            return
        except Exception as e:
            logger.exception(f"Deploy failed unexpectedly: {e}")
            return

        logger.log(SUCCESS, f"Deployed {path.name}.")

    def _deploy(self, path: Path) -> None:
        """Executes pull, then install and build when the descriptor exists.

        Raises:
            DeployFailed: If any step exits nonzero.
        """
        logger.info("Pulling latest commits...")
        self._step("pull", lambda: GitRepo(path, self.target.remote_name).pull())

        descriptor = path / self.target.build_descriptor
        if not descriptor.exists():
            logger.warning(
                f"No {self.target.build_descriptor} found. "
                "Skipping dependency install and build."
            )
            return

        install, *install_args = self.target.install_command
        build, *build_args = self.target.build_command

        logger.info(
            f"Found {self.target.build_descriptor}. Installing dependencies..."
        )
        self._step("install", lambda: runner.run(install, install_args, cwd=path))

        logger.info("Building...")
        self._step("build", lambda: runner.run(build, build_args, cwd=path))
        logger.info("Build complete.")

    @staticmethod
    def _step(name: str, action: Callable[[], object]) -> None:
        """Runs one deployment step, tagging a command failure with its name."""
        try:
            action()
        except CommandFailed as e:
            raise DeployFailed(name, e) from e

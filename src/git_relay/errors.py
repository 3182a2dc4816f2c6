"""Error taxonomy for Git Relay.

Callers match on the exception type rather than on message text:

* :class:`ConfigError` is fatal and ends the process before polling starts.
* :class:`CommandFailed` is raised for any external command that exits nonzero
  (or cannot be spawned) and is recoverable by the caller.
* :class:`RepositoryMissing` is a control-flow signal telling the syncer to
  clone before doing anything else.
* :class:`DeployFailed` wraps the failing step of a single deployment and never
  leaves the deployer.
"""


class RelayError(Exception):
    """Base class for all Git Relay errors."""


class ConfigError(RelayError):
    """The configuration is missing, unreadable or invalid."""


class CommandFailed(RelayError):
    """An external command exited with a nonzero status.

    Attributes:
        program (str): The executable that was run.
        arguments (list[str]): The arguments passed to it.
        returncode (int | None): The exit status, or None if it never started.
        stderr (str): The captured (stripped) standard error text.
    """

    def __init__(
        self,
        program: str,
        args: list[str],
        returncode: int | None,
        stderr: str,
    ):
        self.program = program
        self.arguments = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(stderr or f"{self.command} exited with status {returncode}")

    @property
    def command(self) -> str:
        """str: The command line as a single display string."""
        return " ".join([self.program, *self.arguments])


class RepositoryMissing(RelayError):
    """The local repository path does not exist and must be cloned."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Repository path does not exist: {path}")


class DeployFailed(RelayError):
    """A pull, install or build step failed during one deployment.

    Attributes:
        step (str): The name of the failing step ('pull', 'install', 'build').
    """

    def __init__(self, step: str, cause: Exception):
        self.step = step
        super().__init__(f"{step} failed: {cause}")

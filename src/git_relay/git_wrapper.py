import logging
from pathlib import Path

from . import runner
from .constants import APP_NAME, DEFAULT_REMOTE

logger = logging.getLogger(APP_NAME)


class GitRepo:
    """A wrapper around the Git command-line interface for a deployed clone.

    Every operation goes through :func:`git_relay.runner.run`, so a nonzero
    exit from git surfaces as :class:`~git_relay.errors.CommandFailed`.

    Attributes:
        path (Path): The file system path to the repository root.
        remote (str): The remote name used for fetches and diffs.
    """

    def __init__(self, path: Path, remote: str = DEFAULT_REMOTE):
        """Initializes the GitRepo instance.

        Args:
            path (Path): The path to the repository root directory.
            remote (str, optional): The remote name. Defaults to 'origin'.
        """
        self.path = path
        self.remote = remote

    @classmethod
    def clone(
        cls, url: str, path: Path, branch: str, remote: str = DEFAULT_REMOTE
    ) -> "GitRepo":
        """Clones a remote repository with an explicit branch into `path`.

        Args:
            url (str): The remote repository URL.
            path (Path): The target directory (absent or empty).
            branch (str): The branch to check out.
            remote (str, optional): The remote name. Defaults to 'origin'.

        Returns:
            GitRepo: A wrapper around the new clone.
        """
        args = ["clone", "--branch", branch]
        if remote != DEFAULT_REMOTE:
            args.extend(["--origin", remote])
        args.extend([url, str(path)])
        runner.run("git", args)
        return cls(path, remote)

    def _run(self, args: list[str]) -> str:
        """Executes a git command inside the repository.

        Args:
            args (list[str]): Arguments passed to git.

        Returns:
            str: The stripped stdout of the command.
        """
        return runner.run("git", args, cwd=self.path)

    def remote_ref(self, branch: str) -> str:
        """Returns the remote-tracking ref name for `branch` (e.g. 'origin/main')."""
        return f"{self.remote}/{branch}"

    def fetch(self, branch: str) -> None:
        """Fetches `branch` from the configured remote.

        Args:
            branch (str): The branch to fetch.
        """
        self._run(["fetch", self.remote, branch])

    def diff(self, target: str, source: str = "HEAD") -> str:
        """Returns the textual diff between two revisions.

        Args:
            target (str): The revision compared against `source`.
            source (str, optional): The base revision. Defaults to 'HEAD'.

        Returns:
            str: The diff text, empty when the trees are identical.
        """
        return self._run(["diff", source, target])

    def pull(self) -> str:
        """Pulls the latest commits into the currently checked-out branch.

        Returns:
            str: The summary git prints.
        """
        return self._run(["pull"])

    def rev_parse(self, rev: str) -> str | None:
        """Resolves a revision to a full SHA-1 hash.

        Args:
            rev (str): The revision to parse (e.g., 'HEAD', 'origin/main').

        Returns:
            Optional[str]:  The full SHA-1 hash,
                            or None if the revision could not be resolved.
        """
        try:
            return self._run(["rev-parse", rev])
        except Exception as e:
            logger.debug(f"rev-parse failed for '{rev}': {e}")
            return None

import enum
import logging
import os
from pathlib import Path

from .constants import APP_NAME, DEFAULT_REMOTE
from .errors import RepositoryMissing
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)


class ChangeDecision(enum.Enum):
    """The outcome of one detection pass."""

    REPOSITORY_MISSING = "repository-missing"
    CHANGES_DETECTED = "changes-detected"
    NO_CHANGES = "no-changes"


def is_absent_or_empty(path: Path) -> bool:
    """Determines whether `path` still needs a clone.

    Any read failure (permission denied, not a directory) is folded into
    "needs cloning" rather than raised.

    Args:
        path (Path): The local repository path.

    Returns:
        bool: True if the path is missing, unreadable, or an empty directory.
    """
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError as e:
        if path.exists():
            logger.debug(f"Treating unreadable {path} as absent: {e}")
        return True


def require_repository(path: Path) -> None:
    """Raises RepositoryMissing if `path` does not exist."""
    if not path.exists():
        raise RepositoryMissing(path)


def detect_changes(
    path: Path, remote_url: str, branch: str, remote: str = DEFAULT_REMOTE
) -> ChangeDecision:
    """Fetches the tracked branch and compares it against the checked-out HEAD.

    Existence is checked on every call so a deleted clone is noticed on the
    next cycle. Fetch and diff failures propagate as CommandFailed.

    Args:
        path (Path): The local repository path.
        remote_url (str): The remote URL (used only for reporting).
        branch (str): The branch tracked on the remote.
        remote (str, optional): The remote name. Defaults to 'origin'.

    Returns:
        ChangeDecision: The decision for this cycle.
    """
    try:
        require_repository(path)
    except RepositoryMissing:
        logger.error(f"Repository path does not exist: {path}")
        return ChangeDecision.REPOSITORY_MISSING

    logger.info(f"Fetching {branch} from {remote_url}...")
    repo = GitRepo(path, remote)
    repo.fetch(branch)

    target = repo.remote_ref(branch)
    if repo.diff(target):
        local_head = repo.rev_parse("HEAD") or "unknown"
        remote_head = repo.rev_parse(target) or "unknown"
        logger.info(
            f"Changes detected: local={local_head[:8]} remote={remote_head[:8]}"
        )
        return ChangeDecision.CHANGES_DETECTED

    logger.info("No changes.")
    return ChangeDecision.NO_CHANGES

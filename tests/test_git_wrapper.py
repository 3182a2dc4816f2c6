from pathlib import Path
from unittest.mock import MagicMock

import pytest

from git_relay.errors import CommandFailed
from git_relay.git_wrapper import GitRepo


def test_clone_passes_branch_url_and_path(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that clone selects the branch explicitly and targets the path."""
    mock_run = mocker.patch("git_relay.runner.run", return_value="")
    target = tmp_path / "app"

    repo = GitRepo.clone("https://example.com/app.git", target, "release")

    mock_run.assert_called_once_with(
        "git",
        ["clone", "--branch", "release", "https://example.com/app.git", str(target)],
    )
    assert repo.path == target
    assert repo.remote == "origin"


def test_clone_with_custom_remote_name(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that a non-default remote name is passed to git clone."""
    mock_run = mocker.patch("git_relay.runner.run", return_value="")

    GitRepo.clone("git@example.com:app.git", tmp_path, "main", remote="upstream")

    args = mock_run.call_args[0][1]
    assert args[:5] == ["clone", "--branch", "main", "--origin", "upstream"]


def test_fetch_diff_pull_run_inside_repo(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies the fetch, diff and pull command lines and working directory."""
    mock_run = mocker.patch("git_relay.runner.run", return_value="")
    repo = GitRepo(tmp_path)

    repo.fetch("main")
    mock_run.assert_called_with("git", ["fetch", "origin", "main"], cwd=tmp_path)

    repo.diff(repo.remote_ref("main"))
    mock_run.assert_called_with("git", ["diff", "HEAD", "origin/main"], cwd=tmp_path)

    repo.pull()
    mock_run.assert_called_with("git", ["pull"], cwd=tmp_path)


def test_fetch_failure_propagates(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that git failures are not swallowed by the wrapper."""
    mocker.patch(
        "git_relay.runner.run",
        side_effect=CommandFailed("git", ["fetch"], 128, "Could not resolve host"),
    )

    with pytest.raises(CommandFailed, match="Could not resolve host"):
        GitRepo(tmp_path).fetch("main")


def test_rev_parse_returns_none_on_failure(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that an unresolvable revision yields None instead of raising."""
    mocker.patch(
        "git_relay.runner.run",
        side_effect=CommandFailed("git", ["rev-parse"], 128, "unknown revision"),
    )

    assert GitRepo(tmp_path).rev_parse("origin/missing") is None

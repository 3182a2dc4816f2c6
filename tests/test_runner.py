"""Tests for the external command runner."""

import sys
from pathlib import Path

import pytest

from git_relay import runner
from git_relay.errors import CommandFailed


def test_run_returns_stripped_stdout() -> None:
    """Verifies that stdout is captured and trimmed on success."""
    out = runner.run(sys.executable, ["-c", "print('  deployed  ')"])
    assert out == "deployed"


def test_run_uses_working_directory(tmp_path: Path) -> None:
    """Verifies that the command runs inside the requested directory."""
    out = runner.run(sys.executable, ["-c", "import os; print(os.getcwd())"], tmp_path)
    assert Path(out).resolve() == tmp_path.resolve()


def test_run_nonzero_exit_raises_with_stderr() -> None:
    """Verifies that a nonzero exit carries the trimmed stderr and exit status."""
    script = "import sys; sys.stderr.write('  fatal: boom \\n'); sys.exit(3)"

    with pytest.raises(CommandFailed) as excinfo:
        runner.run(sys.executable, ["-c", script])

    err = excinfo.value
    assert err.returncode == 3
    assert err.stderr == "fatal: boom"
    assert str(err) == "fatal: boom"
    assert err.program == sys.executable
    assert err.arguments == ["-c", script]


def test_run_nonzero_exit_without_stderr_has_message() -> None:
    """Verifies that a silent failure still produces a readable message."""
    with pytest.raises(CommandFailed, match="exited with status 1"):
        runner.run(sys.executable, ["-c", "import sys; sys.exit(1)"])


def test_run_missing_program_raises_command_failed() -> None:
    """Verifies that an unknown executable surfaces as CommandFailed, not OSError."""
    with pytest.raises(CommandFailed) as excinfo:
        runner.run("git-relay-no-such-program", ["--version"])

    assert excinfo.value.returncode is None
    assert excinfo.value.command == "git-relay-no-such-program --version"

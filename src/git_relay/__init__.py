"""Git Relay: a polling continuous-deployment agent for a single git clone.

This package provides the command-line interface, the synchronization daemon,
and the building blocks it drives: an external command runner, repository
state inspection, and the pull-and-build deployer.
"""

from . import (
    cli,
    config,
    constants,
    daemon,
    deployer,
    errors,
    git_wrapper,
    repository,
    runner,
    service,
    timer,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "daemon",
    "deployer",
    "errors",
    "git_wrapper",
    "repository",
    "runner",
    "service",
    "timer",
]

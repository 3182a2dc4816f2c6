import logging
import subprocess
from pathlib import Path

from .constants import APP_NAME
from .errors import CommandFailed

logger = logging.getLogger(APP_NAME)


def run(program: str, args: list[str], cwd: Path | None = None) -> str:
    """Executes an external program and waits for it to exit.

    Output is captured in full, never streamed. There is no retry here; the
    caller owns the retry policy.

    Args:
        program (str): The executable name, resolved through PATH.
        args (list[str]): The ordered argument list.
        cwd (Path | None, optional):    The working directory. Defaults to the
                                        current process directory.

    Returns:
        str: The captured stdout with surrounding whitespace stripped.

    Raises:
        CommandFailed: If the program exits nonzero or cannot be started.
    """
    cmd = [program, *args]
    logger.debug(f"RUN {' '.join(cmd)} (cwd={cwd or '.'})")
    try:
        res = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        raise CommandFailed(
            program, args, e.returncode, (e.stderr or "").strip()
        ) from e
    except OSError as e:
        # Missing executable or working directory.
        raise CommandFailed(program, args, None, str(e)) from e
    return res.stdout.strip()

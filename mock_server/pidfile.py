"""Process identity record.

The server writes its PID next to the program at startup so the test harness
that launched it can find and kill it after the run.
"""

import os
import signal
import logging
from pathlib import Path

from .config import PID_FILE_NAME
from .errors import PidFileError

logger = logging.getLogger(__name__)


def pid_file_path(pid_dir: Path) -> Path:
    return Path(pid_dir) / PID_FILE_NAME


def write_pid_file(pid_dir: Path) -> Path:
    """Write the current PID as decimal text and return the file path."""
    path = pid_file_path(pid_dir)
    try:
        path.write_text(str(os.getpid()))
    except OSError as e:
        raise PidFileError(f"Could not write PID file {path}: {e}") from e
    logger.debug(f"Wrote PID {os.getpid()} to {path}")
    return path


def read_pid_file(pid_dir: Path) -> int:
    path = pid_file_path(pid_dir)
    try:
        content = path.read_text().strip()
    except OSError as e:
        raise PidFileError(f"Could not read PID file {path}: {e}") from e
    try:
        return int(content)
    except ValueError:
        raise PidFileError(f"PID file {path} does not contain a process id: {content!r}")


def terminate(pid_dir: Path, sig: int = signal.SIGTERM) -> int:
    """Send *sig* to the process recorded in the PID file.

    Returns the signalled PID. The PID file is left in place.
    """
    pid = read_pid_file(pid_dir)
    try:
        os.kill(pid, sig)
    except ProcessLookupError:
        raise PidFileError(f"No running process with PID {pid}")
    except PermissionError as e:
        raise PidFileError(f"Not allowed to signal PID {pid}: {e}") from e
    logger.info(f"Sent signal {sig} to mock server PID:{pid}")
    return pid

"""Stop a running mock server through its PID file.

Usage:
    mock-server-stop [PID_DIR]
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from .config import PID_DIR
from .errors import PidFileError
from .pidfile import terminate

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mock-server-stop",
        description="Send SIGTERM to the mock server recorded in mock_server_pid.txt.",
    )
    parser.add_argument(
        "pid_dir", nargs="?", type=Path, default=PID_DIR,
        help=f"Directory holding the PID file (default: {PID_DIR})",
    )
    args = parser.parse_args(argv)

    try:
        pid = terminate(args.pid_dir)
    except PidFileError as e:
        logger.error(str(e))
        sys.exit(1)
    logger.info(f"Stopped mock server PID:{pid}")


if __name__ == "__main__":
    main()

import os
import logging
from pathlib import Path

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("mock_server")

# Bind address shared by the plain and TLS listeners
HOST = os.environ.get("MOCK_SERVER_HOST", "0.0.0.0")

# PID file lives next to the program unless overridden
PID_FILE_NAME = "mock_server_pid.txt"
PID_DIR = Path(os.environ.get("MOCK_SERVER_PID_DIR", str(Path(__file__).resolve().parent)))

# Echo endpoint
ECHO_PATH = "/echo"
MAX_ECHO_BODY_BYTES = 100 * 1024  # 100 KB

# Framing headers recomputed for the echoed body instead of mirrored.
# Everything else, connection and host included, is copied back as sent.
ECHO_SKIP_HEADERS = frozenset({b"content-length", b"transfer-encoding"})

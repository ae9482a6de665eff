import json
from pathlib import Path
from typing import ItemsView, Iterator

from pydantic import BaseModel, ConfigDict, Field, RootModel, StrictStr, ValidationError, field_validator

from .config import ECHO_PATH, HOST, LOG_LEVEL, PID_DIR
from .errors import ConfigError


class RouteTable(RootModel[dict[StrictStr, StrictStr]]):
    """Immutable mapping of request path -> literal GET response body."""

    model_config = ConfigDict(frozen=True)

    @field_validator("root")
    @classmethod
    def _check_paths(cls, routes: dict[str, str]) -> dict[str, str]:
        for path in routes:
            if not path.startswith("/"):
                raise ValueError(f"route path must start with '/': {path!r}")
            if path == ECHO_PATH:
                raise ValueError(f"{ECHO_PATH} is reserved for the echo endpoint")
        return routes

    @classmethod
    def from_file(cls, path: Path) -> "RouteTable":
        """Load and validate a route table from a JSON document."""
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Could not read route config {path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in route config {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Route config {path} must be a JSON object, got {type(data).__name__}")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Malformed route config {path}: {e}") from e

    def __iter__(self) -> Iterator[str]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def items(self) -> ItemsView[str, str]:
        return self.root.items()


class ServerSettings(BaseModel):
    """Everything the listeners need, built once at startup."""

    model_config = ConfigDict(frozen=True)

    config_path: Path
    tls_key_path: Path
    tls_cert_path: Path
    plain_port: int = Field(ge=0, le=65535)
    tls_port: int = Field(ge=0, le=65535)
    host: str = HOST
    pid_dir: Path = PID_DIR
    log_level: str = LOG_LEVEL

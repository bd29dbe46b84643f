"""Loading and validation of the JSON mock configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from mocker.errors import ConfigError

DEFAULT_CONFIG_PATH = "./example.json"


class ResponseSpec(BaseModel):
    status: int = Field(ge=100, le=599)
    body: Any


class RouteSpec(BaseModel):
    """One configured route: method + path template -> status + body."""

    method: str
    path: str
    response: ResponseSpec

    @field_validator("method")
    @classmethod
    def _method_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("method must not be empty")
        return value

    @field_validator("path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value


class MockConfig(BaseModel):
    port: str
    routes: list[RouteSpec] = Field(default_factory=list)

    @field_validator("port")
    @classmethod
    def _port_in_range(cls, value: str) -> str:
        value = value.strip()
        if not value.isdigit() or not 0 < int(value) < 65536:
            raise ValueError("port must be a number between 1 and 65535")
        return value

    @property
    def port_number(self) -> int:
        return int(self.port)


def parse_config(data: str | bytes, *, source: str = "<config>") -> MockConfig:
    """Validate raw JSON *data* into a :class:`MockConfig`."""
    try:
        return MockConfig.model_validate_json(data)
    except ValidationError as exc:
        msg = f"Invalid configuration in {source}:\n{exc}"
        raise ConfigError(msg) from exc


def load_config(path: str | Path) -> MockConfig:
    """Read and validate the configuration file at *path*.

    Raises :class:`ConfigError` when the file cannot be read or does not
    describe a valid configuration.
    """
    file = Path(path)
    try:
        data = file.read_bytes()
    except OSError as exc:
        msg = f"Cannot read configuration file {str(file)!r}: {exc.strerror or exc}"
        raise ConfigError(msg) from exc
    return parse_config(data, source=str(file))


# ------------------------------------------------------------------
# Built-in example
# ------------------------------------------------------------------

EXAMPLE_CONFIG = """\
{
  "port": "6969",
  "routes": [
    {
      "path": "/api/users",
      "method": "GET",
      "response": {
        "status": 200,
        "body": {
          "users": ["alice", "bob", "charlie"]
        }
      }
    },
    {
      "path": "/api/users",
      "method": "POST",
      "response": {
        "status": 201,
        "body": {
          "message": "User created successfully"
        }
      }
    },
    {
      "path": "/api/users/{id}",
      "method": "PATCH",
      "response": {
        "status": 200,
        "body": {
          "id": "{id}",
          "updated": true,
          "role": "admin"
        }
      }
    }
  ]
}
"""


def write_example(path: str | Path) -> Path:
    """Write :data:`EXAMPLE_CONFIG` to *path* and return it."""
    file = Path(path)
    file.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    return file

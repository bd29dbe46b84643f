"""Serve mocked JSON HTTP endpoints from a declarative configuration."""

__version__ = "1.0.0"

from mocker.app import MockServer
from mocker.config import MockConfig, RouteSpec, load_config
from mocker.dispatch import dispatch
from mocker.errors import ConfigError, SerializationError
from mocker.response import JSONResponse, Response
from mocker.routing import (
    CompiledRoute,
    Matched,
    MethodNotAllowed,
    NotFound,
    RouteTable,
    compile_routes,
    match,
)

__all__ = [
    "CompiledRoute",
    "ConfigError",
    "JSONResponse",
    "Matched",
    "MethodNotAllowed",
    "MockConfig",
    "MockServer",
    "NotFound",
    "Response",
    "RouteSpec",
    "RouteTable",
    "SerializationError",
    "compile_routes",
    "dispatch",
    "load_config",
    "match",
]

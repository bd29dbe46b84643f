"""Mocker ASGI application."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from mocker.config import DEFAULT_CONFIG_PATH, load_config
from mocker.dispatch import dispatch
from mocker.routing import Matched, RouteTable, compile_routes, match, match_segments, split_raw_path

if TYPE_CHECKING:
    from pathlib import Path

    from mocker._types import Receive, Scope, Send

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MOCKER_CONFIG"


class MockServer:
    """ASGI 3.0 application serving the routes of a :class:`RouteTable`.

    The table is never modified after construction, so a single instance
    serves any number of concurrent requests without locking.
    """

    __slots__ = ("table",)

    def __init__(self, table: RouteTable) -> None:
        self.table = table

    @classmethod
    def from_config(cls, path: str | Path) -> MockServer:
        """Load, validate and compile the configuration at *path*."""
        config = load_config(path)
        table = compile_routes(config.routes)
        for route in table:
            logger.info("%s %s set", route.method, route.path)
        return cls(table)

    # ------------------------------------------------------------------
    # ASGI interface
    # ------------------------------------------------------------------

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await _handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        method, path = scope["method"], scope["path"]
        raw_path = scope.get("raw_path")
        if raw_path:
            outcome = match_segments(self.table, method, split_raw_path(raw_path))
        else:
            outcome = match(self.table, method, path)
        if isinstance(outcome, Matched):
            logger.info("%s %s was called", method, outcome.route.path)
        else:
            logger.info("%s %s -> %s", method, path, type(outcome).__name__)

        await dispatch(outcome).send(send)


def create_app() -> MockServer:
    """Granian factory: build the app from the path in ``MOCKER_CONFIG``."""
    return MockServer.from_config(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))


async def _handle_lifespan(receive: Receive, send: Send) -> None:
    """Minimal lifespan responder; the route table is ready before startup."""
    while True:
        message = await receive()
        if message["type"] == "lifespan.startup":
            await send({"type": "lifespan.startup.complete"})
        elif message["type"] == "lifespan.shutdown":
            await send({"type": "lifespan.shutdown.complete"})
            return

import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from mocker.app import CONFIG_ENV_VAR
from mocker.routing import CompiledRoute

APP_FACTORY = "mocker.app:create_app"


def serve(
    config_path: str | Path,
    *,
    host: str = "0.0.0.0",
    port: int = 6969,
    workers: int = 1,
    log_level: str = "info",
    log_access: bool = False,
    routes: Iterable[CompiledRoute] = (),
    granian_kwargs: dict[str, Any] | None = None,
) -> None:
    """Start a Granian server for the mock configuration at *config_path*.

    Parameters
    ----------
    config_path:
        JSON configuration file.  Each Granian worker rebuilds its route
        table from this file through :func:`mocker.app.create_app`.
    routes:
        Routes compiled from *config_path*, listed in the startup banner.
    """
    from granian import Granian

    resolved = Path(config_path).resolve()
    os.environ[CONFIG_ENV_VAR] = str(resolved)

    banner = format_banner(resolved, routes, host=host, port=port, workers=workers, color=sys.stdout.isatty())
    print(banner, flush=True)

    kw: dict[str, Any] = granian_kwargs or {}
    server = Granian(
        target=APP_FACTORY,
        factory=True,
        address=host,
        port=port,
        interface="asgi",
        workers=workers,
        log_level=log_level,
        log_access=log_access,
        **kw,
    )
    server.serve()


# ------------------------------------------------------------------
# Startup banner
# ------------------------------------------------------------------

_RESET = "\033[0m"
_TITLE = "\033[1;36m"
_LABEL = "\033[32m"
_METHOD_COLORS = {
    "GET": "\033[34m",
    "POST": "\033[32m",
    "PUT": "\033[33m",
    "PATCH": "\033[33m",
    "DELETE": "\033[31m",
}


def format_banner(
    config_path: Path,
    routes: Iterable[CompiledRoute],
    *,
    host: str,
    port: int,
    workers: int,
    color: bool = False,
) -> str:
    """Render the startup summary: listener, config file and one line per route."""

    def paint(code: str, text: str) -> str:
        return f"{code}{text}{_RESET}" if color and code else text

    routes = list(routes)
    width = max((len(r.method) for r in routes), default=0)
    lines = [
        f"{paint(_TITLE, 'Mocker')}   server is up and running at port: {port}",
        "",
        f"{paint(_LABEL, 'server')}     Granian on http://{host}:{port} ({workers} worker{'s' if workers != 1 else ''})",
        f"{paint(_LABEL, 'config')}     {config_path}",
        f"{paint(_LABEL, 'routes')}     {len(routes)}",
    ]
    for route in routes:
        method = paint(_METHOD_COLORS.get(route.method, ""), route.method.ljust(width))
        lines.append(f"  {method}  {route.path} -> {route.status}")
    lines.append("")
    return "\n".join(lines)

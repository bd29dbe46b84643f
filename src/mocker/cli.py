"""Mocker command-line interface powered by Typer."""

from pathlib import Path
from typing import Annotated

import typer

from mocker import __version__
from mocker.config import DEFAULT_CONFIG_PATH, load_config, write_example
from mocker.errors import ConfigError
from mocker.routing import compile_routes

app = typer.Typer(name="mocker", add_completion=False)


@app.command()
def main(
    path: Annotated[Path, typer.Option("--path", help="Path of the JSON mock configuration.")] = Path(
        DEFAULT_CONFIG_PATH
    ),
    host: Annotated[str, typer.Option(help="Bind address.")] = "0.0.0.0",
    workers: Annotated[int, typer.Option(help="Number of worker processes.")] = 1,
    log_level: Annotated[str, typer.Option(help="Server log level.")] = "info",
    download: Annotated[
        Path | None,
        typer.Option("--download", help="Write an example configuration to this file and exit."),
    ] = None,
    version: Annotated[bool, typer.Option("--version", help="Print version info and exit.")] = False,
    update: Annotated[bool, typer.Option("--update", help="Update to the latest or a specific version.")] = False,
    download_version: Annotated[
        str,
        typer.Option("--download_version", "--download-version", help="Release tag to update to."),
    ] = "",
    uninstall: Annotated[bool, typer.Option("--uninstall", help="Uninstall mocker.")] = False,
) -> None:
    """Spin up a mock HTTP server from a JSON configuration."""
    if uninstall:
        from mocker.selfupdate import uninstall_mocker

        raise typer.Exit(uninstall_mocker())

    if update:
        from mocker.selfupdate import update_mocker

        raise typer.Exit(update_mocker(download_version))

    if version:
        typer.echo(f"Mocker v{__version__}")
        return

    if download is not None:
        _download_example(download)
        return

    _serve(path, host=host, workers=workers, log_level=log_level)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _download_example(target: Path) -> None:
    try:
        write_example(target)
    except OSError as exc:
        typer.echo(f"Error creating example file: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"Example configuration downloaded to: {target}")
    typer.echo(f"Run it with: mocker --path={target}")


def _serve(path: Path, *, host: str, workers: int, log_level: str) -> None:
    """Validate the configuration up front, then hand over to Granian."""
    from mocker._server import serve

    try:
        config = load_config(path)
        table = compile_routes(config.routes)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    serve(
        path,
        host=host,
        port=config.port_number,
        workers=workers,
        log_level=log_level,
        routes=table.routes,
    )

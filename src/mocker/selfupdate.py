"""Self-update and uninstall of a standalone Mocker executable.

Both flows first try the plain filesystem operation and report
:attr:`Outcome.PERMISSION_DENIED` when that is refused, so the interactive
drivers can offer a ``sudo`` retry.
"""

from __future__ import annotations

import enum
import logging
import platform
import shutil
import subprocess
import sys
from pathlib import Path

import httpx
import typer

from mocker.errors import SelfUpdateError

logger = logging.getLogger(__name__)

RELEASES_URL = "https://github.com/Yuddhaa/mocker/releases"
STAGED_NAME = "mocker_new"


class Outcome(enum.Enum):
    SUCCESS = "success"
    PERMISSION_DENIED = "permission_denied"
    FAILURE = "failure"


# ------------------------------------------------------------------
# Platform helpers
# ------------------------------------------------------------------


def is_windows() -> bool:
    return platform.system().lower() == "windows"


def asset_name(system: str | None = None, machine: str | None = None) -> str:
    """Return the release asset built for *system*/*machine*.

    Defaults to the running platform.
    """
    system = (system or platform.system()).lower()
    machine = (machine or platform.machine()).lower()
    if system == "darwin":
        return "mocker-macos" if machine in ("arm64", "aarch64") else "mocker-macos-amd"
    if system == "linux":
        return "mocker-linux"
    if system == "windows":
        return "mocker-windows.exe"
    msg = f"Unsupported platform: {system}/{machine}"
    raise SelfUpdateError(msg)


def release_url(version: str | None, asset: str, *, base: str = RELEASES_URL) -> str:
    """Download URL for *asset*; an empty version or ``"latest"`` picks the newest release."""
    if not version or version == "latest":
        return f"{base}/latest/download/{asset}"
    return f"{base}/download/{version}/{asset}"


def current_executable() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    return Path(sys.argv[0]).resolve()


def staged_path() -> Path:
    name = STAGED_NAME + (".exe" if is_windows() else "")
    return Path.cwd() / name


# ------------------------------------------------------------------
# Non-interactive operations
# ------------------------------------------------------------------


def download_release(url: str, dest: Path, *, client: httpx.Client | None = None) -> Path:
    """Stream the release at *url* into *dest* and mark it executable."""
    owns_client = client is None
    client = client or httpx.Client(follow_redirects=True, timeout=60.0)
    try:
        with client.stream("GET", url) as resp:
            if resp.status_code != 200:
                msg = f"Failed to download binary, HTTP {resp.status_code}"
                raise SelfUpdateError(msg)
            with dest.open("wb") as fh:
                for chunk in resp.iter_bytes():
                    fh.write(chunk)
    except httpx.HTTPError as exc:
        msg = f"Failed to download {url}: {exc}"
        raise SelfUpdateError(msg) from exc
    except OSError as exc:
        msg = f"Failed to write {dest}: {exc.strerror or exc}"
        raise SelfUpdateError(msg) from exc
    finally:
        if owns_client:
            client.close()

    try:
        dest.chmod(0o755)
    except OSError as exc:
        logger.warning("Could not set permissions on %s: %s", dest, exc)
    return dest


def fetch_and_replace_binary(
    version: str | None,
    *,
    executable: Path | None = None,
    staged: Path | None = None,
    client: httpx.Client | None = None,
) -> Outcome:
    """Download *version* and move it over the running executable.

    On Windows the download is left at *staged* since a running ``.exe``
    cannot be replaced.
    """
    executable = executable or current_executable()
    staged = staged or staged_path()
    try:
        download_release(release_url(version, asset_name()), staged, client=client)
    except SelfUpdateError as exc:
        logger.error("%s", exc)
        staged.unlink(missing_ok=True)
        return Outcome.FAILURE

    if is_windows():
        return Outcome.SUCCESS

    try:
        shutil.move(str(staged), str(executable))
    except PermissionError:
        return Outcome.PERMISSION_DENIED
    except OSError as exc:
        logger.error("Failed to replace binary: %s", exc)
        return Outcome.FAILURE
    return Outcome.SUCCESS


def remove_binary(*, executable: Path | None = None) -> Outcome:
    executable = executable or current_executable()
    try:
        executable.unlink()
    except PermissionError:
        return Outcome.PERMISSION_DENIED
    except OSError as exc:
        logger.error("Failed to uninstall: %s", exc)
        return Outcome.FAILURE
    return Outcome.SUCCESS


def run_elevated(*args: str) -> bool:
    """Run ``sudo <args>`` attached to the terminal; return whether it succeeded."""
    try:
        result = subprocess.run(["sudo", *args], check=False)
    except OSError as exc:
        logger.error("Could not run sudo: %s", exc)
        return False
    return result.returncode == 0


# ------------------------------------------------------------------
# Interactive drivers
# ------------------------------------------------------------------


def update_mocker(version: str | None) -> int:
    """Update the running executable, prompting for sudo when needed.

    Returns the process exit code.
    """
    if not version or version == "latest":
        typer.echo("Updating to the latest version...")
    else:
        typer.echo(f"Updating to version {version}...")

    executable = current_executable()
    staged = staged_path()
    outcome = fetch_and_replace_binary(version, executable=executable, staged=staged)

    if outcome is Outcome.FAILURE:
        typer.echo("Update failed.", err=True)
        return 1

    if outcome is Outcome.SUCCESS:
        if is_windows():
            typer.echo(f"Downloaded new version to {staged}")
            typer.echo("On Windows, please manually replace the old binary with the new one.")
        else:
            typer.echo("Successfully updated Mocker!")
        return 0

    typer.echo("Permission denied while trying to replace the binary.")
    typer.echo(f"Current location: {executable}")
    typer.echo(f"New binary:       {staged}")
    if not typer.confirm("Would you like Mocker to try replacing it using sudo?", default=False):
        typer.echo("Skipped automatic sudo replacement.")
        typer.echo("You can manually run:")
        typer.echo(f"  sudo mv {staged} {executable}")
        return 0

    typer.echo("Attempting to elevate privileges with sudo...")
    if not run_elevated("mv", str(staged), str(executable)):
        staged.unlink(missing_ok=True)
        typer.echo("Failed to update even with sudo. Please try manually running:", err=True)
        typer.echo(f"  sudo mv {staged} {executable}", err=True)
        return 1

    typer.echo("Successfully updated Mocker!")
    return 0


def uninstall_mocker() -> int:
    """Remove the running executable after confirmation.

    Returns the process exit code.
    """
    executable = current_executable()
    typer.echo(f"This will remove Mocker from your system.\nLocation: {executable}")
    if not typer.confirm("Are you sure you want to uninstall Mocker?", default=False):
        typer.echo("Uninstall cancelled.")
        return 0

    if is_windows():
        typer.echo("On Windows, an application cannot delete itself while running.")
        typer.echo("Please manually delete this file:")
        typer.echo(str(executable))
        return 0

    outcome = remove_binary(executable=executable)
    if outcome is Outcome.SUCCESS:
        typer.echo("Successfully uninstalled Mocker.")
        return 0
    if outcome is Outcome.FAILURE:
        return 1

    typer.echo("Permission denied while trying to uninstall Mocker.")
    typer.echo(f"Binary location: {executable}")
    if not typer.confirm("Would you like Mocker to try removing it using sudo?", default=False):
        typer.echo("Skipped automatic sudo removal.")
        typer.echo("You can manually run:")
        typer.echo(f"  sudo rm {executable}")
        return 0

    typer.echo("Attempting to elevate privileges with sudo...")
    if not run_elevated("rm", str(executable)):
        typer.echo("Failed to uninstall with sudo. You can try manually running:", err=True)
        typer.echo(f"  sudo rm {executable}", err=True)
        return 1

    typer.echo("Successfully uninstalled Mocker.")
    return 0

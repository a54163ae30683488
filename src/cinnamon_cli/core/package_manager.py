"""Install a generated project's dependencies with an external package manager."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from rich.console import Console

from .config import PACKAGE_MANAGERS

logger = logging.getLogger(__name__)


class PackageManagerError(Exception):
    """The package manager is missing or exited with an error."""

    def __init__(self, message: str, returncode: int | None = None, output: str = ""):
        self.returncode = returncode
        self.output = output
        super().__init__(message)


def check_tool(tool: str) -> bool:
    """Check if a tool is installed."""
    return shutil.which(tool) is not None


def detect_package_manager(preferred: str | None = None) -> str | None:
    """Return ``preferred`` when installed, else the first installed manager."""
    if preferred and check_tool(preferred):
        return preferred
    for candidate in PACKAGE_MANAGERS:
        if check_tool(candidate):
            if preferred:
                logger.warning("%s not found, falling back to %s", preferred, candidate)
            return candidate
    return None


def install_dependencies(project_path: Path, manager: str, console: Console | None = None) -> None:
    """Run ``<manager> install`` inside ``project_path`` behind a spinner."""
    executable = shutil.which(manager)
    if executable is None:
        raise PackageManagerError(f"{manager} is not installed")

    cmd = [executable, "install"]
    logger.debug("Running %s in %s", " ".join(cmd), project_path)
    console = console or Console()
    with console.status(f"[cyan]Installing dependencies with {manager}...[/cyan]", spinner="dots"):
        try:
            result = subprocess.run(cmd, cwd=project_path, capture_output=True, text=True)
        except OSError as exc:
            raise PackageManagerError(f"Could not run {manager}: {exc}") from exc

    if result.returncode != 0:
        output = (result.stderr or result.stdout or "").strip()
        raise PackageManagerError(
            f"{manager} install exited with code {result.returncode}",
            returncode=result.returncode,
            output=output,
        )


__all__ = [
    "PackageManagerError",
    "check_tool",
    "detect_package_manager",
    "install_dependencies",
]

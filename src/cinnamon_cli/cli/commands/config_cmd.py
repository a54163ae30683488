"""``cinnamon-create config``: show or change user defaults."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cinnamon_cli.core.config import (
    PACKAGE_MANAGERS,
    ConfigError,
    load_config,
    save_config,
)

console = Console()


def config(
    template: str = typer.Option(None, "--template", help="Default template archive or directory ('bundled' to reset)"),
    package_manager: str = typer.Option(None, "--package-manager", help=f"Default package manager: {', '.join(PACKAGE_MANAGERS)}"),
    install: Optional[bool] = typer.Option(None, "--install/--no-install", help="Install dependencies after creating a project"),
) -> None:
    """Display the effective configuration, updating it when options are given."""
    try:
        current = load_config()
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    if template is not None or package_manager is not None or install is not None:
        if package_manager is not None:
            if package_manager.lower() not in PACKAGE_MANAGERS:
                console.print(
                    f"[red]Error:[/red] Invalid package manager '{package_manager}'. "
                    f"Choose from: {', '.join(PACKAGE_MANAGERS)}"
                )
                raise typer.Exit(1)
            current.package_manager = package_manager.lower()
        if template is not None:
            current.template = None if template == "bundled" else template
        if install is not None:
            current.install = install
        path = save_config(current)
        console.print(f"[green]✓[/green] Saved {path}")

    table = Table(title="cinnamon-create configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("config file", str(current.config_file))
    table.add_row("template", current.template or "bundled")
    table.add_row("package_manager", current.package_manager)
    table.add_row("install", "yes" if current.install else "no")
    table.add_row("non_interactive", "yes" if current.non_interactive else "no")
    console.print(table)


__all__ = ["config"]

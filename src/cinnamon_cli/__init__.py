"""
cinnamon-create - scaffold Cinnamon projects from a template.

Usage:
    cinnamon-create init <project-name>
    cinnamon-create init .
    cinnamon-create features
    cinnamon-create verify <template-dir>
"""

import sys

import typer
from rich.align import Align
from rich.console import Console
from rich.text import Text
from typer.core import TyperGroup

from cinnamon_cli.cli.commands import config, features, register_init_command, verify
from cinnamon_cli.core.log import configure_logging

__version__ = "0.4.0"

BANNER = r"""
   ___  _
  / __\(_) _ __   _ __    __ _  _ __ ___    ___   _ __
 / /   | || '_ \ | '_ \  / _` || '_ ` _ \  / _ \ | '_ \
/ /___ | || | | || | | || (_| || | | | | || (_) || | | |
\____/ |_||_| |_||_| |_| \__,_||_| |_| |_| \___/ |_| |_|
"""

TAGLINE = "cinnamon-create - new Cinnamon projects, only the features you need"

console = Console()


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="cinnamon-create",
    help="Create Cinnamon projects with the features you choose",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def show_banner():
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip("\n").split("\n")
    colors = ["bright_red", "red", "yellow", "bright_yellow", "white"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        styled_banner.append(line + "\n", style=colors[i % len(colors)])

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"cinnamon-create {__version__}")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show debug logging on stderr"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
):
    """Show banner when no subcommand is provided."""
    configure_logging(debug)
    if ctx.invoked_subcommand is None and "--help" not in sys.argv and "-h" not in sys.argv:
        show_banner()
        console.print(Align.center("[dim]Run 'cinnamon-create --help' for usage information[/dim]"))
        console.print()


register_init_command(app, console=console, show_banner=show_banner)
app.command()(features)
app.command()(verify)
app.command()(config)


def main():
    app()


if __name__ == "__main__":
    main()

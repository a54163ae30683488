"""``cinnamon-create init``: create a project from a template."""

from __future__ import annotations

import logging
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Callable, NoReturn

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel

from cinnamon_cli.cli.prompts import ask_project_name, make_feature_selector
from cinnamon_cli.cli.ui import StepTracker, select_with_arrows
from cinnamon_cli.core.config import (
    PACKAGE_MANAGER_ENV_VAR,
    PACKAGE_MANAGERS,
    ConfigError,
    CreateConfig,
    load_config,
)
from cinnamon_cli.core.naming import to_kebab_case, validate_project_name
from cinnamon_cli.core.package_manager import (
    PackageManagerError,
    detect_package_manager,
    install_dependencies,
)
from cinnamon_cli.features import (
    FeatureForest,
    FeatureMetadata,
    FeatureTreeError,
    apply_feature_selection,
    ask_features,
    create_cinnamon_feature_forest,
    enable_everything,
    parse_feature_list,
)
from cinnamon_cli.template import (
    TemplateError,
    extract_template,
    publish_project,
    project_variables,
    resolve_template_source,
    rewrite_tree,
)

logger = logging.getLogger(__name__)

PACKAGE_MANAGER_CHOICES = {
    "npm": "npm, bundled with Node.js",
    "yarn": "Yarn",
    "pnpm": "pnpm, content-addressed store",
}


def _is_non_interactive_mode(flag: bool, config: CreateConfig) -> bool:
    if flag or config.non_interactive:
        return True
    return not sys.stdin.isatty()


def _select_features(
    forest: FeatureForest,
    features: str | None,
    all_features: bool,
    non_interactive: bool,
    console: Console,
) -> list[FeatureMetadata]:
    if all_features:
        return enable_everything(forest)
    if features is not None:
        return apply_feature_selection(forest, parse_feature_list(features))
    if non_interactive:
        return []
    return ask_features(forest, make_feature_selector(console))


def _fail(console: Console, message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def register_init_command(
    app: typer.Typer,
    *,
    console: Console,
    show_banner: Callable[[], None],
) -> None:
    """Attach ``init`` to ``app`` using the given console and banner."""

    @app.command()
    def init(
        project_name: str = typer.Argument(None, help="Name of the project directory to create (use '.' for the current directory)"),
        template: str = typer.Option(None, "--template", "-t", help="Template zip archive or directory (defaults to the bundled template)"),
        features: str = typer.Option(None, "--features", "-f", help="Comma-separated feature identifiers to enable, skipping the prompts"),
        all_features: bool = typer.Option(False, "--all-features", help="Enable every feature"),
        no_install: bool = typer.Option(False, "--no-install", help="Do not install dependencies"),
        package_manager: str = typer.Option(None, "--package-manager", "-p", help=f"Package manager to use: {', '.join(PACKAGE_MANAGERS)}"),
        here: bool = typer.Option(False, "--here", help="Initialize the project in the current directory"),
        force: bool = typer.Option(False, "--force", help="Merge into a non-empty directory without asking"),
        non_interactive: bool = typer.Option(False, "--non-interactive", "--yes", help="Never prompt; use flags, configuration and defaults"),
    ) -> None:
        """
        Create a new Cinnamon project from a template.

        Examples:
            cinnamon-create init my-api
            cinnamon-create init my-api --features database,authentication
            cinnamon-create init . --all-features --no-install
        """
        show_banner()

        try:
            config = load_config()
        except ConfigError as exc:
            _fail(console, str(exc))

        non_interactive = _is_non_interactive_mode(non_interactive, config)

        if features is not None and all_features:
            _fail(console, "Use either --features or --all-features, not both")
        if project_name == ".":
            here = True
            project_name = None
        if here and project_name:
            _fail(console, "Cannot specify both project name and --here flag")

        if here:
            project_path = Path.cwd()
            display_name = project_path.name
            existing_items = list(project_path.iterdir())
            if existing_items:
                console.print(f"[yellow]Warning:[/yellow] Current directory is not empty ({len(existing_items)} items)")
                if force:
                    console.print("[cyan]--force supplied: merging template files into the current directory[/cyan]")
                elif non_interactive:
                    _fail(console, "Current directory is not empty; pass --force to merge template files into it")
                elif not typer.confirm("Template files may overwrite existing files. Continue?"):
                    console.print("[yellow]Operation cancelled[/yellow]")
                    raise typer.Exit(0)
        else:
            if not project_name:
                if non_interactive:
                    _fail(console, "A project name is required in non-interactive mode")
                project_name = ask_project_name(console)
            problem = validate_project_name(project_name)
            if problem:
                _fail(console, problem)
            display_name = project_name
            project_path = Path(to_kebab_case(project_name)).resolve()
            if project_path.exists():
                console.print()
                console.print(Panel(
                    f"Directory '[cyan]{project_path.name}[/cyan]' already exists\n"
                    "Please choose a different project name or remove the existing directory.",
                    title="[red]Directory Conflict[/red]",
                    border_style="red",
                    padding=(1, 2),
                ))
                raise typer.Exit(1)

        manager_choice = (package_manager or config.package_manager).lower()
        if manager_choice not in PACKAGE_MANAGERS:
            message = f"Invalid package manager '{manager_choice}'. Choose from: {', '.join(PACKAGE_MANAGERS)}"
            if package_manager is None:
                message += (
                    f"\nIt comes from {config.config_file} or ${PACKAGE_MANAGER_ENV_VAR}."
                    "\nPass --package-manager, or save a new default with:"
                    "\n  cinnamon-create config --package-manager npm"
                )
            _fail(console, message)
        should_install = config.install and not no_install
        if package_manager is None and should_install and not non_interactive:
            manager_choice = select_with_arrows(
                PACKAGE_MANAGER_CHOICES,
                "Choose a package manager (or press Enter)",
                manager_choice,
                console=console,
            )

        try:
            source = resolve_template_source(template, config.template)
        except TemplateError as exc:
            _fail(console, str(exc))

        console.print(Panel(
            "\n".join([
                "[cyan]Cinnamon Project Setup[/cyan]",
                "",
                f"{'Project':<15} [green]{display_name}[/green]",
                f"{'Target Path':<15} [dim]{project_path}[/dim]",
                f"{'Template':<15} [dim]{source}[/dim]",
            ]),
            border_style="cyan",
            padding=(1, 2),
        ))

        forest = create_cinnamon_feature_forest()
        try:
            selected = _select_features(forest, features, all_features, non_interactive, console)
        except FeatureTreeError as exc:
            _fail(console, str(exc))

        feature_display = ", ".join(feature.name for feature in selected) or "none"
        console.print(f"[cyan]Selected features:[/cyan] {feature_display}")
        logger.debug("Enabled features: %s", [feature.id for feature in selected])

        tracker = StepTracker("Create Cinnamon Project")
        tracker.add("select", "Select features")
        tracker.complete("select", f"{len(selected)} enabled")
        tracker.add("extract", "Extract template")
        tracker.add("rewrite", "Tailor template to features")
        tracker.add("install", "Install dependencies")
        tracker.add("final", "Finalize")

        created = not project_path.exists()
        with Live(tracker.render(), console=console, refresh_per_second=8, transient=True) as live:
            tracker.attach_refresh(lambda: live.update(tracker.render()))
            try:
                # tailored in staging; files already in the target are never rewritten
                with tempfile.TemporaryDirectory(prefix="cinnamon-") as staging_dir:
                    staging = Path(staging_dir) / "project"
                    tracker.start("extract")
                    extract_template(source, staging)
                    tracker.complete("extract", str(source))

                    tracker.start("rewrite")
                    report = rewrite_tree(staging, forest, project_variables(display_name))
                    tracker.complete("rewrite", f"{len(report.rewritten)} rewritten, {len(report.removed)} removed")

                    publish_project(staging, project_path)
            except (TemplateError, OSError) as exc:
                tracker.error("final", str(exc))
                console.print(Panel(f"Initialization failed: {exc}", title="Failure", border_style="red"))
                if created and project_path.exists():
                    shutil.rmtree(project_path)
                raise typer.Exit(1)

        install_problem: str | None = None
        if not should_install:
            tracker.skip("install", "--no-install")
        else:
            manager = detect_package_manager(manager_choice)
            if manager is None:
                tracker.skip("install", "no package manager found")
                install_problem = f"Install {manager_choice} and run '{manager_choice} install' in the project"
            else:
                tracker.start("install", manager)
                try:
                    install_dependencies(project_path, manager, console)
                except PackageManagerError as exc:
                    tracker.error("install", str(exc))
                    install_problem = exc.output or str(exc)
                else:
                    tracker.complete("install", manager)
        tracker.complete("final", "project ready")

        console.print(tracker.render())
        console.print("\n[bold green]Project ready.[/bold green]")

        if install_problem:
            console.print()
            console.print(Panel(install_problem, title="[yellow]Dependencies Not Installed[/yellow]", border_style="yellow"))

        steps_lines = []
        if here:
            steps_lines.append("1. You're already in the project directory!")
        else:
            steps_lines.append(f"1. Go to the project folder: [cyan]cd {project_path.name}[/cyan]")
        if not should_install or install_problem:
            steps_lines.append(f"2. Install dependencies: [cyan]{manager_choice} install[/cyan]")
        steps_lines.append(f"{len(steps_lines) + 1}. Build and start: [cyan]{manager_choice} run build && {manager_choice} start[/cyan]")
        console.print()
        console.print(Panel("\n".join(steps_lines), title="Next Steps", border_style="cyan", padding=(1, 2)))


__all__ = ["register_init_command"]

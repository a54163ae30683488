"""``cinnamon-create verify``: check a template before publishing it."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cinnamon_cli.features import create_cinnamon_feature_forest
from cinnamon_cli.template import build_manifest, diff_manifests, lint_tree, read_manifest, write_manifest

console = Console()

DEFAULT_MANIFEST = ".cinnamon-manifest.json"


def verify(
    template: Path = typer.Argument(..., exists=True, file_okay=False, dir_okay=True, help="Template directory to check"),
    manifest: Path = typer.Option(None, "--manifest", "-m", help=f"Manifest file (default: <template>/{DEFAULT_MANIFEST})"),
    write: bool = typer.Option(False, "--write", help="Record the current file hashes in the manifest"),
) -> None:
    """Validate conditional markup and compare file hashes with the manifest."""
    forest = create_cinnamon_feature_forest()
    errors, usage = lint_tree(template, forest)
    manifest_path = manifest or template / DEFAULT_MANIFEST

    current = build_manifest(template)
    template_root = template.resolve()
    resolved_manifest = manifest_path.resolve()
    if resolved_manifest.is_relative_to(template_root):
        current.pop(resolved_manifest.relative_to(template_root).as_posix(), None)

    table = Table(title="Template Files", show_lines=False)
    table.add_column("File", style="bold")
    table.add_column("Features", style="cyan")
    table.add_column("SHA256", style="dim")
    for relative, digest in current.items():
        table.add_row(relative, ", ".join(sorted(usage.get(relative, ()))), digest[:12])
    console.print(table)

    if errors:
        console.print(Panel(
            "\n".join(str(error) for error in errors),
            title=f"[red]{len(errors)} markup error(s)[/red]",
            border_style="red",
        ))
        raise typer.Exit(1)

    if write:
        write_manifest(current, manifest_path)
        console.print(f"[green]✓[/green] Manifest written to {manifest_path}")
        return

    if not manifest_path.exists():
        console.print(f"[yellow]No manifest at {manifest_path}; run with --write to create one[/yellow]")
        return

    try:
        recorded = read_manifest(manifest_path)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    diff = diff_manifests(recorded, current)
    if diff.clean:
        console.print("[green]✓[/green] Template matches its manifest")
        return

    lines = [f"[green]+ {path}[/green]" for path in diff.added]
    lines += [f"[red]- {path}[/red]" for path in diff.removed]
    lines += [f"[yellow]~ {path}[/yellow]" for path in diff.changed]
    console.print(Panel("\n".join(lines), title="[yellow]Template Drift[/yellow]", border_style="yellow"))
    raise typer.Exit(1)


__all__ = ["DEFAULT_MANIFEST", "verify"]

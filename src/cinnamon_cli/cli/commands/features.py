"""``cinnamon-create features``: show the feature catalog."""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.tree import Tree

from cinnamon_cli.features import (
    FeatureForest,
    FeatureTreeError,
    apply_feature_selection,
    create_cinnamon_feature_forest,
    parse_feature_list,
)

console = Console()


def build_feature_tree(forest: FeatureForest, title: str = "Cinnamon features") -> Tree:
    """Render a forest; features that would not be generated are dimmed."""
    reachable = {feature.id for feature in forest.get_all_enabled()}
    tree = Tree(f"[cyan]{title}[/cyan]", guide_style="grey50")
    branches: list[Tree] = [tree]
    for level, feature, enabled in forest.describe():
        del branches[level + 1:]
        if feature.id in reachable:
            label = f"[green]●[/green] [white]{feature.name}[/white] [cyan]{feature.id}[/cyan]"
        elif enabled:
            # stored flag set, but a parent is off
            label = f"[yellow]○[/yellow] [bright_black]{feature.name} {feature.id} (parent disabled)[/bright_black]"
        else:
            label = f"[bright_black]○ {feature.name} {feature.id}[/bright_black]"
        if feature.description:
            label += f" [dim]- {feature.description}[/dim]"
        branches.append(branches[level].add(label))
    return tree


def features(
    enable: str = typer.Option(None, "--enable", "-e", help="Comma-separated features to mark as enabled"),
    as_json: bool = typer.Option(False, "--json", help="Print the catalog as JSON"),
) -> None:
    """List the optional features a project can be created with."""
    forest = create_cinnamon_feature_forest()
    if enable:
        try:
            apply_feature_selection(forest, parse_feature_list(enable))
        except FeatureTreeError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1)

    if as_json:
        payload = [
            {
                "id": feature.id,
                "name": feature.name,
                "description": feature.description,
                "level": level,
                "parent": getattr(forest.get_parent_of(feature), "id", None),
                "enabled": enabled,
            }
            for level, feature, enabled in forest.describe()
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print(build_feature_tree(forest))


__all__ = ["build_feature_tree", "features"]

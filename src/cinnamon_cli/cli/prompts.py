"""Interactive questions asked by ``cinnamon-create init``."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console

from cinnamon_cli.core.naming import to_kebab_case, validate_project_name
from cinnamon_cli.features.selection import SelectFeatures
from cinnamon_cli.features.tree import FeatureMetadata

from .ui import ask_text, multi_select_with_arrows

LEVEL_PROMPTS = (
    "Choose the features to include:",
    "These features build on your choices, pick any:",
)


def make_feature_selector(console: Console | None = None) -> SelectFeatures:
    """Adapt the arrow-key multi select to ``ask_features``."""

    def select(
        options: Sequence[FeatureMetadata],
        preselected: Sequence[FeatureMetadata],
        level: int,
    ) -> list[FeatureMetadata]:
        by_id = {str(feature.id): feature for feature in options}
        labels = {str(feature.id): f"{feature.name} - {feature.description}" for feature in options}
        prompt = LEVEL_PROMPTS[min(level, len(LEVEL_PROMPTS) - 1)]
        chosen = multi_select_with_arrows(
            labels,
            prompt,
            default_keys=[str(feature.id) for feature in preselected],
            console=console,
        )
        return [by_id[key] for key in chosen]

    return select


def ask_project_name(console: Console | None = None) -> str:
    return ask_text(
        "Project name",
        validate=validate_project_name,
        normalise=to_kebab_case,
        console=console,
    )


__all__ = ["LEVEL_PROMPTS", "ask_project_name", "make_feature_selector"]

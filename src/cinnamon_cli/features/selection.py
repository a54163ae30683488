"""Drive feature selection over a forest, one level at a time."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from .exceptions import FeatureDependencyError, FeatureTreeError, UnknownFeatureError
from .tree import FeatureForest, FeatureMetadata, FeatureRef, feature_id_of

logger = logging.getLogger(__name__)

# (options, preselected, level) -> chosen options
SelectFeatures = Callable[
    [Sequence[FeatureMetadata], Sequence[FeatureMetadata], int],
    Iterable[FeatureMetadata],
]


def ask_features(forest: FeatureForest, select: SelectFeatures) -> list[FeatureMetadata]:
    """Ask for features level by level until a level has nothing to offer.

    Every level is asked once. Options already enabled (for instance by an
    earlier run of the same forest) are passed as preselected; whatever the
    user leaves unticked on a level is disabled.
    """
    level = 0
    while True:
        options = forest.get_features_for_level(level)
        if not options:
            break

        preselected = [feature for feature in options if forest.get(feature)]
        chosen = list(select(options, preselected, level))
        option_ids = {feature.id for feature in options}
        stray = [feature.id for feature in chosen if feature.id not in option_ids]
        if stray:
            raise FeatureTreeError(f"Selection for level {level} contains features not offered: {stray}")

        logger.debug("Level %d: selected %s", level, [feature.id for feature in chosen])
        forest.disable_all(options)
        forest.enable_all(chosen)
        level += 1

    return forest.get_all_enabled()


def apply_feature_selection(forest: FeatureForest, features: Iterable[FeatureRef]) -> list[FeatureMetadata]:
    """Enable ``features`` without prompting.

    Every requested feature's parent must be requested too, otherwise the
    feature would be enabled but unreachable. Nothing is changed when the
    request is rejected.
    """
    requested = [feature_id_of(feature) for feature in features]
    requested_ids = set(requested)
    for feature_id in requested:
        if feature_id not in forest:
            raise UnknownFeatureError(feature_id)
        parent = forest.get_parent_of(feature_id)
        if parent is not None and parent.id not in requested_ids:
            raise FeatureDependencyError(feature_id, parent.id)

    forest.enable_all(requested)
    return forest.get_all_enabled()


def enable_everything(forest: FeatureForest) -> list[FeatureMetadata]:
    forest.enable_all(list(forest))
    return forest.get_all_enabled()


__all__ = [
    "SelectFeatures",
    "ask_features",
    "apply_feature_selection",
    "enable_everything",
]

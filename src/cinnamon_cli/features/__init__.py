"""Feature forest and the Cinnamon feature catalog."""

from .catalog import (
    CinnamonProjectFeature,
    FEATURES_BY_ID,
    create_cinnamon_feature_forest,
    get_feature,
    parse_feature_list,
)
from .exceptions import (
    DuplicateFeatureError,
    FeatureDependencyError,
    FeatureTreeError,
    UnknownFeatureError,
)
from .selection import apply_feature_selection, ask_features, enable_everything
from .tree import FeatureForest, FeatureMetadata, FeatureNode, forest, node

__all__ = [
    "CinnamonProjectFeature",
    "DuplicateFeatureError",
    "FEATURES_BY_ID",
    "FeatureDependencyError",
    "FeatureForest",
    "FeatureMetadata",
    "FeatureNode",
    "FeatureTreeError",
    "UnknownFeatureError",
    "apply_feature_selection",
    "ask_features",
    "create_cinnamon_feature_forest",
    "enable_everything",
    "forest",
    "get_feature",
    "node",
    "parse_feature_list",
]

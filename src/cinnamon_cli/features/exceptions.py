"""Exception hierarchy for feature forests."""

from __future__ import annotations

from typing import Hashable


class FeatureTreeError(Exception):
    """Base exception for feature forest errors."""
    pass


class DuplicateFeatureError(FeatureTreeError):
    """A feature identifier appears more than once in a forest.

    Raised while a forest is being constructed, so an invalid topology never
    produces a queryable forest.
    """

    def __init__(self, feature_id: Hashable, where: str = "forest"):
        self.feature_id = feature_id
        self.where = where
        super().__init__(f"Duplicate feature identifier {feature_id!r} in {where}")


class UnknownFeatureError(FeatureTreeError, KeyError):
    """A feature identifier used as a mutation target is not in the forest."""

    def __init__(self, feature_id: Hashable):
        self.feature_id = feature_id
        super().__init__(f"Unknown feature identifier {feature_id!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class FeatureDependencyError(FeatureTreeError):
    """A feature was requested without the parent it depends on."""

    def __init__(self, feature_id: Hashable, parent_id: Hashable):
        self.feature_id = feature_id
        self.parent_id = parent_id
        super().__init__(
            f"Feature {feature_id!r} requires {parent_id!r} to be enabled as well"
        )


__all__ = [
    "FeatureTreeError",
    "DuplicateFeatureError",
    "UnknownFeatureError",
    "FeatureDependencyError",
]

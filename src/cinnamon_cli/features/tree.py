"""Generic feature dependency forest.

A forest is an ordered list of root ``FeatureNode`` trees. A feature may only
be offered once its parent is enabled; enablement gates descendants when the
forest is queried, never by rewriting the descendants' stored flags. Turning
a parent off and on again therefore brings back whatever was enabled below it.

Feature identifiers are unique across the whole forest, not just among
siblings. Construction validates this eagerly and raises before the forest
becomes usable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Hashable, Iterable, Iterator, Optional, Sequence, Union

from .exceptions import DuplicateFeatureError, UnknownFeatureError

FeatureId = Hashable


@dataclass(frozen=True)
class FeatureMetadata:
    """Immutable description of a single optional feature."""

    id: FeatureId
    name: str
    description: str = ""


FeatureRef = Union[FeatureMetadata, FeatureId]


def feature_id_of(feature: FeatureRef) -> FeatureId:
    if isinstance(feature, FeatureMetadata):
        return feature.id
    return feature


class FeatureNode:
    """One feature, its enabled flag and the subtree it owns."""

    def __init__(
        self,
        metadata: FeatureMetadata,
        children: Optional[Sequence["FeatureNode"]] = None,
        enabled: bool = False,
    ):
        self.metadata = metadata
        self.children: tuple[FeatureNode, ...] = tuple(children or ())
        self.enabled = enabled

    @property
    def id(self) -> FeatureId:
        return self.metadata.id

    def check_children(self, ancestor_ids: frozenset) -> None:
        """Validate this node's subtree against the ids of its ancestors.

        ``ancestor_ids`` must include this node's own id. Raises
        ``DuplicateFeatureError`` when two direct children share an id or a
        child reuses an ancestor's id, then recurses into every child.
        """
        seen: set = set()
        for child in self.children:
            if child.id in seen:
                raise DuplicateFeatureError(child.id, where=f"children of {self.id!r}")
            if child.id in ancestor_ids:
                raise DuplicateFeatureError(child.id, where=f"ancestors of {child.id!r}")
            seen.add(child.id)

        for child in self.children:
            child.check_children(ancestor_ids | {child.id})

    def __repr__(self) -> str:
        state = "on" if self.enabled else "off"
        return f"FeatureNode({self.id!r}, {state}, children={len(self.children)})"


class FeatureForest:
    """Ordered collection of feature trees with level-based queries."""

    def __init__(self, roots: Sequence[FeatureNode]):
        roots = tuple(roots)
        root_ids: set = set()
        for root in roots:
            if root.id in root_ids:
                raise DuplicateFeatureError(root.id, where="forest roots")
            root_ids.add(root.id)

        frozen_root_ids = frozenset(root_ids)
        for root in roots:
            root.check_children(frozen_root_ids)

        # The sibling/ancestor checks above cannot see cousins, the index can.
        index: dict[FeatureId, FeatureNode] = {}
        parents: dict[FeatureId, Optional[FeatureNode]] = {}
        stack: list[tuple[FeatureNode, Optional[FeatureNode]]] = [(r, None) for r in reversed(roots)]
        while stack:
            current, parent = stack.pop()
            if current.id in index:
                raise DuplicateFeatureError(current.id)
            index[current.id] = current
            parents[current.id] = parent
            stack.extend((child, current) for child in reversed(current.children))

        self._roots = roots
        self._index = index
        self._parents = parents

    # -- lookup ------------------------------------------------------------

    def _find_node(self, feature: FeatureRef) -> Optional[FeatureNode]:
        return self._index.get(feature_id_of(feature))

    def _require_node(self, feature: FeatureRef) -> FeatureNode:
        found = self._find_node(feature)
        if found is None:
            raise UnknownFeatureError(feature_id_of(feature))
        return found

    def __contains__(self, feature: object) -> bool:
        try:
            return self._find_node(feature) is not None  # type: ignore[arg-type]
        except TypeError:
            # unhashable values are never identifiers
            return False

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[FeatureMetadata]:
        """Yield every feature's metadata depth first, in forest order."""
        return (node.metadata for node in self._index.values())

    @property
    def roots(self) -> list[FeatureMetadata]:
        return [root.metadata for root in self._roots]

    @property
    def depth(self) -> int:
        """Number of levels in the deepest tree, ignoring enabled state."""
        depth = 0
        level: Sequence[FeatureNode] = self._roots
        while level:
            depth += 1
            level = [child for node in level for child in node.children]
        return depth

    def children_of(self, feature: FeatureRef) -> list[FeatureMetadata]:
        return [child.metadata for child in self._require_node(feature).children]

    # -- queries -------------------------------------------------------------

    def get_features_for_level(self, level: int) -> list[FeatureMetadata]:
        """Return the features that can be toggled at ``level`` right now.

        Level 0 is every root, whatever its state. Deeper levels only contain
        children of enabled nodes whose own ancestors are all enabled. A level
        past the end of every branch is simply empty.
        """
        if level < 0:
            raise ValueError(f"level must be >= 0, got {level}")

        candidates: Sequence[FeatureNode] = self._roots
        for _ in range(level):
            candidates = [child for node in candidates if node.enabled for child in node.children]
            if not candidates:
                return []
        return [node.metadata for node in candidates]

    def get_enabled_features_for_level(self, level: int) -> list[FeatureMetadata]:
        return [feature for feature in self.get_features_for_level(level) if self.get(feature)]

    def get_all_enabled(self) -> list[FeatureMetadata]:
        """Return enabled features reachable through enabled ancestors only.

        Results are ordered breadth first: enabled roots, then their enabled
        children, and so on.
        """
        enabled: list[FeatureMetadata] = []
        frontier = [root for root in self._roots if root.enabled]
        while frontier:
            enabled.extend(node.metadata for node in frontier)
            frontier = [child for node in frontier for child in node.children if child.enabled]
        return enabled

    def get(self, feature: FeatureRef) -> bool:
        """Return the stored flag of ``feature``; unknown features are off."""
        found = self._find_node(feature)
        return found.enabled if found is not None else False

    def get_parent_of(self, feature: FeatureRef) -> Optional[FeatureMetadata]:
        parent = self._parents.get(feature_id_of(feature))
        return parent.metadata if parent is not None else None

    def describe(self) -> list[tuple[int, FeatureMetadata, bool]]:
        """Return ``(level, metadata, enabled)`` for every node, depth first."""
        rows: list[tuple[int, FeatureMetadata, bool]] = []

        def walk(nodes: Sequence[FeatureNode], level: int) -> None:
            for current in nodes:
                rows.append((level, current.metadata, current.enabled))
                walk(current.children, level + 1)

        walk(self._roots, 0)
        return rows

    # -- mutation ------------------------------------------------------------

    def set(self, feature: FeatureRef, enabled: bool) -> None:
        self._require_node(feature).enabled = enabled

    def enable(self, feature: FeatureRef) -> None:
        self.set(feature, True)

    def disable(self, feature: FeatureRef) -> None:
        self.set(feature, False)

    def enable_all(self, features: Iterable[FeatureRef]) -> None:
        for found in [self._require_node(f) for f in features]:
            found.enabled = True

    def disable_all(self, features: Iterable[FeatureRef]) -> None:
        for found in [self._require_node(f) for f in features]:
            found.enabled = False

    def __repr__(self) -> str:
        return f"FeatureForest(roots={[root.id for root in self._roots]!r}, size={len(self)})"


def node(
    metadata: FeatureMetadata,
    children: Optional[Sequence[FeatureNode]] = None,
    enabled: bool = False,
) -> FeatureNode:
    """Shorthand used when spelling out a topology."""
    return FeatureNode(metadata, children, enabled)


def forest(roots: Sequence[FeatureNode]) -> FeatureForest:
    return FeatureForest(roots)


__all__ = [
    "FeatureId",
    "FeatureMetadata",
    "FeatureNode",
    "FeatureRef",
    "feature_id_of",
    "FeatureForest",
    "node",
    "forest",
]

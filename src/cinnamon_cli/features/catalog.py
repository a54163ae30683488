"""Optional features offered when creating a Cinnamon project."""

from __future__ import annotations

from typing import Iterable

from .exceptions import UnknownFeatureError
from .tree import FeatureForest, FeatureMetadata, forest, node


class CinnamonProjectFeature:
    """Registry of every feature a Cinnamon template can be tailored with."""

    VALIDATOR = FeatureMetadata(
        id="validator",
        name="Validator",
        description="Declarative request payload validation",
    )
    DATABASE = FeatureMetadata(
        id="database",
        name="Database",
        description="MikroORM models, migrations and connection settings",
    )
    AUTHENTICATION = FeatureMetadata(
        id="authentication",
        name="Authentication",
        description="User accounts, login and session tokens",
    )
    PUSH_TOKENS = FeatureMetadata(
        id="push-tokens",
        name="Push Tokens",
        description="Store device tokens for push notifications",
    )
    ASSET = FeatureMetadata(
        id="asset",
        name="Assets",
        description="Uploaded file storage backed by the database",
    )
    AVATAR = FeatureMetadata(
        id="avatar",
        name="Avatars",
        description="Profile pictures stored as assets",
    )
    ASL_PROTOCOL = FeatureMetadata(
        id="asl-protocol",
        name="ASL Protocol",
        description="Wrap responses in the ASL response envelope",
    )
    ASL_ERRORS = FeatureMetadata(
        id="asl-errors",
        name="ASL Errors",
        description="Standard ASL error codes and handlers",
    )
    WEBSERVER_SETTINGS_PLUGIN = FeatureMetadata(
        id="webserver-settings-plugin",
        name="Web Server Settings",
        description="Plugin exposing web server settings (CORS, body limits)",
    )

    @classmethod
    def all(cls) -> list[FeatureMetadata]:
        return [value for value in vars(cls).values() if isinstance(value, FeatureMetadata)]


FEATURES_BY_ID: dict[str, FeatureMetadata] = {
    feature.id: feature for feature in CinnamonProjectFeature.all()
}


def create_cinnamon_feature_forest() -> FeatureForest:
    """Build a fresh forest, with everything disabled, for one project."""
    return forest([
        node(CinnamonProjectFeature.VALIDATOR),
        node(CinnamonProjectFeature.DATABASE, [
            node(CinnamonProjectFeature.AUTHENTICATION, [
                node(CinnamonProjectFeature.PUSH_TOKENS),
            ]),
            node(CinnamonProjectFeature.ASSET, [
                node(CinnamonProjectFeature.AVATAR),
            ]),
        ]),
        node(CinnamonProjectFeature.ASL_PROTOCOL),
        node(CinnamonProjectFeature.ASL_ERRORS),
        node(CinnamonProjectFeature.WEBSERVER_SETTINGS_PLUGIN),
    ])


def get_feature(feature_id: str) -> FeatureMetadata:
    key = feature_id.strip().lower().replace("_", "-")
    try:
        return FEATURES_BY_ID[key]
    except KeyError:
        raise UnknownFeatureError(feature_id) from None


def parse_feature_list(raw: str | Iterable[str]) -> list[FeatureMetadata]:
    """Parse ``"database,authentication"`` style input into metadata.

    Separators may be commas, semicolons or whitespace; duplicates are
    dropped while keeping first-seen order.
    """
    if isinstance(raw, str):
        parts = raw.replace(";", ",").replace(" ", ",").split(",")
    else:
        parts = list(raw)

    selected: list[FeatureMetadata] = []
    for part in parts:
        if not part.strip():
            continue
        feature = get_feature(part)
        if feature not in selected:
            selected.append(feature)
    return selected


__all__ = [
    "CinnamonProjectFeature",
    "FEATURES_BY_ID",
    "create_cinnamon_feature_forest",
    "get_feature",
    "parse_feature_list",
]

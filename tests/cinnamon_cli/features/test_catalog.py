from __future__ import annotations

import pytest

from cinnamon_cli.features import (
    FEATURES_BY_ID,
    CinnamonProjectFeature as F,
    UnknownFeatureError,
    create_cinnamon_feature_forest,
    get_feature,
    parse_feature_list,
)


def test_catalog_lists_every_feature_once():
    ids = [feature.id for feature in F.all()]
    assert len(ids) == 9
    assert len(set(ids)) == 9
    assert set(FEATURES_BY_ID) == set(ids)


def test_cinnamon_topology():
    forest = create_cinnamon_feature_forest()

    assert forest.roots == [F.VALIDATOR, F.DATABASE, F.ASL_PROTOCOL, F.ASL_ERRORS, F.WEBSERVER_SETTINGS_PLUGIN]
    assert forest.children_of(F.DATABASE) == [F.AUTHENTICATION, F.ASSET]
    assert forest.children_of(F.AUTHENTICATION) == [F.PUSH_TOKENS]
    assert forest.children_of(F.ASSET) == [F.AVATAR]
    assert forest.children_of(F.VALIDATOR) == []


def test_every_catalog_feature_is_in_the_forest():
    forest = create_cinnamon_feature_forest()
    assert sorted(feature.id for feature in forest) == sorted(FEATURES_BY_ID)


def test_each_call_builds_an_independent_forest():
    first = create_cinnamon_feature_forest()
    second = create_cinnamon_feature_forest()

    first.enable(F.DATABASE)

    assert second.get(F.DATABASE) is False
    assert second.get_all_enabled() == []


@pytest.mark.parametrize("raw", ["push-tokens", "PUSH_TOKENS", "  Push-Tokens  "])
def test_get_feature_normalises_input(raw: str):
    assert get_feature(raw) is F.PUSH_TOKENS


def test_get_feature_unknown():
    with pytest.raises(UnknownFeatureError, match="graphql"):
        get_feature("graphql")


def test_parse_feature_list_accepts_mixed_separators():
    assert parse_feature_list("database, authentication;asset avatar") == [
        F.DATABASE,
        F.AUTHENTICATION,
        F.ASSET,
        F.AVATAR,
    ]


def test_parse_feature_list_drops_duplicates_keeping_order():
    assert parse_feature_list("asset,database,asset") == [F.ASSET, F.DATABASE]


def test_parse_feature_list_from_iterable():
    assert parse_feature_list(["validator", "", "asl_errors"]) == [F.VALIDATOR, F.ASL_ERRORS]


def test_parse_feature_list_empty():
    assert parse_feature_list("") == []
    assert parse_feature_list(" , ") == []


def test_parse_feature_list_unknown():
    with pytest.raises(UnknownFeatureError):
        parse_feature_list("database,nope")

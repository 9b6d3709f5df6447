"""Tests for paginated collection queries."""

from __future__ import annotations

import logging

import pytest

from tokentax.errors import InvalidArgument
from tokentax.models import ArtifactType, Base
from tokentax.query import QueryOptions, iter_pages, list_by_type


@pytest.fixture
def many_bases(store):
    for i in range(10):
        tooling = f"B{i:02d}"
        store.add_or_update(
            ArtifactType.BASE,
            Base.from_dict({"artifact": {"name": f"Base {i}", "artifactSymbol": tooling}}),
        )
    return store


def test_whole_collection_when_it_fits(store):
    result = list_by_type(store, QueryOptions(ArtifactType.BEHAVIOR, max_item_return=10))
    assert result.collection.kind == ArtifactType.BEHAVIOR
    assert [r.tooling for r in result.collection] == ["d", "t"]
    assert result.first_item_index == 0
    assert result.last_item_index == 1
    assert result.total_items_in_collection == 2


def test_start_index_ignored_when_collection_fits(store):
    result = list_by_type(store, QueryOptions("behaviors", max_item_return=10, last_item_index=1))
    assert result.first_item_index == 0
    assert len(result.collection) == 2


def test_middle_page(many_bases):
    # 12 bases: B00..B09, F, NF
    result = list_by_type(many_bases, QueryOptions(ArtifactType.BASE, max_item_return=5, last_item_index=5))
    assert [r.tooling for r in result.collection] == ["B05", "B06", "B07", "B08", "B09"]
    assert result.first_item_index == 5
    assert result.last_item_index == 9
    assert result.total_items_in_collection == 12


def test_last_page_is_clipped(many_bases):
    result = list_by_type(many_bases, QueryOptions(ArtifactType.BASE, max_item_return=5, last_item_index=10))
    assert [r.tooling for r in result.collection] == ["F", "NF"]
    assert result.last_item_index == 11


def test_start_past_end_is_empty(many_bases):
    result = list_by_type(many_bases, QueryOptions(ArtifactType.BASE, max_item_return=5, last_item_index=50))
    assert len(result.collection) == 0
    assert result.total_items_in_collection == 12


def test_iter_pages_visits_everything_once(many_bases):
    seen = [r.tooling for page in iter_pages(many_bases, ArtifactType.BASE, 5) for r in page.collection]
    assert seen == sorted(seen)
    assert len(seen) == len(set(seen)) == 12


@pytest.mark.parametrize(
    "options",
    [
        QueryOptions("Widget"),
        QueryOptions(7),
        QueryOptions(ArtifactType.BASE, max_item_return=0),
        QueryOptions(ArtifactType.BASE, last_item_index=-1),
    ],
)
def test_invalid_arguments(store, options):
    with pytest.raises(InvalidArgument):
        list_by_type(store, options)


def test_ordinal_type(store):
    assert list_by_type(store, QueryOptions(4)).artifact_type == ArtifactType.TOKEN_TEMPLATE


def test_failure_degrades_to_empty(store, monkeypatch, caplog):
    def boom(artifact_type):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "list_of_type", boom)
    with caplog.at_level(logging.ERROR, logger="tokentax.query"):
        result = list_by_type(store, QueryOptions(ArtifactType.BASE))

    assert len(result.collection) == 0
    assert result.total_items_in_collection == 0
    assert "disk on fire" in caplog.text


def test_to_dict(store):
    data = list_by_type(store, QueryOptions(ArtifactType.PROPERTY_SET)).to_dict()
    assert data["artifactType"] == "PropertySet"
    assert data["totalItemsInCollection"] == 1
    assert data["items"][0]["artifact"]["name"] == "SKU"

"""Tests for serialized access to the store and the snapshot cache."""

from __future__ import annotations

import copy
import threading

from tokentax.cache import TaxonomyCache
from tokentax.models import ArtifactType, Base, Behavior, Taxonomy
from tokentax.mutations import DeleteArtifactRequest, MutationPipeline, NewArtifactRequest
from tokentax.persistence import NullPersistence
from tokentax.query import QueryOptions, list_by_type

WRITERS = 4
PER_WRITER = 25


def run_threads(targets) -> list[Exception]:
    """Start every target together; return whatever they raised."""
    errors: list[Exception] = []
    barrier = threading.Barrier(len(targets))

    def wrap(target):
        def run():
            barrier.wait()
            try:
                target()
            except Exception as e:
                errors.append(e)

        return run

    threads = [threading.Thread(target=wrap(t)) for t in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return errors


def base_payload(name: str, tooling: str) -> dict:
    return {"artifact": {"name": name, "artifactSymbol": tooling}}


def test_pages_stay_consistent_under_concurrent_creates(store):
    pipeline = MutationPipeline(store, NullPersistence())
    start_count = len(store.taxonomy.bases)
    final_count = start_count + WRITERS * PER_WRITER

    def writer(n: int):
        def run():
            for i in range(PER_WRITER):
                request = NewArtifactRequest(ArtifactType.BASE, base_payload(f"Writer {n} {i}", f"W{n}x{i}"))
                response = pipeline.create(request)
                assert response.success, response.reason

        return run

    def reader():
        for _ in range(PER_WRITER * 2):
            result = list_by_type(store, QueryOptions(ArtifactType.BASE, max_item_return=10, last_item_index=2))
            symbols = [r.tooling for r in result.collection]
            assert symbols == sorted(symbols)
            assert len(symbols) <= 10
            assert start_count <= result.total_items_in_collection <= final_count

    assert run_threads([*(writer(n) for n in range(WRITERS)), reader, reader]) == []
    assert len(store.taxonomy.bases) == final_count
    assert len({r.name for r in store.list_of_type(ArtifactType.BASE)}) == final_count


def test_concurrent_create_and_delete_keep_counts(store):
    pipeline = MutationPipeline(store, NullPersistence())
    for i in range(PER_WRITER):
        store.add_or_update(ArtifactType.BEHAVIOR, Behavior.from_dict(base_payload(f"Old {i}", f"old{i}")))
    start_count = len(store.taxonomy.behaviors)

    def creator():
        for i in range(PER_WRITER):
            request = NewArtifactRequest(ArtifactType.BEHAVIOR, base_payload(f"New {i}", f"new{i}"))
            assert pipeline.create(request).success

    def deleter():
        for i in range(PER_WRITER):
            assert pipeline.delete(DeleteArtifactRequest(ArtifactType.BEHAVIOR, f"old{i}")).success

    def reader():
        for _ in range(PER_WRITER):
            result = list_by_type(store, QueryOptions(ArtifactType.BEHAVIOR, max_item_return=1000))
            assert len(result.collection) == result.total_items_in_collection

    assert run_threads([creator, deleter, reader, reader]) == []
    assert len(store.taxonomy.behaviors) == start_count
    assert not any(t.startswith("old") for t in store.taxonomy.behaviors)


def test_add_or_update_from_many_threads(store):
    start_count = len(store.taxonomy.bases)

    def writer(n: int):
        def run():
            for i in range(PER_WRITER):
                record = Base.from_dict(base_payload(f"T{n}-{i}", f"T{n}-{i}"))
                store.add_or_update(ArtifactType.BASE, record)
                # Rewriting the same key never duplicates it
                store.add_or_update(ArtifactType.BASE, copy.deepcopy(record))

        return run

    assert run_threads([writer(n) for n in range(WRITERS)]) == []
    assert len(store.list_of_type(ArtifactType.BASE)) == start_count + WRITERS * PER_WRITER


def test_replace_leaves_held_snapshot_untouched(store):
    held = store.taxonomy
    counts_before = held.counts()
    empty_counts = Taxonomy(version="empty").counts()

    def swapper():
        for i in range(PER_WRITER):
            store.replace(Taxonomy(version=f"2.{i}"))

    def reader():
        for _ in range(PER_WRITER):
            with store.locked() as taxonomy:
                expected = counts_before if taxonomy is held else empty_counts
                assert taxonomy.counts() == expected

    assert run_threads([swapper, reader, reader]) == []
    assert held.version == "1.0"
    assert held.counts() == counts_before
    assert store.version == f"2.{PER_WRITER - 1}"


def test_cache_put_and_get_from_many_threads():
    cache = TaxonomyCache()
    snapshots = {f"v{n}.{i}": Taxonomy(version=f"v{n}.{i}") for n in range(WRITERS) for i in range(PER_WRITER)}

    def worker(n: int):
        def run():
            for i in range(PER_WRITER):
                version = f"v{n}.{i}"
                cache.put(version, snapshots[version])
                assert cache.get(version) is snapshots[version]
                assert version in cache

        return run

    assert run_threads([worker(n) for n in range(WRITERS)]) == []
    assert len(cache) == WRITERS * PER_WRITER
    assert cache.versions() == sorted(snapshots)
    for version, snapshot in snapshots.items():
        assert cache.get(version) is snapshot

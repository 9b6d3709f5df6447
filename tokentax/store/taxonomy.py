"""The live taxonomy handle shared by queries, mutations and the service."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from ..errors import NotFound
from ..models import (
    ArtifactType,
    Base,
    Behavior,
    BehaviorGroup,
    PropertySet,
    Record,
    Taxonomy,
    TokenTemplate,
)


class TaxonomyStore:
    """
    Owns the live Taxonomy reference and serializes access to it.

    A single re-entrant lock guards both reads of the collection set and
    writes to it, so a paginated read never sees a half-applied mutation.
    ``replace`` swaps the whole reference; callers that grabbed the old
    reference keep a consistent snapshot.

    Only the mutation pipeline calls ``add_or_update`` and ``remove``.
    """

    def __init__(self, taxonomy: Taxonomy):
        self._taxonomy = taxonomy
        self._lock = threading.RLock()

    @property
    def taxonomy(self) -> Taxonomy:
        return self._taxonomy

    @property
    def version(self) -> str:
        return self._taxonomy.version

    @contextmanager
    def locked(self) -> Iterator[Taxonomy]:
        """Hold the store lock and yield the live taxonomy."""
        with self._lock:
            yield self._taxonomy

    def replace(self, taxonomy: Taxonomy) -> Taxonomy:
        """Swap in a new taxonomy, returning the previous one."""
        with self._lock:
            previous = self._taxonomy
            self._taxonomy = taxonomy
        return previous

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def find(self, artifact_type: ArtifactType, tooling: str) -> Record | None:
        with self._lock:
            return self._taxonomy.collection(artifact_type).get(tooling)

    def find_by_name(self, artifact_type: ArtifactType, name: str) -> Record | None:
        with self._lock:
            for record in self._taxonomy.collection(artifact_type).values():
                if record.name == name:
                    return record
        return None

    def get(self, artifact_type: ArtifactType, tooling: str) -> Record:
        """
        Exact-match lookup by tooling symbol.

        Raises:
            NotFound: If no artifact of that type carries the symbol
        """
        record = self.find(artifact_type, tooling)
        if record is None:
            raise NotFound(f"No {artifact_type.value} with tooling symbol {tooling!r}")
        return record

    def get_base(self, tooling: str) -> Base:
        return self.get(ArtifactType.BASE, tooling)  # type: ignore[return-value]

    def get_behavior(self, tooling: str) -> Behavior:
        return self.get(ArtifactType.BEHAVIOR, tooling)  # type: ignore[return-value]

    def get_behavior_group(self, tooling: str) -> BehaviorGroup:
        return self.get(ArtifactType.BEHAVIOR_GROUP, tooling)  # type: ignore[return-value]

    def get_property_set(self, tooling: str) -> PropertySet:
        return self.get(ArtifactType.PROPERTY_SET, tooling)  # type: ignore[return-value]

    def get_token_template(self, formula: str) -> TokenTemplate:
        return self.get(ArtifactType.TOKEN_TEMPLATE, formula)  # type: ignore[return-value]

    def list_of_type(self, artifact_type: ArtifactType) -> list[Record]:
        """Whole collection, ordered by tooling symbol."""
        with self._lock:
            records = list(self._taxonomy.collection(artifact_type).values())
        return sorted(records, key=lambda r: r.tooling)

    # -------------------------------------------------------------------------
    # Writes (mutation pipeline only)
    # -------------------------------------------------------------------------

    def add_or_update(self, artifact_type: ArtifactType, record: Record) -> Record | None:
        """Remove any entry sharing the tooling symbol, then add. Returns the removed entry."""
        with self._lock:
            collection = self._taxonomy.collection(artifact_type)
            previous = collection.pop(record.tooling, None)
            collection[record.tooling] = record
        return previous

    def remove(self, artifact_type: ArtifactType, tooling: str) -> Record | None:
        with self._lock:
            return self._taxonomy.collection(artifact_type).pop(tooling, None)

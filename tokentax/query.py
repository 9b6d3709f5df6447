"""Paginated retrieval of one artifact collection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator

from .errors import InvalidArgument
from .models import ArtifactType, Record
from .store.taxonomy import TaxonomyStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryOptions:
    artifact_type: ArtifactType | str | int
    max_item_return: int = 100
    last_item_index: int = 0


@dataclass(frozen=True)
class ArtifactCollection:
    """Tagged page payload: ``kind`` names which collection ``items`` came from."""

    kind: ArtifactType
    items: tuple[Record, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.items)


@dataclass
class QueryResult:
    artifact_type: ArtifactType
    collection: ArtifactCollection
    first_item_index: int = 0
    last_item_index: int = -1
    # Size of the whole collection, not of this page
    total_items_in_collection: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "artifactType": self.artifact_type.value,
            "firstItemIndex": self.first_item_index,
            "lastItemIndex": self.last_item_index,
            "totalItemsInCollection": self.total_items_in_collection,
            "items": [r.to_dict() for r in self.collection],
        }


def list_by_type(store: TaxonomyStore, options: QueryOptions) -> QueryResult:
    """
    Return one page of a collection, ordered by tooling symbol.

    If the whole collection fits in ``max_item_return`` it is returned
    entirely (first index 0). Otherwise the page is
    ``[last_item_index, last_item_index + max_item_return)``, clipped at
    the end of the collection.

    Raises:
        InvalidArgument: For an unknown type or non-positive page size or
            negative start index. Any other failure is logged and yields
            an empty page.
    """
    artifact_type = ArtifactType.parse(options.artifact_type)
    if options.max_item_return <= 0:
        raise InvalidArgument(f"max_item_return must be positive, got {options.max_item_return}")
    if options.last_item_index < 0:
        raise InvalidArgument(f"last_item_index must not be negative, got {options.last_item_index}")

    result = QueryResult(artifact_type=artifact_type, collection=ArtifactCollection(artifact_type))
    try:
        items = store.list_of_type(artifact_type)
        total = len(items)
        if total <= options.max_item_return:
            first = 0
            page = items
        else:
            first = options.last_item_index
            page = items[first:first + options.max_item_return]

        result.collection = ArtifactCollection(artifact_type, tuple(page))
        result.first_item_index = first
        result.last_item_index = first + len(page) - 1
        result.total_items_in_collection = total
    except Exception:
        logger.exception("Error retrieving artifact collection of type %s", artifact_type.value)
    return result


def iter_pages(store: TaxonomyStore, artifact_type: ArtifactType | str, page_size: int) -> Iterator[QueryResult]:
    """Walk a whole collection page by page."""
    start = 0
    while True:
        page = list_by_type(store, QueryOptions(artifact_type, page_size, start))
        yield page
        start = page.last_item_index + 1
        if not len(page.collection) or start >= page.total_items_in_collection:
            return

"""
Create, update and delete of taxonomy artifacts.

Each operation runs under the store lock: validate, change the store,
then hand the change to the persistence delegate. A delegate failure
undoes the in-memory change. Outcomes are reported as MutationResponse
values; nothing here raises to the caller.
"""

from __future__ import annotations

import copy
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from .errors import Collision, InvalidArgument, NotFound, ParseError, TaxonomyError, TemplateCycle
from .models import RECORD_TYPES, ArtifactSymbol, ArtifactType, Record, record_from_dict
from .persistence import NullPersistence, Persistence
from .store.taxonomy import TaxonomyStore
from .symbols import check_unique, make_unique_record, resolve_folder_name, unique_folder_name
from .templates import find_template_cycles

logger = logging.getLogger(__name__)

CommitHook = Callable[[ArtifactType, str], None]


@dataclass
class NewArtifactRequest:
    artifact_type: ArtifactType | str | int
    payload: Record | Mapping[str, Any]
    # Regenerate name and symbols on collision instead of failing
    auto_resolve: bool = False


@dataclass
class UpdateArtifactRequest:
    """Replace an existing artifact.

    ``symbol`` names the artifact being replaced and defaults to the
    payload's own tooling symbol; when they differ the artifact is
    re-keyed.
    """

    artifact_type: ArtifactType | str | int
    payload: Record | Mapping[str, Any]
    symbol: ArtifactSymbol | str = ""


@dataclass
class DeleteArtifactRequest:
    artifact_type: ArtifactType | str | int
    symbol: ArtifactSymbol | str


@dataclass
class MutationResponse:
    success: bool
    artifact_type: ArtifactType | None = None
    symbol: str = ""
    reason: str = ""
    record: Record | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "artifactType": self.artifact_type.value if self.artifact_type else "",
            "symbol": self.symbol,
            "reason": self.reason,
        }


def tooling_of(symbol: ArtifactSymbol | str) -> str:
    if isinstance(symbol, ArtifactSymbol):
        return symbol.tooling
    return str(symbol)


def coerce_record(artifact_type: ArtifactType, payload: Record | Mapping[str, Any]) -> Record:
    """Turn a request payload into a typed record of the given type.

    Record payloads are deep-copied so the caller's object never becomes
    the stored one.

    Raises:
        ParseError: If the payload is malformed or of another type
    """
    if isinstance(payload, Record):
        expected = RECORD_TYPES[artifact_type]
        if not isinstance(payload, expected):
            raise ParseError(f"expected a {artifact_type.value} record, got {type(payload).__name__}")
        if not payload.tooling.strip():
            raise ParseError(f"artifact {payload.name!r}: missing tooling symbol")
        return copy.deepcopy(payload)
    if not isinstance(payload, Mapping):
        raise ParseError(f"unsupported payload type {type(payload).__name__}")
    return record_from_dict(artifact_type, dict(payload))


class MutationPipeline:
    """
    Serialized writer for a TaxonomyStore.

    ``on_committed`` runs after each successful, persisted mutation with
    the artifact type and tooling symbol; the service uses it to reload
    the tree.
    """

    def __init__(
        self,
        store: TaxonomyStore,
        persistence: Persistence | None = None,
        *,
        on_committed: CommitHook | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.persistence = persistence if persistence is not None else NullPersistence()
        self.on_committed = on_committed
        self.rng = rng

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def create(self, request: NewArtifactRequest) -> MutationResponse:
        try:
            artifact_type = ArtifactType.parse(request.artifact_type)
            record = coerce_record(artifact_type, request.payload)
        except (InvalidArgument, ParseError) as e:
            return self._failed(None, "", e)

        with self.store.locked() as taxonomy:
            if not check_unique(taxonomy, artifact_type, record.artifact):
                if not request.auto_resolve:
                    return self._failed(
                        artifact_type,
                        record.tooling,
                        Collision(
                            f"{artifact_type.value} name {record.name!r} or tooling symbol "
                            f"{record.tooling!r} already exists"
                        ),
                    )
                try:
                    resolved = make_unique_record(taxonomy, artifact_type, record, self.rng)
                except Collision as e:
                    return self._failed(artifact_type, record.tooling, e)
                logger.info(
                    "Resolved %s collision: %s -> %s", artifact_type.value, record.tooling, resolved.tooling
                )
                record = resolved

            # A new artifact never reuses a folder another artifact owns
            try:
                folder = unique_folder_name(
                    taxonomy,
                    artifact_type,
                    record.name,
                    exists=lambda f: self.persistence.folder_exists(artifact_type, f),
                )
            except Collision as e:
                return self._failed(artifact_type, record.tooling, e)
            record.artifact.folder_name = folder
            self.store.add_or_update(artifact_type, record)

            try:
                self._check_templates(artifact_type)
            except TemplateCycle as e:
                self.store.remove(artifact_type, record.tooling)
                return self._failed(artifact_type, record.tooling, e)

            if not self.persistence.save(artifact_type, folder, record):
                self.store.remove(artifact_type, record.tooling)
                return self._persist_failed(artifact_type, record.tooling)

        logger.info("Created %s %s", artifact_type.value, record.tooling)
        return self._succeeded(artifact_type, record)

    def update(self, request: UpdateArtifactRequest) -> MutationResponse:
        try:
            artifact_type = ArtifactType.parse(request.artifact_type)
            record = coerce_record(artifact_type, request.payload)
        except (InvalidArgument, ParseError) as e:
            return self._failed(None, tooling_of(request.symbol), e)

        target = tooling_of(request.symbol) or record.tooling

        with self.store.locked() as taxonomy:
            collection = taxonomy.collection(artifact_type)
            previous = collection.get(target)
            if previous is None:
                return self._failed(artifact_type, target, NotFound(f"No {artifact_type.value} with symbol {target!r}"))

            clash = self._clashing(collection.values(), record, previous)
            if clash is not None:
                return self._failed(
                    artifact_type,
                    target,
                    Collision(f"{artifact_type.value} {clash.tooling!r} already uses that name or tooling symbol"),
                )

            folder = resolve_folder_name(taxonomy, artifact_type, target)
            record.artifact.folder_name = folder
            if not record.artifact.files:
                record.artifact.files = list(previous.artifact.files)
                record.artifact.control_uri = record.artifact.control_uri or previous.artifact.control_uri

            self.store.remove(artifact_type, target)
            self.store.add_or_update(artifact_type, record)

            try:
                self._check_templates(artifact_type)
            except TemplateCycle as e:
                self._restore(artifact_type, record.tooling, previous)
                return self._failed(artifact_type, target, e)

            if not self.persistence.save(artifact_type, folder, record):
                self._restore(artifact_type, record.tooling, previous)
                return self._persist_failed(artifact_type, target)

        logger.info("Updated %s %s", artifact_type.value, target)
        return self._succeeded(artifact_type, record)

    def delete(self, request: DeleteArtifactRequest) -> MutationResponse:
        try:
            artifact_type = ArtifactType.parse(request.artifact_type)
        except InvalidArgument as e:
            return self._failed(None, tooling_of(request.symbol), e)

        tooling = tooling_of(request.symbol)
        with self.store.locked() as taxonomy:
            folder = resolve_folder_name(taxonomy, artifact_type, tooling)
            if not folder:
                return self._failed(
                    artifact_type, tooling, NotFound(f"No {artifact_type.value} with symbol {tooling!r}")
                )

            removed = self.store.remove(artifact_type, tooling)
            if not self.persistence.delete(artifact_type, folder):
                self.store.add_or_update(artifact_type, removed)
                return self._persist_failed(artifact_type, tooling)

        logger.info("Deleted %s %s", artifact_type.value, tooling)
        return self._succeeded(artifact_type, removed)

    def add_or_update_in_memory(self, artifact_type: ArtifactType | str, record: Record) -> bool:
        """Remove any entry with the record's tooling symbol, then insert it."""
        try:
            artifact_type = ArtifactType.parse(artifact_type)
            record = coerce_record(artifact_type, record)
        except TaxonomyError as e:
            logger.error("Rejected in-memory update: %s", e)
            return False
        previous = self.store.add_or_update(artifact_type, record)
        logger.debug(
            "%s %s %s in memory",
            "Replaced" if previous is not None else "Inserted",
            artifact_type.value,
            record.tooling,
        )
        return True

    def resolve_folder_name(self, artifact_type: ArtifactType | str, symbol: ArtifactSymbol | str) -> str:
        with self.store.locked() as taxonomy:
            return resolve_folder_name(taxonomy, ArtifactType.parse(artifact_type), tooling_of(symbol))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _clashing(records, record: Record, previous: Record) -> Record | None:
        """Another artifact already holding the record's name or tooling symbol."""
        for other in records:
            if other is previous:
                continue
            if other.tooling == record.tooling or other.name == record.name:
                return other
        return None

    def _check_templates(self, artifact_type: ArtifactType) -> None:
        if artifact_type != ArtifactType.TOKEN_TEMPLATE:
            return
        cycles = find_template_cycles(self.store.taxonomy)
        if cycles:
            raise TemplateCycle("Template cycle: " + " -> ".join(cycles[0]))

    def _restore(self, artifact_type: ArtifactType, tooling: str, previous: Record) -> None:
        self.store.remove(artifact_type, tooling)
        self.store.add_or_update(artifact_type, previous)

    def _succeeded(self, artifact_type: ArtifactType, record: Record) -> MutationResponse:
        if self.on_committed is not None:
            self.on_committed(artifact_type, record.tooling)
        return MutationResponse(True, artifact_type, record.tooling, record=record)

    def _failed(self, artifact_type: ArtifactType | None, symbol: str, error: TaxonomyError) -> MutationResponse:
        logger.warning("Mutation rejected (%s): %s", type(error).__name__, error)
        return MutationResponse(False, artifact_type, symbol, reason=f"{type(error).__name__}: {error}")

    def _persist_failed(self, artifact_type: ArtifactType, symbol: str) -> MutationResponse:
        logger.error("Persistence failed for %s %s; in-memory change rolled back", artifact_type.value, symbol)
        return MutationResponse(False, artifact_type, symbol, reason="Persistence failed; change rolled back")

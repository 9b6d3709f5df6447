"""
Boundary operations over one artifact tree.

TaxonomyService ties the loader, store, cache, query engine and mutation
pipeline together. Hosts (the CLI, a request server) call only this.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from .cache import TaxonomyCache
from .config import ServiceConfig
from .errors import FolderMissing, InvalidArgument, NotFound, ParseError
from .models import (
    ArtifactSymbol,
    ArtifactType,
    Base,
    Behavior,
    BehaviorGroup,
    PropertySet,
    Taxonomy,
    TemplateFormula,
    TokenSpecification,
    TokenTemplate,
    TokenTemplateId,
)
from .mutations import (
    DeleteArtifactRequest,
    MutationPipeline,
    MutationResponse,
    NewArtifactRequest,
    UpdateArtifactRequest,
    tooling_of,
)
from .persistence import FilesystemPersistence, GitBackend, Persistence, VcsResponse
from .query import QueryOptions, QueryResult, list_by_type
from .store import TaxonomyStore, load_taxonomy
from .templates import resolve_specification

logger = logging.getLogger(__name__)


class TaxonomyService:
    """
    Live taxonomy plus its cached snapshots.

    The live taxonomy is served straight from the store; the cache is
    consulted only when a caller asks for another version. After a
    successful mutation the tree is reloaded when the persistence delegate
    writes to disk, and the fresh taxonomy replaces the live one.
    """

    def __init__(
        self,
        config: ServiceConfig,
        persistence: Persistence | None = None,
        vcs: GitBackend | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.root = config.artifact_path
        if vcs is None and config.git_enabled:
            vcs = GitBackend(self.root)
        self.vcs = vcs
        if persistence is None:
            persistence = FilesystemPersistence(
                self.root, vcs=vcs, commit_on_mutation=config.commit_on_mutation
            )
        self.persistence = persistence
        self.cache = TaxonomyCache(config.cache_ttl, clock=clock)
        self._store: TaxonomyStore | None = None
        self._pipeline: MutationPipeline | None = None

    def start(self) -> "TaxonomyService":
        """Load the tree and register it in the cache.

        Raises:
            FolderMissing: If the artifact root or its manifest is missing
        """
        taxonomy = load_taxonomy(self.root)
        self._store = TaxonomyStore(taxonomy)
        self._pipeline = MutationPipeline(self._store, self.persistence, on_committed=self._on_committed)
        self.cache.put(taxonomy.version, taxonomy)
        counts = ", ".join(f"{t.value}={n}" for t, n in taxonomy.counts().items())
        logger.info("Taxonomy %s ready (%s)", taxonomy.version, counts)
        return self

    @property
    def store(self) -> TaxonomyStore:
        if self._store is None:
            raise RuntimeError("TaxonomyService.start() has not been called")
        return self._store

    @property
    def pipeline(self) -> MutationPipeline:
        if self._pipeline is None:
            raise RuntimeError("TaxonomyService.start() has not been called")
        return self._pipeline

    # -------------------------------------------------------------------------
    # Whole taxonomy
    # -------------------------------------------------------------------------

    def get_full_taxonomy(self, version: str | None = None) -> Taxonomy:
        """
        The live taxonomy, or a cached snapshot of another version.

        Raises:
            NotFound: If the version is not cached
            Expired: If the cached snapshot has expired
        """
        live = self.store.taxonomy
        if not version or version == live.version:
            return live
        logger.info("Taxonomy version %s is not live, checking cache", version)
        return self.cache.get(version)

    def get_config(self) -> ServiceConfig:
        return self.config

    def get_lite_taxonomy(self, version: str | None = None) -> Taxonomy:
        return self.get_full_taxonomy(version).lite()

    def refresh_taxonomy(self) -> Taxonomy:
        """Reload the tree from disk and make it the live taxonomy."""
        taxonomy = load_taxonomy(self.root)
        self.store.replace(taxonomy)
        self.cache.put(taxonomy.version, taxonomy)
        logger.info("Refreshed taxonomy version %s", taxonomy.version)
        return taxonomy

    def _on_committed(self, artifact_type: ArtifactType, tooling: str) -> None:
        if not getattr(self.persistence, "durable", False):
            # Nothing new on disk; the in-memory change is the truth
            self.cache.put(self.store.version, self.store.taxonomy)
            return
        try:
            self.refresh_taxonomy()
        except (FolderMissing, ParseError, OSError) as e:
            logger.error("Refresh after %s %s failed, keeping in-memory taxonomy: %s", artifact_type.value, tooling, e)

    # -------------------------------------------------------------------------
    # Single artifacts
    # -------------------------------------------------------------------------

    def get_base_artifact(self, symbol: ArtifactSymbol | str) -> Base:
        return self.store.get_base(tooling_of(symbol))

    def get_behavior_artifact(self, symbol: ArtifactSymbol | str) -> Behavior:
        return self.store.get_behavior(tooling_of(symbol))

    def get_behavior_group_artifact(self, symbol: ArtifactSymbol | str) -> BehaviorGroup:
        return self.store.get_behavior_group(tooling_of(symbol))

    def get_property_set_artifact(self, symbol: ArtifactSymbol | str) -> PropertySet:
        return self.store.get_property_set(tooling_of(symbol))

    def get_template_definition_artifact(self, symbol: ArtifactSymbol | str) -> TokenTemplate:
        return self.store.get_token_template(tooling_of(symbol))

    def get_template_formula_artifact(self, symbol: ArtifactSymbol | str) -> TemplateFormula:
        return self.get_template_definition_artifact(symbol).formula_view()

    def get_token_template(self, template_id: TokenTemplateId) -> TokenTemplate:
        """
        Look a template up by formula id, else by definition (template) name.

        Raises:
            InvalidArgument: If the id carries neither
            NotFound: If nothing matches
        """
        if template_id.formula_id:
            return self.store.get_token_template(template_id.formula_id)
        if template_id.definition_id:
            record = self.store.find_by_name(ArtifactType.TOKEN_TEMPLATE, template_id.definition_id)
            if record is None:
                raise NotFound(f"No TokenTemplate named {template_id.definition_id!r}")
            return record  # type: ignore[return-value]
        raise InvalidArgument("TokenTemplateId needs a formula_id or definition_id")

    def get_token_specification(self, template_id: TokenTemplateId) -> TokenSpecification:
        template = self.get_token_template(template_id)
        with self.store.locked() as taxonomy:
            return resolve_specification(taxonomy, template.formula, max_depth=self.config.max_template_depth)

    # -------------------------------------------------------------------------
    # Queries and mutations
    # -------------------------------------------------------------------------

    def list_by_type(self, options: QueryOptions) -> QueryResult:
        return list_by_type(self.store, options)

    def create_artifact(self, request: NewArtifactRequest) -> MutationResponse:
        return self.pipeline.create(request)

    def update_artifact(self, request: UpdateArtifactRequest) -> MutationResponse:
        return self.pipeline.update(request)

    def delete_artifact(self, request: DeleteArtifactRequest) -> MutationResponse:
        return self.pipeline.delete(request)

    # -------------------------------------------------------------------------
    # Version control
    # -------------------------------------------------------------------------

    def commit_local_updates(self, message: str) -> VcsResponse:
        if self.vcs is None:
            return VcsResponse(False, "Version control is not enabled")
        return self.vcs.commit(message)

    def pull(self) -> VcsResponse:
        """Pull upstream changes and reload the tree on success."""
        if self.vcs is None:
            return VcsResponse(False, "Version control is not enabled")
        response = self.vcs.pull()
        if response.success:
            self.refresh_taxonomy()
        return response

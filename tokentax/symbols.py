"""Name and tooling-symbol uniqueness within a collection."""

from __future__ import annotations

import copy
import logging
import random
import string
from typing import Callable

from .errors import Collision
from .models import Artifact, ArtifactSymbol, ArtifactType, Record, Taxonomy, TokenTemplate

logger = logging.getLogger(__name__)

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
SUFFIX_LENGTH = 4
MAX_ATTEMPTS = 50


def name_exists(taxonomy: Taxonomy, artifact_type: ArtifactType, name: str) -> bool:
    return any(r.name == name for r in taxonomy.collection(artifact_type).values())


def check_unique(taxonomy: Taxonomy, artifact_type: ArtifactType, artifact: Artifact) -> bool:
    """False if the artifact's tooling symbol or name is already taken in its collection."""
    if artifact_type == ArtifactType.TOKEN_TEMPLATE:
        return check_unique_template(taxonomy, artifact.tooling, artifact.name)
    if artifact.tooling in taxonomy.collection(artifact_type):
        return False
    return not name_exists(taxonomy, artifact_type, artifact.name)


def check_unique_template(taxonomy: Taxonomy, formula_id: str, name: str) -> bool:
    """Template variant of ``check_unique``, keyed by formula id."""
    if formula_id in taxonomy.token_templates:
        return False
    return not name_exists(taxonomy, ArtifactType.TOKEN_TEMPLATE, name)


def resolve_folder_name(taxonomy: Taxonomy, artifact_type: ArtifactType, tooling: str) -> str:
    """
    Map a tooling symbol to the artifact's directory name.

    Returns "" when nothing resolves, which callers read as
    "new artifact, no folder yet".
    """
    record = taxonomy.collection(artifact_type).get(tooling)
    if record is None:
        logger.info("No matching artifact folder of type %s with symbol %s", artifact_type.value, tooling)
        return ""
    return record.artifact.folder_name or record.artifact.name


def folder_taken(taxonomy: Taxonomy, artifact_type: ArtifactType, folder: str) -> bool:
    """True if any artifact of the collection already lives in ``folder`` (case-insensitive)."""
    wanted = folder.casefold()
    return any(
        (r.artifact.folder_name or r.artifact.name).casefold() == wanted
        for r in taxonomy.collection(artifact_type).values()
    )


def unique_folder_name(
    taxonomy: Taxonomy,
    artifact_type: ArtifactType,
    name: str,
    exists: Callable[[str], bool] | None = None,
) -> str:
    """
    Directory name for a new artifact.

    Starts from the artifact name and appends ``-2``, ``-3``... while the
    folder belongs to another artifact of the collection or ``exists``
    reports it present on disk.

    Raises:
        Collision: If no free folder was found within MAX_ATTEMPTS
    """
    candidate = name
    for attempt in range(2, MAX_ATTEMPTS + 2):
        if not folder_taken(taxonomy, artifact_type, candidate) and not (exists and exists(candidate)):
            return candidate
        candidate = f"{name}-{attempt}"
    raise Collision(f"No free folder for {artifact_type.value} {name!r} after {MAX_ATTEMPTS} attempts")


def make_unique(
    taxonomy: Taxonomy,
    artifact_type: ArtifactType,
    artifact: Artifact,
    rng: random.Random | None = None,
) -> Artifact:
    """
    Clone an artifact with a regenerated name, visual and tooling symbol.

    A random suffix is appended to all three until the clone no longer
    collides with the collection. Neither the input nor the taxonomy is
    modified.

    Raises:
        Collision: If no free suffix was found within MAX_ATTEMPTS
    """
    rng = rng or random.Random()
    for _ in range(MAX_ATTEMPTS):
        suffix = "".join(rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
        candidate = copy.deepcopy(artifact)
        candidate.name = f"{artifact.name}-{suffix}"
        candidate.symbol = ArtifactSymbol(
            tooling=f"{artifact.symbol.tooling}{suffix}",
            visual=f"{artifact.symbol.visual}{suffix}",
        )
        candidate.folder_name = None
        if check_unique(taxonomy, artifact_type, candidate):
            return candidate
    raise Collision(f"Could not find a unique symbol for {artifact.name!r} after {MAX_ATTEMPTS} attempts")


def make_unique_record(
    taxonomy: Taxonomy,
    artifact_type: ArtifactType,
    record: Record,
    rng: random.Random | None = None,
) -> Record:
    """Record-level ``make_unique``; keeps a template's formula in step with its symbol."""
    clone = copy.deepcopy(record)
    clone.artifact = make_unique(taxonomy, artifact_type, record.artifact, rng)
    if isinstance(clone, TokenTemplate):
        clone.formula = clone.artifact.tooling
    return clone

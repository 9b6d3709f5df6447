"""Artifact tree loading into a typed Taxonomy."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..errors import FolderMissing, ParseError
from ..models import (
    ArtifactContent,
    ArtifactFile,
    ArtifactType,
    Record,
    Taxonomy,
    record_from_dict,
)
from ..symbols import check_unique
from ..templates import find_template_problems

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = {".json", ".yaml", ".yml"}
CONTROL_SUFFIXES = {".proto"}
UML_SUFFIXES = {".md"}


def read_descriptor(path: Path) -> Any:
    """Parse a JSON or YAML descriptor file."""
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ParseError(f"{path.name}: {e}") from e


def _visible_files(directory: Path) -> list[Path]:
    return sorted(p for p in directory.iterdir() if p.is_file() and not p.name.startswith("."))


def _descriptors(directory: Path) -> list[Path]:
    return [p for p in _visible_files(directory) if p.suffix.lower() in DESCRIPTOR_SUFFIXES]


def find_descriptor(directory: Path) -> Path:
    """The single descriptor file of an artifact directory."""
    candidates = _descriptors(directory)
    if not candidates:
        raise ParseError(f"{directory.name}: no descriptor file")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise ParseError(f"{directory.name}: ambiguous descriptors ({names})")
    return candidates[0]


def classify_file(path: Path) -> ArtifactContent:
    suffix = path.suffix.lower()
    if suffix in CONTROL_SUFFIXES:
        return ArtifactContent.CONTROL
    if suffix in UML_SUFFIXES:
        return ArtifactContent.UML
    return ArtifactContent.OTHER


def attach_files(directory: Path, descriptor: Path, record: Record) -> None:
    """Attach every non-descriptor file of the directory to the record."""
    for path in _visible_files(directory):
        if path == descriptor:
            continue
        content = classify_file(path)
        if content == ArtifactContent.CONTROL:
            record.artifact.control_uri = path.name
        record.artifact.files.append(
            ArtifactFile(file_name=path.name, file_data=path.read_bytes(), content=content)
        )


def load_artifact(directory: Path, artifact_type: ArtifactType) -> Record:
    """Load one artifact directory into its typed record."""
    descriptor = find_descriptor(directory)
    record = record_from_dict(artifact_type, read_descriptor(descriptor))
    record.artifact.folder_name = directory.name
    attach_files(directory, descriptor, record)
    return record


def load_manifest(root: Path) -> Taxonomy:
    """Read the top-level manifest holding the taxonomy version."""
    candidates = _descriptors(root)
    if not candidates:
        raise FolderMissing(f"No taxonomy manifest found in {root}")
    if len(candidates) > 1:
        names = ", ".join(p.name for p in candidates)
        raise ParseError(f"Ambiguous taxonomy manifest in {root}: {names}")
    return Taxonomy.from_manifest(read_descriptor(candidates[0]))


def load_collection(taxonomy: Taxonomy, root: Path, artifact_type: ArtifactType) -> int:
    """
    Load one artifact-type folder into the taxonomy.

    Artifact directories are read in lexicographic order; an artifact whose
    name or tooling symbol is already present is skipped, so the first
    directory wins.

    Returns:
        Number of artifacts added
    """
    folder = root / artifact_type.folder
    if not folder.is_dir():
        logger.warning("%s artifact folder not found, skipping", artifact_type.folder)
        return 0

    logger.info("%s artifact folder found, loading", artifact_type.folder)
    collection = taxonomy.collection(artifact_type)
    loaded = 0

    for directory in sorted(p for p in folder.iterdir() if p.is_dir() and not p.name.startswith(".")):
        logger.debug("Loading %s", directory.name)
        try:
            record = load_artifact(directory, artifact_type)
        except (ParseError, OSError, UnicodeDecodeError) as e:
            # Log error but continue loading
            logger.error("Failed to load %s %s: %s", artifact_type.value, directory.name, e)
            continue

        if not check_unique(taxonomy, artifact_type, record.artifact):
            logger.warning(
                "Skipping %s %s: name %r or tooling symbol %r already loaded",
                artifact_type.value,
                directory.name,
                record.name,
                record.tooling,
            )
            continue

        collection[record.tooling] = record
        loaded += 1

    return loaded


def load_taxonomy(root: Path | str) -> Taxonomy:
    """Load the full artifact tree.

    Args:
        root: Artifact root holding the manifest and type folders

    Returns:
        Taxonomy with all loadable artifacts

    Raises:
        FolderMissing: If the root or its manifest is missing
        ParseError: If the manifest is ambiguous or malformed
    """
    root = Path(root)
    if not root.is_dir():
        raise FolderMissing(f"Artifact path not found: {root}")

    taxonomy = load_manifest(root)
    logger.info("Loaded taxonomy version %s from %s", taxonomy.version, root)

    for artifact_type in ArtifactType:
        load_collection(taxonomy, root, artifact_type)

    for problem in find_template_problems(taxonomy):
        logger.warning(problem)

    return taxonomy

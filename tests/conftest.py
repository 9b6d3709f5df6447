"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from tokentax.config import ServiceConfig
from tokentax.models import ArtifactType, Taxonomy
from tokentax.persistence import NullPersistence
from tokentax.service import TaxonomyService
from tokentax.store import TaxonomyStore, load_taxonomy


def descriptor(
    name: str,
    tooling: str,
    artifact_type: ArtifactType,
    visual: str | None = None,
    **fields: Any,
) -> dict[str, Any]:
    """Minimal descriptor dict for tests."""
    data: dict[str, Any] = {
        "artifact": {
            "name": name,
            "type": artifact_type.value,
            "artifactSymbol": {"toolingSymbol": tooling, "visualSymbol": visual or tooling},
        }
    }
    data.update(fields)
    return data


def write_artifact(
    root: Path,
    artifact_type: ArtifactType,
    folder: str,
    data: dict[str, Any],
    files: dict[str, bytes | str] | None = None,
) -> Path:
    directory = root / artifact_type.folder / folder
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{folder}.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    for file_name, content in (files or {}).items():
        if isinstance(content, str):
            (directory / file_name).write_text(content, encoding="utf-8")
        else:
            (directory / file_name).write_bytes(content)
    return directory


@pytest.fixture
def make_artifact() -> Callable[..., Path]:
    return write_artifact


@pytest.fixture
def make_descriptor() -> Callable[..., dict[str, Any]]:
    return descriptor


@pytest.fixture
def artifact_root(tmp_path: Path) -> Path:
    """A small artifact tree covering all five types."""
    root = tmp_path / "artifacts"
    root.mkdir()
    (root / "taxonomy.json").write_text(json.dumps({"version": "1.0"}), encoding="utf-8")

    write_artifact(
        root,
        ArtifactType.BASE,
        "fungible",
        descriptor(
            "Fungible",
            "F",
            ArtifactType.BASE,
            tokenType="Fungible",
            decimals=2,
            tokenProperties={"color": "blue"},
        ),
        files={
            "fungible.md": "---\ntitle: Fungible\n---\n# Fungible a TTF Base\n",
            "fungible.proto": 'syntax = "proto3";\n',
            "logo.bin": b"\x00\x01\x02",
        },
    )
    write_artifact(
        root,
        ArtifactType.BASE,
        "non-fungible",
        descriptor("NonFungible", "NF", ArtifactType.BASE, tokenType="NonFungible"),
    )
    write_artifact(
        root,
        ArtifactType.BEHAVIOR,
        "divisible",
        descriptor(
            "Divisible",
            "d",
            ArtifactType.BEHAVIOR,
            behaviorInvocations=[
                {
                    "name": "Split",
                    "request": {"controlMessageName": "SplitRequest", "inputParameters": [{"name": "parts"}]},
                    "response": {"controlMessageName": "SplitResponse"},
                }
            ],
        ),
    )
    write_artifact(root, ArtifactType.BEHAVIOR, "transferable", descriptor("Transferable", "t", ArtifactType.BEHAVIOR))
    write_artifact(
        root,
        ArtifactType.BEHAVIOR_GROUP,
        "supply-control",
        descriptor(
            "SupplyControl",
            "SC",
            ArtifactType.BEHAVIOR_GROUP,
            behaviorSymbols=[{"toolingSymbol": "m"}, {"toolingSymbol": "b"}],
        ),
    )
    write_artifact(
        root,
        ArtifactType.PROPERTY_SET,
        "sku",
        descriptor("SKU", "phSKU", ArtifactType.PROPERTY_SET, properties=[{"name": "SKU", "templateValue": ""}]),
    )
    write_artifact(
        root,
        ArtifactType.TOKEN_TEMPLATE,
        "divisible-fungible",
        descriptor(
            "DivisibleFungible",
            "tF{d,t}",
            ArtifactType.TOKEN_TEMPLATE,
            base={"toolingSymbol": "F"},
            behaviors=[{"toolingSymbol": "d"}, {"toolingSymbol": "t"}],
            behaviorGroups=[{"toolingSymbol": "SC"}],
            propertySets=[{"toolingSymbol": "phSKU"}],
        ),
    )
    write_artifact(
        root,
        ArtifactType.TOKEN_TEMPLATE,
        "hybrid",
        descriptor(
            "Hybrid",
            "tN{t}[tF{d,t}]",
            ArtifactType.TOKEN_TEMPLATE,
            templateType="Hybrid",
            base={"toolingSymbol": "NF"},
            behaviors=[{"toolingSymbol": "t"}, {"toolingSymbol": "missing"}],
            childTemplates=["tF{d,t}"],
        ),
    )
    return root


@pytest.fixture
def taxonomy(artifact_root: Path) -> Taxonomy:
    return load_taxonomy(artifact_root)


@pytest.fixture
def store(taxonomy: Taxonomy) -> TaxonomyStore:
    return TaxonomyStore(taxonomy)


@pytest.fixture
def config(artifact_root: Path) -> ServiceConfig:
    return ServiceConfig(artifact_path=artifact_root)


@pytest.fixture
def service(config: ServiceConfig) -> TaxonomyService:
    """Service writing through to the artifact tree."""
    return TaxonomyService(config).start()


@pytest.fixture
def memory_service(config: ServiceConfig) -> TaxonomyService:
    """Service that keeps mutations in memory only."""
    return TaxonomyService(config, persistence=NullPersistence()).start()

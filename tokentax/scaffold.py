"""
Artifact scaffolding.

Creates a new artifact directory populated with placeholder content for
its type: a descriptor, a markdown page with front matter and a
``.proto`` control file. The descriptor is parsed back into its typed
record before anything is written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import frontmatter

from .errors import Collision, ParseError
from .models import ArtifactType, Record, record_from_dict
from .store.loader import DESCRIPTOR_SUFFIXES

logger = logging.getLogger(__name__)

PROTO_TEMPLATE = """syntax = "proto3";

package taxonomy.ARTIFACT;

option csharp_namespace = "TTI.TTF.Taxonomy.ARTIFACT";
option java_package = "org.tti.ttf.taxonomy.ARTIFACT";
option java_multiple_files = true;

message ARTIFACT {
}
"""


def _message(name: str, description: str, key: str, params: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "controlMessageName": name,
        "description": description,
        key: [{"name": n, "valueDescription": v} for n, v in params],
    }


def _property_placeholders() -> list[dict[str, Any]]:
    return [
        {
            "name": "Property1",
            "valueDescription": "This is the property required to be implemented and should be able to contain data of type X.",
            "templateValue": "",
            "propertyInvocations": [
                {
                    "name": "Property1 Getter",
                    "description": "Request the value of the property",
                    "request": _message("GetProperty1Request", "The request", "inputParameters", []),
                    "response": _message(
                        "GetProperty1Response",
                        "The response",
                        "outputParameters",
                        [("Property1.Value", "Returning the value of the property.")],
                    ),
                },
                {
                    "name": "Property1 Setter",
                    "description": "Set the Value of the Property, note if Roles should be applied to the Setter.",
                    "request": _message(
                        "SetProperty1Request",
                        "The request",
                        "inputParameters",
                        [("New Value of Property", "The data to set the property to.")],
                    ),
                    "response": _message(
                        "SetProperty1Response",
                        "The response",
                        "outputParameters",
                        [("Result, true or false", "Returning the value of the set request.")],
                    ),
                },
            ],
        }
    ]


def placeholder_descriptor(artifact_type: ArtifactType, name: str, tooling: str, visual: str) -> dict[str, Any]:
    """Descriptor dict with placeholder content for a new artifact."""
    descriptor: dict[str, Any] = {
        "artifact": {
            "name": name,
            "type": artifact_type.value,
            "artifactSymbol": {"toolingSymbol": tooling, "visualSymbol": visual},
            "artifactDefinition": {
                "businessDescription": f"This is a {name} of type: {artifact_type.value}",
                "businessExample": "",
                "comments": "",
                "analogies": [{"name": "Analogy 1", "description": f"{name} analogy 1 description"}],
            },
            "maps": {
                "codeReferences": [{"mappingType": "SourceCode", "name": "Code 1", "platform": "", "referencePath": ""}],
                "implementationReferences": [
                    {"mappingType": "SourceCode", "name": "Implementation 1", "platform": "", "referencePath": ""}
                ],
                "resources": [
                    {"mappingType": "Regulation", "name": "Regulation Reference 1", "description": "", "resourcePath": ""}
                ],
            },
            "incompatibleWithSymbols": [],
            "influencedBySymbols": [],
            "aliases": ["alias1", "alias2"],
            "controlUri": f"{name}.proto",
        }
    }

    if artifact_type == ArtifactType.BASE:
        descriptor["artifact"]["influencedBySymbols"] = [
            {
                "description": "Whether or not the token class will be sub-dividable will influence the "
                "decimals value of this token. If it is non-sub-dividable, the decimals value should be 0.",
                "symbol": {"toolingSymbol": "~d", "visualSymbol": "~d"},
            }
        ]
        descriptor.update(
            {
                "tokenType": "Fungible",
                "representationType": "Common",
                "valueType": "Intrinsic",
                "tokenUnit": "Fractional",
                "symbol": "",
                "owner": "",
                "quantity": 0,
                "decimals": 0,
                "tokenProperties": {},
            }
        )
    elif artifact_type == ArtifactType.BEHAVIOR:
        descriptor.update(
            {
                "behaviorConstructorName": "",
                "behaviorInvocations": [
                    {
                        "name": "InvocationRequest1",
                        "description": "Describe the what the this invocation triggers in the behavior",
                        "request": _message(
                            "InvocationRequest",
                            "The request",
                            "inputParameters",
                            [("Input Parameter 1", "Contains some input data required for the invocation to work.")],
                        ),
                        "response": _message(
                            "InvocationResponse",
                            "The response",
                            "outputParameters",
                            [("Output Parameter 1", "One of the values that the invocation should return.")],
                        ),
                    }
                ],
                "behavioralProperties": _property_placeholders(),
            }
        )
    elif artifact_type == ArtifactType.BEHAVIOR_GROUP:
        descriptor["behaviorSymbols"] = [
            {"toolingSymbol": f"Symbol{i}", "visualSymbol": f"Symbol{i}"} for i in (1, 2, 3)
        ]
    elif artifact_type == ArtifactType.PROPERTY_SET:
        descriptor["properties"] = _property_placeholders()
    elif artifact_type == ArtifactType.TOKEN_TEMPLATE:
        descriptor.update(
            {
                "formula": tooling,
                "templateType": "SingleToken",
                "base": None,
                "behaviors": [],
                "behaviorGroups": [],
                "propertySets": [],
                "childTemplates": [],
            }
        )
    return descriptor


def render_markdown(artifact_type: ArtifactType, name: str, tooling: str) -> str:
    post = frontmatter.Post(
        f"# {name} a TTF {artifact_type.value}\n",
        name=name,
        type=artifact_type.value,
        tooling_symbol=tooling,
    )
    return frontmatter.dumps(post) + "\n"


def scaffold_artifact(
    root: Path | str,
    artifact_type: ArtifactType | str | int,
    name: str,
    *,
    tooling: str | None = None,
    visual: str | None = None,
) -> tuple[Path, Record]:
    """
    Create ``<root>/<type folder>/<name>/`` with placeholder files.

    Args:
        root: Artifact root
        artifact_type: Type of the new artifact
        name: Artifact name, also the directory and file stem
        tooling: Tooling symbol; defaults to the name
        visual: Visual symbol; defaults to the tooling symbol

    Returns:
        The artifact directory and the parsed record

    Raises:
        InvalidArgument: For an unknown artifact type
        ValueError: If the name cannot be used as a directory name
        Collision: If the directory already holds a descriptor
        ParseError: If the generated descriptor does not parse back
    """
    artifact_type = ArtifactType.parse(artifact_type)
    name = name.strip()
    if not name or "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"Invalid artifact name: {name!r}")
    tooling = tooling or name
    visual = visual or tooling

    directory = Path(root) / artifact_type.folder / name
    if directory.is_dir() and any(p.suffix.lower() in DESCRIPTOR_SUFFIXES for p in directory.iterdir()):
        raise Collision(f"{directory} already contains an artifact descriptor")

    descriptor = placeholder_descriptor(artifact_type, name, tooling, visual)
    text = json.dumps(descriptor, indent=2, ensure_ascii=False) + "\n"
    try:
        record = record_from_dict(artifact_type, json.loads(text))
    except ParseError:
        logger.error("Generated %s descriptor failed to parse back", artifact_type.value)
        raise
    logger.info("%s %s successfully deserialized", artifact_type.value, name)

    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{name}.json").write_text(text, encoding="utf-8")
    (directory / f"{name}.md").write_text(render_markdown(artifact_type, name, tooling), encoding="utf-8")
    (directory / f"{name}.proto").write_text(PROTO_TEMPLATE.replace("ARTIFACT", name), encoding="utf-8")
    logger.info("Scaffolded %s %s at %s", artifact_type.value, name, directory)
    return directory, record

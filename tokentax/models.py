"""Data models for taxonomy artifacts.

Descriptors on disk use the camelCase protobuf-JSON shape, e.g.::

    {
      "artifact": {
        "name": "Fungible",
        "type": "Base",
        "artifactSymbol": {"toolingSymbol": "F", "visualSymbol": "F"},
        ...
      },
      "tokenType": "Fungible",
      ...
    }

Every record carries the shared ``Artifact`` envelope plus its own fields.
``from_dict`` raises ``ParseError`` on malformed input; ``to_dict`` produces
the descriptor shape back (embedded files are not part of a descriptor).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

import frontmatter

from .errors import InvalidArgument, ParseError


class ArtifactType(str, Enum):
    """The five artifact collections of a taxonomy."""

    BASE = "Base"
    BEHAVIOR = "Behavior"
    BEHAVIOR_GROUP = "BehaviorGroup"
    PROPERTY_SET = "PropertySet"
    TOKEN_TEMPLATE = "TokenTemplate"

    @property
    def folder(self) -> str:
        """Subfolder of the artifact root holding this type."""
        return ARTIFACT_FOLDERS[self]

    @classmethod
    def parse(cls, value: Any) -> "ArtifactType":
        """Coerce a type, ordinal (0-4), value, member name or folder name.

        Raises:
            InvalidArgument: If the value names no artifact type
        """
        if isinstance(value, cls):
            return value
        members = list(cls)
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < len(members):
                return members[value]
            raise InvalidArgument(f"Unknown artifact type ordinal: {value}")
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
            for member in members:
                candidates = {
                    member.value.lower(),
                    member.name.lower().replace("_", ""),
                    member.folder.replace("-", ""),
                }
                if key in candidates:
                    return member
            if key.isdigit():
                return cls.parse(int(key))
        raise InvalidArgument(f"Unknown artifact type: {value!r}")


ARTIFACT_FOLDERS: dict[ArtifactType, str] = {
    ArtifactType.BASE: "base",
    ArtifactType.BEHAVIOR: "behaviors",
    ArtifactType.BEHAVIOR_GROUP: "behavior-groups",
    ArtifactType.PROPERTY_SET: "property-sets",
    ArtifactType.TOKEN_TEMPLATE: "token-templates",
}


class ArtifactContent(str, Enum):
    """Classification of a file embedded in an artifact directory."""

    CONTROL = "Control"  # schema (.proto)
    UML = "Uml"  # markdown
    OTHER = "Other"  # raw bytes


# -----------------------------------------------------------------------------
# Coercion helpers
# -----------------------------------------------------------------------------


def _mapping(value: Any, where: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{where}: expected an object, got {type(value).__name__}")
    return value


def _items(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"{where}: expected a list, got {type(value).__name__}")
    return value


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _int(value: Any, where: str) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"{where}: expected an integer, got {value!r}") from e


# -----------------------------------------------------------------------------
# Artifact envelope
# -----------------------------------------------------------------------------


@dataclass
class ArtifactSymbol:
    """Tooling (machine) and visual (display) symbol pair."""

    tooling: str = ""
    visual: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ArtifactSymbol":
        # A bare string is shorthand for identical tooling and visual symbols
        if isinstance(data, str):
            return cls(tooling=data, visual=data)
        data = _mapping(data, "artifactSymbol")
        return cls(
            tooling=_text(data.get("toolingSymbol", data.get("tooling"))),
            visual=_text(data.get("visualSymbol", data.get("visual"))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"toolingSymbol": self.tooling, "visualSymbol": self.visual}


@dataclass
class Analogy:
    name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Analogy":
        data = _mapping(data, "analogies[]")
        return cls(name=_text(data.get("name")), description=_text(data.get("description")))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description}


@dataclass
class ArtifactDefinition:
    """Business-facing description of an artifact."""

    business_description: str = ""
    business_example: str = ""
    comments: str = ""
    analogies: list[Analogy] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ArtifactDefinition":
        data = _mapping(data, "artifactDefinition")
        return cls(
            business_description=_text(data.get("businessDescription")),
            business_example=_text(data.get("businessExample")),
            comments=_text(data.get("comments")),
            analogies=[Analogy.from_dict(a) for a in _items(data.get("analogies"), "analogies")],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "businessDescription": self.business_description,
            "businessExample": self.business_example,
            "comments": self.comments,
            "analogies": [a.to_dict() for a in self.analogies],
        }


@dataclass
class MapReference:
    """Link from an artifact to source code or an implementation."""

    mapping_type: str = ""
    name: str = ""
    platform: str = ""
    reference_path: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "MapReference":
        data = _mapping(data, "maps reference")
        return cls(
            mapping_type=_text(data.get("mappingType")),
            name=_text(data.get("name")),
            platform=_text(data.get("platform")),
            reference_path=_text(data.get("referencePath")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "mappingType": self.mapping_type,
            "name": self.name,
            "platform": self.platform,
            "referencePath": self.reference_path,
        }


@dataclass
class MapResource:
    """Link from an artifact to an external resource (regulation, paper)."""

    mapping_type: str = ""
    name: str = ""
    description: str = ""
    resource_path: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "MapResource":
        data = _mapping(data, "maps resource")
        return cls(
            mapping_type=_text(data.get("mappingType")),
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            resource_path=_text(data.get("resourcePath")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "mappingType": self.mapping_type,
            "name": self.name,
            "description": self.description,
            "resourcePath": self.resource_path,
        }


@dataclass
class Maps:
    code_references: list[MapReference] = field(default_factory=list)
    implementation_references: list[MapReference] = field(default_factory=list)
    resources: list[MapResource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Maps":
        data = _mapping(data, "maps")
        return cls(
            code_references=[
                MapReference.from_dict(r) for r in _items(data.get("codeReferences"), "codeReferences")
            ],
            implementation_references=[
                MapReference.from_dict(r)
                for r in _items(data.get("implementationReferences"), "implementationReferences")
            ],
            resources=[MapResource.from_dict(r) for r in _items(data.get("resources"), "resources")],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "codeReferences": [r.to_dict() for r in self.code_references],
            "implementationReferences": [r.to_dict() for r in self.implementation_references],
            "resources": [r.to_dict() for r in self.resources],
        }


@dataclass
class SymbolInfluence:
    """Another artifact whose presence influences this one."""

    description: str = ""
    symbol: ArtifactSymbol = field(default_factory=ArtifactSymbol)

    @classmethod
    def from_dict(cls, data: Any) -> "SymbolInfluence":
        data = _mapping(data, "influencedBySymbols[]")
        return cls(
            description=_text(data.get("description")),
            symbol=ArtifactSymbol.from_dict(data.get("symbol")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "symbol": self.symbol.to_dict()}


@dataclass
class ArtifactFile:
    """A supporting file attached to an artifact directory."""

    file_name: str
    file_data: bytes = b""
    content: ArtifactContent = ArtifactContent.OTHER

    def text(self) -> str:
        return self.file_data.decode("utf-8", errors="replace")

    def markdown(self) -> frontmatter.Post:
        """Parse a Uml file, splitting off its YAML front matter."""
        return frontmatter.loads(self.text())


@dataclass
class Artifact:
    """Universal envelope shared by every taxonomy entry."""

    name: str
    symbol: ArtifactSymbol = field(default_factory=ArtifactSymbol)
    type: ArtifactType | None = None
    definition: ArtifactDefinition = field(default_factory=ArtifactDefinition)
    maps: Maps = field(default_factory=Maps)
    incompatible_with: list[ArtifactSymbol] = field(default_factory=list)
    influenced_by: list[SymbolInfluence] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    control_uri: str = ""
    files: list[ArtifactFile] = field(default_factory=list)
    # Directory the artifact was loaded from; not part of the descriptor
    folder_name: str | None = None

    @property
    def tooling(self) -> str:
        return self.symbol.tooling

    @classmethod
    def from_dict(cls, data: Any) -> "Artifact":
        data = _mapping(data, "artifact")
        name = _text(data.get("name")).strip()
        if not name:
            raise ParseError("artifact: missing name")

        raw_type = data.get("type")
        try:
            artifact_type = ArtifactType.parse(raw_type) if raw_type not in (None, "") else None
        except InvalidArgument as e:
            raise ParseError(f"artifact {name!r}: {e}") from e

        aliases = data.get("aliases", [])
        if isinstance(aliases, str):
            aliases = [aliases]

        return cls(
            name=name,
            symbol=ArtifactSymbol.from_dict(data.get("artifactSymbol")),
            type=artifact_type,
            definition=ArtifactDefinition.from_dict(data.get("artifactDefinition")),
            maps=Maps.from_dict(data.get("maps")),
            incompatible_with=[
                ArtifactSymbol.from_dict(s)
                for s in _items(data.get("incompatibleWithSymbols"), "incompatibleWithSymbols")
            ],
            influenced_by=[
                SymbolInfluence.from_dict(s)
                for s in _items(data.get("influencedBySymbols"), "influencedBySymbols")
            ],
            aliases=[_text(a) for a in _items(aliases, "aliases")],
            control_uri=_text(data.get("controlUri")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value if self.type else "",
            "artifactSymbol": self.symbol.to_dict(),
            "artifactDefinition": self.definition.to_dict(),
            "maps": self.maps.to_dict(),
            "incompatibleWithSymbols": [s.to_dict() for s in self.incompatible_with],
            "influencedBySymbols": [s.to_dict() for s in self.influenced_by],
            "aliases": list(self.aliases),
            "controlUri": self.control_uri,
        }


# -----------------------------------------------------------------------------
# Invocations and properties
# -----------------------------------------------------------------------------


@dataclass
class InvocationParameter:
    name: str = ""
    value_description: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "InvocationParameter":
        data = _mapping(data, "parameter")
        return cls(name=_text(data.get("name")), value_description=_text(data.get("valueDescription")))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "valueDescription": self.value_description}


@dataclass
class InvocationMessage:
    """Request or response half of an invocation."""

    control_message_name: str = ""
    description: str = ""
    parameters: list[InvocationParameter] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, parameters_key: str) -> "InvocationMessage":
        data = _mapping(data, parameters_key)
        return cls(
            control_message_name=_text(data.get("controlMessageName")),
            description=_text(data.get("description")),
            parameters=[
                InvocationParameter.from_dict(p) for p in _items(data.get(parameters_key), parameters_key)
            ],
        )

    def to_dict(self, parameters_key: str) -> dict[str, Any]:
        return {
            "controlMessageName": self.control_message_name,
            "description": self.description,
            parameters_key: [p.to_dict() for p in self.parameters],
        }


@dataclass
class Invocation:
    name: str = ""
    description: str = ""
    request: InvocationMessage = field(default_factory=InvocationMessage)
    response: InvocationMessage = field(default_factory=InvocationMessage)

    @classmethod
    def from_dict(cls, data: Any) -> "Invocation":
        data = _mapping(data, "invocation")
        return cls(
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            request=InvocationMessage.from_dict(data.get("request"), "inputParameters"),
            response=InvocationMessage.from_dict(data.get("response"), "outputParameters"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "request": self.request.to_dict("inputParameters"),
            "response": self.response.to_dict("outputParameters"),
        }


@dataclass
class Property:
    """A property with its getter/setter invocations."""

    name: str = ""
    value_description: str = ""
    template_value: str = ""
    invocations: list[Invocation] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Property":
        data = _mapping(data, "property")
        return cls(
            name=_text(data.get("name")),
            value_description=_text(data.get("valueDescription")),
            template_value=_text(data.get("templateValue")),
            invocations=[
                Invocation.from_dict(i) for i in _items(data.get("propertyInvocations"), "propertyInvocations")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "valueDescription": self.value_description,
            "templateValue": self.template_value,
            "propertyInvocations": [i.to_dict() for i in self.invocations],
        }


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------


@dataclass
class Record:
    """Base class for the five record kinds; wraps the artifact envelope."""

    artifact_type: ClassVar[ArtifactType]

    artifact: Artifact

    @property
    def tooling(self) -> str:
        return self.artifact.symbol.tooling

    @property
    def name(self) -> str:
        return self.artifact.name

    @classmethod
    def _artifact_from(cls, data: Any) -> tuple[dict[str, Any], Artifact]:
        data = _mapping(data, cls.artifact_type.value)
        if "artifact" not in data:
            raise ParseError(f"{cls.artifact_type.value}: descriptor has no 'artifact' block")
        artifact = Artifact.from_dict(data["artifact"])
        if artifact.type is None:
            artifact.type = cls.artifact_type
        elif artifact.type != cls.artifact_type:
            raise ParseError(
                f"artifact {artifact.name!r}: declared type {artifact.type.value} "
                f"in a {cls.artifact_type.value} descriptor"
            )
        return data, artifact

    def to_dict(self) -> dict[str, Any]:
        return {"artifact": self.artifact.to_dict()}


@dataclass
class Base(Record):
    """Base token type and its token-economics attributes."""

    artifact_type: ClassVar[ArtifactType] = ArtifactType.BASE

    token_type: str = ""
    representation_type: str = ""
    value_type: str = ""
    token_unit: str = ""
    symbol: str = ""
    owner: str = ""
    quantity: int = 0
    decimals: int = 0
    properties: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Base":
        data, artifact = cls._artifact_from(data)
        props = _mapping(data.get("tokenProperties"), "tokenProperties")
        return cls(
            artifact=artifact,
            token_type=_text(data.get("tokenType")),
            representation_type=_text(data.get("representationType")),
            value_type=_text(data.get("valueType")),
            token_unit=_text(data.get("tokenUnit")),
            symbol=_text(data.get("symbol")),
            owner=_text(data.get("owner")),
            quantity=_int(data.get("quantity"), "quantity"),
            decimals=_int(data.get("decimals"), "decimals"),
            properties={str(k): _text(v) for k, v in props.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update(
            {
                "tokenType": self.token_type,
                "representationType": self.representation_type,
                "valueType": self.value_type,
                "tokenUnit": self.token_unit,
                "symbol": self.symbol,
                "owner": self.owner,
                "quantity": self.quantity,
                "decimals": self.decimals,
                "tokenProperties": dict(self.properties),
            }
        )
        return d


@dataclass
class Behavior(Record):
    artifact_type: ClassVar[ArtifactType] = ArtifactType.BEHAVIOR

    constructor_name: str = ""
    invocations: list[Invocation] = field(default_factory=list)
    properties: list[Property] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Behavior":
        data, artifact = cls._artifact_from(data)
        return cls(
            artifact=artifact,
            constructor_name=_text(data.get("behaviorConstructorName")),
            invocations=[
                Invocation.from_dict(i) for i in _items(data.get("behaviorInvocations"), "behaviorInvocations")
            ],
            properties=[
                Property.from_dict(p) for p in _items(data.get("behavioralProperties"), "behavioralProperties")
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update(
            {
                "behaviorConstructorName": self.constructor_name,
                "behaviorInvocations": [i.to_dict() for i in self.invocations],
                "behavioralProperties": [p.to_dict() for p in self.properties],
            }
        )
        return d


@dataclass
class BehaviorGroup(Record):
    artifact_type: ClassVar[ArtifactType] = ArtifactType.BEHAVIOR_GROUP

    behaviors: list[ArtifactSymbol] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "BehaviorGroup":
        data, artifact = cls._artifact_from(data)
        return cls(
            artifact=artifact,
            behaviors=[ArtifactSymbol.from_dict(s) for s in _items(data.get("behaviorSymbols"), "behaviorSymbols")],
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["behaviorSymbols"] = [s.to_dict() for s in self.behaviors]
        return d


@dataclass
class PropertySet(Record):
    artifact_type: ClassVar[ArtifactType] = ArtifactType.PROPERTY_SET

    properties: list[Property] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "PropertySet":
        data, artifact = cls._artifact_from(data)
        return cls(
            artifact=artifact,
            properties=[Property.from_dict(p) for p in _items(data.get("properties"), "properties")],
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["properties"] = [p.to_dict() for p in self.properties]
        return d


@dataclass
class TokenTemplate(Record):
    """Composition of a base, behaviors, groups and property sets.

    The formula id doubles as the template's tooling symbol. Children are
    referenced by formula id, so the template collection is an arena and
    the tree is walked by lookup (see ``tokentax.templates``).
    """

    artifact_type: ClassVar[ArtifactType] = ArtifactType.TOKEN_TEMPLATE

    formula: str = ""
    template_type: str = "SingleToken"
    base: ArtifactSymbol | None = None
    behaviors: list[ArtifactSymbol] = field(default_factory=list)
    behavior_groups: list[ArtifactSymbol] = field(default_factory=list)
    property_sets: list[ArtifactSymbol] = field(default_factory=list)
    child_templates: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "TokenTemplate":
        data, artifact = cls._artifact_from(data)

        formula = _text(data.get("formula")).strip()
        tooling = artifact.symbol.tooling
        if formula and tooling and formula != tooling:
            raise ParseError(
                f"template {artifact.name!r}: formula {formula!r} differs from tooling symbol {tooling!r}"
            )
        formula = formula or tooling
        if not tooling:
            artifact.symbol.tooling = formula
            artifact.symbol.visual = artifact.symbol.visual or formula

        base = data.get("base")
        children = []
        for child in _items(data.get("childTemplates"), "childTemplates"):
            # Accept either a formula id or an object carrying one
            if isinstance(child, dict):
                child = child.get("formula", "")
            children.append(_text(child))

        return cls(
            artifact=artifact,
            formula=formula,
            template_type=_text(data.get("templateType")) or "SingleToken",
            base=ArtifactSymbol.from_dict(base) if base else None,
            behaviors=[ArtifactSymbol.from_dict(s) for s in _items(data.get("behaviors"), "behaviors")],
            behavior_groups=[
                ArtifactSymbol.from_dict(s) for s in _items(data.get("behaviorGroups"), "behaviorGroups")
            ],
            property_sets=[ArtifactSymbol.from_dict(s) for s in _items(data.get("propertySets"), "propertySets")],
            child_templates=[c for c in children if c],
        )

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d.update(
            {
                "formula": self.formula,
                "templateType": self.template_type,
                "base": self.base.to_dict() if self.base else None,
                "behaviors": [s.to_dict() for s in self.behaviors],
                "behaviorGroups": [s.to_dict() for s in self.behavior_groups],
                "propertySets": [s.to_dict() for s in self.property_sets],
                "childTemplates": list(self.child_templates),
            }
        )
        return d

    def formula_view(self) -> "TemplateFormula":
        return TemplateFormula(
            formula=self.formula,
            template_type=self.template_type,
            base=self.base.tooling if self.base else "",
            behaviors=[s.tooling for s in self.behaviors],
            behavior_groups=[s.tooling for s in self.behavior_groups],
            property_sets=[s.tooling for s in self.property_sets],
            child_templates=list(self.child_templates),
        )


RECORD_TYPES: dict[ArtifactType, type[Record]] = {
    ArtifactType.BASE: Base,
    ArtifactType.BEHAVIOR: Behavior,
    ArtifactType.BEHAVIOR_GROUP: BehaviorGroup,
    ArtifactType.PROPERTY_SET: PropertySet,
    ArtifactType.TOKEN_TEMPLATE: TokenTemplate,
}


def record_from_dict(artifact_type: ArtifactType, data: Any) -> Record:
    """Parse a descriptor into the typed record for its collection.

    Raises:
        ParseError: If the descriptor is malformed or has no tooling symbol
    """
    record = RECORD_TYPES[artifact_type].from_dict(data)
    if not record.tooling.strip():
        raise ParseError(f"artifact {record.name!r}: missing tooling symbol")
    return record


# -----------------------------------------------------------------------------
# Aggregate and views
# -----------------------------------------------------------------------------


@dataclass
class Taxonomy:
    """Versioned aggregate of the five symbol-keyed collections."""

    version: str
    bases: dict[str, Base] = field(default_factory=dict)
    behaviors: dict[str, Behavior] = field(default_factory=dict)
    behavior_groups: dict[str, BehaviorGroup] = field(default_factory=dict)
    property_sets: dict[str, PropertySet] = field(default_factory=dict)
    token_templates: dict[str, TokenTemplate] = field(default_factory=dict)

    def collection(self, artifact_type: ArtifactType) -> dict[str, Any]:
        """The mutable dict backing one collection."""
        return {
            ArtifactType.BASE: self.bases,
            ArtifactType.BEHAVIOR: self.behaviors,
            ArtifactType.BEHAVIOR_GROUP: self.behavior_groups,
            ArtifactType.PROPERTY_SET: self.property_sets,
            ArtifactType.TOKEN_TEMPLATE: self.token_templates,
        }[artifact_type]

    def counts(self) -> dict[ArtifactType, int]:
        return {t: len(self.collection(t)) for t in ArtifactType}

    def lite(self) -> "Taxonomy":
        """Deep copy with embedded file blobs stripped."""
        clone = copy.deepcopy(self)
        for artifact_type in ArtifactType:
            for record in clone.collection(artifact_type).values():
                record.artifact.files = []
        return clone

    @classmethod
    def from_manifest(cls, data: Any) -> "Taxonomy":
        data = _mapping(data, "manifest")
        version = _text(data.get("version")).strip()
        if not version:
            raise ParseError("manifest: missing version")
        return cls(version=version)


@dataclass
class TemplateFormula:
    """A template's composition expressed purely as symbol references."""

    formula: str
    template_type: str = "SingleToken"
    base: str = ""
    behaviors: list[str] = field(default_factory=list)
    behavior_groups: list[str] = field(default_factory=list)
    property_sets: list[str] = field(default_factory=list)
    child_templates: list[str] = field(default_factory=list)


@dataclass
class TokenTemplateId:
    """Identifies a template by formula id or by definition (template) name."""

    formula_id: str = ""
    definition_id: str = ""


@dataclass
class TokenSpecification:
    """A template with every reference resolved against the taxonomy."""

    template: TokenTemplate
    base: Base | None = None
    behaviors: list[Behavior] = field(default_factory=list)
    behavior_groups: list[BehaviorGroup] = field(default_factory=list)
    property_sets: list[PropertySet] = field(default_factory=list)
    child_tokens: list["TokenSpecification"] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)

    @property
    def formula(self) -> str:
        return self.template.formula

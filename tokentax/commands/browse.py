"""Read-only commands: summary, list, show, spec."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from ..config import ServiceConfig
from ..errors import InvalidArgument, NotFound, ParseError
from ..models import ArtifactType, TokenSpecification, TokenTemplateId
from ..query import QueryOptions
from . import start_service


def run_summary(config: ServiceConfig) -> int:
    console = Console()
    err = Console(stderr=True)
    service = start_service(config, err)
    if service is None:
        return 1

    taxonomy = service.get_full_taxonomy()
    table = Table(title=f"Taxonomy {taxonomy.version}")
    table.add_column("type", style="magenta")
    table.add_column("folder", style="dim")
    table.add_column("count", justify="right")
    for artifact_type, count in taxonomy.counts().items():
        table.add_row(artifact_type.value, artifact_type.folder, str(count))

    console.print(table)
    return 0


def run_list(
    config: ServiceConfig,
    artifact_type: str,
    *,
    max_items: int = 100,
    start: int = 0,
    output_json: bool = False,
) -> int:
    """Print one page of a collection."""
    console = Console()
    err = Console(stderr=True)
    service = start_service(config, err)
    if service is None:
        return 1

    try:
        result = service.list_by_type(QueryOptions(artifact_type, max_items, start))
    except InvalidArgument as e:
        err.print(str(e), style="bold red")
        return 2

    if output_json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    table = Table(title=f"{result.artifact_type.value} artifacts")
    table.add_column("tooling", style="cyan", no_wrap=True)
    table.add_column("visual")
    table.add_column("name")
    table.add_column("folder", style="dim")
    for record in result.collection:
        table.add_row(
            record.tooling,
            record.artifact.symbol.visual,
            record.name,
            record.artifact.folder_name or "",
        )
    console.print(table)

    if len(result.collection):
        console.print(
            f"items {result.first_item_index}-{result.last_item_index} "
            f"of {result.total_items_in_collection}",
            style="dim",
        )
    else:
        console.print(f"no items (collection holds {result.total_items_in_collection})", style="dim")
    return 0


def run_show(config: ServiceConfig, artifact_type: str, symbol: str, *, output_json: bool = False) -> int:
    console = Console()
    err = Console(stderr=True)
    service = start_service(config, err)
    if service is None:
        return 1

    try:
        kind = ArtifactType.parse(artifact_type)
        record = service.store.get(kind, symbol)
    except (InvalidArgument, NotFound) as e:
        err.print(str(e), style="bold red")
        return 1

    if output_json:
        print(json.dumps(record.to_dict(), indent=2))
        return 0

    artifact = record.artifact
    console.print(f"[bold]{artifact.name}[/bold] ({kind.value})")
    console.print(f"tooling: {artifact.symbol.tooling}  visual: {artifact.symbol.visual}")
    if artifact.folder_name:
        console.print(f"folder: {kind.folder}/{artifact.folder_name}", style="dim")
    if artifact.definition.business_description:
        console.print(artifact.definition.business_description)
    if artifact.aliases:
        console.print(f"aliases: {', '.join(artifact.aliases)}", style="dim")
    for f in artifact.files:
        console.print(f"  - {f.file_name} [{f.content.value}, {len(f.file_data)} bytes]", style="dim")
    return 0


def _spec_tree(spec: TokenSpecification, tree: Tree) -> None:
    if spec.base is not None:
        tree.add(f"base: {spec.base.tooling} ({spec.base.name})")
    for behavior in spec.behaviors:
        tree.add(f"behavior: {behavior.tooling} ({behavior.name})")
    for group in spec.behavior_groups:
        tree.add(f"behavior group: {group.tooling} ({group.name})")
    for property_set in spec.property_sets:
        tree.add(f"property set: {property_set.tooling} ({property_set.name})")
    for missing in spec.unresolved:
        tree.add(f"[red]unresolved {missing}[/red]")
    for child in spec.child_tokens:
        _spec_tree(child, tree.add(f"[bold]{child.formula}[/bold]"))


def run_spec(config: ServiceConfig, formula: str | None = None, *, name: str | None = None) -> int:
    """Print a template's resolved specification as a tree."""
    console = Console()
    err = Console(stderr=True)
    service = start_service(config, err)
    if service is None:
        return 1

    try:
        spec = service.get_token_specification(TokenTemplateId(formula_id=formula or "", definition_id=name or ""))
    except (InvalidArgument, NotFound, ParseError) as e:
        err.print(str(e), style="bold red")
        return 1

    tree = Tree(f"[bold]{spec.formula}[/bold] {spec.template.name}")
    _spec_tree(spec, tree)
    console.print(tree)
    return 1 if spec.unresolved else 0

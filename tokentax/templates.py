"""
Token template tree resolution.

Templates reference their children by formula id, so the template
collection acts as an arena. Every walk here tracks the current path to
detect cycles and stops at a maximum depth.
"""

from __future__ import annotations

from .errors import NotFound, ParseError, TemplateCycle
from .models import ArtifactType, Taxonomy, TokenSpecification

DEFAULT_MAX_DEPTH = 32


def resolve_specification(
    taxonomy: Taxonomy,
    formula: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> TokenSpecification:
    """
    Resolve a template and its children against the taxonomy.

    Missing base/behavior/group/property-set references and missing
    children are recorded in ``unresolved`` rather than raised.

    Raises:
        NotFound: If the root formula is not a template
        TemplateCycle: If a child refers back to one of its ancestors
        ParseError: If nesting exceeds max_depth
    """
    if formula not in taxonomy.token_templates:
        raise NotFound(f"No TokenTemplate with formula {formula!r}")
    return _resolve(taxonomy, formula, max_depth, ())


def _resolve(taxonomy: Taxonomy, formula: str, max_depth: int, path: tuple[str, ...]) -> TokenSpecification:
    if formula in path:
        raise TemplateCycle("Template cycle: " + " -> ".join((*path, formula)))
    if len(path) >= max_depth:
        raise ParseError(f"Template nesting under {path[0]!r} exceeds depth {max_depth}")

    template = taxonomy.token_templates[formula]
    spec = TokenSpecification(template=template)

    if template.base is not None:
        spec.base = taxonomy.bases.get(template.base.tooling)
        if spec.base is None:
            spec.unresolved.append(f"{ArtifactType.BASE.value}:{template.base.tooling}")

    for ref_type, refs, target, found in (
        (ArtifactType.BEHAVIOR, template.behaviors, taxonomy.behaviors, spec.behaviors),
        (ArtifactType.BEHAVIOR_GROUP, template.behavior_groups, taxonomy.behavior_groups, spec.behavior_groups),
        (ArtifactType.PROPERTY_SET, template.property_sets, taxonomy.property_sets, spec.property_sets),
    ):
        for ref in refs:
            record = target.get(ref.tooling)
            if record is None:
                spec.unresolved.append(f"{ref_type.value}:{ref.tooling}")
            else:
                found.append(record)

    for child in template.child_templates:
        if child not in taxonomy.token_templates:
            spec.unresolved.append(f"{ArtifactType.TOKEN_TEMPLATE.value}:{child}")
            continue
        spec.child_tokens.append(_resolve(taxonomy, child, max_depth, (*path, formula)))

    return spec


def find_template_cycles(taxonomy: Taxonomy) -> list[list[str]]:
    """Every cycle among child references, each as a closed formula path."""
    templates = taxonomy.token_templates
    visiting: set[str] = set()
    done: set[str] = set()
    cycles: list[list[str]] = []

    def visit(formula: str, stack: list[str]) -> None:
        visiting.add(formula)
        stack.append(formula)
        for child in templates[formula].child_templates:
            if child not in templates:
                continue
            if child in visiting:
                cycles.append(stack[stack.index(child):] + [child])
            elif child not in done:
                visit(child, stack)
        stack.pop()
        visiting.discard(formula)
        done.add(formula)

    for formula in sorted(templates):
        if formula not in done:
            visit(formula, [])
    return cycles


def find_template_problems(taxonomy: Taxonomy) -> list[str]:
    """Human-readable dangling child references and cycles."""
    problems = []
    for formula in sorted(taxonomy.token_templates):
        for child in taxonomy.token_templates[formula].child_templates:
            if child not in taxonomy.token_templates:
                problems.append(f"Template {formula!r} references missing child {child!r}")
    for cycle in find_template_cycles(taxonomy):
        problems.append("Template cycle: " + " -> ".join(cycle))
    return problems

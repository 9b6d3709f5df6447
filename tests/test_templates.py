"""Tests for token template resolution."""

from __future__ import annotations

import pytest

from tokentax.errors import NotFound, ParseError, TemplateCycle
from tokentax.models import ArtifactSymbol, TokenTemplate
from tokentax.templates import find_template_cycles, find_template_problems, resolve_specification


def _template(formula: str, children: list[str]) -> TokenTemplate:
    return TokenTemplate.from_dict(
        {
            "artifact": {"name": f"T-{formula}", "artifactSymbol": formula},
            "childTemplates": children,
        }
    )


def test_resolves_references(taxonomy):
    spec = resolve_specification(taxonomy, "tF{d,t}")
    assert spec.formula == "tF{d,t}"
    assert spec.base.name == "Fungible"
    assert [b.tooling for b in spec.behaviors] == ["d", "t"]
    assert [g.tooling for g in spec.behavior_groups] == ["SC"]
    assert [p.tooling for p in spec.property_sets] == ["phSKU"]
    assert spec.unresolved == []


def test_children_and_unresolved(taxonomy):
    spec = resolve_specification(taxonomy, "tN{t}[tF{d,t}]")
    assert spec.base.tooling == "NF"
    assert spec.unresolved == ["Behavior:missing"]
    assert [c.formula for c in spec.child_tokens] == ["tF{d,t}"]
    assert spec.child_tokens[0].base.tooling == "F"


def test_unknown_formula(taxonomy):
    with pytest.raises(NotFound):
        resolve_specification(taxonomy, "nope")


def test_cycle_detected(taxonomy):
    taxonomy.token_templates["a"] = _template("a", ["b"])
    taxonomy.token_templates["b"] = _template("b", ["a"])

    with pytest.raises(TemplateCycle):
        resolve_specification(taxonomy, "a")
    assert find_template_cycles(taxonomy) == [["a", "b", "a"]]
    assert any("cycle" in p for p in find_template_problems(taxonomy))


def test_depth_bound(taxonomy):
    chain = [f"c{i}" for i in range(5)]
    for parent, child in zip(chain, chain[1:]):
        taxonomy.token_templates[parent] = _template(parent, [child])
    taxonomy.token_templates[chain[-1]] = _template(chain[-1], [])

    assert len(resolve_specification(taxonomy, "c0", max_depth=5).child_tokens) == 1
    with pytest.raises(ParseError, match="depth"):
        resolve_specification(taxonomy, "c0", max_depth=3)


def test_dangling_child_is_a_problem(taxonomy):
    taxonomy.token_templates["lonely"] = _template("lonely", ["ghost"])
    assert "Template 'lonely' references missing child 'ghost'" in find_template_problems(taxonomy)
    assert "TokenTemplate:ghost" in resolve_specification(taxonomy, "lonely").unresolved


def test_formula_view(taxonomy):
    view = taxonomy.token_templates["tF{d,t}"].formula_view()
    assert view.base == "F"
    assert view.behaviors == ["d", "t"]


def test_formula_must_match_tooling():
    with pytest.raises(ParseError):
        TokenTemplate.from_dict({"artifact": {"name": "X", "artifactSymbol": ArtifactSymbol("a", "a").to_dict()}, "formula": "b"})

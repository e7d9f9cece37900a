"""Graph model: ids, containment bookkeeping, structural validation, geometry"""

from azarch.model.geometry import absolute_bounds, relative_bounds
from azarch.model.ids import IdGenerator, generate_group_id
from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    Bounds,
    Layer,
    NodeType,
    containment_edge,
)
from azarch.model.validation import validate_structure


def _node(node_id, parent_id=None):
    return ArchNode(id=node_id, type=NodeType.VM, label=node_id, layer=Layer.COMPUTE, parent_id=parent_id)


def test_id_generator_disambiguates_repeats():
    ids = IdGenerator()
    assert ids.generate("policy") == "policy"
    assert ids.generate("policy") == "policy-2"
    assert ids.generate("policy") == "policy-3"
    assert ids.generate("Web Tier", prefix="tier") == "tier-web-tier"


def test_id_generator_skips_reserved_ids():
    ids = IdGenerator()
    ids.reserve("vm-2")
    assert ids.generate("vm") == "vm"
    assert ids.generate("vm") == "vm-3"
    assert ids.is_issued("vm-2")


def test_generate_group_id_normalizes_name():
    assert generate_group_id("sub", "Landing Zone (Prod)") == "sub-landing-zone--prod-"
    assert generate_group_id("hub") == "hub"


def test_rebuild_children_follows_parent_id():
    model = ArchitectureModel(nodes=[_node("a"), _node("b", "a"), _node("c", "a")])
    model.rebuild_children()
    assert model.get("a").children == ["b", "c"]
    assert [n.id for n in model.roots()] == ["a"]
    assert model.depth("c") == 1


def test_ancestors_stop_on_cycle():
    model = ArchitectureModel(nodes=[_node("a", "b"), _node("b", "a")])
    assert [n.id for n in model.ancestors("a")] == ["b"]


def test_copy_is_deep():
    model = ArchitectureModel(nodes=[_node("a")])
    clone = model.copy()
    clone.nodes[0].label = "changed"
    assert model.nodes[0].label == "a"


def test_valid_tree_passes():
    model = ArchitectureModel(
        nodes=[_node("a"), _node("b", "a")],
        edges=[containment_edge("a", "b")],
    )
    model.rebuild_children()
    result = validate_structure(model, require_unique_edges=True)
    assert result.is_valid
    assert result.get_summary() == "Valid | Errors: 0, Warnings: 0"


def test_missing_references_are_reported():
    model = ArchitectureModel(
        nodes=[_node("a", "ghost")],
        edges=[ArchEdge(source="a", target="nowhere")],
    )
    result = validate_structure(model)
    assert not result.is_valid
    assert "Parent node not found: ghost (for a)" in result.errors
    assert "Edge target node not found: nowhere" in result.errors


def test_containment_cycle_is_reported():
    model = ArchitectureModel(nodes=[_node("a", "b"), _node("b", "a")])
    model.rebuild_children()
    result = validate_structure(model)
    codes = {issue.code for issue in result.issues}
    assert "CONTAINMENT_CYCLE" in codes


def test_duplicate_edges_only_checked_on_request():
    model = ArchitectureModel(
        nodes=[_node("a"), _node("b")],
        edges=[ArchEdge(source="a", target="b"), ArchEdge(source="a", target="b")],
    )
    assert validate_structure(model).is_valid
    strict = validate_structure(model, require_unique_edges=True)
    assert "Duplicate edge: a -> b" in strict.errors


def test_stale_children_cache_is_a_warning():
    model = ArchitectureModel(nodes=[_node("a"), _node("b", "a")])
    result = validate_structure(model)
    assert result.is_valid
    assert result.warning_count == 1


def test_relative_and_absolute_bounds_round_trip():
    parent = _node("p")
    parent.bounds = Bounds(100, 100, 300, 200)
    child = _node("c", "p")
    child.bounds = Bounds(120, 150, 120, 70)
    model = ArchitectureModel(nodes=[parent, child])

    relative = relative_bounds(model)
    assert relative["c"] == Bounds(20, 50, 120, 70)

    for node in model.nodes:
        node.bounds = relative[node.id]
    model.relative_geometry = True
    assert absolute_bounds(model)["c"] == Bounds(120, 150, 120, 70)


def test_bounds_contains_with_tolerance():
    outer = Bounds(0, 0, 100, 100)
    assert outer.contains(Bounds(0, 0, 100, 100))
    assert outer.contains(Bounds(-0.25, 10, 50, 50))
    assert not outer.contains(Bounds(60, 60, 50, 50))


def test_to_dict_uses_wire_names():
    node = _node("a", "p")
    data = node.to_dict()
    assert data["parentId"] == "p"
    assert data["entityType"] == "service"
    edge = ArchEdge(source="a", target="b").to_dict()
    assert (edge["from"], edge["to"]) == ("a", "b")

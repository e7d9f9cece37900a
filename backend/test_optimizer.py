"""Edge dedupe/merge, connector limiting and grouping"""

import pytest

from azarch.builder import build_from_assessment, build_landing_zone
from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    EdgeStyle,
    EdgeType,
    EntityType,
    Layer,
    NodeType,
    containment_edge,
)
from azarch.model.validation import validate_structure
from azarch.optimizer import (
    apply_grouping,
    connector_counts,
    dedupe_edges,
    limit_connectors,
    merge_duplicate_edges,
    optimize_graph,
    validate_model,
)
from azarch.schemas import DiagramOptions


def _pair_model(*edges):
    nodes = [
        ArchNode(id="a", type=NodeType.VM, label="A", layer=Layer.COMPUTE),
        ArchNode(id="b", type=NodeType.STORAGE, label="B", layer=Layer.DATA),
    ]
    return ArchitectureModel(nodes=nodes, edges=list(edges))


def test_dedupe_drops_self_edges_and_repeats():
    model = _pair_model(
        ArchEdge(source="a", target="b", label="first"),
        ArchEdge(source="a", target="b", label="second"),
        ArchEdge(source="a", target="a"),
        ArchEdge(source="b", target="a"),
    )
    result = dedupe_edges(model)
    assert [(e.source, e.target, e.label) for e in result.edges] == [
        ("a", "b", "first"),
        ("b", "a", None),
    ]
    assert len(model.edges) == 4


def test_merge_collects_labels_and_counts():
    model = _pair_model(
        ArchEdge(source="a", target="b", label="x"),
        ArchEdge(source="a", target="b", label="y"),
        ArchEdge(source="a", target="b", label="x"),
    )
    merged = merge_duplicate_edges(model).edges
    assert len(merged) == 1
    assert merged[0].label == "x, y ×3"
    assert merged[0].bundle_count == 3

    quiet = merge_duplicate_edges(model, show_counts=False).edges
    assert quiet[0].label == "x, y"


def test_fan_out_gets_one_overflow_hub(fan_out_model):
    result = limit_connectors(fan_out_model, 8)
    hubs = [n for n in result.nodes if n.is_hub]

    assert [h.id for h in hubs] == ["hub_center_overflow_1"]
    hub = hubs[0]
    assert hub.label == "More connections"
    assert hub.meta.parent_node == "center"
    assert hub.meta.overflow_level == 1

    counts = connector_counts(result)
    assert counts["center"] == 8
    assert counts[hub.id] == 6
    link = [e for e in result.edges if e.source == "center" and e.target == hub.id][0]
    assert link.style == EdgeStyle.DOTTED
    assert link.bundle_count == 5
    # Every leaf is still reachable and keeps its label.
    assert sorted(e.label for e in result.edges if e.target.startswith("leaf-")) == sorted(
        f"link {i}" for i in range(12)
    )


def test_node_under_limit_is_untouched(fan_out_model):
    result = limit_connectors(fan_out_model, 12)
    assert len(result.nodes) == len(fan_out_model.nodes)
    assert [e.key for e in result.edges] == [e.key for e in fan_out_model.edges]


@pytest.mark.parametrize("limit", [8, 10])
def test_assessment_model_respects_connector_limit(large_assessment, limit):
    model = build_from_assessment(large_assessment)
    options = DiagramOptions(max_connectors_per_node=limit)
    optimized = optimize_graph(model, options)

    assert validate_model(optimized, limit).is_valid
    assert all(e.source != e.target for e in optimized.edges)
    assert len({e.key for e in optimized.edges}) == len(optimized.edges)


def test_optimize_is_idempotent(large_assessment):
    options = DiagramOptions(max_connectors_per_node=8)
    once = optimize_graph(build_from_assessment(large_assessment), options)
    twice = optimize_graph(once, options)
    assert twice.to_dict() == once.to_dict()


def test_optimize_leaves_input_untouched(fan_out_model):
    before = fan_out_model.to_dict()
    optimize_graph(fan_out_model, DiagramOptions(max_connectors_per_node=8))
    assert fan_out_model.to_dict() == before


def test_validate_model_reports_offenders(fan_out_model):
    result = validate_model(fan_out_model, 8)
    assert not result.is_valid
    assert result.errors == ['Node "Center" (center) has 12 connectors, exceeding limit of 8']


def test_tier_grouping_collapses_members(nested_model):
    grouped = apply_grouping(nested_model, "tier")

    assert [n.id for n in grouped.nodes] == ["app-tier", "networking", "security"]
    app_tier = grouped.get("app-tier")
    assert app_tier.meta.contained_nodes == ["sub", "vm-1", "vm-2"]
    assert app_tier.meta.node_count == 3
    # kv -> vm-1 survives as a group edge; vm-1 -> vm-2 is internal and disappears.
    assert [(e.source, e.target, e.label) for e in grouped.edges] == [("security", "app-tier", "Secrets")]


def test_grouping_is_idempotent(nested_model):
    once = apply_grouping(nested_model, "tier")
    twice = apply_grouping(once, "tier")
    assert twice.to_dict() == once.to_dict()


def test_service_grouping_keeps_unclassified_nodes(nested_model):
    grouped = apply_grouping(nested_model, "service")
    ids = {n.id for n in grouped.nodes}
    assert {"vm-1", "vm-2", "sub", "security", "networking"} <= ids
    assert grouped.get("vm-1").parent_id is None


def test_unknown_grouping_level_is_a_no_op(nested_model):
    assert apply_grouping(nested_model, "bogus").to_dict() == nested_model.to_dict()


def test_grouping_replaces_connector_limiting(large_assessment):
    model = build_from_assessment(large_assessment)
    grouped = optimize_graph(model, DiagramOptions(group_level="tier"))
    assert not any(n.is_hub and n.meta.hub_type == "overflow" for n in grouped.nodes)
    assert any(n.is_grouped for n in grouped.nodes)


def test_service_grouping_does_not_reuse_taken_ids():
    model = build_landing_zone(None, DiagramOptions())
    grouped = apply_grouping(model, "service")

    ids = [n.id for n in grouped.nodes]
    assert len(set(ids)) == len(ids)
    assert not grouped.get("observability").is_grouped

    group = next(n for n in grouped.nodes if n.is_grouped and n.meta.bucket == "observability")
    assert group.id == "observability-2"
    assert {"monitor", "log-analytics"} <= set(group.meta.contained_nodes)
    assert validate_structure(grouped).is_valid

    twice = apply_grouping(grouped, "service")
    assert [n.id for n in twice.nodes] == ids


def _vnet_with_subnets(count):
    nodes = [ArchNode(id="vnet", type=NodeType.VNET, label="VNet", layer=Layer.NETWORKING,
                      entity_type=EntityType.VNET)]
    edges = []
    for i in range(count):
        nodes.append(ArchNode(id=f"subnet-{i}", type=NodeType.SUBNET, label=f"Subnet {i}",
                              layer=Layer.NETWORKING, entity_type=EntityType.SUBNET, parent_id="vnet"))
        edges.append(containment_edge("vnet", f"subnet-{i}"))
    return nodes, edges


def test_containment_edges_count_as_connectors():
    nodes, edges = _vnet_with_subnets(12)
    model = ArchitectureModel(nodes=nodes, edges=edges)
    assert connector_counts(model)["vnet"] == 12

    result = limit_connectors(model, 8)
    assert [n.id for n in result.nodes] == [n.id for n in model.nodes]
    assert validate_model(result, 8).errors == [
        'Node "VNet" (vnet) has 12 connectors, exceeding limit of 8'
    ]


def test_containment_edges_stay_on_their_parent():
    nodes, edges = _vnet_with_subnets(4)
    for i in range(10):
        nodes.append(ArchNode(id=f"peer-{i}", type=NodeType.VNET, label=f"Peer {i}", layer=Layer.NETWORKING))
        edges.append(ArchEdge(source=f"peer-{i}", target="vnet", label="VNet Peering",
                              edge_type=EdgeType.PEERING))
    result = limit_connectors(ArchitectureModel(nodes=nodes, edges=edges), 8)

    counts = connector_counts(result)
    assert counts["vnet"] == 8
    assert counts["hub_vnet_overflow_1"] == 8
    assert sorted(e.target for e in result.edges if e.is_containment and e.source == "vnet") == [
        f"subnet-{i}" for i in range(4)
    ]
    assert validate_model(result, 8).is_valid

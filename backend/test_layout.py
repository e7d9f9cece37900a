"""Layout profiles: placement, containment fitting, relative geometry"""

import pytest

from azarch.builder import build_from_assessment, build_from_caf, build_landing_zone
from azarch.layout import LAYOUT_PROFILES, apply_layout, get_layout_engine
from azarch.layout.grid import Gap, Size, enclose, grid_extent, place_in
from azarch.model.geometry import absolute_bounds
from azarch.model.types import ArchitectureModel, ArchNode, Bounds, Layer, NodeType
from azarch.model.validation import validate_structure
from azarch.optimizer import optimize_graph
from azarch.schemas import LayoutOptions


def _builder_outputs(assessment):
    return {
        "assessment": optimize_graph(build_from_assessment(assessment)),
        "landing-zone": build_landing_zone(assessment),
        "caf": build_from_caf().model,
    }


@pytest.mark.parametrize("profile", sorted(LAYOUT_PROFILES))
def test_every_profile_places_and_encloses(large_assessment, profile):
    for name, model in _builder_outputs(large_assessment).items():
        laid_out = apply_layout(model, LayoutOptions(profile=profile))

        unplaced = [n.id for n in laid_out.nodes if n.bounds is None]
        assert unplaced == [], f"{profile}/{name}"
        result = validate_structure(laid_out, check_bounds=True)
        assert result.is_valid, f"{profile}/{name}: {result.errors}"


def test_layout_leaves_input_untouched(nested_model):
    apply_layout(nested_model)
    assert all(n.bounds is None for n in nested_model.nodes)


def test_layered_anchors_by_layer(nested_model):
    laid_out = apply_layout(nested_model, LayoutOptions(profile="layered"))

    # Security is column 5, Management column 7; node_width 120 + 20 per column.
    assert laid_out.get("kv").bounds == Bounds(750, 50, 120, 70)
    sub = laid_out.get("sub").bounds
    assert (sub.x, sub.y) == (1030, 50)

    vnet = laid_out.get("vnet").bounds
    assert (vnet.x, vnet.y) == (1050, 100)
    vm1 = laid_out.get("vm-1").bounds
    vm2 = laid_out.get("vm-2").bounds
    assert vm1.y == vm2.y
    assert vm2.x == vm1.x + 120 + 16


def test_relative_geometry_round_trips(nested_model):
    absolute = apply_layout(nested_model)
    relative = apply_layout(nested_model, LayoutOptions(relative_geometry=True))

    assert relative.relative_geometry
    assert relative.get("vnet").bounds == Bounds(20, 50, absolute.get("vnet").bounds.w,
                                                 absolute.get("vnet").bounds.h)
    assert absolute_bounds(relative) == absolute_bounds(absolute)
    assert validate_structure(relative, check_bounds=True).is_valid


def test_missing_parent_leaves_node_unplaced(nested_model):
    nested_model.add_node(
        ArchNode(id="orphan", type=NodeType.VM, label="Orphan", layer=Layer.COMPUTE, parent_id="ghost")
    )
    laid_out = apply_layout(nested_model)
    assert laid_out.get("orphan").bounds is None
    assert laid_out.get("vm-1").bounds is not None


def test_containment_cycle_leaves_nodes_unplaced():
    model = ArchitectureModel(nodes=[
        ArchNode(id="a", type=NodeType.VM, label="A", layer=Layer.COMPUTE, parent_id="b"),
        ArchNode(id="b", type=NodeType.VM, label="B", layer=Layer.COMPUTE, parent_id="a"),
        ArchNode(id="c", type=NodeType.VM, label="C", layer=Layer.COMPUTE),
    ])
    laid_out = apply_layout(model)
    assert laid_out.get("a").bounds is None
    assert laid_out.get("b").bounds is None
    assert laid_out.get("c").bounds is not None


def test_caf_layout_orders_subscription_columns():
    model = apply_layout(build_landing_zone(None), LayoutOptions(profile="caf"))
    connectivity = model.get("sub-platform-connectivity").bounds
    management = model.get("sub-platform-management").bounds
    data = model.get("sub-platform-data").bounds
    assert connectivity.x < management.x < data.x

    prod = model.get("sub-landingzone-prod").bounds
    nonprod = model.get("sub-landingzone-nonprod").bounds
    assert prod.x < nonprod.x


def test_hub_spoke_puts_hub_left_of_spoke(large_assessment):
    model = apply_layout(build_from_assessment(large_assessment), LayoutOptions(profile="hub-spoke"))
    assert model.get("appgw").bounds.x < model.get("hub-vnet").bounds.x < model.get("spoke-vnet").bounds.x
    assert get_layout_engine(LayoutOptions(profile="hub-spoke")).name == "hub-spoke"


def test_grid_helpers():
    assert place_in(None, 1, 0) == Bounds(192, 16, 160, 140)
    assert grid_extent(3, 2, Size(100, 50), Gap(10, 10)) == Size(210, 110)
    assert grid_extent(0, 2, Size(100, 50), Gap(10, 10)) == Size(0, 0)
    box = enclose([Bounds(10, 60, 50, 20), Bounds(80, 60, 20, 40)], 10, 30)
    assert box == Bounds(0, 20, 110, 90)
    assert enclose([], 10, 30) is None


def test_hub_spoke_data_services_column():
    engine = get_layout_engine(LayoutOptions(profile="hub-spoke"))
    storage = ArchNode(id="storage", type=NodeType.STORAGE, label="Storage", layer=Layer.DATA)
    keyvault = ArchNode(id="kv", type=NodeType.KEYVAULT, label="Key Vault", layer=Layer.SECURITY)
    assert engine.placement(storage) == ("data-services", "data")
    assert engine.placement(keyvault) == ("platform-services", "security")

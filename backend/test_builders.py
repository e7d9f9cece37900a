"""Assessment, CAF tree and landing-zone builders"""

from azarch.builder import (
    build_from_assessment,
    build_from_caf,
    build_landing_zone,
    default_caf_architecture,
    is_subnet_in_vnet,
    validate_cidr_ranges,
    validate_containment,
)
from azarch.builder.assessment import classify_vm_role, subnet_for_role
from azarch.builder.landing_zone import determine_environment, determine_tier
from azarch.model.types import EdgeType, EntityType, Layer, ServiceMeta
from azarch.model.validation import validate_structure
from azarch.schemas import CafArchitecture, DiagramOptions, VmRecord


def _edges(model, source, target):
    return [e for e in model.edges if e.source == source and e.target == target]


# ---- assessment builder ----

def test_large_assessment_is_hub_spoke(large_assessment):
    model = build_from_assessment(large_assessment)
    ids = {n.id for n in model.nodes}

    assert {"hub-vnet", "spoke-vnet"} <= ids
    assert "main-vnet" not in ids
    peering = [e for e in model.edges if e.label == "VNet Peering"]
    assert len(peering) == 1
    assert (peering[0].source, peering[0].target) == ("hub-vnet", "spoke-vnet")
    assert peering[0].edge_type == EdgeType.PEERING
    assert model.get("hub-vnet").label == "Hub VNet (East US)"


def test_large_assessment_threshold_services(large_assessment):
    model = build_from_assessment(large_assessment)
    ids = {n.id for n in model.nodes}

    assert {"firewall", "lb", "sql-db", "appgw", "bastion"} <= ids
    assert "frontdoor" not in ids
    assert {"web-subnet-nsg", "app-subnet-nsg", "db-subnet-nsg"} <= ids
    assert _edges(model, "firewall", "hub-vnet")[0].label == "Egress"
    assert _edges(model, "lb", "web-subnet")


def test_subnets_are_contained_in_workload_vnet(large_assessment):
    model = build_from_assessment(large_assessment)
    for subnet_id in ("web-subnet", "app-subnet", "db-subnet", "mgmt-subnet"):
        subnet = model.get(subnet_id)
        assert subnet.parent_id == "spoke-vnet"
        assert subnet.entity_type == EntityType.SUBNET
        assert _edges(model, "spoke-vnet", subnet_id)[0].is_containment
    assert validate_structure(model).is_valid


def test_vms_are_wired_by_role(large_assessment):
    model = build_from_assessment(large_assessment)

    assert model.get("vm-web-8") is not None
    assert model.get("vm-app-9") is not None
    assert model.get("vm-database-5") is not None
    assert model.get("vm-general-2") is not None
    assert _edges(model, "web-subnet", "vm-web-1")
    assert _edges(model, "db-subnet", "vm-database-1")
    assert _edges(model, "app-subnet", "vm-storage-1")
    assert model.get("vm-web-1").label == "web-00 (Standard_D4s_v5)"
    assert model.get("vm-web-1").meta.cores == 4


def test_management_policy_gets_second_id(large_assessment):
    model = build_from_assessment(large_assessment)
    assert model.get("policy").layer == Layer.SECURITY
    assert model.get("policy-2").layer == Layer.MANAGEMENT
    assert _edges(model, "policy-2", "vm-web-1")[0].edge_type == EdgeType.GOVERNANCE


def test_small_assessment_uses_single_vnet(small_assessment):
    model = build_from_assessment(small_assessment)
    ids = {n.id for n in model.nodes}

    assert "main-vnet" in ids
    assert "hub-vnet" not in ids
    assert "firewall" not in ids
    assert "lb" not in ids
    # db-01 triggers SQL below the threshold.
    assert "sql-db" in ids
    assert _edges(model, "appgw", "web-subnet")[0].label == "Ingress"
    assert _edges(model, "bastion", "mgmt-subnet")


def test_empty_assessment_gets_placeholder(empty_assessment):
    model = build_from_assessment(empty_assessment)
    placeholder = model.get("vm-placeholder")

    assert placeholder.label == "VM (No Assessment Data)"
    assert isinstance(placeholder.meta, ServiceMeta) and placeholder.meta.placeholder
    assert _edges(model, "web-subnet", "vm-placeholder")
    assert model.get("storage").label == "Storage Account (0 GB)"


def test_global_region_uses_front_door(small_assessment):
    assessment = small_assessment.model_copy(update={"target_region": "Global"})
    model = build_from_assessment(assessment)
    assert model.get("frontdoor") is not None
    assert model.get("appgw") is None


def test_minimal_detail_uses_single_hubs(small_assessment):
    model = build_from_assessment(small_assessment, DiagramOptions(detail_level="minimal"))
    ids = {n.id for n in model.nodes}

    assert {"hub_sec", "hub_obs"} <= ids
    assert "keyvault" not in ids
    assert "web-subnet-nsg" not in ids
    assert model.get("hub_sec").is_hub


def test_aggregated_security_routes_through_hub(small_assessment):
    model = build_from_assessment(small_assessment, DiagramOptions(aggregate_security=True))
    assert model.get("hub_sec").label == "Security Hub"
    assert _edges(model, "keyvault", "hub_sec")
    assert not _edges(model, "keyvault", "vm-web-1")
    assert _edges(model, "hub_sec", "vm-web-1")


def test_aggregated_networking_attaches_vms_to_subnet_hub(small_assessment):
    model = build_from_assessment(small_assessment, DiagramOptions(aggregate_networking=True))
    assert _edges(model, "hub_net_web-subnet", "web-subnet")
    assert _edges(model, "hub_net_web-subnet", "vm-web-1")


def test_assessment_build_is_deterministic(large_assessment):
    first = build_from_assessment(large_assessment)
    second = build_from_assessment(large_assessment)
    assert [n.id for n in first.nodes] == [n.id for n in second.nodes]
    assert [e.key for e in first.edges] == [e.key for e in second.edges]


def test_vm_role_classification():
    assert classify_vm_role("PRD-WEB-01") == "web"
    assert classify_vm_role("middleware-2") == "app"
    assert classify_vm_role("sqlnode") == "database"
    assert classify_vm_role("fileserver") == "storage"
    assert classify_vm_role("dc01") == "general"
    assert subnet_for_role("general") == "app-subnet"


# ---- CIDR ----

def test_cidr_containment():
    assert is_subnet_in_vnet("10.0.1.0/24", "10.0.0.0/16")
    assert not is_subnet_in_vnet("192.168.1.0/24", "10.0.0.0/16")
    assert not is_subnet_in_vnet("10.0.0.0/16", "10.0.0.0/16")
    assert not is_subnet_in_vnet("not-a-cidr", "10.0.0.0/16")


def _single_vnet_architecture(subnet_prefix):
    return CafArchitecture.model_validate({
        "subscriptions": [{
            "id": "sub-a",
            "name": "Workload",
            "type": "landingzone-prod",
            "vnets": [{
                "id": "vnet-a",
                "name": "VNet A",
                "addressSpace": "10.0.0.0/16",
                "subnets": [{"id": "subnet-a", "name": "Subnet A", "addressPrefix": subnet_prefix}],
            }],
        }],
    })


def test_cidr_inside_vnet_passes():
    architecture = _single_vnet_architecture("10.0.1.0/24")
    assert validate_cidr_ranges(architecture) == []
    assert build_from_caf(architecture).validation_errors == []


def test_cidr_outside_vnet_is_reported_but_model_still_converts():
    result = build_from_caf(_single_vnet_architecture("192.168.1.0/24"))
    assert "Subnet 192.168.1.0/24 is not contained in VNet 10.0.0.0/16" in result.validation_errors
    assert len(result.model.nodes) > 0


def test_duplicate_vnet_space_is_reported():
    architecture = default_caf_architecture()
    architecture.subscriptions[1].vnets[0].address_space = "10.0.0.0/16"
    errors = validate_cidr_ranges(architecture)
    assert "Duplicate VNet address space: 10.0.0.0/16" in errors


# ---- CAF tree ----

def test_default_caf_architecture_converts():
    result = build_from_caf()
    model = result.model
    ids = {n.id for n in model.nodes}

    assert {"sub-hub", "vnet-hub", "subnet-hub-management", "firewall-hub", "sub-spoke", "vnet-spoke"} <= ids
    assert model.get("vnet-hub").parent_id == "sub-hub"
    assert model.get("firewall-hub").label == "Azure Firewall (1)"
    peering = _edges(model, "vnet-hub", "vnet-spoke")
    assert len(peering) == 1 and peering[0].label == "VNet Peering"
    assert result.meta.complexity == "low"
    assert validate_structure(model, require_unique_edges=True).is_valid


def test_caf_services_with_zero_count_are_skipped():
    architecture = default_caf_architecture()
    architecture.subscriptions[0].vnets[0].subnets[0].services[1].count = 0
    model = build_from_caf(architecture).model
    assert model.get("bastion-hub") is None


def test_caf_duplicate_ids_are_reported():
    architecture = default_caf_architecture()
    architecture.subscriptions[1].vnets[0].subnets[1].id = "subnet-spoke-web"
    result = build_from_caf(architecture)
    assert "Duplicate node id: subnet-spoke-web" in result.validation_errors
    assert sum(1 for n in result.model.nodes if n.id == "subnet-spoke-web") == 1


# ---- landing zone ----

def test_landing_zone_hierarchy(large_assessment):
    model = build_landing_zone(large_assessment)

    assert model.get("mg-platform").parent_id == "mg-tenant-root"
    assert model.get("sub-landingzone-prod").parent_id == "mg-landing-zones"
    assert model.get("vnet-hub").parent_id == "sub-platform-connectivity"
    assert model.get("subnet-prod-web").parent_id == "vnet-spoke-prod"
    assert model.get("tier-prod-web").parent_id == "subnet-prod-web"
    assert model.get("tier-prod-web").entity_type == EntityType.TIER
    assert validate_containment(model) == []
    assert validate_structure(model).is_valid


def test_landing_zone_tier_counts(large_assessment):
    model = build_landing_zone(large_assessment)
    web = model.get("tier-prod-web")
    assert web.meta.count == 8
    assert web.label == "Web Tier (8) • Standard_D4s_v5"
    assert model.get("subnet-prod-web").meta.vm_count == 8
    # app gets the app VMs plus everything unclassified
    assert model.get("tier-prod-app").meta.count == 12


def test_landing_zone_without_nonprod():
    model = build_landing_zone(None, DiagramOptions(show_non_prod=False))
    ids = {n.id for n in model.nodes}
    assert "sub-landingzone-nonprod" not in ids
    assert "vnet-spoke-nonprod" not in ids
    assert model.get("tier-prod-web").label == "Web Tier (0)"


def test_landing_zone_connections():
    model = build_landing_zone(None)
    assert _edges(model, "vnet-hub", "vnet-spoke-prod")[0].label == "VNet Peering"
    bastion = _edges(model, "bastion", "vnet-spoke-prod")[0]
    assert bastion.label == "Bastion ×3"
    assert bastion.bundle_count == 3
    assert _edges(model, "policy", "sub-landingzone-nonprod")[0].edge_type == EdgeType.GOVERNANCE
    assert _edges(model, "sql-server", "vnet-spoke-prod")[0].label == "PE ×1"


def test_environment_and_tier_detection():
    assert determine_environment(VmRecord(name="app-dev-01")) == "nonprod"
    assert determine_environment(VmRecord(name="app-01", environment="test")) == "nonprod"
    assert determine_environment(VmRecord(name="app-01")) == "prod"
    assert determine_tier("ui-server") == "web"
    assert determine_tier("sql-01") == "db"
    assert determine_tier("batch-01") == "app"

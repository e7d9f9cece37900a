import pytest

from azarch.model.types import ArchEdge, ArchitectureModel, ArchNode, EntityType, Layer, NodeType
from azarch.schemas import AssessmentSummary, VmRecord


def make_vms(names, size="Standard_D4s_v5"):
    return [VmRecord(name=name, cores=4, memory_gb=16, recommended_size=size) for name in names]


@pytest.fixture
def large_assessment():
    """25 servers in East US: hub-spoke, firewall, LB, SQL."""
    names = (
        [f"web-{i:02d}" for i in range(8)]
        + [f"app-{i:02d}" for i in range(9)]
        + [f"sql-{i:02d}" for i in range(5)]
        + ["file-01", "misc-01", "misc-02"]
    )
    return AssessmentSummary(
        total_servers=25,
        windows_servers=15,
        linux_servers=10,
        target_region="East US",
        total_storage_tb=2,
        vms=make_vms(names),
    )


@pytest.fixture
def small_assessment():
    return AssessmentSummary(
        total_servers=3,
        target_region="West Europe",
        total_storage_tb=0.5,
        vms=make_vms(["web-01", "app-01", "db-01"]),
    )


@pytest.fixture
def empty_assessment():
    return AssessmentSummary()


@pytest.fixture
def fan_out_model():
    """One node with 12 outgoing connections."""
    nodes = [ArchNode(id="center", type=NodeType.VM, label="Center", layer=Layer.COMPUTE)]
    edges = []
    for i in range(12):
        leaf = f"leaf-{i}"
        nodes.append(ArchNode(id=leaf, type=NodeType.STORAGE, label=f"Leaf {i}", layer=Layer.DATA))
        edges.append(ArchEdge(source="center", target=leaf, label=f"link {i}"))
    return ArchitectureModel(nodes=nodes, edges=edges)


@pytest.fixture
def nested_model():
    """subscription > vnet > subnet > two VMs, plus one root service."""
    nodes = [
        ArchNode(id="sub", type=NodeType.SUBSCRIPTION, label="Sub", layer=Layer.MANAGEMENT,
                 entity_type=EntityType.SUBSCRIPTION),
        ArchNode(id="vnet", type=NodeType.VNET, label="VNet", layer=Layer.NETWORKING,
                 entity_type=EntityType.VNET, parent_id="sub"),
        ArchNode(id="subnet", type=NodeType.SUBNET, label="Subnet", layer=Layer.NETWORKING,
                 entity_type=EntityType.SUBNET, parent_id="vnet"),
        ArchNode(id="vm-1", type=NodeType.VM, label="VM 1", layer=Layer.COMPUTE, parent_id="subnet"),
        ArchNode(id="vm-2", type=NodeType.VM, label="VM 2", layer=Layer.COMPUTE, parent_id="subnet"),
        ArchNode(id="kv", type=NodeType.KEYVAULT, label="Key Vault", layer=Layer.SECURITY),
    ]
    edges = [
        ArchEdge(source="kv", target="vm-1", label="Secrets"),
        ArchEdge(source="vm-1", target="vm-2"),
    ]
    model = ArchitectureModel(nodes=nodes, edges=edges)
    model.rebuild_children()
    return model

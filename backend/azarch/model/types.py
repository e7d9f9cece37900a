"""
Architecture graph model.

The model is an arena: nodes live in one list and refer to each other only by id.
`parent_id` is the authoritative containment link; `children` is a cache that
`ArchitectureModel.rebuild_children()` recomputes from it.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Union


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Layer(str, Enum):
    CONNECTIVITY = "Connectivity"
    NETWORKING = "Networking"
    COMPUTE = "Compute"
    DATA = "Data"
    SECURITY = "Security"
    IDENTITY = "Identity"
    MANAGEMENT = "Management"
    OBSERVABILITY = "Observability"
    DEVOPS = "DevOps"


class EntityType(str, Enum):
    MANAGEMENT_GROUP = "managementGroup"
    SUBSCRIPTION = "subscription"
    VNET = "vnet"
    SUBNET = "subnet"
    TIER = "tier"
    SERVICE = "service"
    PAAS = "paas"
    CUSTOM = "custom"


class EdgeType(str, Enum):
    CONTAINMENT = "containment"
    PEERING = "peering"
    MANAGEMENT = "management"
    GOVERNANCE = "governance"
    SECURITY = "security"
    EAST_WEST = "east-west"
    INGRESS = "ingress"
    EGRESS = "egress"
    BASTION = "bastion"
    PRIVATE_ENDPOINT = "private-endpoint"
    CUSTOM = "custom"


class EdgeStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


class NodeType(str, Enum):
    FRONTDOOR = "frontdoor"
    APPGW = "appgw"
    FIREWALL = "firewall"
    BASTION = "bastion"
    LB = "lb"
    VPN_GATEWAY = "vpngateway"
    DNS = "dns"
    VNET = "vnet"
    SUBNET = "subnet"
    NSG = "nsg"
    VM = "vm"
    VMSS = "vmss"
    SQL = "sql"
    STORAGE = "storage"
    KEYVAULT = "keyvault"
    MONITOR = "monitor"
    LOG_ANALYTICS = "loganalytics"
    DEFENDER = "defender"
    POLICY = "policy"
    IDENTITY = "identity"
    OPENAI = "openai"
    SEARCH = "search"
    SUBSCRIPTION = "subscription"
    MANAGEMENT_GROUP = "managementgroup"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "NodeType":
        """Map a raw type string onto a NodeType, falling back to CUSTOM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.CUSTOM


class SubscriptionType(str, Enum):
    PLATFORM_IDENTITY = "platform-identity"
    PLATFORM_MANAGEMENT = "platform-management"
    PLATFORM_CONNECTIVITY = "platform-connectivity"
    PLATFORM_DATA = "platform-data"
    LANDINGZONE_PROD = "landingzone-prod"
    LANDINGZONE_NONPROD = "landingzone-nonprod"


CONTAINER_ENTITY_TYPES = {
    EntityType.MANAGEMENT_GROUP,
    EntityType.SUBSCRIPTION,
    EntityType.VNET,
    EntityType.SUBNET,
}


# =============================================================================
# GEOMETRY
# =============================================================================

@dataclass
class Bounds:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def contains(self, other: "Bounds", tolerance: float = 0.5) -> bool:
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.right <= self.right + tolerance
            and other.bottom <= self.bottom + tolerance
        )

    def translated(self, dx: float, dy: float) -> "Bounds":
        return Bounds(self.x + dx, self.y + dy, self.w, self.h)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}


# =============================================================================
# NODE METADATA (tagged union)
# =============================================================================

@dataclass
class SubscriptionMeta:
    kind: ClassVar[str] = "subscription"
    subscription_type: Optional[SubscriptionType] = None
    color: Optional[str] = None


@dataclass
class ManagementGroupMeta:
    kind: ClassVar[str] = "managementGroup"
    group_kind: str = "root"


@dataclass
class VNetMeta:
    kind: ClassVar[str] = "vnet"
    address_space: Optional[str] = None
    role: Optional[str] = None  # hub | spoke | main
    region: Optional[str] = None
    color: Optional[str] = None


@dataclass
class SubnetMeta:
    kind: ClassVar[str] = "subnet"
    address_prefix: Optional[str] = None
    tier: Optional[str] = None
    vm_count: int = 0
    region: Optional[str] = None
    color: Optional[str] = None


@dataclass
class ServiceMeta:
    kind: ClassVar[str] = "service"
    role: Optional[str] = None
    count: int = 1
    sku: Optional[str] = None
    cores: Optional[float] = None
    memory_gb: Optional[float] = None
    operating_system: Optional[str] = None
    region: Optional[str] = None
    placeholder: bool = False
    config: Dict[str, Any] = field(default_factory=dict)
    color: Optional[str] = None


@dataclass
class HubMeta:
    kind: ClassVar[str] = "hub"
    hub_type: str = "overflow"  # overflow | security | observability | subnet
    parent_node: Optional[str] = None
    overflow_level: int = 0
    tooltip: Optional[str] = None
    subnet: Optional[str] = None


@dataclass
class GroupMeta:
    kind: ClassVar[str] = "group"
    group_type: str = "tier"  # tier | subnet | service
    contained_nodes: List[str] = field(default_factory=list)
    node_count: int = 0
    bucket: Optional[str] = None  # classification bucket; the node id differs only on a clash


NodeMeta = Union[
    SubscriptionMeta,
    ManagementGroupMeta,
    VNetMeta,
    SubnetMeta,
    ServiceMeta,
    HubMeta,
    GroupMeta,
]


def meta_to_dict(meta: Optional[NodeMeta]) -> Optional[Dict[str, Any]]:
    if meta is None:
        return None
    data = {"kind": meta.kind}
    for key, value in asdict(meta).items():
        data[key] = value.value if isinstance(value, Enum) else value
    return data


# =============================================================================
# NODES & EDGES
# =============================================================================

@dataclass
class ArchNode:
    id: str
    type: NodeType
    label: str
    layer: Layer
    entity_type: EntityType = EntityType.SERVICE
    parent_id: Optional[str] = None
    children: List[str] = field(default_factory=list)
    bounds: Optional[Bounds] = None
    meta: Optional[NodeMeta] = None

    @property
    def is_hub(self) -> bool:
        return isinstance(self.meta, HubMeta)

    @property
    def is_grouped(self) -> bool:
        return isinstance(self.meta, GroupMeta)

    @property
    def is_container(self) -> bool:
        return self.entity_type in CONTAINER_ENTITY_TYPES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "layer": self.layer.value,
            "entityType": self.entity_type.value,
            "parentId": self.parent_id,
            "children": list(self.children),
            "bounds": self.bounds.to_dict() if self.bounds else None,
            "meta": meta_to_dict(self.meta),
        }


@dataclass
class ArchEdge:
    source: str
    target: str
    label: Optional[str] = None
    edge_type: EdgeType = EdgeType.CUSTOM
    style: EdgeStyle = EdgeStyle.SOLID
    is_containment: bool = False
    bundle_count: int = 1

    @property
    def key(self) -> tuple:
        return (self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "label": self.label,
            "edgeType": self.edge_type.value,
            "style": self.style.value,
            "isContainment": self.is_containment,
            "bundleCount": self.bundle_count,
        }


def containment_edge(parent_id: str, child_id: str) -> ArchEdge:
    return ArchEdge(
        source=parent_id,
        target=child_id,
        edge_type=EdgeType.CONTAINMENT,
        style=EdgeStyle.DASHED,
        is_containment=True,
    )


# =============================================================================
# MODEL
# =============================================================================

@dataclass
class ArchitectureModel:
    nodes: List[ArchNode] = field(default_factory=list)
    edges: List[ArchEdge] = field(default_factory=list)
    relative_geometry: bool = False

    def node_map(self) -> Dict[str, ArchNode]:
        """Id -> node. The first node wins when ids collide."""
        lookup: Dict[str, ArchNode] = {}
        for node in self.nodes:
            lookup.setdefault(node.id, node)
        return lookup

    def get(self, node_id: Optional[str]) -> Optional[ArchNode]:
        if node_id is None:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return any(node.id == node_id for node in self.nodes)

    def add_node(self, node: ArchNode) -> ArchNode:
        self.nodes.append(node)
        return node

    def add_edge(self, edge: ArchEdge) -> ArchEdge:
        self.edges.append(edge)
        return edge

    def children_of(self, node_id: str) -> List[ArchNode]:
        return [node for node in self.nodes if node.parent_id == node_id]

    def roots(self) -> List[ArchNode]:
        ids = {node.id for node in self.nodes}
        return [n for n in self.nodes if n.parent_id is None or n.parent_id not in ids]

    def rebuild_children(self) -> None:
        lookup = self.node_map()
        for node in self.nodes:
            node.children = []
        for node in self.nodes:
            parent = lookup.get(node.parent_id) if node.parent_id else None
            if parent is not None and node.id not in parent.children:
                parent.children.append(node.id)

    def ancestors(self, node_id: str) -> Iterator[ArchNode]:
        """Walk parent links upward. Stops on a cycle or a missing parent."""
        lookup = self.node_map()
        seen = {node_id}
        current = lookup.get(node_id)
        while current is not None and current.parent_id:
            if current.parent_id in seen:
                return
            seen.add(current.parent_id)
            current = lookup.get(current.parent_id)
            if current is not None:
                yield current

    def depth(self, node_id: str) -> int:
        return sum(1 for _ in self.ancestors(node_id))

    def copy(self) -> "ArchitectureModel":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "relativeGeometry": self.relative_geometry,
        }

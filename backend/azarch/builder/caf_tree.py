"""
CAF tree builder - converts an AI-proposed subscription -> VNet -> subnet -> service
tree into an ArchitectureModel.

CIDR problems are reported in `validation_errors` but never stop the conversion.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Set

from azarch.builder.cidr import validate_cidr_ranges
from azarch.model.palette import service_color, subscription_color
from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    EdgeStyle,
    EdgeType,
    EntityType,
    Layer,
    NodeType,
    ServiceMeta,
    SubnetMeta,
    SubscriptionMeta,
    SubscriptionType,
    VNetMeta,
    containment_edge,
)
from azarch.schemas import CafArchitecture, CafMeta, DiagramOptions

logger = logging.getLogger(__name__)

SERVICE_TYPE_MAP = {
    "vm": NodeType.VM,
    "vmss": NodeType.VMSS,
    "sql": NodeType.SQL,
    "storage": NodeType.STORAGE,
    "keyvault": NodeType.KEYVAULT,
    "monitor": NodeType.MONITOR,
    "firewall": NodeType.FIREWALL,
    "bastion": NodeType.BASTION,
    "appgw": NodeType.APPGW,
    "applicationgateway": NodeType.APPGW,
    "lb": NodeType.LB,
    "loadbalancer": NodeType.LB,
    "nsg": NodeType.NSG,
}

SERVICE_LAYER_MAP = {
    "vm": Layer.COMPUTE,
    "vmss": Layer.COMPUTE,
    "sql": Layer.DATA,
    "storage": Layer.DATA,
    "keyvault": Layer.SECURITY,
    "monitor": Layer.OBSERVABILITY,
    "firewall": Layer.NETWORKING,
    "bastion": Layer.NETWORKING,
    "appgw": Layer.NETWORKING,
    "lb": Layer.NETWORKING,
    "nsg": Layer.NETWORKING,
}

LANDING_ZONE_TYPES = {SubscriptionType.LANDINGZONE_PROD, SubscriptionType.LANDINGZONE_NONPROD}


DEFAULT_CAF_ARCHITECTURE = CafArchitecture.model_validate({
    "architecture": {"pattern": "hub-spoke"},
    "subscriptions": [
        {
            "id": "sub-hub",
            "name": "Hub Subscription",
            "type": "platform-connectivity",
            "vnets": [{
                "id": "vnet-hub",
                "name": "Hub VNet",
                "addressSpace": "10.0.0.0/16",
                "subnets": [{
                    "id": "subnet-hub-management",
                    "name": "Management Subnet",
                    "addressPrefix": "10.0.0.0/24",
                    "tier": "management",
                    "services": [
                        {"id": "firewall-hub", "name": "Azure Firewall", "type": "firewall", "count": 1},
                        {"id": "bastion-hub", "name": "Azure Bastion", "type": "bastion", "count": 1},
                    ],
                }],
            }],
        },
        {
            "id": "sub-spoke",
            "name": "Spoke Subscription",
            "type": "landingzone-prod",
            "vnets": [{
                "id": "vnet-spoke",
                "name": "Spoke VNet",
                "addressSpace": "10.1.0.0/16",
                "subnets": [
                    {"id": "subnet-spoke-web", "name": "Web Tier", "addressPrefix": "10.1.0.0/24", "tier": "web"},
                    {"id": "subnet-spoke-app", "name": "App Tier", "addressPrefix": "10.1.1.0/24", "tier": "app"},
                    {"id": "subnet-spoke-db", "name": "DB Tier", "addressPrefix": "10.1.2.0/24", "tier": "db"},
                ],
            }],
        },
    ],
    "meta": {
        "assumptions": ["Using default hub-spoke pattern due to parsing error"],
        "recommendations": ["Review and customize the architecture based on your specific requirements"],
        "risks": ["Default configuration may not meet security or performance requirements"],
        "complexity": "low",
    },
})


def default_caf_architecture() -> CafArchitecture:
    return DEFAULT_CAF_ARCHITECTURE.model_copy(deep=True)


@dataclass
class CafBuildResult:
    model: ArchitectureModel
    validation_errors: List[str] = field(default_factory=list)
    meta: Optional[CafMeta] = None

    def to_dict(self) -> dict:
        return {
            "model": self.model.to_dict(),
            "validation_errors": self.validation_errors,
            "meta": self.meta.model_dump(by_alias=True) if self.meta else None,
        }


class CafTreeConverter:
    def __init__(self, architecture: CafArchitecture):
        self.architecture = architecture
        self.model = ArchitectureModel()
        self.errors: List[str] = []
        self._ids: Set[str] = set()

    def convert(self) -> CafBuildResult:
        self.errors.extend(validate_cidr_ranges(self.architecture))
        for message in self.errors:
            logger.warning("[CafBuilder] %s", message)

        for subscription in self.architecture.subscriptions:
            self._add_subscription(subscription)

        if self.architecture.architecture.pattern == "hub-spoke":
            self._add_peering()

        self._clean_edges()
        self.model.rebuild_children()

        logger.info(
            "[CafBuilder] %d subscriptions -> %d nodes, %d edges",
            len(self.architecture.subscriptions), len(self.model.nodes), len(self.model.edges),
        )
        return CafBuildResult(
            model=self.model,
            validation_errors=self.errors,
            meta=self.architecture.meta,
        )

    # -------------------------------------------------------------------------

    def _add(self, node: ArchNode) -> bool:
        if node.id in self._ids:
            self.errors.append(f"Duplicate node id: {node.id}")
            return False
        self._ids.add(node.id)
        self.model.add_node(node)
        if node.parent_id:
            self.model.add_edge(containment_edge(node.parent_id, node.id))
        return True

    def _add_subscription(self, subscription):
        self._add(ArchNode(
            id=subscription.id,
            type=NodeType.SUBSCRIPTION,
            label=subscription.name,
            layer=Layer.MANAGEMENT,
            entity_type=EntityType.SUBSCRIPTION,
            meta=SubscriptionMeta(
                subscription_type=subscription.type,
                color=subscription_color(subscription.type),
            ),
        ))

        for vnet in subscription.vnets:
            self._add(ArchNode(
                id=vnet.id,
                type=NodeType.VNET,
                label=vnet.name,
                layer=Layer.NETWORKING,
                entity_type=EntityType.VNET,
                parent_id=subscription.id,
                meta=VNetMeta(address_space=vnet.address_space),
            ))

            for subnet in vnet.subnets:
                self._add(ArchNode(
                    id=subnet.id,
                    type=NodeType.SUBNET,
                    label=subnet.name,
                    layer=Layer.NETWORKING,
                    entity_type=EntityType.SUBNET,
                    parent_id=vnet.id,
                    meta=SubnetMeta(
                        address_prefix=subnet.address_prefix,
                        tier=subnet.tier,
                        vm_count=subnet.vm_count or 0,
                    ),
                ))

                for service in subnet.services:
                    if service.count <= 0:
                        continue
                    self._add(ArchNode(
                        id=service.id,
                        type=SERVICE_TYPE_MAP.get(service.type) or NodeType.parse(service.type),
                        label=f"{service.name} ({service.count})",
                        layer=SERVICE_LAYER_MAP.get(service.type, Layer.COMPUTE),
                        entity_type=EntityType.SERVICE,
                        parent_id=subnet.id,
                        meta=ServiceMeta(
                            count=service.count,
                            sku=service.sku,
                            config=dict(service.config),
                            color=service_color(service.type),
                        ),
                    ))

    def _add_peering(self):
        hubs = []
        spokes = []
        for subscription in self.architecture.subscriptions:
            if subscription.type == SubscriptionType.PLATFORM_CONNECTIVITY:
                hubs.extend(v.id for v in subscription.vnets)
            elif subscription.type in LANDING_ZONE_TYPES:
                spokes.extend(v.id for v in subscription.vnets)

        for hub in hubs:
            for spoke in spokes:
                self.model.add_edge(ArchEdge(
                    source=hub,
                    target=spoke,
                    label="VNet Peering",
                    edge_type=EdgeType.PEERING,
                    style=EdgeStyle.DASHED,
                ))

    def _clean_edges(self):
        seen = set()
        kept = []
        for edge in self.model.edges:
            if edge.source == edge.target or edge.key in seen:
                continue
            if edge.source not in self._ids or edge.target not in self._ids:
                logger.warning(
                    "[CafBuilder] dropping edge with missing endpoint: %s -> %s",
                    edge.source, edge.target,
                )
                continue
            seen.add(edge.key)
            kept.append(edge)
        self.model.edges = kept


def build_from_caf(
    architecture: Optional[CafArchitecture] = None,
    options: Optional[DiagramOptions] = None,
) -> CafBuildResult:
    """Convert a CAF tree; with no tree, the default hub-spoke architecture is used."""
    if architecture is None:
        architecture = default_caf_architecture()
    return CafTreeConverter(architecture).convert()

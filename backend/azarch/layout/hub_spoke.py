from typing import List, Optional

from azarch.layout.base import Anchor, LayoutEngine
from azarch.model.types import ArchitectureModel, ArchNode, EntityType, Layer, NodeType, VNetMeta

HUB_VNET_IDS = {"hub-vnet", "vnet-hub"}
SPOKE_VNET_IDS = {"spoke-vnet", "main-vnet", "vnet-spoke-prod", "vnet-spoke"}
NONPROD_VNET_IDS = {"vnet-spoke-nonprod"}

# Column multipliers of column_spacing, offset from x=50.
COLUMNS = {
    "on-premises": 0,
    "connectivity": 1,
    "hub-vnet": 2,
    "platform-services": 2.5,
    "data-services": 2.5,
    "spoke-prod": 3,
    "spoke-nonprod": 4,
}

# Row multipliers of row_spacing, offset from y=100.
ROWS = {
    "ingress": 0,
    "security": 1,
    "core": 2,
    "monitoring": 3,
    "data": 4,
}

TYPE_PLACEMENT = {
    NodeType.FRONTDOOR: ("connectivity", "ingress"),
    NodeType.APPGW: ("connectivity", "ingress"),
    NodeType.FIREWALL: ("connectivity", "security"),
    NodeType.BASTION: ("connectivity", "core"),
    NodeType.VPN_GATEWAY: ("on-premises", "core"),
}

LAYER_PLACEMENT = {
    Layer.CONNECTIVITY: ("connectivity", "ingress"),
    Layer.NETWORKING: ("connectivity", "core"),
    Layer.COMPUTE: ("spoke-prod", "data"),
    Layer.SECURITY: ("platform-services", "security"),
    Layer.IDENTITY: ("platform-services", "security"),
    Layer.MANAGEMENT: ("platform-services", "monitoring"),
    Layer.OBSERVABILITY: ("platform-services", "monitoring"),
    Layer.DEVOPS: ("platform-services", "monitoring"),
    Layer.DATA: ("data-services", "data"),
}


class HubSpokeLayout(LayoutEngine):
    """Reference hub-spoke picture: ingress on the left, hub in the middle, spokes right."""

    name = "hub-spoke"

    def placement(self, node: ArchNode) -> tuple:
        if node.id in HUB_VNET_IDS:
            return "hub-vnet", "core"
        if node.id in NONPROD_VNET_IDS:
            return "spoke-nonprod", "core"
        if node.id in SPOKE_VNET_IDS:
            return "spoke-prod", "core"
        if node.entity_type == EntityType.VNET and isinstance(node.meta, VNetMeta):
            return ("hub-vnet" if node.meta.role == "hub" else "spoke-prod"), "core"
        if node.type in TYPE_PLACEMENT:
            return TYPE_PLACEMENT[node.type]
        return LAYER_PLACEMENT.get(node.layer, ("platform-services", "monitoring"))

    def anchor(self, node: ArchNode, model: ArchitectureModel) -> Optional[Anchor]:
        column, row = self.placement(node)
        x = 50 + COLUMNS[column] * self.options.column_spacing
        y = 100 + ROWS[row] * self.options.row_spacing
        return column, x, y

    def grid_columns(self, parent: ArchNode, children: List[ArchNode]) -> int:
        if parent.entity_type == EntityType.VNET:
            return 1
        return super().grid_columns(parent, children)

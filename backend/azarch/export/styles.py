"""Icon, vertex and edge style tables shared by every exporter."""

from typing import Optional

from azarch.model.palette import (
    CAF_STYLE_TOKENS,
    DEFAULT_COLOR,
    LAYER_COLORS,
    SERVICE_COLOR_MAP,
    SUBSCRIPTION_COLOR_MAP,
)
from azarch.model.types import (
    ArchEdge,
    ArchNode,
    EdgeStyle,
    EdgeType,
    EntityType,
    SubscriptionMeta,
)

AZURE_ICON_MAP = {
    "subscription": "/azure-icons/subscription.svg",
    "managementgroup": "/azure-icons/management-group.svg",
    "vnet": "/azure-icons/vnet.svg",
    "subnet": "/azure-icons/subnet.svg",
    "vm": "/azure-icons/vm.svg",
    "vmss": "/azure-icons/vmss.svg",
    "tier": "/azure-icons/vm.svg",
    "firewall": "/azure-icons/firewall.svg",
    "bastion": "/azure-icons/bastion.svg",
    "lb": "/azure-icons/load-balancer.svg",
    "appgw": "/azure-icons/app-gateway.svg",
    "frontdoor": "/azure-icons/front-door.svg",
    "vpngateway": "/azure-icons/vpn-gateway.svg",
    "dns": "/azure-icons/dns.svg",
    "monitor": "/azure-icons/monitor.svg",
    "loganalytics": "/azure-icons/log-analytics.svg",
    "policy": "/azure-icons/policy.svg",
    "defender": "/azure-icons/defender.svg",
    "identity": "/azure-icons/entra-id.svg",
    "keyvault": "/azure-icons/key-vault.svg",
    "nsg": "/azure-icons/nsg.svg",
    "sql": "/azure-icons/sql.svg",
    "storage": "/azure-icons/storage-blob.svg",
    "openai": "/azure-icons/openai.svg",
    "search": "/azure-icons/search.svg",
    "default": "/azure-icons/vm.svg",
}

_SWIMLANE = (
    "swimlane;fontStyle=1;childLayout=stackLayout;horizontal=1;startSize=30;"
    "horizontalStack=0;resizeParent=1;resizeParentMax=0;resizeParentMin=0;resizeLast=0;"
    "collapsible=1;marginBottom=0;whiteSpace=wrap;html=1;fontSize=12;"
)
_BOX = "rounded=1;whiteSpace=wrap;html=1;fontSize=10;"

STYLE_MAP = {
    "management": _SWIMLANE + "fillColor=#e3f2fd;strokeColor=#1565c0;fontColor=#1565c0;",
    "connectivity": _SWIMLANE + "fillColor=#f3e5f5;strokeColor=#7b1fa2;fontColor=#7b1fa2;",
    "landingzone": _SWIMLANE + "fillColor=#e8f5e9;strokeColor=#2e7d32;fontColor=#2e7d32;",
    "managementGroup": _SWIMLANE + "fillColor=#fff8e1;strokeColor=#ff8c00;fontColor=#8a4b00;",
    "subscription": _SWIMLANE + "fillColor=#f5f5f5;strokeColor=#666666;fontColor=#333333;",
    "vnet": _BOX + "fontStyle=1;fillColor=#ede7f6;strokeColor=#7b1fa2;verticalAlign=top;",
    "subnet": _BOX + "fontStyle=0;fillColor=#f5f5f5;strokeColor=#666666;verticalAlign=top;",
    "tier": _BOX + "fontStyle=1;fillColor=#e8f5e9;strokeColor=#2e7d32;",
    "hub": _BOX + "fontStyle=2;dashed=1;fillColor=#fffde7;strokeColor=#f9a825;",
    "group": _BOX + "fontStyle=1;fillColor=#e0f7fa;strokeColor=#00838f;",
    "service": (
        "shape=image;imageAspect=0;aspect=fixed;verticalLabelPosition=bottom;verticalAlign=top;"
        "whiteSpace=wrap;html=1;fontSize=10;fontStyle=0;fillColor=#e1f5fe;strokeColor=#0277bd;"
    ),
    "default": _BOX + "fontStyle=0;fillColor=#f5f5f5;strokeColor=#666666;",
}

_ARROW = "endArrow=classic;html=1;strokeWidth=2;"

EDGE_STYLE_MAP = {
    "peering": _ARROW + "strokeColor=#1976d2;",
    "management": _ARROW + "strokeColor=#607d8b;",
    "governance": _ARROW + "strokeColor=#666666;dashed=1;",
    "security": _ARROW + "strokeColor=#d32f2f;dashed=1;",
    "east-west": _ARROW + "strokeColor=#42a5f5;",
    "ingress": _ARROW + "strokeColor=#0078d4;",
    "egress": _ARROW + "strokeColor=#d13438;",
    "bastion": _ARROW + "strokeColor=#8661c5;",
    "private-endpoint": _ARROW + "strokeColor=#00bcf2;",
    "overflow": _ARROW + "strokeColor=#9e9e9e;dashed=1;dashPattern=1 4;",
    "default": _ARROW + "strokeColor=#666666;",
}

# Pairs of (legend label, swatch style key) shown by the drawio legend.
LEGEND_ITEMS = [
    ("Management", "management"),
    ("Connectivity", "connectivity"),
    ("Landing Zone", "landingzone"),
]
LEGEND_EDGES = [
    ("VNet Peering", "peering"),
    ("Governance", "governance"),
    ("App Flow", "east-west"),
]


def has_specific_icon(node: ArchNode) -> bool:
    return node.type.value in AZURE_ICON_MAP


def icon_for(node: ArchNode) -> str:
    return AZURE_ICON_MAP.get(node.type.value, AZURE_ICON_MAP["default"])


def subscription_family(node: ArchNode) -> str:
    """management | connectivity | landingzone | default, from the subscription type or id."""
    subscription_type = None
    if isinstance(node.meta, SubscriptionMeta) and node.meta.subscription_type is not None:
        subscription_type = node.meta.subscription_type.value
    key = subscription_type or node.id
    if "management" in key or "identity" in key:
        return "management"
    if "connectivity" in key:
        return "connectivity"
    if "landingzone" in key or "landing" in key:
        return "landingzone"
    return "default"


def vertex_style_for(node: ArchNode) -> str:
    if node.entity_type == EntityType.SUBSCRIPTION:
        family = subscription_family(node)
        return STYLE_MAP[family] if family != "default" else STYLE_MAP["subscription"]
    if node.entity_type == EntityType.MANAGEMENT_GROUP:
        return STYLE_MAP["managementGroup"]
    if node.entity_type in (EntityType.VNET, EntityType.SUBNET, EntityType.TIER):
        return STYLE_MAP[node.entity_type.value]
    if node.is_hub:
        return STYLE_MAP["hub"]
    if node.is_grouped:
        return STYLE_MAP["group"]
    if node.entity_type in (EntityType.SERVICE, EntityType.PAAS):
        return f"{STYLE_MAP['service']}image={icon_for(node)};"
    return STYLE_MAP["default"]


def edge_style_for(edge: ArchEdge) -> str:
    if edge.style == EdgeStyle.DOTTED:
        return EDGE_STYLE_MAP["overflow"]
    if edge.style == EdgeStyle.DASHED:
        return EDGE_STYLE_MAP["governance"]
    return EDGE_STYLE_MAP.get(edge.edge_type.value, EDGE_STYLE_MAP["default"])


def color_for(node: ArchNode) -> str:
    """Fill color: the node's own meta color, then type, subscription and layer tables."""
    color: Optional[str] = getattr(node.meta, "color", None)
    if color:
        return color
    if node.type.value in SERVICE_COLOR_MAP:
        return SERVICE_COLOR_MAP[node.type.value]
    if isinstance(node.meta, SubscriptionMeta) and node.meta.subscription_type is not None:
        return SUBSCRIPTION_COLOR_MAP.get(node.meta.subscription_type.value, DEFAULT_COLOR)
    return LAYER_COLORS.get(node.layer, DEFAULT_COLOR)


def edge_color_for(edge: ArchEdge) -> str:
    if edge.edge_type in (EdgeType.SECURITY, EdgeType.EGRESS):
        return CAF_STYLE_TOKENS["connectivity"]
    if edge.edge_type in (EdgeType.GOVERNANCE, EdgeType.MANAGEMENT):
        return CAF_STYLE_TOKENS["management"]
    if edge.edge_type == EdgeType.PEERING:
        return CAF_STYLE_TOKENS["networking"]
    if edge.edge_type == EdgeType.PRIVATE_ENDPOINT:
        return CAF_STYLE_TOKENS["data"]
    return "#666666"


__all__ = [
    "AZURE_ICON_MAP",
    "CAF_STYLE_TOKENS",
    "EDGE_STYLE_MAP",
    "LAYER_COLORS",
    "STYLE_MAP",
    "SUBSCRIPTION_COLOR_MAP",
    "color_for",
    "edge_color_for",
    "edge_style_for",
    "icon_for",
    "vertex_style_for",
]

"""
Grouping - collapse nodes into synthetic group nodes at tier, subnet or service level.

Hub nodes and nodes that are already groups are never regrouped, which makes the
pass idempotent.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from azarch.model.ids import IdGenerator
from azarch.model.types import ArchitectureModel, ArchNode, EntityType, GroupMeta, Layer, NodeType
from azarch.optimizer.edges import merge_duplicate_edges

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupSpec:
    id: str
    label: str
    type: NodeType
    layer: Layer


TIER_GROUPS = [
    GroupSpec("web-tier", "Web Tier", NodeType.VM, Layer.COMPUTE),
    GroupSpec("app-tier", "Application Tier", NodeType.VM, Layer.COMPUTE),
    GroupSpec("db-tier", "Database Tier", NodeType.SQL, Layer.DATA),
    GroupSpec("networking", "Networking", NodeType.VNET, Layer.NETWORKING),
    GroupSpec("security", "Security", NodeType.KEYVAULT, Layer.SECURITY),
    GroupSpec("observability", "Observability", NodeType.MONITOR, Layer.OBSERVABILITY),
]

SUBNET_GROUPS = [
    GroupSpec("web-subnet", "Web Subnet", NodeType.SUBNET, Layer.NETWORKING),
    GroupSpec("app-subnet", "Application Subnet", NodeType.SUBNET, Layer.NETWORKING),
    GroupSpec("db-subnet", "Database Subnet", NodeType.SUBNET, Layer.NETWORKING),
    GroupSpec("management-subnet", "Management Subnet", NodeType.SUBNET, Layer.NETWORKING),
]

SERVICE_GROUPS = [
    GroupSpec("observability", "Observability", NodeType.MONITOR, Layer.OBSERVABILITY),
    GroupSpec("security", "Security", NodeType.KEYVAULT, Layer.SECURITY),
    GroupSpec("networking", "Networking", NodeType.VNET, Layer.NETWORKING),
]


def _has(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


def classify_tier(node: ArchNode) -> Optional[str]:
    node_type = node.type.value
    label = node.label.lower()
    if _has(node_type, "web") or _has(label, "web", "frontend"):
        return "web-tier"
    if _has(node_type, "app") or _has(label, "app", "api"):
        return "app-tier"
    if _has(node_type, "sql", "db", "database"):
        return "db-tier"
    if _has(node_type, "vnet", "subnet", "nsg"):
        return "networking"
    if _has(node_type, "key", "defender", "policy"):
        return "security"
    if _has(node_type, "monitor", "log", "insights"):
        return "observability"
    return "app-tier"


def classify_subnet(node: ArchNode) -> Optional[str]:
    node_type = node.type.value
    label = node.label.lower()
    if _has(label, "web") or _has(node_type, "web"):
        return "web-subnet"
    if _has(label, "app") or _has(node_type, "app", "api"):
        return "app-subnet"
    if _has(label, "db") or _has(node_type, "sql", "database"):
        return "db-subnet"
    return "management-subnet"


def classify_service(node: ArchNode) -> Optional[str]:
    node_type = node.type.value
    label = node.label.lower()
    if _has(node_type, "monitor", "log", "insights") or _has(label, "monitor", "log"):
        return "observability"
    if _has(node_type, "key", "defender", "policy") or _has(label, "policy", "defender", "key"):
        return "security"
    if _has(node_type, "vnet", "subnet", "nsg") or _has(label, "vnet", "subnet", "networking"):
        return "networking"
    return None


GROUPING_LEVELS: Dict[str, tuple] = {
    "tier": (TIER_GROUPS, classify_tier),
    "subnet": (SUBNET_GROUPS, classify_subnet),
    "service": (SERVICE_GROUPS, classify_service),
}


def apply_grouping(model: ArchitectureModel, level: Optional[str]) -> ArchitectureModel:
    if not level or level == "none":
        return model.copy()
    if level not in GROUPING_LEVELS:
        logger.warning("[GraphOptimizer] unknown grouping level %r; model left ungrouped", level)
        return model.copy()

    specs: List[GroupSpec]
    classify: Callable[[ArchNode], Optional[str]]
    specs, classify = GROUPING_LEVELS[level]
    spec_by_id = {spec.id: spec for spec in specs}

    source = model.copy()
    ids = IdGenerator()
    for node in source.nodes:
        ids.reserve(node.id)
    existing_groups = {n.meta.bucket or n.id: n for n in source.nodes if n.is_grouped}
    membership: Dict[str, str] = {}
    nodes: List[ArchNode] = []
    created: Dict[str, ArchNode] = {}

    for node in source.nodes:
        if node.is_hub or node.is_grouped:
            nodes.append(node)
            continue

        bucket = classify(node)
        if bucket is None:
            nodes.append(node)
            continue

        group = existing_groups.get(bucket) or created.get(bucket)
        if group is None:
            spec = spec_by_id[bucket]
            group = ArchNode(
                id=ids.generate(spec.id),
                type=spec.type,
                label=spec.label,
                layer=spec.layer,
                entity_type=EntityType.CUSTOM,
                meta=GroupMeta(group_type=level, bucket=bucket),
            )
            created[bucket] = group
            nodes.append(group)
        membership[node.id] = group.id
        group.meta.contained_nodes.append(node.id)
        group.meta.node_count = len(group.meta.contained_nodes)

    for node in nodes:
        if node.parent_id in membership:
            node.parent_id = None

    # Containment into or out of a collapsed node no longer describes anything.
    source.edges = [
        e for e in source.edges
        if not (e.is_containment and (e.source in membership or e.target in membership))
    ]

    source.nodes = nodes
    result = merge_duplicate_edges(source, show_counts=True, membership=membership)
    result.rebuild_children()

    logger.info(
        "[GraphOptimizer] %s grouping: %d nodes -> %d nodes, %d edges",
        level, len(model.nodes), len(result.nodes), len(result.edges),
    )
    return result

import logging
from typing import List

from azarch.export.styles import has_specific_icon
from azarch.model.geometry import absolute_bounds
from azarch.model.types import ArchitectureModel, EntityType

logger = logging.getLogger(__name__)


def validate_for_export(model: ArchitectureModel) -> List[str]:
    """
    Problems an exporter will degrade around rather than fail on.

    Dangling parents are exported at root, dangling edges are skipped and unknown
    node types fall back to the default icon.
    """
    messages: List[str] = []
    lookup = model.node_map()
    placed = absolute_bounds(model)

    for node in model.nodes:
        if node.parent_id and node.parent_id not in lookup:
            messages.append(f"Parent node not found: {node.parent_id} (for {node.id})")
        elif node.parent_id and node.id in placed and node.parent_id in placed:
            if not placed[node.parent_id].contains(placed[node.id]):
                messages.append(f"Node {node.id} extends beyond parent {node.parent_id}")

        if node.entity_type in (EntityType.SERVICE, EntityType.PAAS) and not has_specific_icon(node):
            messages.append(f"No icon found for node type: {node.type.value} ({node.id}), using default")

    seen = set()
    for edge in model.edges:
        if edge.key in seen:
            messages.append(f"Duplicate edge: {edge.source} -> {edge.target}")
        seen.add(edge.key)
        if edge.source not in lookup:
            messages.append(f"Edge source node not found: {edge.source}")
        if edge.target not in lookup:
            messages.append(f"Edge target node not found: {edge.target}")

    if messages:
        logger.warning("[Exporter] %d export validation issue(s): %s", len(messages), "; ".join(messages[:5]))
    return messages

import json
from collections import defaultdict
from typing import Any, Dict, List

from azarch.layout.layered import LAYER_ORDER
from azarch.model.geometry import absolute_bounds
from azarch.model.types import ArchitectureModel, EntityType, meta_to_dict

GROUP_ENTITY_TYPES = {EntityType.SUBSCRIPTION, EntityType.VNET}
ROW_HEIGHT = 150
COLUMN_WIDTH = 250


def to_flow_graph(model: ArchitectureModel) -> Dict[str, List[Dict[str, Any]]]:
    """
    Node/edge lists for a browser flow-chart widget.

    Unplaced nodes fall back to one row per layer, spread left to right.
    """
    placed = absolute_bounds(model)
    per_layer: Dict[str, int] = defaultdict(int)

    nodes = []
    for node in model.nodes:
        bounds = placed.get(node.id)
        if bounds is not None:
            position = {"x": bounds.x, "y": bounds.y}
        else:
            row = LAYER_ORDER.index(node.layer) if node.layer in LAYER_ORDER else len(LAYER_ORDER)
            index = per_layer[node.layer.value]
            per_layer[node.layer.value] += 1
            position = {"x": 50 + index * COLUMN_WIDTH, "y": 50 + row * ROW_HEIGHT}

        nodes.append({
            "id": node.id,
            "type": "groupNode" if node.entity_type in GROUP_ENTITY_TYPES else "azureNode",
            "position": position,
            "data": {
                "label": node.label,
                "type": node.type.value,
                "layer": node.layer.value,
                "entityType": node.entity_type.value,
                "meta": meta_to_dict(node.meta),
            },
        })

    edges = [
        {
            "id": f"{edge.source}-{edge.target}",
            "source": edge.source,
            "target": edge.target,
            "type": "custom",
            "data": {
                "label": edge.label,
                "style": edge.style.value,
                "edgeType": edge.edge_type.value,
                "isContainment": edge.is_containment,
            },
        }
        for edge in model.edges
    ]
    return {"nodes": nodes, "edges": edges}


def to_flow_json(model: ArchitectureModel) -> str:
    return json.dumps(to_flow_graph(model), indent=2)

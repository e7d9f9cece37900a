from typing import Dict, Optional

from azarch.model.types import ArchitectureModel, Bounds


def absolute_bounds(model: ArchitectureModel) -> Dict[str, Bounds]:
    """Bounds of every placed node in absolute coordinates."""
    lookup = model.node_map()
    if not model.relative_geometry:
        return {n.id: n.bounds for n in model.nodes if n.bounds is not None}

    resolved: Dict[str, Bounds] = {}

    def resolve(node_id: str, seen: set) -> Optional[Bounds]:
        if node_id in resolved:
            return resolved[node_id]
        node = lookup.get(node_id)
        if node is None or node.bounds is None or node_id in seen:
            return None
        seen.add(node_id)
        parent_abs = resolve(node.parent_id, seen) if node.parent_id else None
        result = node.bounds if parent_abs is None else node.bounds.translated(parent_abs.x, parent_abs.y)
        resolved[node_id] = result
        return result

    for node in model.nodes:
        resolve(node.id, set())
    return resolved


def relative_bounds(model: ArchitectureModel) -> Dict[str, Bounds]:
    """Bounds of every placed node relative to its parent (absolute at root)."""
    if model.relative_geometry:
        return {n.id: n.bounds for n in model.nodes if n.bounds is not None}

    lookup = model.node_map()
    result: Dict[str, Bounds] = {}
    for node in model.nodes:
        if node.bounds is None:
            continue
        parent = lookup.get(node.parent_id) if node.parent_id else None
        if parent is not None and parent.bounds is not None:
            result[node.id] = node.bounds.translated(-parent.bounds.x, -parent.bounds.y)
        else:
            result[node.id] = node.bounds
    return result

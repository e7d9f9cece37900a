import logging
import re
from collections import defaultdict
from typing import Dict, List, Optional

from azarch.export.styles import CAF_STYLE_TOKENS, LAYER_COLORS, color_for, edge_color_for
from azarch.model.types import ArchitectureModel, ArchNode
from azarch.schemas import ExportOptions

logger = logging.getLogger(__name__)

HEADER = [
    "@startuml",
    "!theme plain",
    "skinparam rectangleRoundCorner 8",
    "skinparam defaultFontName Arial",
    "skinparam defaultFontSize 11",
    "skinparam shadowing false",
]


def alias_for(node_id: str, taken: Dict[str, str]) -> str:
    """PlantUML identifier for a node id, unique within one document."""
    if node_id in taken:
        return taken[node_id]
    alias = re.sub(r"[^A-Za-z0-9_]", "_", node_id) or "node"
    if alias[0].isdigit():
        alias = f"n_{alias}"
    base, suffix = alias, 2
    while alias in taken.values():
        alias = f"{base}_{suffix}"
        suffix += 1
    taken[node_id] = alias
    return alias


def _quote(label: str) -> str:
    return label.replace('"', "'")


def _legend() -> List[str]:
    lines = ["legend right", "|= Layer |= Color |"]
    for layer, color in LAYER_COLORS.items():
        lines.append(f"| {layer.value} | <back:{color}>    </back> |")
    lines.append("endlegend")
    return lines


def to_plantuml(model: ArchitectureModel, options: Optional[ExportOptions] = None) -> str:
    opts = options or ExportOptions()
    lookup = model.node_map()
    aliases: Dict[str, str] = {}

    children: Dict[str, List[ArchNode]] = defaultdict(list)
    roots: List[ArchNode] = []
    for node in lookup.values():
        if node.parent_id and node.parent_id in lookup:
            children[node.parent_id].append(node)
        else:
            roots.append(node)

    lines = list(HEADER)
    lines.append(f"title {opts.diagram_name}")
    lines.append("")

    emitted = set()

    def emit(node: ArchNode, depth: int) -> None:
        if node.id in emitted:
            return
        emitted.add(node.id)
        indent = "  " * depth
        color = color_for(node).lstrip("#")
        head = f'{indent}rectangle "{_quote(node.label)}" as {alias_for(node.id, aliases)} #{color}'
        kids = children.get(node.id, [])
        if not kids:
            lines.append(head)
            return
        lines.append(head + " {")
        for kid in kids:
            emit(kid, depth + 1)
        lines.append(f"{indent}}}")

    for node in roots:
        emit(node, 0)

    # Nodes caught in a containment cycle never hang off a root.
    for node in lookup.values():
        if node.id not in emitted:
            logger.warning("[PlantUmlExporter] %s is not reachable from a root, emitting flat", node.id)
            emit(node, 0)

    lines.append("")
    for edge in model.edges:
        if edge.is_containment:
            continue
        if edge.source not in lookup or edge.target not in lookup:
            logger.warning("[PlantUmlExporter] skipping dangling edge %s -> %s", edge.source, edge.target)
            continue
        color = edge_color_for(edge) or CAF_STYLE_TOKENS["platform"]
        arrow = f"{aliases[edge.source]} -[{color},thickness=2]-> {aliases[edge.target]}"
        lines.append(f"{arrow} : {edge.label}" if edge.label else arrow)

    if opts.show_legend:
        lines.append("")
        lines.extend(_legend())

    lines.append("@enduml")
    return "\n".join(lines) + "\n"

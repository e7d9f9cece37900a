"""
diagrams.net (mxGraph) exporter.

Vertices are written in containment order (management groups, subscriptions,
VNets, subnets, tiers, then everything else) so every mxCell parent exists before
its children. Geometry is parent-relative, as mxGraph expects.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from azarch.export.styles import (
    EDGE_STYLE_MAP,
    LEGEND_EDGES,
    LEGEND_ITEMS,
    STYLE_MAP,
    edge_style_for,
    vertex_style_for,
)
from azarch.export.validation import validate_for_export
from azarch.model.geometry import absolute_bounds, relative_bounds
from azarch.model.ids import IdGenerator
from azarch.model.types import ArchEdge, ArchitectureModel, ArchNode, Bounds, EntityType
from azarch.optimizer.edges import count_label
from azarch.schemas import ExportOptions

logger = logging.getLogger(__name__)

VERTEX_ORDER = {
    EntityType.MANAGEMENT_GROUP: 0,
    EntityType.SUBSCRIPTION: 1,
    EntityType.VNET: 2,
    EntityType.SUBNET: 3,
    EntityType.TIER: 4,
}

DEFAULT_GEOMETRY = Bounds(100, 100, 120, 70)
MIN_PAGE_WIDTH = 1200
MIN_PAGE_HEIGHT = 800
PAGE_MARGIN = 200
LEGEND_WIDTH = 200
LEGEND_HEIGHT = 200

ROOT_CELL_ID = "0"
LAYER_CELL_ID = "1"
LEGEND_CONTAINER_ID = "legend-container"


def _num(value: float) -> str:
    value = round(float(value), 2)
    return str(int(value)) if value.is_integer() else str(value)


def truncate_label(label: str, max_length: int = 24) -> str:
    if len(label) <= max_length:
        return label
    return label[: max_length - 3] + "..."


def page_size(model: ArchitectureModel) -> tuple:
    placed = list(absolute_bounds(model).values())
    if not placed:
        return MIN_PAGE_WIDTH, MIN_PAGE_HEIGHT
    min_x = min(b.x for b in placed)
    min_y = min(b.y for b in placed)
    max_x = max(b.right for b in placed)
    max_y = max(b.bottom for b in placed)
    return (
        max(MIN_PAGE_WIDTH, max_x - min_x + PAGE_MARGIN),
        max(MIN_PAGE_HEIGHT, max_y - min_y + PAGE_MARGIN),
    )


def ordered_vertices(model: ArchitectureModel) -> List[ArchNode]:
    seen = set()
    unique = []
    for node in model.nodes:
        if node.id in seen:
            logger.warning("[DrawioExporter] skipping duplicate node id %s", node.id)
            continue
        seen.add(node.id)
        unique.append(node)

    indexed = list(enumerate(unique))
    indexed.sort(key=lambda item: (
        VERTEX_ORDER.get(item[1].entity_type, len(VERTEX_ORDER)),
        model.depth(item[1].id),
        item[0],
    ))
    return [node for _, node in indexed]


def bundled_edges(model: ArchitectureModel, lookup: Dict[str, ArchNode]) -> List[ArchEdge]:
    """Exportable edges: dangling ones dropped, repeated pairs folded into one."""
    bundled: Dict[tuple, ArchEdge] = {}
    counts: Dict[tuple, int] = {}
    for edge in model.edges:
        if edge.source not in lookup or edge.target not in lookup:
            logger.warning("[DrawioExporter] skipping dangling edge %s -> %s", edge.source, edge.target)
            continue
        if edge.key in bundled:
            counts[edge.key] += 1
            continue
        bundled[edge.key] = edge
        counts[edge.key] = 1

    result = []
    for key, edge in bundled.items():
        if counts[key] > 1:
            labels = [edge.label] if edge.label else []
            edge = ArchEdge(
                source=edge.source,
                target=edge.target,
                label=count_label(labels, counts[key]),
                edge_type=edge.edge_type,
                style=edge.style,
                is_containment=edge.is_containment,
                bundle_count=counts[key],
            )
        result.append(edge)
    return result


def _geometry(cell: ET.Element, bounds: Bounds) -> None:
    ET.SubElement(cell, "mxGeometry", {
        "x": _num(bounds.x),
        "y": _num(bounds.y),
        "width": _num(bounds.w),
        "height": _num(bounds.h),
        "as": "geometry",
    })


def legend_cell_ids() -> List[str]:
    ids = [LEGEND_CONTAINER_ID]
    for _, style_key in LEGEND_ITEMS:
        ids += [f"legend-{style_key}", f"legend-{style_key}-color"]
    for _, style_key in LEGEND_EDGES:
        ids.append(f"legend-{style_key}-line")
    return ids


def cell_ids() -> IdGenerator:
    """
    Cell id allocator for one document. The root cells and the legend cells are
    reserved up front; node ids are kept unless they clash with one of them.
    """
    ids = IdGenerator()
    for reserved in [ROOT_CELL_ID, LAYER_CELL_ID] + legend_cell_ids():
        ids.reserve(reserved)
    return ids


def _legend(root: ET.Element, page_width: float) -> None:
    container = ET.SubElement(root, "mxCell", {
        "id": LEGEND_CONTAINER_ID,
        "value": "Legend",
        "style": STYLE_MAP["subscription"],
        "vertex": "1",
        "parent": LAYER_CELL_ID,
    })
    _geometry(container, Bounds(page_width - 250, 50, LEGEND_WIDTH, LEGEND_HEIGHT))

    y = 40
    for label, style_key in LEGEND_ITEMS:
        text = ET.SubElement(root, "mxCell", {
            "id": f"legend-{style_key}",
            "value": label,
            "style": "text;html=1;strokeColor=none;fillColor=none;align=left;fontSize=10;",
            "vertex": "1",
            "parent": LEGEND_CONTAINER_ID,
        })
        _geometry(text, Bounds(10, y, 120, 20))
        swatch = ET.SubElement(root, "mxCell", {
            "id": f"legend-{style_key}-color",
            "value": "",
            "style": STYLE_MAP[style_key],
            "vertex": "1",
            "parent": LEGEND_CONTAINER_ID,
        })
        _geometry(swatch, Bounds(140, y, 20, 15))
        y += 25

    for label, style_key in LEGEND_EDGES:
        line = ET.SubElement(root, "mxCell", {
            "id": f"legend-{style_key}-line",
            "value": label,
            "style": EDGE_STYLE_MAP[style_key],
            "edge": "1",
            "parent": LEGEND_CONTAINER_ID,
        })
        geometry = ET.SubElement(line, "mxGeometry", {"relative": "1", "as": "geometry"})
        ET.SubElement(geometry, "mxPoint", {"x": "140", "y": str(y + 10), "as": "sourcePoint"})
        ET.SubElement(geometry, "mxPoint", {"x": "170", "y": str(y + 10), "as": "targetPoint"})
        y += 25


def to_drawio_xml(model: ArchitectureModel, options: Optional[ExportOptions] = None) -> str:
    opts = options or ExportOptions()
    validate_for_export(model)

    lookup = model.node_map()
    geometry = relative_bounds(model)
    width, height = page_size(model)

    mxfile = ET.Element("mxfile", {"host": "app.diagrams.net", "type": "device"})
    diagram = ET.SubElement(mxfile, "diagram", {"name": opts.diagram_name, "id": "azure-architecture"})
    graph = ET.SubElement(diagram, "mxGraphModel", {
        "grid": "1",
        "gridSize": "10",
        "guides": "1",
        "tooltips": "1",
        "connect": "1",
        "arrows": "1",
        "fold": "1",
        "page": "1",
        "pageScale": "1",
        "pageWidth": _num(width),
        "pageHeight": _num(height),
        "math": "0",
        "shadow": "0",
    })
    root = ET.SubElement(graph, "root")
    ET.SubElement(root, "mxCell", {"id": ROOT_CELL_ID})
    ET.SubElement(root, "mxCell", {"id": LAYER_CELL_ID, "parent": ROOT_CELL_ID})

    ids = cell_ids()
    vertices = ordered_vertices(model)
    cells = {node.id: ids.generate(node.id) for node in vertices}
    for node_id, cell_id in cells.items():
        if cell_id != node_id:
            logger.warning("[DrawioExporter] node id %s clashes with a reserved cell; using %s", node_id, cell_id)

    for node in vertices:
        parent = cells[node.parent_id] if node.parent_id in lookup else LAYER_CELL_ID
        cell = ET.SubElement(root, "mxCell", {
            "id": cells[node.id],
            "value": truncate_label(node.label, opts.max_label_length),
            "style": vertex_style_for(node),
            "vertex": "1",
            "parent": parent,
        })
        _geometry(cell, geometry.get(node.id, DEFAULT_GEOMETRY))

    edges = bundled_edges(model, lookup)
    for edge in edges:
        cell = ET.SubElement(root, "mxCell", {
            "id": ids.generate(f"edge-{edge.source}-{edge.target}"),
            "value": edge.label or "",
            "style": edge_style_for(edge),
            "edge": "1",
            "parent": LAYER_CELL_ID,
            "source": cells[edge.source],
            "target": cells[edge.target],
        })
        ET.SubElement(cell, "mxGeometry", {"relative": "1", "as": "geometry"})

    if opts.show_legend:
        _legend(root, width)

    logger.info("[DrawioExporter] exported %d vertices and %d edges", len(vertices), len(edges))
    ET.indent(mxfile, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(mxfile, encoding="unicode")


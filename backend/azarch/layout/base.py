"""
Shared layout algorithm.

1. Measure every node bottom-up (containers hold a uniform grid of their children).
2. Anchor top-level nodes at profile-specific column/row anchors; nodes sharing a
   column stack downwards, and columns shift right so they never overlap.
3. Place children top-down inside their container with `place_in`.
4. Fit every container bottom-up to its children plus padding and a title bar.
5. Optionally convert to parent-relative geometry.

Nodes that cannot be placed (no anchor, missing parent, containment cycle) keep
`bounds=None`.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from azarch.layout.grid import Gap, Size, enclose, grid_extent, place_in
from azarch.model.geometry import relative_bounds
from azarch.model.types import ArchitectureModel, ArchNode, Bounds
from azarch.schemas import LayoutOptions

logger = logging.getLogger(__name__)

# (column key, column x anchor, row y anchor)
Anchor = Tuple[str, float, float]


class LayoutEngine(ABC):
    name: str = "base"

    def __init__(self, options: Optional[LayoutOptions] = None):
        self.options = options or LayoutOptions()
        self.gap = Gap(self.options.cell_gap, self.options.cell_gap)

    # ---- profile hooks ------------------------------------------------------

    @abstractmethod
    def anchor(self, node: ArchNode, model: ArchitectureModel) -> Optional[Anchor]:
        """Column/row anchor for a top-level node, or None to leave it unplaced."""

    def leaf_size(self, node: ArchNode) -> Size:
        return Size(self.options.node_width, self.options.node_height)

    def grid_columns(self, parent: ArchNode, children: List[ArchNode]) -> int:
        return min(2, max(1, len(children)))

    def order_children(self, parent: ArchNode, children: List[ArchNode]) -> List[ArchNode]:
        return children

    @property
    def stack_gap(self) -> float:
        return self.options.container_margin

    # ---- algorithm ----------------------------------------------------------

    def apply(self, model: ArchitectureModel) -> ArchitectureModel:
        result = model.copy()
        result.relative_geometry = False
        for node in result.nodes:
            node.bounds = None

        lookup = result.node_map()
        placeable = self._placeable(result, lookup)
        children: Dict[str, List[ArchNode]] = defaultdict(list)
        for node in result.nodes:
            if node.id in placeable and node.parent_id:
                children[node.parent_id].append(node)
        for parent_id in list(children):
            children[parent_id] = self.order_children(lookup[parent_id], children[parent_id])

        sizes: Dict[str, Size] = {}
        for node in result.nodes:
            if node.id in placeable:
                self._measure(node, children, sizes)

        positions: Dict[str, Bounds] = {}
        self._anchor_roots(result, placeable, sizes, positions)
        for node in result.nodes:
            if node.id in positions and node.parent_id is None:
                self._place_children(node, children, sizes, positions)

        self._fit_containers(result, children, positions)

        for node in result.nodes:
            node.bounds = positions.get(node.id)

        unplaced = [n.id for n in result.nodes if n.bounds is None]
        if unplaced:
            logger.warning("[LayoutEngine] %s: %d node(s) left without bounds: %s",
                           self.name, len(unplaced), ", ".join(unplaced[:10]))

        if self.options.relative_geometry:
            relative = relative_bounds(result)
            for node in result.nodes:
                node.bounds = relative.get(node.id)
            result.relative_geometry = True

        result.rebuild_children()
        return result

    def _placeable(self, model: ArchitectureModel, lookup: Dict[str, ArchNode]) -> Set[str]:
        """Nodes whose ancestor chain resolves to a root without a cycle."""
        ok: Set[str] = set()
        bad: Set[str] = set()
        for node in model.nodes:
            chain = []
            current = node
            verdict = None
            while verdict is None:
                if current.id in ok:
                    verdict = True
                elif current.id in bad or current.id in chain:
                    verdict = False
                elif current.parent_id is None:
                    chain.append(current.id)
                    verdict = True
                elif current.parent_id not in lookup:
                    chain.append(current.id)
                    verdict = False
                else:
                    chain.append(current.id)
                    current = lookup[current.parent_id]
            (ok if verdict else bad).update(chain)
        return ok

    def _measure(self, node: ArchNode, children: Dict[str, List[ArchNode]], sizes: Dict[str, Size]) -> Size:
        if node.id in sizes:
            return sizes[node.id]
        kids = children.get(node.id, [])
        if not kids:
            size = self.leaf_size(node)
        else:
            kid_sizes = [self._measure(kid, children, sizes) for kid in kids]
            cell = Size(max(s.w for s in kid_sizes), max(s.h for s in kid_sizes))
            inner = grid_extent(len(kids), self.grid_columns(node, kids), cell, self.gap)
            pad = self.options.container_padding
            size = Size(inner.w + 2 * pad, inner.h + 2 * pad + self.options.title_height)
        sizes[node.id] = size
        return size

    def _anchor_roots(self, model, placeable, sizes, positions):
        columns: Dict[str, List[Tuple[ArchNode, float]]] = defaultdict(list)
        column_x: Dict[str, float] = {}

        for node in model.nodes:
            if node.id not in placeable or node.parent_id is not None:
                continue
            anchor = self.anchor(node, model)
            if anchor is None:
                continue
            key, x, y = anchor
            columns[key].append((node, y))
            column_x[key] = min(column_x.get(key, x), x)

        # Shift columns right so that a wide column never overlaps the next one.
        right_edge = None
        for key in sorted(columns, key=lambda k: column_x[k]):
            x = column_x[key]
            if right_edge is not None:
                x = max(x, right_edge + self.options.container_margin)
            cursor = None
            width = 0.0
            for node, y in sorted(columns[key], key=lambda item: item[1]):
                size = sizes[node.id]
                top = y if cursor is None else max(y, cursor)
                positions[node.id] = Bounds(x, top, size.w, size.h)
                cursor = top + size.h + self.stack_gap
                width = max(width, size.w)
            right_edge = x + width

    def _place_children(self, parent, children, sizes, positions):
        kids = children.get(parent.id, [])
        if not kids:
            return
        origin = positions[parent.id]
        kid_sizes = [sizes[kid.id] for kid in kids]
        cell = Size(max(s.w for s in kid_sizes), max(s.h for s in kid_sizes))
        columns = self.grid_columns(parent, kids)
        pad = self.options.container_padding
        inner_x = origin.x + pad - self.gap.x
        inner_y = origin.y + self.options.title_height + pad - self.gap.y

        for index, kid in enumerate(kids):
            cell_bounds = place_in(origin, index % columns, index // columns, cell, self.gap)
            size = sizes[kid.id]
            positions[kid.id] = Bounds(inner_x + cell_bounds.x, inner_y + cell_bounds.y, size.w, size.h)
            self._place_children(kid, children, sizes, positions)

    def _fit_containers(self, model, children, positions):
        pad = self.options.container_padding
        title = self.options.title_height

        def fit(node_id: str):
            kids = [k for k in children.get(node_id, []) if k.id in positions]
            for kid in kids:
                fit(kid.id)
            if kids:
                box = enclose((positions[k.id] for k in kids), pad, title)
                positions[node_id] = box

        for node in model.nodes:
            if node.parent_id is None and node.id in positions:
                fit(node.id)

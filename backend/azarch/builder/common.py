from typing import Iterable, List, Optional

from azarch.model.ids import IdGenerator
from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    EdgeStyle,
    EdgeType,
    EntityType,
    Layer,
    NodeMeta,
    NodeType,
    containment_edge,
)


class ModelAssembler:
    """Accumulates nodes and edges for one build call, allocating ids as it goes."""

    def __init__(self):
        self.model = ArchitectureModel()
        self.ids = IdGenerator()

    def add(
        self,
        name: str,
        node_type: NodeType,
        label: str,
        layer: Layer,
        entity_type: EntityType = EntityType.SERVICE,
        parent_id: Optional[str] = None,
        meta: Optional[NodeMeta] = None,
        prefix: Optional[str] = None,
        contain: bool = True,
    ) -> ArchNode:
        node = ArchNode(
            id=self.ids.generate(name, prefix),
            type=node_type,
            label=label,
            layer=layer,
            entity_type=entity_type,
            parent_id=parent_id,
            meta=meta,
        )
        self.model.add_node(node)
        if parent_id and contain:
            self.model.add_edge(containment_edge(parent_id, node.id))
        return node

    def connect(
        self,
        source: str,
        target: str,
        label: Optional[str] = None,
        edge_type: EdgeType = EdgeType.CUSTOM,
        style: EdgeStyle = EdgeStyle.SOLID,
        bundle_count: int = 1,
    ) -> ArchEdge:
        return self.model.add_edge(ArchEdge(
            source=source,
            target=target,
            label=label,
            edge_type=edge_type,
            style=style,
            bundle_count=bundle_count,
        ))

    def nodes_in_layers(self, layers: Iterable[Layer]) -> List[ArchNode]:
        wanted = set(layers)
        return [n for n in self.model.nodes if n.layer in wanted and not n.is_hub]

    def finish(self) -> ArchitectureModel:
        self.model.rebuild_children()
        return self.model

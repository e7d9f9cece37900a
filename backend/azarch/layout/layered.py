from typing import Optional

from azarch.layout.base import Anchor, LayoutEngine
from azarch.model.types import ArchitectureModel, ArchNode, Layer

LAYER_ORDER = [
    Layer.CONNECTIVITY,
    Layer.NETWORKING,
    Layer.COMPUTE,
    Layer.DATA,
    Layer.OBSERVABILITY,
    Layer.SECURITY,
    Layer.IDENTITY,
    Layer.MANAGEMENT,
    Layer.DEVOPS,
]


class LayeredLayout(LayoutEngine):
    """One column per layer, nodes stacked top to bottom in model order."""

    name = "layered"

    @property
    def stack_gap(self) -> float:
        return 10

    def anchor(self, node: ArchNode, model: ArchitectureModel) -> Optional[Anchor]:
        index = LAYER_ORDER.index(node.layer) if node.layer in LAYER_ORDER else len(LAYER_ORDER)
        x = 50 + index * (self.options.node_width + 20)
        return node.layer.value, x, 50

import logging
from typing import Dict, Optional, Type

from azarch.layout.base import LayoutEngine
from azarch.layout.caf_containment import CafContainmentLayout
from azarch.layout.grid import Gap, Size, enclose, place_in
from azarch.layout.hub_spoke import HubSpokeLayout
from azarch.layout.layered import LayeredLayout
from azarch.model.types import ArchitectureModel
from azarch.schemas import LayoutOptions

logger = logging.getLogger(__name__)

LAYOUT_PROFILES: Dict[str, Type[LayoutEngine]] = {
    "hub-spoke": HubSpokeLayout,
    "caf": CafContainmentLayout,
    "layered": LayeredLayout,
}


def get_layout_engine(options: Optional[LayoutOptions] = None) -> LayoutEngine:
    opts = options or LayoutOptions()
    return LAYOUT_PROFILES[opts.profile](opts)


def apply_layout(model: ArchitectureModel, options: Optional[LayoutOptions] = None) -> ArchitectureModel:
    engine = get_layout_engine(options)
    logger.info("[LayoutEngine] applying %s layout to %d nodes", engine.name, len(model.nodes))
    return engine.apply(model)


__all__ = [
    "CafContainmentLayout",
    "Gap",
    "HubSpokeLayout",
    "LAYOUT_PROFILES",
    "LayeredLayout",
    "LayoutEngine",
    "Size",
    "apply_layout",
    "enclose",
    "get_layout_engine",
    "place_in",
]

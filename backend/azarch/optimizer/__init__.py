import logging
from typing import Optional

from azarch.model.types import ArchitectureModel
from azarch.optimizer.connectors import (
    MAX_ITERATIONS,
    ConnectorValidation,
    connector_counts,
    limit_connectors,
    validate_model,
)
from azarch.optimizer.edges import dedupe_edges, merge_duplicate_edges
from azarch.optimizer.grouping import apply_grouping
from azarch.schemas import DiagramOptions

logger = logging.getLogger(__name__)


def optimize_graph(model: ArchitectureModel, options: Optional[DiagramOptions] = None) -> ArchitectureModel:
    """
    dedupe -> merge -> (grouping | connector limiting) -> validate.

    Grouping replaces overflow hubs, so the two never run together.
    """
    opts = options or DiagramOptions()

    optimized = dedupe_edges(model)
    optimized = merge_duplicate_edges(optimized, opts.show_edge_counts)

    if opts.group_level != "none":
        optimized = apply_grouping(optimized, opts.group_level)
    else:
        optimized = limit_connectors(optimized, opts.max_connectors_per_node)

    validation = validate_model(optimized, opts.max_connectors_per_node)
    if not validation.is_valid:
        logger.warning("[GraphOptimizer] validation failed after optimization, continuing")

    return optimized


__all__ = [
    "MAX_ITERATIONS",
    "ConnectorValidation",
    "apply_grouping",
    "connector_counts",
    "dedupe_edges",
    "limit_connectors",
    "merge_duplicate_edges",
    "optimize_graph",
    "validate_model",
]

"""
Connector limiting.

A node whose in+out connector count exceeds the limit gets an overflow hub; the
edges it cannot keep are rerouted through the hub. Containment edges count towards
the limit but stay on the node; a node whose containment edges alone leave no room
is reported as unresolved.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set

from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    EdgeStyle,
    EntityType,
    HubMeta,
    NodeType,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100

OVERFLOW_LABEL = "More connections"


@dataclass
class ConnectorValidation:
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def connector_counts(model: ArchitectureModel) -> Dict[str, int]:
    counts: Dict[str, int] = defaultdict(int)
    for edge in model.edges:
        counts[edge.source] += 1
        counts[edge.target] += 1
    return counts


def _directions(node_id: str, edges: List[ArchEdge]) -> Set[str]:
    return {"out" if e.source == node_id else "in" for e in edges}


def _overflow_hub_id(model: ArchitectureModel, node_id: str) -> tuple:
    existing = {n.id for n in model.nodes}
    level = 1
    while f"hub_{node_id}_overflow_{level}" in existing:
        level += 1
    return f"hub_{node_id}_overflow_{level}", level


def _is_overflow_hub(node: ArchNode) -> bool:
    return node.is_hub and node.meta.hub_type == "overflow"


def _relieve(model: ArchitectureModel, node: ArchNode, limit: int, current: int) -> bool:
    """Reroute the overflow of one node through a new hub. False when no rewrite helps."""
    touching = [e for e in model.edges if node.id in (e.source, e.target)]
    fixed = sum(1 for e in touching if e.is_containment)
    touching = [e for e in touching if not e.is_containment]

    # A hub keeps the link to the node it relieves; stable sort preserves model order.
    anchor = node.meta.parent_node if _is_overflow_hub(node) else None
    touching.sort(key=lambda e: 0 if anchor and anchor in (e.source, e.target) else 1)

    keep: Optional[int] = None
    for kept in range(len(touching) - 1, -1, -1):
        if fixed + kept + len(_directions(node.id, touching[kept:])) <= limit:
            keep = kept
            break
    if keep is None:
        return False

    rerouted = touching[keep:]
    hub_load = len(rerouted) + len(_directions(node.id, rerouted))
    if _is_overflow_hub(node) and hub_load >= current:
        return False

    hub_id, level = _overflow_hub_id(model, node.id)
    hub = ArchNode(
        id=hub_id,
        type=NodeType.CUSTOM,
        label=OVERFLOW_LABEL,
        layer=node.layer,
        entity_type=EntityType.CUSTOM,
        parent_id=node.parent_id,
        meta=HubMeta(
            hub_type="overflow",
            parent_node=node.id,
            overflow_level=level,
            tooltip=f"Aggregated connections from {node.label}",
        ),
    )
    model.nodes.insert(model.nodes.index(node) + 1, hub)

    moving = {id(e) for e in rerouted}
    outgoing = incoming = 0
    edges: List[ArchEdge] = []
    for edge in model.edges:
        if id(edge) not in moving:
            edges.append(edge)
        elif edge.source == node.id:
            edges.append(replace(edge, source=hub_id))
            outgoing += 1
        else:
            edges.append(replace(edge, target=hub_id))
            incoming += 1

    if outgoing:
        edges.append(ArchEdge(node.id, hub_id, style=EdgeStyle.DOTTED, bundle_count=outgoing))
    if incoming:
        edges.append(ArchEdge(hub_id, node.id, style=EdgeStyle.DOTTED, bundle_count=incoming))
    model.edges = edges

    logger.debug(
        "[GraphOptimizer] %s: %d -> %d connectors via %s (%d rerouted)",
        node.id, current, fixed + keep + len(_directions(node.id, rerouted)), hub_id, len(rerouted),
    )
    return True


def _limit(model: ArchitectureModel, limit: int) -> ArchitectureModel:
    result = model.copy()
    unresolved: Set[str] = set()

    for _ in range(MAX_ITERATIONS):
        counts = connector_counts(result)
        offender = next(
            (
                n for n in result.nodes
                if not n.is_grouped and n.id not in unresolved and counts.get(n.id, 0) > limit
            ),
            None,
        )
        if offender is None:
            break
        if not _relieve(result, offender, limit, counts[offender.id]):
            unresolved.add(offender.id)
    else:
        logger.warning("[GraphOptimizer] connector limiting stopped at %d iterations", MAX_ITERATIONS)

    result.rebuild_children()

    counts = connector_counts(result)
    for node in result.nodes:
        if not node.is_grouped and counts.get(node.id, 0) > limit:
            logger.error(
                "[GraphOptimizer] FATAL: %s still has %d connectors (limit %d)",
                node.id, counts[node.id], limit,
            )
    return result


def limit_connectors(model: ArchitectureModel, max_connectors_per_node: int = 10) -> ArchitectureModel:
    """
    Bounded fixed point: one offending node per pass, at most MAX_ITERATIONS passes.
    Returns the input model unchanged if anything unexpected goes wrong.
    """
    limit = max(1, int(max_connectors_per_node))
    try:
        return _limit(model, limit)
    except Exception:
        logger.exception("[GraphOptimizer] connector limiting failed; keeping input model")
        return model


def validate_model(model: ArchitectureModel, max_connectors_per_node: int = 10) -> ConnectorValidation:
    """Connector-limit check. Grouped nodes stand for many nodes and are skipped."""
    errors: List[str] = []
    try:
        counts = connector_counts(model)
        lookup = model.node_map()
        for node_id, total in counts.items():
            node = lookup.get(node_id)
            if node is not None and node.is_grouped:
                continue
            if total > max_connectors_per_node:
                label = node.label if node is not None else node_id
                errors.append(
                    f'Node "{label}" ({node_id}) has {total} connectors, '
                    f"exceeding limit of {max_connectors_per_node}"
                )
    except Exception as exc:
        logger.exception("[GraphOptimizer] validation failed")
        errors.append(f"Validation failed: {exc}")

    if errors:
        logger.warning("[GraphOptimizer] model validation failed with %d error(s)", len(errors))
    return ConnectorValidation(is_valid=not errors, errors=errors)

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from azarch.model.types import ArchEdge, ArchitectureModel

logger = logging.getLogger(__name__)


def count_label(labels: List[str], count: int, show_counts: bool = True) -> Optional[str]:
    """Join distinct labels; append " ×n" when n > 1 edges were folded together."""
    label = ", ".join(labels) if labels else None
    if show_counts and count > 1:
        return f"{label or ''} ×{count}".strip()
    return label


def dedupe_edges(model: ArchitectureModel) -> ArchitectureModel:
    """Drop self-edges and repeated (source, target) pairs. The first edge wins."""
    result = model.copy()
    seen = set()
    kept: List[ArchEdge] = []
    for edge in result.edges:
        if edge.source == edge.target or edge.key in seen:
            continue
        seen.add(edge.key)
        kept.append(edge)

    dropped = len(result.edges) - len(kept)
    if dropped:
        logger.debug("[GraphOptimizer] dedupe removed %d edge(s)", dropped)
    result.edges = kept
    return result


def merge_duplicate_edges(
    model: ArchitectureModel,
    show_counts: bool = True,
    membership: Optional[Dict[str, str]] = None,
) -> ArchitectureModel:
    """
    Fold edges that share a (source, target) pair into one edge.

    With `membership` (node id -> group id) both endpoints are looked up first, so
    edges between members of two groups collapse onto the group pair. Edges that
    end up inside a single group disappear.
    """
    membership = membership or {}
    result = model.copy()

    merged: Dict[tuple, ArchEdge] = {}
    labels: Dict[tuple, List[str]] = {}
    counts: Dict[tuple, int] = {}

    for edge in result.edges:
        source = membership.get(edge.source, edge.source)
        target = membership.get(edge.target, edge.target)
        if source == target:
            continue

        key = (source, target)
        if key not in merged:
            merged[key] = replace(edge, source=source, target=target)
            labels[key] = [edge.label] if edge.label else []
            counts[key] = 1
            continue

        counts[key] += 1
        if edge.label and edge.label not in labels[key]:
            labels[key].append(edge.label)

    edges = []
    for key, edge in merged.items():
        count = counts[key]
        if count > 1:
            edge.bundle_count = count
            edge.label = count_label(labels[key], count, show_counts)
            edge.is_containment = False
        edges.append(edge)

    result.edges = edges
    return result

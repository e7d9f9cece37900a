"""
Structural validation for ArchitectureModel.

Checks:
- Unique node ids
- Edge endpoints and parent references resolve
- Containment is a forest (single parent, no cycles, consistent caches)
- No self-loops
- Optionally: one edge per ordered pair, container bounds enclose children

Validation never raises; problems come back as issues on the result.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from azarch.model.geometry import absolute_bounds
from azarch.model.types import ArchitectureModel, Bounds


class ValidationSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """A single problem found in the model"""
    severity: ValidationSeverity
    code: str
    message: str
    node_id: Optional[str] = None
    edge_info: Optional[str] = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_info": self.edge_info,
            "suggestion": self.suggestion,
        }


@dataclass
class ModelValidationResult:
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.severity == ValidationSeverity.WARNING)

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "issues": [i.to_dict() for i in self.issues],
        }

    def get_summary(self) -> str:
        status = "Valid" if self.is_valid else "Invalid"
        return f"{status} | Errors: {self.error_count}, Warnings: {self.warning_count}"


class ModelValidator:
    """
    Usage:
        result = ModelValidator(require_unique_edges=True).validate(model)
        if not result.is_valid:
            for message in result.errors:
                ...
    """

    def __init__(
        self,
        require_unique_edges: bool = False,
        check_bounds: bool = False,
        padding: float = 20,
        title_height: float = 30,
    ):
        self.require_unique_edges = require_unique_edges
        self.check_bounds = check_bounds
        self.padding = padding
        self.title_height = title_height

    def validate(self, model: ArchitectureModel) -> ModelValidationResult:
        issues: List[ValidationIssue] = []
        node_ids = {node.id for node in model.nodes}

        issues.extend(self._check_duplicate_node_ids(model))
        issues.extend(self._check_edge_references(model, node_ids))
        issues.extend(self._check_parent_references(model, node_ids))
        issues.extend(self._check_self_loops(model))
        issues.extend(self._check_containment_edges(model))
        issues.extend(self._check_containment_cycles(model))
        issues.extend(self._check_children_cache(model))
        if self.require_unique_edges:
            issues.extend(self._check_duplicate_edges(model))
        if self.check_bounds:
            issues.extend(self._check_bounds(model))

        has_errors = any(i.severity == ValidationSeverity.ERROR for i in issues)
        return ModelValidationResult(is_valid=not has_errors, issues=issues)

    # -------------------------------------------------------------------------

    def _check_duplicate_node_ids(self, model: ArchitectureModel) -> List[ValidationIssue]:
        seen = set()
        issues = []
        for node in model.nodes:
            if node.id in seen:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_NODE_ID",
                    message=f"Duplicate node id: {node.id}",
                    node_id=node.id,
                ))
            seen.add(node.id)
        return issues

    def _check_edge_references(self, model: ArchitectureModel, node_ids: set) -> List[ValidationIssue]:
        issues = []
        for edge in model.edges:
            info = f"{edge.source} -> {edge.target}"
            if edge.source not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_SOURCE_NODE",
                    message=f"Edge source node not found: {edge.source}",
                    edge_info=info,
                ))
            if edge.target not in node_ids:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MISSING_TARGET_NODE",
                    message=f"Edge target node not found: {edge.target}",
                    edge_info=info,
                ))
        return issues

    def _check_parent_references(self, model: ArchitectureModel, node_ids: set) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code="MISSING_PARENT",
                message=f"Parent node not found: {node.parent_id} (for {node.id})",
                node_id=node.id,
            )
            for node in model.nodes
            if node.parent_id is not None and node.parent_id not in node_ids
        ]

    def _check_self_loops(self, model: ArchitectureModel) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity=ValidationSeverity.ERROR,
                code="SELF_LOOP",
                message=f"Self-referencing edge on {edge.source}",
                node_id=edge.source,
            )
            for edge in model.edges
            if edge.source == edge.target
        ]

    def _check_containment_edges(self, model: ArchitectureModel) -> List[ValidationIssue]:
        issues = []
        lookup = model.node_map()
        incoming: Dict[str, List[str]] = defaultdict(list)

        for edge in model.edges:
            if not edge.is_containment:
                continue
            incoming[edge.target].append(edge.source)
            child = lookup.get(edge.target)
            if child is not None and child.parent_id != edge.source:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="CONTAINMENT_MISMATCH",
                    message=(
                        f"Containment edge {edge.source} -> {edge.target} "
                        f"disagrees with parent {child.parent_id}"
                    ),
                    node_id=edge.target,
                ))

        for child_id, parents in incoming.items():
            if len(set(parents)) > 1:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="MULTIPLE_PARENTS",
                    message=f"Node {child_id} has multiple parents: {', '.join(sorted(set(parents)))}",
                    node_id=child_id,
                ))
        return issues

    def _check_containment_cycles(self, model: ArchitectureModel) -> List[ValidationIssue]:
        issues = []
        lookup = model.node_map()
        reported = set()

        for node in model.nodes:
            path = []
            current = node
            while current is not None and current.parent_id:
                if current.id in path:
                    cycle = path[path.index(current.id):]
                    key = frozenset(cycle)
                    if key not in reported:
                        reported.add(key)
                        issues.append(ValidationIssue(
                            severity=ValidationSeverity.ERROR,
                            code="CONTAINMENT_CYCLE",
                            message=f"Containment cycle: {' -> '.join(cycle + [current.id])}",
                            node_id=current.id,
                        ))
                    break
                path.append(current.id)
                current = lookup.get(current.parent_id)
        return issues

    def _check_children_cache(self, model: ArchitectureModel) -> List[ValidationIssue]:
        issues = []
        expected: Dict[str, set] = defaultdict(set)
        for node in model.nodes:
            if node.parent_id:
                expected[node.parent_id].add(node.id)

        for node in model.nodes:
            if set(node.children) != expected.get(node.id, set()):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.WARNING,
                    code="CHILDREN_MISMATCH",
                    message=f"Children of {node.id} do not match parent references",
                    node_id=node.id,
                    suggestion="Call rebuild_children() after changing parent_id",
                ))
        return issues

    def _check_duplicate_edges(self, model: ArchitectureModel) -> List[ValidationIssue]:
        issues = []
        seen = set()
        for edge in model.edges:
            if edge.key in seen:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="DUPLICATE_EDGE",
                    message=f"Duplicate edge: {edge.source} -> {edge.target}",
                    edge_info=f"{edge.source} -> {edge.target}",
                ))
            seen.add(edge.key)
        return issues

    def _check_bounds(self, model: ArchitectureModel) -> List[ValidationIssue]:
        issues = []
        lookup = model.node_map()
        placed = absolute_bounds(model)

        for node in model.nodes:
            parent = lookup.get(node.parent_id) if node.parent_id else None
            if parent is None or node.id not in placed or parent.id not in placed:
                continue
            child = placed[node.id]
            needed = Bounds(
                child.x - self.padding,
                child.y - self.padding - self.title_height,
                child.w + 2 * self.padding,
                child.h + 2 * self.padding + self.title_height,
            )
            if not placed[parent.id].contains(needed):
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    code="CHILD_OUTSIDE_PARENT",
                    message=f"Node {node.id} is not enclosed by its parent {parent.id}",
                    node_id=node.id,
                ))
        return issues


def validate_structure(
    model: ArchitectureModel,
    require_unique_edges: bool = False,
    check_bounds: bool = False,
    padding: float = 20,
    title_height: float = 30,
) -> ModelValidationResult:
    return ModelValidator(
        require_unique_edges=require_unique_edges,
        check_bounds=check_bounds,
        padding=padding,
        title_height=title_height,
    ).validate(model)

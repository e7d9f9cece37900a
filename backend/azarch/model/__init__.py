from azarch.model.types import (
    ArchEdge,
    ArchitectureModel,
    ArchNode,
    Bounds,
    EdgeStyle,
    EdgeType,
    EntityType,
    GroupMeta,
    HubMeta,
    Layer,
    ManagementGroupMeta,
    NodeType,
    ServiceMeta,
    SubnetMeta,
    SubscriptionMeta,
    SubscriptionType,
    VNetMeta,
    containment_edge,
)
from azarch.model.ids import IdGenerator, generate_group_id
from azarch.model.validation import ModelValidationResult, validate_structure

__all__ = [
    "ArchEdge",
    "ArchitectureModel",
    "ArchNode",
    "Bounds",
    "EdgeStyle",
    "EdgeType",
    "EntityType",
    "GroupMeta",
    "HubMeta",
    "IdGenerator",
    "Layer",
    "ManagementGroupMeta",
    "ModelValidationResult",
    "NodeType",
    "ServiceMeta",
    "SubnetMeta",
    "SubscriptionMeta",
    "SubscriptionType",
    "VNetMeta",
    "containment_edge",
    "generate_group_id",
    "validate_structure",
]

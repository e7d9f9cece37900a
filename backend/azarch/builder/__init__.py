from azarch.builder.assessment import build_from_assessment
from azarch.builder.caf_tree import (
    DEFAULT_CAF_ARCHITECTURE,
    CafBuildResult,
    build_from_caf,
    default_caf_architecture,
)
from azarch.builder.cidr import is_subnet_in_vnet, validate_cidr_ranges
from azarch.builder.landing_zone import build_landing_zone, validate_containment

__all__ = [
    "DEFAULT_CAF_ARCHITECTURE",
    "CafBuildResult",
    "build_from_assessment",
    "build_from_caf",
    "build_landing_zone",
    "default_caf_architecture",
    "is_subnet_in_vnet",
    "validate_cidr_ranges",
    "validate_containment",
]

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List, Literal

from azarch import config
from azarch.model.types import SubscriptionType

CIDR_PATTERN = r"^(\d{1,3}\.){3}\d{1,3}/\d{1,2}$"


# ---- Assessment input ----

class VmRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="vmName")
    cores: float = 0
    memory_gb: float = Field(default=0, alias="memoryGB")
    recommended_size: Optional[str] = Field(default=None, alias="recommendedSize")
    operating_system: Optional[str] = Field(default=None, alias="operatingSystem")
    environment: Optional[str] = None  # prod | nonprod
    readiness: Optional[str] = None
    in_scope: bool = Field(default=True, alias="inScope")


class AssessmentSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_servers: int = Field(default=0, ge=0, alias="totalServers")
    windows_servers: int = Field(default=0, ge=0, alias="windowsServers")
    linux_servers: int = Field(default=0, ge=0, alias="linuxServers")
    target_region: Optional[str] = Field(default=None, alias="targetRegion")
    total_storage_tb: float = Field(default=0, ge=0, alias="totalStorageTB")
    vms: List[VmRecord] = Field(default_factory=list)


# ---- CAF architecture (AI-proposed subscription tree) ----

class CafService(BaseModel):
    id: str
    name: str
    type: Literal[
        "vm", "vmss", "sql", "storage", "keyvault", "monitor",
        "firewall", "bastion", "appgw", "lb", "nsg",
    ]
    count: int = Field(default=0, ge=0)
    sku: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)


class CafSubnet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    address_prefix: str = Field(alias="addressPrefix", pattern=CIDR_PATTERN)
    tier: Optional[Literal["web", "app", "db", "management", "bastion"]] = None
    vm_count: Optional[int] = Field(default=None, ge=0, alias="vmCount")
    vm_sku: Optional[str] = Field(default=None, alias="vmSku")
    services: List[CafService] = Field(default_factory=list)


class CafVNet(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    address_space: str = Field(alias="addressSpace", pattern=CIDR_PATTERN)
    subnets: List[CafSubnet] = Field(default_factory=list)


class CafSubscription(BaseModel):
    id: str
    name: str
    type: SubscriptionType
    vnets: List[CafVNet] = Field(default_factory=list)


class CafPattern(BaseModel):
    pattern: Literal["hub-spoke", "simple", "caf"] = "hub-spoke"


class CafMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    assumptions: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    estimated_cost: Optional[float] = Field(default=None, alias="estimatedCost")
    complexity: Optional[Literal["low", "medium", "high"]] = None


class CafArchitecture(BaseModel):
    architecture: CafPattern = Field(default_factory=CafPattern)
    subscriptions: List[CafSubscription] = Field(default_factory=list)
    meta: CafMeta = Field(default_factory=CafMeta)


# ---- Stage options (immutable) ----

class DiagramOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_connectors_per_node: int = Field(default=config.MAX_CONNECTORS_PER_NODE, ge=1)
    group_level: Literal["none", "tier", "subnet", "service"] = "none"
    detail_level: Literal["minimal", "standard", "detailed"] = "standard"
    show_edge_counts: bool = True
    aggregate_networking: bool = False
    aggregate_security: bool = False
    aggregate_observability: bool = False

    hub_spoke_threshold: int = config.HUB_SPOKE_SERVER_THRESHOLD
    firewall_threshold: int = config.FIREWALL_SERVER_THRESHOLD
    nsg_threshold: int = config.NSG_SERVER_THRESHOLD
    load_balancer_threshold: int = config.LOAD_BALANCER_SERVER_THRESHOLD
    sql_threshold: int = config.SQL_SERVER_THRESHOLD
    global_workload_threshold: int = config.GLOBAL_WORKLOAD_THRESHOLD
    default_region: str = config.DEFAULT_REGION

    # Landing-zone builder
    show_non_prod: bool = True
    include_app_gateway: bool = True
    include_observability: bool = True
    include_key_vault: bool = True
    include_private_endpoints: bool = True


class LayoutOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    profile: Literal["hub-spoke", "caf", "layered"] = "layered"
    node_width: float = Field(default=config.NODE_WIDTH, gt=0)
    node_height: float = Field(default=config.NODE_HEIGHT, gt=0)
    column_spacing: float = Field(default=config.COLUMN_SPACING, gt=0)
    row_spacing: float = Field(default=config.ROW_SPACING, gt=0)
    container_padding: float = Field(default=config.CONTAINER_PADDING, ge=0)
    container_margin: float = Field(default=config.CONTAINER_MARGIN, ge=0)
    title_height: float = Field(default=30, ge=0)
    cell_gap: float = Field(default=16, ge=0)
    relative_geometry: bool = False


class ExportOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    format: Literal["drawio", "plantuml", "svg", "flow"] = "drawio"
    show_legend: bool = False
    diagram_name: str = "Azure Architecture"
    max_label_length: int = Field(default=24, ge=4)


# ---- API requests ----

class AssessmentDiagramRequest(BaseModel):
    assessment: AssessmentSummary
    builder: Literal["assessment", "landing-zone"] = "assessment"
    options: DiagramOptions = Field(default_factory=DiagramOptions)
    layout: LayoutOptions = Field(default_factory=LayoutOptions)
    export: ExportOptions = Field(default_factory=ExportOptions)


class CafDiagramRequest(BaseModel):
    architecture: Optional[CafArchitecture] = None
    options: DiagramOptions = Field(default_factory=DiagramOptions)
    layout: LayoutOptions = Field(default_factory=lambda: LayoutOptions(profile="caf"))
    export: ExportOptions = Field(default_factory=ExportOptions)


class CidrValidationRequest(BaseModel):
    architecture: CafArchitecture


class DiagramResponse(BaseModel):
    type: str
    source: str

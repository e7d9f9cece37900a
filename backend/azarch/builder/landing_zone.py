"""
Landing-zone builder - the full CAF containment hierarchy:

    Tenant Root Group
    ├── Platform
    │   ├── Platform-Connectivity  (hub VNet + firewall/bastion/gateway/DNS subnets)
    │   ├── Platform-Management    (monitor, log analytics, policy, defender)
    │   └── Platform-Data          (shared PaaS)
    └── Landing Zones
        ├── LandingZone-Prod       (spoke VNet, web/app/db subnets, tier nodes)
        └── LandingZone-NonProd    (optional)

VMs from the assessment are summarized into one tier node per environment and tier.
"""

import logging
from typing import Dict, List, Optional

from azarch.builder.common import ModelAssembler
from azarch.model.ids import ID_PREFIXES
from azarch.model.palette import subscription_color
from azarch.model.types import (
    ArchitectureModel,
    EdgeStyle,
    EdgeType,
    EntityType,
    Layer,
    ManagementGroupMeta,
    NodeType,
    ServiceMeta,
    SubnetMeta,
    SubscriptionMeta,
    SubscriptionType,
    VNetMeta,
)
from azarch.model.validation import validate_structure
from azarch.schemas import AssessmentSummary, DiagramOptions, VmRecord

logger = logging.getLogger(__name__)

HUB_ADDRESS_SPACE = "10.0.0.0/16"

HUB_SUBNETS = [
    ("subnet-hub-azurefirewall", "AzureFirewallSubnet", "10.0.1.0/26"),
    ("subnet-hub-bastion", "AzureBastionSubnet", "10.0.2.0/26"),
    ("subnet-hub-gateway", "GatewaySubnet", "10.0.3.0/27"),
    ("subnet-hub-dns", "DNSPrivateResolver", "10.0.4.0/26"),
]

SPOKES = {
    # env: (address space, second octet)
    "prod": ("10.1.0.0/16", 1),
    "nonprod": ("10.2.0.0/16", 2),
}

TIERS = ("web", "app", "db")

TIER_SUBNET_LABELS = {"web": "Web Subnet", "app": "App Subnet", "db": "DB Subnet"}

NONPROD_HINTS = ("-dev", "-qa", "-test")

CONTAINMENT_CODES = {"CONTAINMENT_CYCLE", "MULTIPLE_PARENTS", "CHILDREN_MISMATCH", "MISSING_PARENT"}


def determine_tier(vm_name: str) -> str:
    name = (vm_name or "").lower()
    if "web" in name or "frontend" in name or "ui" in name:
        return "web"
    if "db" in name or "sql" in name or "database" in name:
        return "db"
    return "app"


def determine_environment(vm: VmRecord) -> str:
    name = (vm.name or "").lower()
    if any(hint in name for hint in NONPROD_HINTS):
        return "nonprod"
    if vm.environment and vm.environment.lower() in ("nonprod", "non-prod", "dev", "test", "qa"):
        return "nonprod"
    return "prod"


def validate_containment(model: ArchitectureModel) -> List[str]:
    """Cycle, single-parent and children-cache checks. Never raises."""
    result = validate_structure(model)
    return [issue.message for issue in result.issues if issue.code in CONTAINMENT_CODES]


class LandingZoneBuilder:
    def __init__(self, assessment: Optional[AssessmentSummary], options: DiagramOptions):
        self.assessment = assessment or AssessmentSummary()
        self.options = options
        self.asm = ModelAssembler()
        self.environments = ["prod", "nonprod"] if options.show_non_prod else ["prod"]

    def build(self) -> ArchitectureModel:
        self._build_management_groups()
        self._build_subscriptions()
        self._build_vnets()
        self._build_tiers()
        self._build_platform_services()
        self._build_data_services()
        self._build_connections()

        model = self.asm.finish()
        for problem in validate_containment(model):
            logger.error("[LandingZoneBuilder] %s", problem)

        logger.info(
            "[LandingZoneBuilder] %d nodes, %d edges (non-prod: %s)",
            len(model.nodes), len(model.edges), self.options.show_non_prod,
        )
        return model

    # -------------------------------------------------------------------------
    # Containment hierarchy
    # -------------------------------------------------------------------------

    def _build_management_groups(self):
        add = self.asm.add
        add("mg-tenant-root", NodeType.MANAGEMENT_GROUP, "Tenant Root Group", Layer.MANAGEMENT,
            entity_type=EntityType.MANAGEMENT_GROUP, meta=ManagementGroupMeta("tenant-root"))
        add("mg-platform", NodeType.MANAGEMENT_GROUP, "Platform", Layer.MANAGEMENT,
            entity_type=EntityType.MANAGEMENT_GROUP, parent_id="mg-tenant-root",
            meta=ManagementGroupMeta("platform"))
        add("mg-landing-zones", NodeType.MANAGEMENT_GROUP, "Landing Zones", Layer.MANAGEMENT,
            entity_type=EntityType.MANAGEMENT_GROUP, parent_id="mg-tenant-root",
            meta=ManagementGroupMeta("landing-zones"))

    def _subscription(self, name: str, label: str, layer: Layer,
                      sub_type: SubscriptionType, parent_id: str):
        self.asm.add(
            name, NodeType.SUBSCRIPTION, label, layer, prefix=ID_PREFIXES["subscription"],
            entity_type=EntityType.SUBSCRIPTION,
            parent_id=parent_id,
            meta=SubscriptionMeta(subscription_type=sub_type, color=subscription_color(sub_type)),
        )

    def _build_subscriptions(self):
        self._subscription("platform-connectivity", "Platform-Connectivity", Layer.NETWORKING,
                           SubscriptionType.PLATFORM_CONNECTIVITY, "mg-platform")
        self._subscription("platform-management", "Platform-Management", Layer.MANAGEMENT,
                           SubscriptionType.PLATFORM_MANAGEMENT, "mg-platform")
        self._subscription("landingzone-prod", "LandingZone-Prod", Layer.COMPUTE,
                           SubscriptionType.LANDINGZONE_PROD, "mg-landing-zones")
        if self.options.show_non_prod:
            self._subscription("landingzone-nonprod", "LandingZone-NonProd", Layer.COMPUTE,
                               SubscriptionType.LANDINGZONE_NONPROD, "mg-landing-zones")
        self._subscription("platform-data", "Platform-Data", Layer.DATA,
                           SubscriptionType.PLATFORM_DATA, "mg-platform")

    def _build_vnets(self):
        add = self.asm.add
        add("vnet-hub", NodeType.VNET, f"Hub VNet ({HUB_ADDRESS_SPACE})", Layer.NETWORKING,
            entity_type=EntityType.VNET, parent_id="sub-platform-connectivity",
            meta=VNetMeta(address_space=HUB_ADDRESS_SPACE, role="hub"))

        for env in self.environments:
            space, _octet = SPOKES[env]
            add(f"vnet-spoke-{env}", NodeType.VNET, f"Spoke VNet ({space})", Layer.NETWORKING,
                entity_type=EntityType.VNET, parent_id=f"sub-landingzone-{env}",
                meta=VNetMeta(address_space=space, role="spoke"))

        for subnet_id, name, prefix in HUB_SUBNETS:
            add(subnet_id, NodeType.SUBNET, f"{name} ({prefix})", Layer.NETWORKING,
                entity_type=EntityType.SUBNET, parent_id="vnet-hub",
                meta=SubnetMeta(address_prefix=prefix))

        for env in self.environments:
            _space, octet = SPOKES[env]
            for index, tier in enumerate(TIERS, start=1):
                prefix = f"10.{octet}.{index}.0/24"
                add(f"subnet-{env}-{tier}", NodeType.SUBNET,
                    f"{TIER_SUBNET_LABELS[tier]} ({prefix})",
                    Layer.NETWORKING, entity_type=EntityType.SUBNET,
                    parent_id=f"vnet-spoke-{env}",
                    meta=SubnetMeta(address_prefix=prefix, tier=tier))

    def _build_tiers(self):
        groups: Dict[str, Dict[str, List[VmRecord]]] = {
            env: {tier: [] for tier in TIERS} for env in SPOKES
        }
        for vm in self.assessment.vms:
            if vm.in_scope:
                groups[determine_environment(vm)][determine_tier(vm.name)].append(vm)

        for env in self.environments:
            for tier in TIERS:
                vms = groups[env][tier]
                skus = {vm.recommended_size for vm in vms}
                common_sku = skus.pop() if len(skus) == 1 else None
                label = f"{tier.capitalize()} Tier ({len(vms)})"
                if common_sku:
                    label += f" • {common_sku}"

                subnet_id = f"subnet-{env}-{tier}"
                self.asm.add(
                    f"{env}-{tier}", NodeType.VM, label, Layer.COMPUTE, prefix=ID_PREFIXES["tier"],
                    entity_type=EntityType.TIER, parent_id=subnet_id,
                    meta=ServiceMeta(role=tier, count=len(vms), sku=common_sku),
                )
                subnet = self.asm.model.get(subnet_id)
                if subnet is not None and isinstance(subnet.meta, SubnetMeta):
                    subnet.meta.vm_count = len(vms)

    def _build_platform_services(self):
        add = self.asm.add
        opts = self.options
        conn = "sub-platform-connectivity"
        mgmt = "sub-platform-management"

        if opts.include_app_gateway:
            add("app-gateway", NodeType.APPGW, "Application Gateway", Layer.CONNECTIVITY, parent_id=conn)
        add("azure-firewall", NodeType.FIREWALL, "Azure Firewall", Layer.SECURITY, parent_id=conn)
        add("bastion", NodeType.BASTION, "Azure Bastion", Layer.SECURITY, parent_id=conn)
        add("dns-resolver", NodeType.DNS, "DNS Private Resolver", Layer.NETWORKING, parent_id=conn)

        if opts.include_observability:
            add("observability", NodeType.CUSTOM, "Observability", Layer.OBSERVABILITY, parent_id=mgmt)
            add("monitor", NodeType.MONITOR, "Azure Monitor", Layer.OBSERVABILITY, parent_id=mgmt)
            add("log-analytics", NodeType.LOG_ANALYTICS, "Log Analytics", Layer.OBSERVABILITY, parent_id=mgmt)

        add("policy", NodeType.POLICY, "Azure Policy", Layer.MANAGEMENT, parent_id=mgmt)
        add("defender", NodeType.DEFENDER, "Defender for Cloud", Layer.SECURITY, parent_id=mgmt)
        if opts.include_key_vault:
            add("key-vault", NodeType.KEYVAULT, "Key Vault", Layer.SECURITY, parent_id=mgmt)

    def _build_data_services(self):
        add = self.asm.add
        storage_gb = self.assessment.total_storage_tb * 1024
        add("sql-server", NodeType.SQL, "Azure SQL Database", Layer.DATA,
            entity_type=EntityType.PAAS, parent_id="sub-platform-data")
        add("storage-account", NodeType.STORAGE, "Storage Account", Layer.DATA,
            entity_type=EntityType.PAAS, parent_id="sub-platform-data",
            meta=ServiceMeta(config={"totalStorageGB": round(storage_gb)}))

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def _build_connections(self):
        connect = self.asm.connect
        opts = self.options
        spokes = [f"vnet-spoke-{env}" for env in self.environments]

        for spoke in spokes:
            connect("vnet-hub", spoke, "VNet Peering", EdgeType.PEERING)

        for env in self.environments:
            if opts.include_app_gateway:
                connect("app-gateway", f"tier-{env}-web", "Ingress", EdgeType.INGRESS)
            connect(f"tier-{env}-web", f"tier-{env}-app", "East-West", EdgeType.EAST_WEST)
            connect(f"tier-{env}-app", f"tier-{env}-db", "East-West", EdgeType.EAST_WEST)

        for spoke in spokes:
            subnet_count = len(self.asm.model.children_of(spoke))
            connect("bastion", spoke, f"Bastion ×{subnet_count}", EdgeType.BASTION,
                    bundle_count=max(subnet_count, 1))

        connect("azure-firewall", "vnet-hub", "Egress", EdgeType.EGRESS)

        if opts.include_observability:
            for spoke in spokes:
                connect("observability", spoke, "Diag/Logs", EdgeType.MANAGEMENT)

        for env in self.environments:
            landing_zone = f"sub-landingzone-{env}"
            connect("policy", landing_zone, "Governance", EdgeType.GOVERNANCE, EdgeStyle.DASHED)
            connect("defender", landing_zone, "Security", EdgeType.SECURITY, EdgeStyle.DASHED)

        if opts.include_key_vault:
            for env in self.environments:
                connect("key-vault", f"tier-{env}-app", "Secrets", EdgeType.SECURITY)
                connect("key-vault", f"tier-{env}-db", "Secrets", EdgeType.SECURITY)

        if opts.include_private_endpoints:
            for paas in ("sql-server", "storage-account"):
                for spoke in spokes:
                    connect(paas, spoke, "PE ×1", EdgeType.PRIVATE_ENDPOINT)


def build_landing_zone(
    assessment: Optional[AssessmentSummary] = None,
    options: Optional[DiagramOptions] = None,
) -> ArchitectureModel:
    return LandingZoneBuilder(assessment, options or DiagramOptions()).build()

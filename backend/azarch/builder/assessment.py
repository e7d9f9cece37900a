"""
Assessment builder - turns a migration assessment summary into an ArchitectureModel.

Rules:
- More servers than the hub-spoke threshold -> hub VNet + spoke VNet joined by one
  "VNet Peering" edge; otherwise a single main VNet.
- Web/App/DB/Management subnets always exist; VMs land in a subnet by name.
- Firewall, NSGs, load balancer and SQL are added by server-count thresholds.
- Front Door for global workloads, Application Gateway otherwise.
- Security, identity, management and observability services are wired to every
  compute/data/networking node, or through a single hub when aggregation is on.
- No VM data -> one placeholder VM on the web subnet.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from azarch.builder.common import ModelAssembler
from azarch.model.types import (
    ArchitectureModel,
    EdgeType,
    EntityType,
    HubMeta,
    Layer,
    NodeType,
    ServiceMeta,
    SubnetMeta,
    VNetMeta,
)
from azarch.schemas import AssessmentSummary, DiagramOptions, VmRecord

logger = logging.getLogger(__name__)

DEFAULT_VM_SIZE = "Standard_D2s_v5"

RESOURCE_LAYERS = (Layer.COMPUTE, Layer.DATA, Layer.NETWORKING)

SUBNETS = [
    # (id, label, tier)
    ("web-subnet", "Web Subnet", "web"),
    ("app-subnet", "App Subnet", "app"),
    ("db-subnet", "DB Subnet", "db"),
    ("mgmt-subnet", "Management Subnet", "management"),
]

ROLE_SUBNET = {
    "web": "web-subnet",
    "app": "app-subnet",
    "database": "db-subnet",
}

DATABASE_HINTS = ("db", "sql", "database")


def classify_vm_role(vm_name: str) -> str:
    name = (vm_name or "").lower()
    if "web" in name or "frontend" in name:
        return "web"
    if "app" in name or "middleware" in name:
        return "app"
    if any(hint in name for hint in DATABASE_HINTS):
        return "database"
    if "file" in name or "storage" in name:
        return "storage"
    return "general"


def subnet_for_role(role: str) -> str:
    return ROLE_SUBNET.get(role, "app-subnet")


def is_global_workload(region: Optional[str], total_servers: int, threshold: int) -> bool:
    return "global" in (region or "").lower() or total_servers > threshold


class AssessmentModelBuilder:
    """One instance per build call; holds the id counter and the subnet index."""

    def __init__(self, assessment: AssessmentSummary, options: DiagramOptions):
        self.assessment = assessment
        self.options = options
        self.region = assessment.target_region or options.default_region
        self.servers = assessment.total_servers
        self.vms = [vm for vm in assessment.vms if vm.in_scope]
        self.asm = ModelAssembler()

        self.hub_vnet_id: Optional[str] = None
        self.workload_vnet_id: Optional[str] = None
        # subnet id -> node id that workloads attach to (subnet or its hub)
        self.attach_points: Dict[str, str] = {}

    def build(self) -> ArchitectureModel:
        self._add_connectivity()
        self._add_networking()
        self._add_compute()
        self._add_data()
        self._add_security()
        self._add_identity()
        self._add_management()
        self._add_observability()

        model = self.asm.finish()
        logger.info(
            "[ModelBuilder] assessment -> %d nodes, %d edges (%s)",
            len(model.nodes), len(model.edges),
            "hub-spoke" if self.hub_vnet_id else "single vnet",
        )
        return model

    # -------------------------------------------------------------------------
    # Connectivity
    # -------------------------------------------------------------------------

    def _add_connectivity(self):
        opts = self.options
        if is_global_workload(self.region, self.servers, opts.global_workload_threshold):
            self.asm.add(
                "frontdoor", NodeType.FRONTDOOR, "Azure Front Door", Layer.CONNECTIVITY,
                meta=ServiceMeta(region=self.region, config={"scope": "global"}),
            )
        else:
            self.asm.add(
                "appgw", NodeType.APPGW, "Application Gateway", Layer.CONNECTIVITY,
                meta=ServiceMeta(region=self.region, config={"scope": "regional"}),
            )

        if self.servers > opts.firewall_threshold:
            self.asm.add("firewall", NodeType.FIREWALL, "Azure Firewall", Layer.CONNECTIVITY)

        self.asm.add("bastion", NodeType.BASTION, "Azure Bastion", Layer.CONNECTIVITY)

    # -------------------------------------------------------------------------
    # Networking
    # -------------------------------------------------------------------------

    def _add_networking(self):
        opts = self.options
        asm = self.asm

        if self.servers > opts.hub_spoke_threshold:
            hub = asm.add(
                "hub-vnet", NodeType.VNET, f"Hub VNet ({self.region})", Layer.NETWORKING,
                entity_type=EntityType.VNET,
                meta=VNetMeta(role="hub", region=self.region),
            )
            spoke = asm.add(
                "spoke-vnet", NodeType.VNET, f"Spoke VNet ({self.region})", Layer.NETWORKING,
                entity_type=EntityType.VNET,
                meta=VNetMeta(role="spoke", region=self.region),
            )
            asm.connect(hub.id, spoke.id, "VNet Peering", EdgeType.PEERING)
            self.hub_vnet_id = hub.id
            self.workload_vnet_id = spoke.id

            if asm.model.has_node("firewall"):
                asm.connect("firewall", hub.id, "Egress", EdgeType.EGRESS)
        else:
            main = asm.add(
                "main-vnet", NodeType.VNET, f"Main VNet ({self.region})", Layer.NETWORKING,
                entity_type=EntityType.VNET,
                meta=VNetMeta(role="main", region=self.region),
            )
            self.workload_vnet_id = main.id

        vm_counts = defaultdict(int)
        for vm in self.vms:
            vm_counts[subnet_for_role(classify_vm_role(vm.name))] += 1

        for subnet_id, label, tier in SUBNETS:
            subnet = asm.add(
                subnet_id, NodeType.SUBNET, label, Layer.NETWORKING,
                entity_type=EntityType.SUBNET,
                parent_id=self.workload_vnet_id,
                meta=SubnetMeta(tier=tier, vm_count=vm_counts[subnet_id], region=self.region),
            )
            self.attach_points[subnet_id] = subnet.id

            if opts.aggregate_networking:
                hub = asm.add(
                    f"hub_net_{subnet.id}", NodeType.CUSTOM, f"{label} Hub", Layer.NETWORKING,
                    meta=HubMeta(hub_type="subnet", subnet=subnet.id),
                )
                asm.connect(hub.id, subnet.id)
                self.attach_points[subnet_id] = hub.id

        if opts.detail_level != "minimal" and self.servers > opts.nsg_threshold:
            for subnet_id, label, _tier in SUBNETS[:3]:
                nsg = asm.add(f"{subnet_id}-nsg", NodeType.NSG, f"{label} NSG", Layer.NETWORKING)
                asm.connect(nsg.id, subnet_id)

        if self.servers > opts.load_balancer_threshold:
            lb = asm.add("lb", NodeType.LB, "Load Balancer", Layer.NETWORKING)
            asm.connect(lb.id, "web-subnet")

        ingress = "frontdoor" if asm.model.has_node("frontdoor") else "appgw"
        if self.hub_vnet_id:
            asm.connect(ingress, self.hub_vnet_id, "Ingress", EdgeType.INGRESS)
            asm.connect("bastion", self.hub_vnet_id, "Bastion", EdgeType.BASTION)
        else:
            # No hub: ingress and bastion land directly on the workload subnets.
            asm.connect(ingress, "web-subnet", "Ingress", EdgeType.INGRESS)
            asm.connect("bastion", "mgmt-subnet", "Bastion", EdgeType.BASTION)

    # -------------------------------------------------------------------------
    # Compute & Data
    # -------------------------------------------------------------------------

    def _add_compute(self):
        asm = self.asm
        if not self.vms:
            vm = asm.add(
                "vm-placeholder", NodeType.VM, "VM (No Assessment Data)", Layer.COMPUTE,
                meta=ServiceMeta(placeholder=True, region=self.region),
            )
            asm.connect(self.attach_points["web-subnet"], vm.id)
            return

        role_index: Dict[str, int] = defaultdict(int)
        for position, record in enumerate(self.vms, start=1):
            role = classify_vm_role(record.name)
            role_index[role] += 1
            vm = asm.add(
                f"vm-{role}-{role_index[role]}", NodeType.VM,
                self._vm_label(record, position), Layer.COMPUTE,
                meta=ServiceMeta(
                    role=role,
                    sku=record.recommended_size or DEFAULT_VM_SIZE,
                    cores=record.cores,
                    memory_gb=record.memory_gb,
                    operating_system=record.operating_system,
                    region=self.region,
                ),
            )
            asm.connect(self.attach_points[subnet_for_role(role)], vm.id)

    @staticmethod
    def _vm_label(record: VmRecord, position: int) -> str:
        name = record.name or f"VM-{position}"
        return f"{name} ({record.recommended_size or DEFAULT_VM_SIZE})"

    def _add_data(self):
        asm = self.asm
        storage_gb = self.assessment.total_storage_tb * 1024
        storage = asm.add(
            "storage", NodeType.STORAGE, f"Storage Account ({storage_gb:.0f} GB)", Layer.DATA,
            meta=ServiceMeta(config={"type": "general-purpose", "totalStorageGB": round(storage_gb)}),
        )
        asm.connect("app-subnet", storage.id)

        has_db_vm = any(
            hint in vm.name.lower() for vm in self.vms for hint in DATABASE_HINTS
        )
        if has_db_vm or self.servers > self.options.sql_threshold:
            sql = asm.add("sql-db", NodeType.SQL, "Azure SQL Database", Layer.DATA)
            asm.connect("db-subnet", sql.id)

    # -------------------------------------------------------------------------
    # Cross-cutting layers
    # -------------------------------------------------------------------------

    def _add_security(self):
        services = [
            ("keyvault", NodeType.KEYVAULT, "Key Vault"),
            ("defender", NodeType.DEFENDER, "Defender for Cloud"),
            ("policy", NodeType.POLICY, "Azure Policy"),
        ]
        self._add_cross_cutting(
            Layer.SECURITY, "hub_sec", "Security", services,
            aggregate=self.options.aggregate_security, edge_type=EdgeType.SECURITY,
        )

    def _add_identity(self):
        identity = self.asm.add("identity", NodeType.IDENTITY, "Azure AD", Layer.IDENTITY)
        for node in self.asm.nodes_in_layers([Layer.COMPUTE]):
            self.asm.connect(identity.id, node.id)

    def _add_management(self):
        # Shares its base id with the security policy; the counter yields policy-2.
        policy = self.asm.add("policy", NodeType.POLICY, "Azure Policy", Layer.MANAGEMENT)
        for node in self.asm.nodes_in_layers(RESOURCE_LAYERS):
            self.asm.connect(policy.id, node.id, edge_type=EdgeType.GOVERNANCE)

    def _add_observability(self):
        services = [
            ("monitor", NodeType.MONITOR, "Azure Monitor"),
            ("loganalytics", NodeType.LOG_ANALYTICS, "Log Analytics"),
        ]
        self._add_cross_cutting(
            Layer.OBSERVABILITY, "hub_obs", "Observability", services,
            aggregate=self.options.aggregate_observability, edge_type=EdgeType.MANAGEMENT,
        )

    def _add_cross_cutting(
        self,
        layer: Layer,
        hub_id: str,
        hub_label: str,
        services: List[tuple],
        aggregate: bool,
        edge_type: EdgeType,
    ):
        asm = self.asm
        resources = asm.nodes_in_layers(RESOURCE_LAYERS)

        if self.options.detail_level == "minimal":
            hub = asm.add(
                hub_id, NodeType.CUSTOM, hub_label, layer,
                meta=HubMeta(hub_type=layer.value.lower()),
            )
            for node in resources:
                asm.connect(hub.id, node.id, edge_type=edge_type)
            return

        added = [asm.add(name, node_type, label, layer) for name, node_type, label in services]

        if aggregate:
            hub = asm.add(
                hub_id, NodeType.CUSTOM, f"{hub_label} Hub", layer,
                meta=HubMeta(hub_type=layer.value.lower()),
            )
            for service in added:
                asm.connect(service.id, hub.id, edge_type=edge_type)
            for node in resources:
                asm.connect(hub.id, node.id, edge_type=edge_type)
        else:
            for service in added:
                for node in resources:
                    asm.connect(service.id, node.id, edge_type=edge_type)


def build_from_assessment(
    assessment: AssessmentSummary,
    options: Optional[DiagramOptions] = None,
) -> ArchitectureModel:
    return AssessmentModelBuilder(assessment, options or DiagramOptions()).build()

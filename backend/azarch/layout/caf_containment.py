from typing import List, Optional

from azarch.layout.base import Anchor, LayoutEngine
from azarch.layout.grid import Size
from azarch.model.types import (
    ArchitectureModel,
    ArchNode,
    EntityType,
    Layer,
    SubscriptionMeta,
    SubscriptionType,
)

COLUMN_ORDER = [
    "management-groups",
    "platform-connectivity",
    "platform-management",
    "landingzone-prod",
    "landingzone-nonprod",
    "shared-data",
]

SUBSCRIPTION_COLUMNS = {
    SubscriptionType.PLATFORM_CONNECTIVITY: "platform-connectivity",
    SubscriptionType.PLATFORM_MANAGEMENT: "platform-management",
    SubscriptionType.PLATFORM_IDENTITY: "platform-management",
    SubscriptionType.LANDINGZONE_PROD: "landingzone-prod",
    SubscriptionType.LANDINGZONE_NONPROD: "landingzone-nonprod",
    SubscriptionType.PLATFORM_DATA: "shared-data",
}

SUBNET_ORDER = [
    "subnet-hub-azurefirewall",
    "subnet-hub-bastion",
    "subnet-hub-gateway",
    "subnet-hub-dns",
    "subnet-prod-web",
    "subnet-prod-app",
    "subnet-prod-db",
    "subnet-nonprod-web",
    "subnet-nonprod-app",
    "subnet-nonprod-db",
]

ENTITY_RANK = {
    EntityType.MANAGEMENT_GROUP: 0,
    EntityType.SUBSCRIPTION: 1,
    EntityType.VNET: 2,
    EntityType.SUBNET: 3,
    EntityType.TIER: 4,
}

MANAGEMENT_GROUP_SIZE = Size(180, 60)
SUBSCRIPTION_WIDTH = 200


def subscription_column(node: ArchNode) -> Optional[str]:
    if isinstance(node.meta, SubscriptionMeta) and node.meta.subscription_type is not None:
        return SUBSCRIPTION_COLUMNS.get(node.meta.subscription_type)
    return None


class CafContainmentLayout(LayoutEngine):
    """
    Management groups in the first column, then one column per subscription family:
    connectivity, management, prod, non-prod and shared data.
    """

    name = "caf"

    def column_x(self, column: str) -> float:
        return 50 + COLUMN_ORDER.index(column) * self.options.column_spacing

    def anchor(self, node: ArchNode, model: ArchitectureModel) -> Optional[Anchor]:
        if node.entity_type == EntityType.MANAGEMENT_GROUP:
            index = [
                n.id for n in model.nodes
                if n.entity_type == EntityType.MANAGEMENT_GROUP and n.parent_id is None
            ].index(node.id)
            return "management-groups", self.column_x("management-groups"), 100 + index * 80

        column = subscription_column(node)
        if column is None:
            column = "shared-data" if node.layer == Layer.DATA else "platform-management"
        return column, self.column_x(column), 100

    def leaf_size(self, node: ArchNode) -> Size:
        if node.entity_type == EntityType.MANAGEMENT_GROUP:
            return MANAGEMENT_GROUP_SIZE
        if node.entity_type == EntityType.SUBSCRIPTION:
            return Size(SUBSCRIPTION_WIDTH, self.options.node_height)
        return super().leaf_size(node)

    def grid_columns(self, parent: ArchNode, children: List[ArchNode]) -> int:
        if parent.entity_type == EntityType.MANAGEMENT_GROUP:
            # Subscriptions side by side, in column order.
            return max(1, len(children))
        if parent.entity_type == EntityType.VNET:
            return 1
        if any(child.entity_type in (EntityType.VNET, EntityType.SUBNET) for child in children):
            return 1
        return super().grid_columns(parent, children)

    def order_children(self, parent: ArchNode, children: List[ArchNode]) -> List[ArchNode]:
        def key(item):
            index, child = item
            if child.entity_type == EntityType.SUBNET and child.id in SUBNET_ORDER:
                subnet_rank = SUBNET_ORDER.index(child.id)
            else:
                subnet_rank = len(SUBNET_ORDER)
            column = subscription_column(child)
            column_rank = COLUMN_ORDER.index(column) if column else len(COLUMN_ORDER)
            return (ENTITY_RANK.get(child.entity_type, 5), column_rank, subnet_rank, index)

        return [child for _, child in sorted(enumerate(children), key=key)]

import ipaddress
import logging
from typing import List, Optional, Union

from azarch.schemas import CafArchitecture

logger = logging.getLogger(__name__)

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_cidr(value: str) -> Optional[Network]:
    try:
        return ipaddress.ip_network(value.strip(), strict=False)
    except (ValueError, AttributeError):
        return None


def is_subnet_in_vnet(subnet_cidr: str, vnet_cidr: str) -> bool:
    """True when the subnet is a strictly smaller range inside the VNet range."""
    subnet = parse_cidr(subnet_cidr)
    vnet = parse_cidr(vnet_cidr)
    if subnet is None or vnet is None or subnet.version != vnet.version:
        return False
    if subnet.prefixlen <= vnet.prefixlen:
        return False
    return subnet.subnet_of(vnet)


def validate_cidr_ranges(architecture: CafArchitecture) -> List[str]:
    errors: List[str] = []
    seen_spaces = set()

    for subscription in architecture.subscriptions:
        for vnet in subscription.vnets:
            if parse_cidr(vnet.address_space) is None:
                errors.append(f"Invalid CIDR: {vnet.address_space}")
                continue

            if vnet.address_space in seen_spaces:
                errors.append(f"Duplicate VNet address space: {vnet.address_space}")
            seen_spaces.add(vnet.address_space)

            for subnet in vnet.subnets:
                if parse_cidr(subnet.address_prefix) is None:
                    errors.append(f"Invalid CIDR: {subnet.address_prefix}")
                elif not is_subnet_in_vnet(subnet.address_prefix, vnet.address_space):
                    errors.append(
                        f"Subnet {subnet.address_prefix} is not contained in VNet {vnet.address_space}"
                    )

    if errors:
        logger.warning("[CIDR] %d address range issue(s) found", len(errors))
    return errors

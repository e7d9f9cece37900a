import re
from typing import Dict, Optional, Set

ID_PREFIXES = {
    "node": "node",
    "management_group": "mg",
    "subscription": "sub",
    "vnet": "vnet",
    "subnet": "subnet",
    "tier": "tier",
    "service": "svc",
    "paas": "paas",
    "resource_group": "rg",
    "vm": "vm",
    "hub": "hub",
}

_NON_ID_CHARS = re.compile(r"[^a-z0-9]")


def generate_group_id(prefix: str, name: Optional[str] = None) -> str:
    """
    Build a stable id from a prefix and a display name.

    >>> generate_group_id("tier", "Web Tier")
    'tier-web-tier'
    """
    if not name:
        return prefix
    return f"{prefix}-{_NON_ID_CHARS.sub('-', name.lower())}"


class IdGenerator:
    """
    Per-build id allocator.

    The first request for a base id returns it unchanged; later requests for the
    same base return `base-2`, `base-3`, ... Ids are therefore deterministic for a
    given sequence of calls.
    """

    def __init__(self):
        self._issued: Set[str] = set()
        self._counters: Dict[str, int] = {}

    def reserve(self, node_id: str) -> None:
        self._issued.add(node_id)

    def is_issued(self, node_id: str) -> bool:
        return node_id in self._issued

    def generate(self, name: str, prefix: Optional[str] = None) -> str:
        base = generate_group_id(prefix, name) if prefix else name
        if base not in self._issued:
            self._issued.add(base)
            return base

        counter = self._counters.get(base, 1)
        while True:
            counter += 1
            candidate = f"{base}-{counter}"
            if candidate not in self._issued:
                break
        self._counters[base] = counter
        self._issued.add(candidate)
        return candidate

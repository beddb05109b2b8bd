"""
Node id bands.

Why this file exists
Every role allocates node ids from its own fixed band so ids never collide
for the sizes a single host development cluster runs with.

The allocation formula is the same for every role:

    node_id = base + (container_index - 1 + container_offset) * slots_per_container + (slot - 1)

container_index and slot are 1-based.

    management   65, 66, 67, ...
    data          1,  2,  3, ...
    mysql        69, 70 for mysqld_1, 71, 72 for mysqld_2, ...

The MySQL band skips 67 and 68 because its first container already starts
at offset one. Keep it that way, existing deployments depend on these ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from rondb_compose.core.types import NodeRole


@dataclass(frozen=True)
class IdBand:
    """
    Identifier band for one role.

    base
    Lowest id the band can produce.

    slots_per_container
    How many node ids a single container owns.

    container_offset
    Shift applied to the container index before scaling by slots_per_container.
    """

    base: int
    slots_per_container: int = 1
    container_offset: int = 0

    def node_id(self, container_index: int, slot: int = 1) -> int:
        """Return the node id for a 1-based container index and slot."""
        if container_index < 1:
            raise ValueError("container_index is 1-based")
        if not 1 <= slot <= self.slots_per_container:
            raise ValueError(f"slot must be in [1, {self.slots_per_container}]")

        return self.base + (container_index - 1 + self.container_offset) * self.slots_per_container + (slot - 1)

    def last_id(self, container_count: int) -> int:
        """Highest id allocated when container_count containers exist."""
        return self.node_id(container_count, self.slots_per_container)


ID_BANDS: Dict[NodeRole, IdBand] = {
    NodeRole.management: IdBand(base=65),
    NodeRole.data: IdBand(base=1),
    NodeRole.mysql: IdBand(base=67, slots_per_container=2, container_offset=1),
}

SERVICE_PREFIXES: Dict[NodeRole, str] = {
    NodeRole.management: "mgmd",
    NodeRole.data: "ndbd",
    NodeRole.mysql: "mysqld",
}

MGM_PORT = 1186
DATA_SERVER_PORT = 11860
MYSQL_PORT = 3306

ROLE_PORTS: Dict[NodeRole, int] = {
    NodeRole.management: MGM_PORT,
    NodeRole.data: DATA_SERVER_PORT,
    NodeRole.mysql: MYSQL_PORT,
}


def service_name(role: NodeRole, container_index: int) -> str:
    """Stable container and service name, for example mgmd_1."""
    return f"{SERVICE_PREFIXES[role]}_{container_index}"

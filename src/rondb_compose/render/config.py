"""
Cluster and client config rendering.

config.ini
A header carrying the replication factor, then one slot per node id in the
order management, data, mysql. API nodes get no slot, they only use the
connection string.

my.cnf
A single template filled with the MySQL connection pool size and the
connection string. Only rendered when the cluster has MySQL nodes.

Slots are collected as ConfigSlot records first, then rendered in one pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from rondb_compose.core.types import Node, NodeRole, Topology
from rondb_compose.planner.node_ids import DATA_SERVER_PORT, MGM_PORT
from rondb_compose.render.templates import (
    CLUSTER_DIR,
    CONFIG_INI_HEADER,
    CONFIG_INI_MGMD_SLOT,
    CONFIG_INI_MYSQLD_SLOT,
    CONFIG_INI_NDBD_SLOT,
    MY_CNF,
)

NODE_ACTIVE = 1
MGMD_ARBITRATION_RANK = 2
MYSQLD_ARBITRATION_RANK = 1

_ROLE_ORDER = (NodeRole.management, NodeRole.data, NodeRole.mysql)


@dataclass(frozen=True)
class ConfigSlot:
    """
    One [section] of config.ini.

    template is one of the slot templates.
    params are the values substituted into it.
    """

    role: NodeRole
    node_id: int
    template: str
    params: Dict[str, Any]

    def render(self) -> str:
        return self.template.format(**self.params)


def _management_slot(node: Node) -> ConfigSlot:
    return ConfigSlot(
        role=node.role,
        node_id=node.node_id,
        template=CONFIG_INI_MGMD_SLOT,
        params={
            "node_id": node.node_id,
            "host_name": node.host_name,
            "port": MGM_PORT,
            "active": NODE_ACTIVE,
            "arbitration_rank": MGMD_ARBITRATION_RANK,
        },
    )


def _data_slot(node: Node) -> ConfigSlot:
    return ConfigSlot(
        role=node.role,
        node_id=node.node_id,
        template=CONFIG_INI_NDBD_SLOT,
        params={
            "node_id": node.node_id,
            "node_group": node.node_group,
            "active": NODE_ACTIVE,
            "host_name": node.host_name,
            "server_port": DATA_SERVER_PORT,
            "cluster_dir": CLUSTER_DIR,
            "file_system_path_id": node.node_id,
        },
    )


def _mysql_slot(node: Node) -> ConfigSlot:
    return ConfigSlot(
        role=node.role,
        node_id=node.node_id,
        template=CONFIG_INI_MYSQLD_SLOT,
        params={
            "node_id": node.node_id,
            "active": NODE_ACTIVE,
            "arbitration_rank": MYSQLD_ARBITRATION_RANK,
            "host_name": node.host_name,
        },
    )


_SLOT_BUILDERS = {
    NodeRole.management: _management_slot,
    NodeRole.data: _data_slot,
    NodeRole.mysql: _mysql_slot,
}


class ConfigRenderer:
    """Render config.ini and my.cnf from a Topology."""

    def build_slots(self, topology: Topology) -> List[ConfigSlot]:
        """
        Build config.ini slots in role order.

        Within a role the planner creation order is kept.
        """

        slots: List[ConfigSlot] = []
        for role in _ROLE_ORDER:
            builder = _SLOT_BUILDERS[role]
            for node in topology.nodes_by_role(role):
                slots.append(builder(node))
        return slots

    def render_cluster_config(self, topology: Topology) -> str:
        header = CONFIG_INI_HEADER.format(
            replication_factor=topology.spec.replication_factor,
            cluster_dir=CLUSTER_DIR,
            data_server_port=DATA_SERVER_PORT,
            mgm_port=MGM_PORT,
        )
        sections = [header] + [slot.render() for slot in self.build_slots(topology)]
        return "\n\n".join(sections) + "\n"

    def render_client_config(self, topology: Topology) -> Optional[str]:
        """Return my.cnf text, or None when the cluster has no MySQL nodes."""

        if topology.spec.mysql_count <= 0:
            return None

        text = MY_CNF.format(
            slots_per_container=topology.slots_per_mysql_container,
            connect_string=topology.connect_string,
            cluster_dir=CLUSTER_DIR,
        )
        return text + "\n"

"""
Core types.

This file defines the shared data structures used across the planner,
the renderers and the deployment layer.

Important design choice
Everything here is immutable once created.

A Topology is computed once per run from a ClusterSpec.
Both renderers only read it, so the same node appears identically in
config.ini, my.cnf and the compose manifest.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class NodeRole(str, Enum):
    """
    Node roles in a RonDB cluster.

    management
      ndb_mgmd. Arbitrates membership and serves config.ini.

    data
      ndbmtd. Holds a replica of one partition, grouped into node groups.

    mysql
      mysqld. Stateless SQL gateway joining through the connection string.

    api
      Native NDB API clients. They do not get containers or config slots,
      the count only takes part in the deployment id.
    """

    management = "management"
    data = "data"
    mysql = "mysql"
    api = "api"


class ArtifactKind(str, Enum):
    """
    Rendered artifact kinds.

    cluster_config
      config.ini bound into management containers.

    client_config
      my.cnf bound into MySQL containers. Only produced when MySQL nodes exist.

    orchestration_manifest
      docker compose file describing every container.
    """

    cluster_config = "cluster_config"
    client_config = "client_config"
    orchestration_manifest = "orchestration_manifest"


@dataclass(frozen=True)
class ClusterSpec:
    """
    Declarative cluster shape.

    This is the only input of the planner.
    Counts are validated by the planner, not here.
    """

    version: str
    mgm_count: int = 1
    data_count: int = 1
    replication_factor: int = 1
    mysql_count: int = 0
    api_count: int = 0


@dataclass(frozen=True)
class Node:
    """
    One allocated node identifier.

    node_group is only set for data nodes.

    service_name is unique per container, not per Node.
    The slot Nodes of one MySQL container all carry the same mysqld_<i>,
    so group by service_name (Topology.services) to get one entry per container.

    slot is the 1-based identifier slot inside the container.
    Management and data containers own one slot.
    MySQL containers own several, each slot is its own Node.
    """

    role: NodeRole
    node_id: int
    service_name: str
    host_name: str
    port: int
    container_index: int
    node_group: Optional[int] = None
    slot: int = 1


@dataclass(frozen=True)
class Topology:
    """
    Planned cluster topology.

    nodes are in creation order: management, data, mysql.
    mgm_connection_string holds one "host:port" entry per management node.
    """

    spec: ClusterSpec
    nodes: Tuple[Node, ...]
    mgm_connection_string: Tuple[str, ...]
    num_node_groups: int
    slots_per_mysql_container: int = 2

    @property
    def connect_string(self) -> str:
        """Comma joined endpoints with the trailing separator ndb accepts."""
        return "".join(f"{endpoint}," for endpoint in self.mgm_connection_string)

    def nodes_by_role(self, role: NodeRole) -> List[Node]:
        """Return nodes of one role in creation order."""
        return [n for n in self.nodes if n.role == role]

    def services(self) -> Iterator[Tuple[str, List[Node]]]:
        """
        Yield (service_name, nodes) once per container, in creation order.

        MySQL containers yield all of their slots together.
        """
        seen: List[str] = []
        grouped: dict[str, List[Node]] = {}
        for node in self.nodes:
            if node.service_name not in grouped:
                seen.append(node.service_name)
                grouped[node.service_name] = []
            grouped[node.service_name].append(node)

        for name in seen:
            yield name, grouped[name]


@dataclass(frozen=True)
class RenderedArtifact:
    """
    A rendered text artifact and the file it belongs in.

    Produced once per run and never mutated.
    """

    kind: ArtifactKind
    file_path: str
    content: str

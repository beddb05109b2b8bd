"""
Deterministic topology planner.

Purpose
This planner converts a ClusterSpec into a Topology that both renderers and
the deployment layer consume.

Why deterministic
The same spec must always produce the same node ids, node groups and service
names. Rendered artifacts are diffed between runs and the compose project is
torn down and recreated by name, so any drift would be visible and harmful.

Input validation
Invalid specs raise ValidationError before anything else happens.
The planner never returns a partial topology.

Node group placement
The default is round robin modulo placement, node_group = i % num_node_groups.
It is simple and matches existing deployments, but it only guarantees
replication_factor members per group when the modulo happens to balance.
Contiguous placement, node_group = (i - 1) // replication_factor, is available
as an explicit opt in through PlannerConfig.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import List

from rondb_compose.core.errors import ValidationError, ValidationFailure
from rondb_compose.core.types import ClusterSpec, Node, NodeRole, Topology
from rondb_compose.planner.node_ids import ID_BANDS, MGM_PORT, ROLE_PORTS, service_name

logger = logging.getLogger(__name__)


class NodeGroupPlacement(str, Enum):
    """
    How data nodes are spread over node groups.

    modulo
      node_group = i % num_node_groups for the i-th data node.

    contiguous
      node_group = (i - 1) // replication_factor. Every group receives exactly
      replication_factor members.
    """

    modulo = "modulo"
    contiguous = "contiguous"


@dataclass(frozen=True)
class PlannerConfig:
    """
    Planner configuration.

    node_group_placement
    Placement strategy for data nodes, modulo by default.
    """

    node_group_placement: NodeGroupPlacement = NodeGroupPlacement.modulo


class TopologyPlanner:
    """
    A strict planner that produces a Topology from a ClusterSpec.

    There is no I/O here. The planner only computes values.
    """

    def __init__(self, config: PlannerConfig | None = None) -> None:
        self._config = config or PlannerConfig()

    def plan(self, spec: ClusterSpec) -> Topology:
        """
        Validate the spec and compute the topology.

        Nodes are created in the order management, data, mysql.
        """

        self._validate(spec)

        num_node_groups = spec.data_count // spec.replication_factor

        mgm_nodes = self._management_nodes(spec)
        data_nodes = self._data_nodes(spec, num_node_groups)
        mysql_nodes = self._mysql_nodes(spec)

        nodes = tuple(mgm_nodes + data_nodes + mysql_nodes)
        self._check_unique_ids(nodes)

        connection_string = tuple(f"{n.service_name}:{MGM_PORT}" for n in mgm_nodes)

        topology = Topology(
            spec=spec,
            nodes=nodes,
            mgm_connection_string=connection_string,
            num_node_groups=num_node_groups,
            slots_per_mysql_container=ID_BANDS[NodeRole.mysql].slots_per_container,
        )

        logger.debug(
            "planned %d node ids in %d node groups, placement %s",
            len(nodes),
            num_node_groups,
            self._config.node_group_placement.value,
        )
        return topology

    def _validate(self, spec: ClusterSpec) -> None:
        """
        Check the count constraints.

        The order matters. Callers report the first failing constraint.
        """

        if spec.mgm_count < 1:
            raise ValidationError(
                ValidationFailure.too_few_management_nodes,
                "At least 1 mgmd is required",
            )
        if spec.replication_factor < 1:
            raise ValidationError(
                ValidationFailure.non_positive_replication_factor,
                "The replication factor has to be at least 1",
            )
        if spec.data_count < 1:
            raise ValidationError(
                ValidationFailure.too_few_data_nodes,
                "At least 1 ndbd is required",
            )
        if spec.data_count % spec.replication_factor != 0:
            raise ValidationError(
                ValidationFailure.data_count_not_divisible,
                "The number of data nodes needs to be a multiple of the replication factor "
                f"(data nodes {spec.data_count}, replication factor {spec.replication_factor})",
            )
        if spec.mysql_count < 0 or spec.api_count < 0:
            raise ValidationError(
                ValidationFailure.negative_node_count,
                "The number of mysql and api nodes cannot be negative",
            )

    def _node_group(self, index: int, num_node_groups: int, replication_factor: int) -> int:
        if self._config.node_group_placement == NodeGroupPlacement.contiguous:
            return (index - 1) // replication_factor
        return index % num_node_groups

    def _management_nodes(self, spec: ClusterSpec) -> List[Node]:
        band = ID_BANDS[NodeRole.management]
        nodes: List[Node] = []
        for idx in range(1, spec.mgm_count + 1):
            name = service_name(NodeRole.management, idx)
            nodes.append(
                Node(
                    role=NodeRole.management,
                    node_id=band.node_id(idx),
                    service_name=name,
                    host_name=name,
                    port=ROLE_PORTS[NodeRole.management],
                    container_index=idx,
                )
            )
        return nodes

    def _data_nodes(self, spec: ClusterSpec, num_node_groups: int) -> List[Node]:
        band = ID_BANDS[NodeRole.data]
        nodes: List[Node] = []
        for idx in range(1, spec.data_count + 1):
            name = service_name(NodeRole.data, idx)
            nodes.append(
                Node(
                    role=NodeRole.data,
                    node_id=band.node_id(idx),
                    service_name=name,
                    host_name=name,
                    port=ROLE_PORTS[NodeRole.data],
                    container_index=idx,
                    node_group=self._node_group(idx, num_node_groups, spec.replication_factor),
                )
            )
        return nodes

    def _mysql_nodes(self, spec: ClusterSpec) -> List[Node]:
        band = ID_BANDS[NodeRole.mysql]
        nodes: List[Node] = []
        for idx in range(1, spec.mysql_count + 1):
            name = service_name(NodeRole.mysql, idx)
            for slot in range(1, band.slots_per_container + 1):
                nodes.append(
                    Node(
                        role=NodeRole.mysql,
                        node_id=band.node_id(idx, slot),
                        service_name=name,
                        host_name=name,
                        port=ROLE_PORTS[NodeRole.mysql],
                        container_index=idx,
                        slot=slot,
                    )
                )
        return nodes

    def _check_unique_ids(self, nodes: tuple[Node, ...]) -> None:
        """
        Reject specs large enough for the id bands to overlap.

        Example: 65 data nodes would reuse id 65 of mgmd_1.
        """

        counts = Counter(n.node_id for n in nodes)
        duplicates = sorted(node_id for node_id, count in counts.items() if count > 1)
        if duplicates:
            raise ValidationError(
                ValidationFailure.node_id_collision,
                f"node id bands overlap for this cluster size, duplicate ids: {duplicates}",
            )

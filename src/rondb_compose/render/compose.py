"""
Compose manifest rendering.

Purpose
Turn a Topology into one docker compose service per container and a complete
manifest that docker-compose can bring up without any pre created volumes.

Three steps
1. build_services creates typed ServiceDescriptor records.
2. build_manifest turns them into plain dicts with a global volumes section
   listing every named volume exactly once.
3. render_manifest emits that mapping with yaml.safe_dump, so host paths are
   quoted wherever YAML needs it.

Output is byte identical for identical input. Artifacts are regenerated and
diffed between runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from rondb_compose.core.types import Node, NodeRole, Topology
from rondb_compose.render.templates import CLUSTER_DIR, COMPOSE_SCHEMA_VERSION

CONFIG_INI_TARGET = f"{CLUSTER_DIR}/config.ini"
MY_CNF_TARGET = f"{CLUSTER_DIR}/my.cnf"


@dataclass(frozen=True)
class ResourceEnvelope:
    """
    deploy.resources of a service.

    Values are kept as compose strings, for example cpus '0.2' and memory 50M.
    cpus_reservation is optional and omitted when None.
    """

    cpus_limit: str
    memory_limit: str
    memory_reservation: str
    cpus_reservation: Optional[str] = None


@dataclass(frozen=True)
class VolumeMount:
    """Named volume mounted at a directory below the cluster dir."""

    name: str
    target_dir: str

    def render(self) -> str:
        return f"{self.name}:{CLUSTER_DIR}/{self.target_dir}"


@dataclass(frozen=True)
class BindMount:
    """Host file bound into the container."""

    source: str
    target: str


@dataclass(frozen=True)
class ServiceDescriptor:
    """
    One compose service.

    name is the service key and the container name.
    """

    name: str
    image: str
    role: NodeRole
    command: Tuple[str, ...]
    resources: ResourceEnvelope
    bind_mounts: Tuple[BindMount, ...] = ()
    volumes: Tuple[VolumeMount, ...] = ()
    environment: Tuple[Tuple[str, str], ...] = ()

    def to_compose(self) -> Dict[str, Any]:
        """
        Return the compose mapping for this service.

        Tuples become lists, yaml.safe_dump does not represent tuples.
        """

        res = self.resources
        reservations: Dict[str, Any] = {}
        if res.cpus_reservation is not None:
            reservations["cpus"] = res.cpus_reservation
        reservations["memory"] = res.memory_reservation

        service: Dict[str, Any] = {
            "image": self.image,
            "container_name": self.name,
            "command": list(self.command),
            "deploy": {
                "resources": {
                    "limits": {"cpus": res.cpus_limit, "memory": res.memory_limit},
                    "reservations": reservations,
                }
            },
        }

        volumes: List[Any] = [{"type": "bind", "source": b.source, "target": b.target} for b in self.bind_mounts]
        volumes.extend(vol.render() for vol in self.volumes)
        if volumes:
            service["volumes"] = volumes

        if self.environment:
            service["environment"] = [f"{key}={value}" for key, value in self.environment]

        return service


# mgmds need very little.
# ndbmtd needs 7000M while starting and loading, after that around 2500M is used.
# Make sure Docker allows these limits, check with `docker stats`.
ROLE_RESOURCES: Dict[NodeRole, ResourceEnvelope] = {
    NodeRole.management: ResourceEnvelope(cpus_limit="0.2", memory_limit="50M", memory_reservation="20M"),
    NodeRole.data: ResourceEnvelope(cpus_limit="2", memory_limit="7000M", memory_reservation="7000M"),
    NodeRole.mysql: ResourceEnvelope(cpus_limit="2", memory_limit="1400M", memory_reservation="650M"),
}

# (volume name prefix, directory below CLUSTER_DIR)
ROLE_VOLUMES: Dict[NodeRole, Tuple[Tuple[str, str], ...]] = {
    NodeRole.management: (("dataDir", "mgmd"), ("logDir", "log")),
    NodeRole.data: (("dataDir", "ndb_data"), ("logDir", "log")),
    NodeRole.mysql: (("dataDir", "mysqld"), ("logDir", "log"), ("mysqlFilesDir", "mysql-files")),
}

MYSQL_ENVIRONMENT: Tuple[Tuple[str, str], ...] = (("MYSQL_ALLOW_EMPTY_PASSWORD", "true"),)


def _command(nodes: List[Node], topology: Topology) -> Tuple[str, ...]:
    first = nodes[0]
    if first.role == NodeRole.management:
        return ("ndb_mgmd", f"--ndb-nodeid={first.node_id}", "--initial")
    if first.role == NodeRole.data:
        return (
            "ndbmtd",
            f"--ndb-nodeid={first.node_id}",
            "--initial",
            f"--ndb-connectstring={topology.connect_string}",
        )
    if first.role == NodeRole.mysql:
        return ("mysqld",)
    raise ValueError(f"no container command for role {first.role.value}")


class ComposeRenderer:
    """
    Render the docker compose manifest.

    cluster_config_path and client_config_path are host paths bound into
    management and MySQL containers. client_config_path may be None only when
    the topology has no MySQL nodes.
    """

    def build_services(
        self,
        topology: Topology,
        image_name: str,
        cluster_config_path: str,
        client_config_path: Optional[str] = None,
    ) -> List[ServiceDescriptor]:
        services: List[ServiceDescriptor] = []

        for name, nodes in topology.services():
            role = nodes[0].role

            binds: Tuple[BindMount, ...] = ()
            environment: Tuple[Tuple[str, str], ...] = ()
            if role == NodeRole.management:
                binds = (BindMount(source=cluster_config_path, target=CONFIG_INI_TARGET),)
            elif role == NodeRole.mysql:
                if client_config_path is None:
                    raise ValueError("client_config_path is required when the topology has mysql nodes")
                binds = (BindMount(source=client_config_path, target=MY_CNF_TARGET),)
                environment = MYSQL_ENVIRONMENT

            volumes = tuple(VolumeMount(name=f"{prefix}_{name}", target_dir=d) for prefix, d in ROLE_VOLUMES[role])

            services.append(
                ServiceDescriptor(
                    name=name,
                    image=image_name,
                    role=role,
                    command=_command(nodes, topology),
                    resources=ROLE_RESOURCES[role],
                    bind_mounts=binds,
                    volumes=volumes,
                    environment=environment,
                )
            )

        return services

    def build_manifest(
        self,
        topology: Topology,
        image_name: str,
        cluster_config_path: str,
        client_config_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Build the compose document as plain dicts and lists.

        Insertion order is the output order. Volumes are declared once each,
        in the order services allocate them.
        """

        services = self.build_services(topology, image_name, cluster_config_path, client_config_path)

        volume_names: Dict[str, None] = {}
        for svc in services:
            for vol in svc.volumes:
                volume_names.setdefault(vol.name, None)

        return {
            "version": COMPOSE_SCHEMA_VERSION,
            "services": {svc.name: svc.to_compose() for svc in services},
            "volumes": volume_names,
        }

    def render_manifest(
        self,
        topology: Topology,
        image_name: str,
        cluster_config_path: str,
        client_config_path: Optional[str] = None,
    ) -> str:
        manifest = self.build_manifest(topology, image_name, cluster_config_path, client_config_path)
        return yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False)

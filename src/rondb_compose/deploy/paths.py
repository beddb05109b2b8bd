"""
Deterministic artifact naming.

Every parameter that shapes the topology takes part in the deployment id,
so two different clusters never share files or a compose project.

Node group placement only appears in the id when it is not the default
modulo placement, so default file names stay v<version>_m.._d.._r.._my.._api...
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from rondb_compose.core.types import ClusterSpec
from rondb_compose.planner.planner import NodeGroupPlacement

DEFAULT_OUTPUT_DIR = Path("autogenerated_files")


def deployment_id(spec: ClusterSpec, placement: NodeGroupPlacement = NodeGroupPlacement.modulo) -> str:
    """Return an id like v21.04.9_m1_d2_r2_my1_api0, or ..._api0_ngcontiguous."""
    dep_id = (
        f"v{spec.version}"
        f"_m{spec.mgm_count}"
        f"_d{spec.data_count}"
        f"_r{spec.replication_factor}"
        f"_my{spec.mysql_count}"
        f"_api{spec.api_count}"
    )
    if placement != NodeGroupPlacement.modulo:
        dep_id += f"_ng{placement.value}"
    return dep_id


def image_name(version: str) -> str:
    """Tag of the locally built RonDB image."""
    return f"rondb:{version}"


@dataclass(frozen=True)
class ArtifactPaths:
    """
    File locations for one deployment.

    Paths are absolute because the compose file bind mounts them.
    """

    output_dir: Path
    deployment_id: str
    compose_file: Path
    cluster_config: Path
    client_config: Path

    @property
    def project_name(self) -> str:
        """docker-compose project name, -p on the command line."""
        return f"rondb_{self.deployment_id}"

    @classmethod
    def for_spec(
        cls,
        output_dir: Path,
        spec: ClusterSpec,
        placement: NodeGroupPlacement = NodeGroupPlacement.modulo,
    ) -> "ArtifactPaths":
        out = output_dir.resolve()
        dep_id = deployment_id(spec, placement)
        return cls(
            output_dir=out,
            deployment_id=dep_id,
            compose_file=out / f"docker_compose_{dep_id}.yml",
            cluster_config=out / f"config_{dep_id}.ini",
            client_config=out / f"my_{dep_id}.cnf",
        )

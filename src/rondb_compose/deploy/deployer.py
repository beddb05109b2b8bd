"""
Cluster deployer.

Purpose
Run one generation:
- Plan the topology
- Render config.ini, my.cnf and the compose manifest
- Build the image
- Write the artifacts
- Tear down the previous deployment with the same id, volumes included
- Start the new deployment

This is the composition layer of the system.
Planner and renderers remain pure.
The deployer handles files and the orchestrator.

Validation happens in the first step, so an invalid spec never writes a file
and never touches a container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rondb_compose.core.types import ArtifactKind, ClusterSpec, RenderedArtifact, Topology
from rondb_compose.deploy.orchestrator import Orchestrator
from rondb_compose.deploy.paths import DEFAULT_OUTPUT_DIR, ArtifactPaths, image_name
from rondb_compose.deploy.writer import ArtifactWriter
from rondb_compose.planner.planner import PlannerConfig, TopologyPlanner
from rondb_compose.render.compose import ComposeRenderer
from rondb_compose.render.config import ConfigRenderer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployConfig:
    """
    Deployer configuration.

    output_dir
    Directory for generated files.

    glibc_version
    Passed to the image build as is.

    detached
    Run docker-compose up with -d.

    skip_build
    Reuse an existing rondb:<version> image.

    render_only
    Write artifacts and stop. No image build, no teardown, no startup.
    """

    output_dir: Path = DEFAULT_OUTPUT_DIR
    glibc_version: str = "2.28"
    detached: bool = False
    skip_build: bool = False
    render_only: bool = False
    planner: PlannerConfig = field(default_factory=PlannerConfig)


@dataclass(frozen=True)
class RenderResult:
    """Everything one generation produced, before anything is written."""

    topology: Topology
    paths: ArtifactPaths
    image_name: str
    artifacts: List[RenderedArtifact]

    def artifact(self, kind: ArtifactKind) -> Optional[RenderedArtifact]:
        for art in self.artifacts:
            if art.kind == kind:
                return art
        return None


@dataclass(frozen=True)
class DeployResult:
    """
    Outcome of deploy.

    started is False for render only runs.
    """

    rendered: RenderResult
    written: List[Path]
    started: bool


class ClusterDeployer:
    """Top level generation and deployment flow."""

    def __init__(self, orchestrator: Orchestrator, config: DeployConfig | None = None) -> None:
        self._config = config or DeployConfig()
        self._orchestrator = orchestrator
        self._planner = TopologyPlanner(self._config.planner)
        self._config_renderer = ConfigRenderer()
        self._compose_renderer = ComposeRenderer()

    def render(self, spec: ClusterSpec) -> RenderResult:
        """
        Plan and render without side effects.

        Raises ValidationError for invalid specs.
        """

        topology = self._planner.plan(spec)
        paths = ArtifactPaths.for_spec(self._config.output_dir, spec, self._config.planner.node_group_placement)
        image = image_name(spec.version)

        artifacts = [
            RenderedArtifact(
                kind=ArtifactKind.cluster_config,
                file_path=str(paths.cluster_config),
                content=self._config_renderer.render_cluster_config(topology),
            )
        ]

        client_config = self._config_renderer.render_client_config(topology)
        client_config_path: Optional[str] = None
        if client_config is not None:
            client_config_path = str(paths.client_config)
            artifacts.append(
                RenderedArtifact(
                    kind=ArtifactKind.client_config,
                    file_path=client_config_path,
                    content=client_config,
                )
            )

        artifacts.append(
            RenderedArtifact(
                kind=ArtifactKind.orchestration_manifest,
                file_path=str(paths.compose_file),
                content=self._compose_renderer.render_manifest(
                    topology,
                    image,
                    cluster_config_path=str(paths.cluster_config),
                    client_config_path=client_config_path,
                ),
            )
        )

        return RenderResult(topology=topology, paths=paths, image_name=image, artifacts=artifacts)

    def deploy(self, spec: ClusterSpec) -> DeployResult:
        """
        Run the full flow.

        Orchestrator failures propagate as OrchestratorFailed.
        """

        self._log_parameters(spec)
        rendered = self.render(spec)

        if not self._config.render_only and not self._config.skip_build:
            logger.info("building RonDB docker image %s for local platform", rendered.image_name)
            self._orchestrator.build_image(rendered.image_name, spec.version, self._config.glibc_version)

        written = ArtifactWriter(rendered.paths.output_dir).write(rendered.artifacts)

        if self._config.render_only:
            logger.info("render only, not touching deployment %s", rendered.paths.project_name)
            return DeployResult(rendered=rendered, written=written, started=False)

        self.redeploy(rendered.paths)
        return DeployResult(rendered=rendered, written=written, started=True)

    def redeploy(self, paths: ArtifactPaths) -> None:
        """
        Destroy the previous deployment with the same id, then start fresh.

        All data in its volumes is lost.
        """

        logger.warning(
            "removing previous deployment %s including its volumes",
            paths.project_name,
        )
        self._orchestrator.teardown_with_volumes(paths.compose_file, paths.project_name)
        self._orchestrator.up(paths.compose_file, paths.project_name, self._config.detached)

    def _log_parameters(self, spec: ClusterSpec) -> None:
        logger.info("RonDB version                 = %s", spec.version)
        logger.info("Glibc version                 = %s", self._config.glibc_version)
        logger.info("Number of management nodes    = %d", spec.mgm_count)
        logger.info("Number of data nodes          = %d", spec.data_count)
        logger.info("Replication factor            = %d", spec.replication_factor)
        logger.info("Number of mysql nodes         = %d", spec.mysql_count)
        logger.info("Number of api nodes           = %d", spec.api_count)
        logger.info("Running detached              = %s", self._config.detached)

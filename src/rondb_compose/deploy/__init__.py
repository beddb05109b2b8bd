"""
Deploy package.

Everything with side effects lives here: files, docker and docker-compose.
"""

from rondb_compose.deploy.deployer import ClusterDeployer, DeployConfig, DeployResult, RenderResult
from rondb_compose.deploy.orchestrator import DockerComposeOrchestrator, Orchestrator, RecordingOrchestrator
from rondb_compose.deploy.paths import ArtifactPaths, deployment_id
from rondb_compose.deploy.writer import ArtifactWriter

__all__ = [
    "ArtifactPaths",
    "ArtifactWriter",
    "ClusterDeployer",
    "DeployConfig",
    "DeployResult",
    "DockerComposeOrchestrator",
    "Orchestrator",
    "RecordingOrchestrator",
    "RenderResult",
    "deployment_id",
]

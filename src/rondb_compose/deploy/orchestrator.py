"""
Orchestrator interfaces.

Goal
Keep docker and docker-compose behind a narrow interface so the deployer
can be tested without a Docker daemon.

Design notes
teardown_with_volumes is destructive. It removes the containers and the
named volumes of a previous deployment with the same project name.
It is its own method so callers can never trigger it by accident while
writing artifacts.

Exit status of the external tools is not interpreted. Any non zero exit
raises OrchestratorFailed and the run stops.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Protocol, Sequence, Tuple

from rondb_compose.core.errors import OrchestratorFailed

logger = logging.getLogger(__name__)


class Orchestrator(Protocol):
    """
    Interface expected by the deployer.

    build_image
    Build the RonDB image for the local platform.

    teardown_with_volumes
    Remove a previous deployment including its volumes.

    up
    Start the deployment described by compose_file.
    """

    def build_image(self, image_name: str, rondb_version: str, glibc_version: str) -> None:
        """Build and tag the image."""

    def teardown_with_volumes(self, compose_file: Path, project_name: str) -> None:
        """Remove containers and volumes of the project."""

    def up(self, compose_file: Path, project_name: str, detached: bool) -> None:
        """Start the project."""


@dataclass(frozen=True)
class DockerComposeOrchestrator:
    """
    Shell out to docker buildx and docker-compose.

    build_context
    Directory holding the Dockerfile.

    compose_command
    Base command, docker-compose by default. Use ("docker", "compose") for the plugin.
    """

    build_context: Path = Path(".")
    compose_command: Tuple[str, ...] = ("docker-compose",)

    def build_image(self, image_name: str, rondb_version: str, glibc_version: str) -> None:
        self._run(
            [
                "docker",
                "buildx",
                "build",
                str(self.build_context),
                "--tag",
                image_name,
                "--build-arg",
                f"RONDB_VERSION={rondb_version}",
                "--build-arg",
                f"GLIBC_VERSION={glibc_version}",
            ]
        )

    def teardown_with_volumes(self, compose_file: Path, project_name: str) -> None:
        self._run([*self.compose_command, "-f", str(compose_file), "-p", project_name, "down", "-v"])

    def up(self, compose_file: Path, project_name: str, detached: bool) -> None:
        cmd = [*self.compose_command, "-f", str(compose_file), "-p", project_name, "up"]
        if detached:
            cmd.append("-d")
        self._run(cmd)

    def _run(self, cmd: Sequence[str]) -> None:
        logger.info("running %s", " ".join(cmd))
        proc = subprocess.run(list(cmd), check=False)
        if proc.returncode != 0:
            raise OrchestratorFailed(cmd, proc.returncode)


@dataclass
class RecordingOrchestrator:
    """
    In memory orchestrator.

    Used for tests and render only runs. Every call is appended to calls as a
    (method name, arguments) tuple.

    fail_on
    Optional method name that raises OrchestratorFailed when called, to
    simulate a failing docker command.
    """

    calls: List[Tuple[str, Tuple[object, ...]]] = field(default_factory=list)
    fail_on: str = ""

    def build_image(self, image_name: str, rondb_version: str, glibc_version: str) -> None:
        self._record("build_image", image_name, rondb_version, glibc_version)

    def teardown_with_volumes(self, compose_file: Path, project_name: str) -> None:
        self._record("teardown_with_volumes", compose_file, project_name)

    def up(self, compose_file: Path, project_name: str, detached: bool) -> None:
        self._record("up", compose_file, project_name, detached)

    def method_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _record(self, name: str, *args: object) -> None:
        self.calls.append((name, args))
        if self.fail_on == name:
            raise OrchestratorFailed([name], 1)

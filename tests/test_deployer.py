from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from rondb_compose.core.errors import OrchestratorFailed, ValidationError
from rondb_compose.core.types import ArtifactKind, ClusterSpec
from rondb_compose.deploy.deployer import ClusterDeployer, DeployConfig
from rondb_compose.deploy.orchestrator import RecordingOrchestrator
from rondb_compose.deploy.paths import ArtifactPaths, deployment_id
from rondb_compose.planner.planner import NodeGroupPlacement, PlannerConfig


def _deployer(tmp_path: Path, **kwargs) -> tuple[ClusterDeployer, RecordingOrchestrator]:
    orchestrator = RecordingOrchestrator()
    config = DeployConfig(output_dir=tmp_path / "out", **kwargs)
    return ClusterDeployer(orchestrator=orchestrator, config=config), orchestrator


def test_deployment_id_uses_every_shaping_parameter():
    spec = ClusterSpec(version="21.04.9", mgm_count=2, data_count=4, replication_factor=2, mysql_count=1, api_count=3)
    assert deployment_id(spec) == "v21.04.9_m2_d4_r2_my1_api3"


def test_artifact_paths_are_absolute_and_named_by_id(tmp_path: Path):
    paths = ArtifactPaths.for_spec(tmp_path, ClusterSpec(version="1"))

    assert paths.compose_file == tmp_path.resolve() / "docker_compose_v1_m1_d1_r1_my0_api0.yml"
    assert paths.cluster_config.name == "config_v1_m1_d1_r1_my0_api0.ini"
    assert paths.client_config.name == "my_v1_m1_d1_r1_my0_api0.cnf"
    assert paths.project_name == "rondb_v1_m1_d1_r1_my0_api0"
    assert paths.compose_file.is_absolute()


def test_deploy_writes_artifacts_then_tears_down_then_starts(tmp_path: Path):
    deployer, orchestrator = _deployer(tmp_path, detached=True)
    spec = ClusterSpec(version="21.04.9", mgm_count=2, data_count=4, replication_factor=2, mysql_count=1)

    result = deployer.deploy(spec)

    assert result.started
    assert orchestrator.method_names() == ["build_image", "teardown_with_volumes", "up"]
    assert orchestrator.calls[0][1] == ("rondb:21.04.9", "21.04.9", "2.28")

    paths = result.rendered.paths
    assert orchestrator.calls[1][1] == (paths.compose_file, paths.project_name)
    assert orchestrator.calls[2][1] == (paths.compose_file, paths.project_name, True)

    assert sorted(p.name for p in result.written) == sorted(
        [paths.compose_file.name, paths.cluster_config.name, paths.client_config.name]
    )
    for artifact in result.rendered.artifacts:
        assert Path(artifact.file_path).read_text(encoding="utf-8") == artifact.content


def test_manifest_binds_the_written_config_files(tmp_path: Path):
    deployer, _ = _deployer(tmp_path, render_only=True)
    rendered = deployer.render(ClusterSpec(version="1", mysql_count=1))

    manifest = rendered.artifact(ArtifactKind.orchestration_manifest)
    assert manifest is not None
    loaded = yaml.safe_load(manifest.content)
    assert loaded["services"]["mgmd_1"]["volumes"][0]["source"] == str(rendered.paths.cluster_config)
    assert loaded["services"]["mysqld_1"]["volumes"][0]["source"] == str(rendered.paths.client_config)


def test_output_dir_with_comment_marker_survives_in_manifest(tmp_path: Path):
    orchestrator = RecordingOrchestrator()
    config = DeployConfig(output_dir=tmp_path / "my #cluster", render_only=True)
    result = ClusterDeployer(orchestrator=orchestrator, config=config).deploy(ClusterSpec(version="1", mysql_count=1))

    paths = result.rendered.paths
    loaded = yaml.safe_load(paths.compose_file.read_text(encoding="utf-8"))
    assert loaded["services"]["mgmd_1"]["volumes"][0]["source"] == str(paths.cluster_config)
    assert loaded["services"]["mysqld_1"]["volumes"][0]["source"] == str(paths.client_config)
    assert paths.cluster_config.exists()


def test_deployment_id_marks_non_default_placement():
    spec = ClusterSpec(version="1", data_count=6, replication_factor=2)

    assert deployment_id(spec, NodeGroupPlacement.modulo) == "v1_m1_d6_r2_my0_api0"
    assert deployment_id(spec, NodeGroupPlacement.contiguous) == "v1_m1_d6_r2_my0_api0_ngcontiguous"


def test_placements_never_share_artifacts_or_project(tmp_path: Path):
    spec = ClusterSpec(version="1", data_count=6, replication_factor=2)
    modulo, _ = _deployer(tmp_path, render_only=True)
    contiguous, _ = _deployer(
        tmp_path,
        render_only=True,
        planner=PlannerConfig(node_group_placement=NodeGroupPlacement.contiguous),
    )

    first = modulo.render(spec)
    second = contiguous.render(spec)

    assert first.artifact(ArtifactKind.cluster_config).content != second.artifact(ArtifactKind.cluster_config).content
    assert first.paths.deployment_id == "v1_m1_d6_r2_my0_api0"
    assert second.paths.deployment_id.endswith("_ngcontiguous")
    assert first.paths.compose_file != second.paths.compose_file
    assert first.paths.cluster_config != second.paths.cluster_config
    assert first.paths.project_name != second.paths.project_name


def test_no_client_config_without_mysql(tmp_path: Path):
    deployer, _ = _deployer(tmp_path, render_only=True)
    result = deployer.deploy(ClusterSpec(version="1"))

    assert result.rendered.artifact(ArtifactKind.client_config) is None
    assert not result.rendered.paths.client_config.exists()
    assert len(result.written) == 2


def test_render_only_never_calls_orchestrator(tmp_path: Path):
    deployer, orchestrator = _deployer(tmp_path, render_only=True)
    result = deployer.deploy(ClusterSpec(version="1"))

    assert not result.started
    assert orchestrator.calls == []
    assert result.rendered.paths.compose_file.exists()


def test_skip_build_still_redeploys(tmp_path: Path):
    deployer, orchestrator = _deployer(tmp_path, skip_build=True)
    deployer.deploy(ClusterSpec(version="1"))

    assert orchestrator.method_names() == ["teardown_with_volumes", "up"]


def test_invalid_spec_writes_nothing_and_touches_nothing(tmp_path: Path):
    deployer, orchestrator = _deployer(tmp_path)

    with pytest.raises(ValidationError):
        deployer.deploy(ClusterSpec(version="1", data_count=3, replication_factor=2))

    assert orchestrator.calls == []
    assert not (tmp_path / "out").exists()


def test_failed_build_aborts_before_writing(tmp_path: Path):
    orchestrator = RecordingOrchestrator(fail_on="build_image")
    deployer = ClusterDeployer(orchestrator=orchestrator, config=DeployConfig(output_dir=tmp_path / "out"))

    with pytest.raises(OrchestratorFailed):
        deployer.deploy(ClusterSpec(version="1"))

    assert orchestrator.method_names() == ["build_image"]
    assert not (tmp_path / "out").exists()


def test_redeploy_logs_destructive_teardown(tmp_path: Path, caplog):
    deployer, _ = _deployer(tmp_path, skip_build=True)

    with caplog.at_level("WARNING", logger="rondb_compose"):
        deployer.deploy(ClusterSpec(version="1"))

    assert any("including its volumes" in r.getMessage() for r in caplog.records)


def test_regeneration_is_byte_identical(tmp_path: Path):
    deployer, _ = _deployer(tmp_path, render_only=True)
    spec = ClusterSpec(version="1", mgm_count=2, data_count=4, replication_factor=2, mysql_count=1)

    first = {p: p.read_bytes() for p in deployer.deploy(spec).written}
    second = {p: p.read_bytes() for p in deployer.deploy(spec).written}

    assert first == second

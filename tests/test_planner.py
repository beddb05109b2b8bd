import pytest

from rondb_compose.core.errors import ValidationError, ValidationFailure
from rondb_compose.core.types import ClusterSpec, NodeRole
from rondb_compose.planner.planner import NodeGroupPlacement, PlannerConfig, TopologyPlanner


def _ids(topology, role):
    return [n.node_id for n in topology.nodes_by_role(role)]


def test_planner_minimal_cluster():
    topology = TopologyPlanner().plan(ClusterSpec(version="21.04.9"))

    assert _ids(topology, NodeRole.management) == [65]
    assert _ids(topology, NodeRole.data) == [1]
    assert topology.nodes_by_role(NodeRole.data)[0].node_group == 0
    assert topology.nodes_by_role(NodeRole.mysql) == []
    assert topology.num_node_groups == 1
    assert topology.mgm_connection_string == ("mgmd_1:1186",)
    assert topology.connect_string == "mgmd_1:1186,"


def test_planner_replicated_cluster_with_mysql():
    spec = ClusterSpec(version="21.04.9", mgm_count=2, data_count=4, replication_factor=2, mysql_count=1)
    topology = TopologyPlanner().plan(spec)

    assert _ids(topology, NodeRole.management) == [65, 66]
    assert _ids(topology, NodeRole.data) == [1, 2, 3, 4]
    assert [n.node_group for n in topology.nodes_by_role(NodeRole.data)] == [1, 0, 1, 0]
    assert _ids(topology, NodeRole.mysql) == [69, 70]
    assert {n.service_name for n in topology.nodes_by_role(NodeRole.mysql)} == {"mysqld_1"}
    assert len(topology.mgm_connection_string) == 2
    assert topology.connect_string == "mgmd_1:1186,mgmd_2:1186,"


def test_planner_orders_nodes_by_role():
    spec = ClusterSpec(version="1", mgm_count=1, data_count=2, replication_factor=1, mysql_count=2)
    topology = TopologyPlanner().plan(spec)

    roles = [n.role for n in topology.nodes]
    assert roles == [NodeRole.management] + [NodeRole.data] * 2 + [NodeRole.mysql] * 4

    names = [name for name, _ in topology.services()]
    assert names == ["mgmd_1", "ndbd_1", "ndbd_2", "mysqld_1", "mysqld_2"]


def test_second_mysql_container_gets_next_id_pair():
    spec = ClusterSpec(version="1", mysql_count=2)
    topology = TopologyPlanner().plan(spec)

    by_service = dict(topology.services())
    assert [n.node_id for n in by_service["mysqld_1"]] == [69, 70]
    assert [n.node_id for n in by_service["mysqld_2"]] == [71, 72]
    assert [n.slot for n in by_service["mysqld_2"]] == [1, 2]


def test_mysql_slot_nodes_share_their_container_service_name():
    topology = TopologyPlanner().plan(ClusterSpec(version="1", mgm_count=2, data_count=2, mysql_count=2))

    mysql_names = [n.service_name for n in topology.nodes_by_role(NodeRole.mysql)]
    assert mysql_names == ["mysqld_1", "mysqld_1", "mysqld_2", "mysqld_2"]

    for role in (NodeRole.management, NodeRole.data):
        names = [n.service_name for n in topology.nodes_by_role(role)]
        assert len(names) == len(set(names))


@pytest.mark.parametrize(
    "spec, reason",
    [
        (ClusterSpec(version="1", mgm_count=0), ValidationFailure.too_few_management_nodes),
        (ClusterSpec(version="1", replication_factor=0), ValidationFailure.non_positive_replication_factor),
        (ClusterSpec(version="1", data_count=0), ValidationFailure.too_few_data_nodes),
        (ClusterSpec(version="1", data_count=3, replication_factor=2), ValidationFailure.data_count_not_divisible),
        (ClusterSpec(version="1", mysql_count=-1), ValidationFailure.negative_node_count),
        (ClusterSpec(version="1", data_count=65), ValidationFailure.node_id_collision),
    ],
)
def test_planner_rejects_invalid_specs(spec, reason):
    with pytest.raises(ValidationError) as excinfo:
        TopologyPlanner().plan(spec)

    assert excinfo.value.reason == reason


def test_management_count_is_checked_before_replication_factor():
    spec = ClusterSpec(version="1", mgm_count=0, replication_factor=0)

    with pytest.raises(ValidationError) as excinfo:
        TopologyPlanner().plan(spec)

    assert excinfo.value.reason == ValidationFailure.too_few_management_nodes


def test_many_management_nodes_collide_with_mysql_band():
    spec = ClusterSpec(version="1", mgm_count=5, mysql_count=1)

    with pytest.raises(ValidationError) as excinfo:
        TopologyPlanner().plan(spec)

    assert excinfo.value.reason == ValidationFailure.node_id_collision
    assert "69" in str(excinfo.value)


def _valid_specs():
    for mgm in (1, 2, 3):
        for rf in (1, 2, 3, 4):
            for groups in (1, 2, 3, 5):
                for mysql in (0, 1, 3):
                    yield ClusterSpec(
                        version="1",
                        mgm_count=mgm,
                        data_count=rf * groups,
                        replication_factor=rf,
                        mysql_count=mysql,
                    )


@pytest.mark.parametrize("placement", list(NodeGroupPlacement))
def test_invariants_hold_for_valid_specs(placement):
    planner = TopologyPlanner(PlannerConfig(node_group_placement=placement))

    for spec in _valid_specs():
        topology = planner.plan(spec)

        ids = [n.node_id for n in topology.nodes]
        assert len(ids) == len(set(ids))
        assert all(i >= 1 for i in ids)

        assert len(topology.mgm_connection_string) == spec.mgm_count
        assert topology.num_node_groups == spec.data_count // spec.replication_factor

        for node in topology.nodes_by_role(NodeRole.data):
            assert 0 <= node.node_group < topology.num_node_groups

        containers = [name for name, _ in topology.services()]
        assert len(containers) == len(set(containers))
        assert len(containers) == spec.mgm_count + spec.data_count + spec.mysql_count


def test_modulo_placement_starts_at_group_one():
    """
    data 6, replicas 3 gives 2 groups.

    The first data node lands in group 1, not group 0.
    """
    topology = TopologyPlanner().plan(ClusterSpec(version="1", data_count=6, replication_factor=3))
    groups = [n.node_group for n in topology.nodes_by_role(NodeRole.data)]
    assert groups == [1, 0, 1, 0, 1, 0]


def test_contiguous_placement_fills_each_group_with_replicas():
    planner = TopologyPlanner(PlannerConfig(node_group_placement=NodeGroupPlacement.contiguous))
    topology = planner.plan(ClusterSpec(version="1", data_count=6, replication_factor=2))

    groups = [n.node_group for n in topology.nodes_by_role(NodeRole.data)]
    assert groups == [0, 0, 1, 1, 2, 2]


def test_api_nodes_only_change_the_spec():
    with_api = TopologyPlanner().plan(ClusterSpec(version="1", api_count=3))
    without_api = TopologyPlanner().plan(ClusterSpec(version="1"))

    assert with_api.nodes == without_api.nodes
    assert with_api.nodes_by_role(NodeRole.api) == []


def test_planning_is_deterministic():
    spec = ClusterSpec(version="1", mgm_count=2, data_count=4, replication_factor=2, mysql_count=2)

    assert TopologyPlanner().plan(spec) == TopologyPlanner().plan(spec)

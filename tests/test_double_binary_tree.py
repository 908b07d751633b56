import pytest

from collsim.binary_tree import NodeType
from collsim.double_binary_tree import DoubleBinaryTreeTopology
from collsim.logical_topology import ComType, Complexity


@pytest.fixture
def topo():
    return DoubleBinaryTreeTopology(id=0, total_tree_nodes=8, start=0, stride=1)


def test_get_topology_alternates(topo):
    got = [topo.get_topology() for _ in range(4)]
    assert got[0] is topo.dbmax
    assert got[1] is topo.dbmin
    assert got[2] is topo.dbmax
    assert got[3] is topo.dbmin
    assert topo.counter == 4


def test_basic_topology_alternates_at_dimension_zero(topo):
    first = topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    second = topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE)
    assert first is topo.dbmax
    assert second is topo.dbmin


def test_other_dimension_gives_none_without_advancing(topo):
    assert topo.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is None
    assert topo.counter == 0
    assert topo.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is topo.dbmax


def test_dimensions_and_node_count(topo):
    assert topo.get_num_of_dimensions() == 1
    assert topo.get_num_of_nodes_in_dimension(0) == 8
    assert topo.complexity is Complexity.COMPLEX


def test_trees_share_nodes_with_opposite_roots(topo):
    assert set(topo.dbmax.node_list) == set(topo.dbmin.node_list)
    assert topo.dbmin.get_node_type(min(topo.dbmin.node_list)) is NodeType.ROOT
    assert topo.dbmax.get_node_type(max(topo.dbmax.node_list)) is NodeType.ROOT


def test_strided_ids():
    topo = DoubleBinaryTreeTopology(id=3, total_tree_nodes=4, start=3, stride=2)
    ids = set(topo.dbmax.node_list)
    assert len(ids) == 4
    assert all(i % 2 == 3 % 2 for i in ids)
    assert 3 in ids
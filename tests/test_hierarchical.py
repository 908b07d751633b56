import pytest

from collsim.binary_tree import BinaryTree, TreeType
from collsim.hierarchical import (
    LocalRingGlobalBinaryTree,
    LocalRingNodeA2AGlobalDBT,
    Torus3D,
)
from collsim.logical_topology import ComType
from collsim.ring_topology import Dimension, Direction, RingTopology


def _cycle(ring, start):
    members = [start]
    node = ring.get_receiver_node(start, Direction.CLOCKWISE)
    while node != start:
        members.append(node)
        node = ring.get_receiver_node(node, Direction.CLOCKWISE)
    return members


@pytest.fixture
def torus():
    return Torus3D(id=5, total_nodes=24, local_dim=2, vertical_dim=3)


def test_torus_dimension_sizes(torus):
    assert torus.get_num_of_dimensions() == 3
    assert torus.get_num_of_nodes_in_dimension(0) == 2
    assert torus.get_num_of_nodes_in_dimension(1) == 3
    assert torus.get_num_of_nodes_in_dimension(2) == 4
    assert torus.get_num_of_nodes_in_dimension(3) == -1


def test_torus_basic_topologies(torus):
    assert torus.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is torus.local_dimension
    assert torus.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is torus.vertical_dimension
    assert torus.get_basic_topology_at_dimension(2, ComType.ALL_GATHER) is torus.horizontal_dimension
    assert torus.get_basic_topology_at_dimension(3, ComType.ALL_REDUCE) is None
    assert torus.local_dimension.dimension is Dimension.LOCAL
    assert torus.vertical_dimension.dimension is Dimension.VERTICAL
    assert torus.horizontal_dimension.dimension is Dimension.HORIZONTAL


@pytest.mark.parametrize("dimension", [0, 1, 2])
def test_torus_rings_close(torus, dimension):
    ring = torus.get_basic_topology_at_dimension(dimension, ComType.ALL_REDUCE)
    members = _cycle(ring, 5)
    assert len(members) == torus.get_num_of_nodes_in_dimension(dimension)
    assert len(set(members)) == len(members)
    assert all(0 <= m < 24 for m in members)


@pytest.fixture
def lrgbt():
    return LocalRingGlobalBinaryTree(
        id=0, local_dim=4, tree_type=TreeType.ROOT_MIN, total_tree_nodes=4, start=0, stride=4
    )


def test_lrgbt_sizes(lrgbt):
    assert lrgbt.get_num_of_dimensions() == 3
    assert lrgbt.get_num_of_nodes_in_dimension(0) == 4
    assert lrgbt.get_num_of_nodes_in_dimension(1) == 1
    assert lrgbt.get_num_of_nodes_in_dimension(2) == 4
    assert lrgbt.get_num_of_nodes_in_dimension(7) == -1


def test_lrgbt_basic_topologies(lrgbt):
    assert lrgbt.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is lrgbt.local_dimension
    assert lrgbt.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is None
    tree = lrgbt.get_basic_topology_at_dimension(2, ComType.ALL_REDUCE)
    assert tree is lrgbt.global_dimension_all_reduce
    assert isinstance(tree, BinaryTree)
    other = lrgbt.get_basic_topology_at_dimension(2, ComType.ALL_GATHER)
    assert other is lrgbt.global_dimension_other
    assert isinstance(other, RingTopology)
    assert lrgbt.get_basic_topology_at_dimension(9, ComType.ALL_REDUCE) is None


def test_lrgbt_global_ring_members_are_strided(lrgbt):
    members = _cycle(lrgbt.global_dimension_other, 0)
    assert sorted(members) == sorted(lrgbt.global_dimension_all_reduce.node_list)


@pytest.fixture
def a2a():
    return LocalRingNodeA2AGlobalDBT(
        id=0, local_dim=2, node_dim=2, total_tree_nodes=4, start=0, stride=4
    )


def test_a2a_sizes(a2a):
    assert a2a.get_num_of_dimensions() == 3
    assert a2a.get_num_of_nodes_in_dimension(0) == 2
    assert a2a.get_num_of_nodes_in_dimension(1) == 2
    assert a2a.get_num_of_nodes_in_dimension(2) == 4
    assert a2a.get_num_of_nodes_in_dimension(3) == -1


def test_a2a_basic_topologies(a2a):
    assert a2a.get_basic_topology_at_dimension(0, ComType.ALL_REDUCE) is a2a.local_dimension
    assert a2a.get_basic_topology_at_dimension(1, ComType.ALL_REDUCE) is a2a.node_dimension
    assert a2a.get_basic_topology_at_dimension(2, ComType.ALL_GATHER) is a2a.global_dimension_other
    assert a2a.get_basic_topology_at_dimension(4, ComType.ALL_GATHER) is None
    assert a2a.node_dimension.dimension is Dimension.HORIZONTAL
    assert a2a.global_dimension_other.dimension is Dimension.VERTICAL


def test_a2a_all_reduce_asks_tree_pair_for_dimension_two(a2a):
    # the tree pair only answers for its own dimension 0
    assert a2a.get_basic_topology_at_dimension(2, ComType.ALL_REDUCE) is None
    assert a2a.global_dimension_all_reduce.counter == 0
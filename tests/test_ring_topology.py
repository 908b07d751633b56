import pytest

from collsim.logical_topology import BasicTopology, ComType
from collsim.ring_topology import Dimension, Direction, RingTopology


@pytest.mark.parametrize(
    "dimension,name",
    [
        (Dimension.LOCAL, "local"),
        (Dimension.VERTICAL, "vertical"),
        (Dimension.HORIZONTAL, "horizontal"),
        (Dimension.NA, "local"),
    ],
)
def test_names(dimension, name):
    assert RingTopology(dimension, 0, 4, 0, 1).name == name


def test_neighbors_wrap_at_ends():
    first = RingTopology(Dimension.NA, 0, 4, 0, 1)
    assert first.next_node_id == 1
    assert first.previous_node_id == 3
    last = RingTopology(Dimension.NA, 3, 4, 3, 1)
    assert last.next_node_id == 0
    assert last.previous_node_id == 2


def test_invalid_placement_raises():
    with pytest.raises(ValueError):
        RingTopology(Dimension.NA, 0, 4, 3, 1)


@pytest.mark.parametrize("direction", [Direction.CLOCKWISE, Direction.ANTICLOCKWISE])
def test_full_walk_visits_every_member_and_returns(direction):
    ring = RingTopology(Dimension.HORIZONTAL, 2, 4, 0, 2)
    node = 2
    seen = []
    for _ in range(4):
        node = ring.get_receiver_node(node, direction)
        seen.append(node)
    assert node == 2
    assert sorted(seen) == [2, 4, 6, 8]


@pytest.mark.parametrize("direction", [Direction.CLOCKWISE, Direction.ANTICLOCKWISE])
def test_sender_undoes_receiver(direction):
    ring = RingTopology(Dimension.LOCAL, 5, 6, 5, 1)
    receiver = ring.get_receiver_node(5, direction)
    assert ring.get_sender_node(receiver, direction) == 5


def test_clockwise_receiver_matches_next_node():
    ring = RingTopology(Dimension.NA, 3, 4, 3, 1)
    assert ring.get_receiver_node(3, Direction.CLOCKWISE) == ring.next_node_id
    assert ring.get_sender_node(3, Direction.CLOCKWISE) == ring.previous_node_id
    assert ring.get_receiver_node(3, Direction.ANTICLOCKWISE) == ring.previous_node_id


def test_unknown_node_raises():
    ring = RingTopology(Dimension.NA, 0, 4, 0, 1)
    with pytest.raises(KeyError):
        ring.get_receiver_node(2, Direction.CLOCKWISE)
    with pytest.raises(KeyError):
        ring.get_sender_node(2, Direction.CLOCKWISE)


def test_is_enabled_only_for_ring_starting_at_zero():
    assert RingTopology(Dimension.NA, 10, 4, 2, 5).is_enabled()
    assert not RingTopology(Dimension.NA, 11, 4, 2, 5).is_enabled()


def test_basic_topology_properties():
    ring = RingTopology(Dimension.VERTICAL, 0, 7, 0, 1)
    assert ring.basic_topology is BasicTopology.RING
    assert ring.get_nodes_in_ring() == 7
    assert ring.get_num_of_nodes_in_dimension(0) == 7
    assert ring.get_num_of_dimensions() == 1
    assert ring.get_basic_topology_at_dimension(0, ComType.ALL_GATHER) is ring
import pytest

from collsim.logical_topology import (
    BasicLogicalTopology,
    BasicTopology,
    ComplexLogicalTopology,
    Complexity,
    ComType,
    LogicalTopology,
    get_reminder,
)


class _Line(BasicLogicalTopology):
    def __init__(self, size):
        super().__init__(BasicTopology.RING)
        self.size = size

    def get_num_of_nodes_in_dimension(self, dimension):
        return self.size


class _Pair(ComplexLogicalTopology):
    def __init__(self, first, second):
        super().__init__()
        self.parts = [first, second]

    def get_num_of_dimensions(self):
        return len(self.parts)

    def get_num_of_nodes_in_dimension(self, dimension):
        return self.parts[dimension].get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(self, dimension, com_type):
        return self.parts[dimension]


def test_reminder_of_non_negative_number():
    assert get_reminder(7, 3) == 7 % 3
    assert get_reminder(0, 5) == 0


def test_reminder_of_small_negative_number_wraps():
    assert get_reminder(-1, 4) == 3


def test_reminder_of_large_negative_number_keeps_sign():
    assert get_reminder(-5, 3) == -2


def test_basic_topology_is_one_dimensional_and_its_own_basic():
    line = _Line(6)
    assert line.complexity is Complexity.BASIC
    assert line.basic_topology is BasicTopology.RING
    assert BasicLogicalTopology.get_num_of_dimensions(line) == 1
    assert (
        BasicLogicalTopology.get_basic_topology_at_dimension(
            line, 0, ComType.ALL_REDUCE
        )
        is line
    )
    assert LogicalTopology.get_topology(line) is line
    assert line.get_num_of_nodes_in_dimension(0) == 6


def test_complex_topology_reports_complex():
    first, second = _Line(2), _Line(3)
    pair = _Pair(first, second)
    assert pair.complexity is Complexity.COMPLEX
    assert LogicalTopology.get_topology(pair) is pair
    assert pair.get_num_of_dimensions() == 2
    assert pair.get_basic_topology_at_dimension(1, ComType.ALL_GATHER) is second
    assert (
        BasicLogicalTopology.get_basic_topology_at_dimension(
            second, 0, ComType.ALL_GATHER
        )
        is second
    )
    assert pair.get_num_of_nodes_in_dimension(1) == 3


@pytest.mark.parametrize(
    "cls", [LogicalTopology, BasicLogicalTopology, ComplexLogicalTopology]
)
def test_abstract_topologies_cannot_be_instantiated(cls):
    with pytest.raises(TypeError):
        if cls is BasicLogicalTopology:
            cls(BasicTopology.RING)
        elif cls is LogicalTopology:
            cls(Complexity.BASIC)
        else:
            cls()
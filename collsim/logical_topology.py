"""Abstract logical topologies shared by every concrete topology."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto


class ComType(Enum):
    """Kind of collective communication."""

    NONE = auto()
    REDUCE_SCATTER = auto()
    ALL_GATHER = auto()
    ALL_REDUCE = auto()
    ALL_TO_ALL = auto()
    ALL_REDUCE_ALL_TO_ALL = auto()
    ALL_REDUCE_NVLS = auto()


class Complexity(Enum):
    """Whether a topology is a single basic shape or a composition of several."""

    BASIC = auto()
    COMPLEX = auto()


class BasicTopology(Enum):
    """Shape of a basic (single dimension) topology."""

    RING = auto()
    BINARY_TREE = auto()


def _truncating_mod(number: int, divisible: int) -> int:
    remainder = abs(number) % abs(divisible)
    return -remainder if number < 0 else remainder


def get_reminder(number: int, divisible: int) -> int:
    """Remainder of ``number`` by ``divisible``, shifting negatives up once.

    Negative numbers are shifted by one ``divisible`` before the remainder is
    taken; the remainder keeps the sign of its dividend.
    """
    if number >= 0:
        return _truncating_mod(number, divisible)
    return _truncating_mod(number + divisible, divisible)


class LogicalTopology(ABC):
    """A logical arrangement of nodes over one or more dimensions."""

    def __init__(self, complexity: Complexity) -> None:
        self.complexity = complexity

    def get_topology(self) -> "LogicalTopology":
        """Return the topology to use for the next collective."""
        return self

    @abstractmethod
    def get_num_of_dimensions(self) -> int:
        """Number of dimensions of this topology."""

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of nodes along ``dimension``."""

    @abstractmethod
    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> "BasicLogicalTopology | None":
        """Basic topology used for ``com_type`` along ``dimension``."""


class BasicLogicalTopology(LogicalTopology):
    """A single-dimension topology such as a ring or a binary tree."""

    def __init__(self, basic_topology: BasicTopology) -> None:
        super().__init__(Complexity.BASIC)
        self.basic_topology = basic_topology

    def get_num_of_dimensions(self) -> int:
        return 1

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of nodes in this topology."""

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> "BasicLogicalTopology":
        return self


class ComplexLogicalTopology(LogicalTopology):
    """A topology composed of several basic topologies."""

    def __init__(self) -> None:
        super().__init__(Complexity.COMPLEX)

    @abstractmethod
    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        """Number of nodes along ``dimension``."""

    @abstractmethod
    def get_num_of_dimensions(self) -> int:
        """Number of dimensions of this topology."""

    @abstractmethod
    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        """Basic topology used for ``com_type`` along ``dimension``."""
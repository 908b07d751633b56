"""Topology assembled dimension by dimension from collective implementations."""

from __future__ import annotations

import math
from enum import Enum, auto
from typing import Sequence

from collsim.double_binary_tree import DoubleBinaryTreeTopology
from collsim.logical_topology import (
    BasicLogicalTopology,
    ComplexLogicalTopology,
    ComType,
    LogicalTopology,
)
from collsim.ring_topology import Dimension, RingTopology


class CollectiveImplementationType(Enum):
    """Collective algorithm chosen for a dimension."""

    RING = auto()
    DIRECT = auto()
    HALVING_DOUBLING = auto()
    NCCL_RING_FLOW_MODEL = auto()
    NCCL_TREE_FLOW_MODEL = auto()
    ONE_RING = auto()
    ONE_DIRECT = auto()
    ONE_HALVING_DOUBLING = auto()
    DOUBLE_BINARY_TREE = auto()


_PER_DIMENSION_RING = frozenset(
    {
        CollectiveImplementationType.RING,
        CollectiveImplementationType.DIRECT,
        CollectiveImplementationType.HALVING_DOUBLING,
        CollectiveImplementationType.NCCL_RING_FLOW_MODEL,
        CollectiveImplementationType.NCCL_TREE_FLOW_MODEL,
    }
)

_SINGLE_RING = frozenset(
    {
        CollectiveImplementationType.ONE_RING,
        CollectiveImplementationType.ONE_DIRECT,
        CollectiveImplementationType.ONE_HALVING_DOUBLING,
    }
)


class GeneralComplexTopology(ComplexLogicalTopology):
    """One logical topology per dimension, chosen by its collective implementation.

    A single-ring implementation spans all nodes and ends the construction.
    """

    def __init__(
        self,
        id: int,
        dimension_size: Sequence[int],
        collective_implementation: Sequence[CollectiveImplementationType],
    ) -> None:
        super().__init__()
        self.dimension_topology: list[LogicalTopology] = []
        offset = 1
        last_dim = len(collective_implementation) - 1
        for dim, kind in enumerate(collective_implementation):
            size = dimension_size[dim]
            if kind in _PER_DIMENSION_RING:
                self.dimension_topology.append(
                    RingTopology(
                        Dimension.NA, id, size, (id % (offset * size)) // offset, offset
                    )
                )
            elif kind in _SINGLE_RING:
                total_npus = math.prod(dimension_size)
                self.dimension_topology.append(
                    RingTopology(Dimension.NA, id, total_npus, id % total_npus, 1)
                )
                return
            elif kind is CollectiveImplementationType.DOUBLE_BINARY_TREE:
                if dim == last_dim:
                    start = id % offset
                else:
                    start = (id - id % (offset * size)) + id % offset
                self.dimension_topology.append(
                    DoubleBinaryTreeTopology(id, size, start, offset)
                )
            offset *= size

    def get_num_of_dimensions(self) -> int:
        return len(self.dimension_topology)

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension >= len(self.dimension_topology):
            raise IndexError(
                f"dim: {dimension} requested! but max dim is: "
                f"{len(self.dimension_topology) - 1}"
            )
        return self.dimension_topology[dimension].get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        return self.dimension_topology[dimension].get_basic_topology_at_dimension(
            0, com_type
        )
"""A pair of binary trees used alternately for all-reduce."""

from __future__ import annotations

import logging

from collsim.binary_tree import BinaryTree, TreeType
from collsim.logical_topology import (
    BasicLogicalTopology,
    ComplexLogicalTopology,
    ComType,
)

_log = logging.getLogger(__name__)


class DoubleBinaryTreeTopology(ComplexLogicalTopology):
    """Two mirrored binary trees over the same nodes, handed out in turn."""

    def __init__(self, id: int, total_tree_nodes: int, start: int, stride: int) -> None:
        super().__init__()
        if id == 0:
            _log.debug(
                "Node 0: Double binary tree created with total nodes: %d "
                ",start: %d ,stride: %d",
                total_tree_nodes,
                start,
                stride,
            )
        self.dbmax = BinaryTree(id, TreeType.ROOT_MAX, total_tree_nodes, start, stride)
        self.dbmin = BinaryTree(id, TreeType.ROOT_MIN, total_tree_nodes, start, stride)
        self.counter = 0

    def get_topology(self) -> BinaryTree:
        """Return the root-max tree and the root-min tree on alternate calls."""
        tree = self.dbmax if self.counter % 2 == 0 else self.dbmin
        self.counter += 1
        return tree

    def get_num_of_dimensions(self) -> int:
        return 1

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.dbmin.get_num_of_nodes_in_dimension(0)

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension != 0:
            return None
        return self.get_topology().get_basic_topology_at_dimension(0, com_type)
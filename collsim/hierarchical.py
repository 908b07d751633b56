"""Fixed three-dimensional topologies built from rings and trees."""

from __future__ import annotations

from collsim.binary_tree import BinaryTree, TreeType
from collsim.double_binary_tree import DoubleBinaryTreeTopology
from collsim.logical_topology import (
    BasicLogicalTopology,
    ComplexLogicalTopology,
    ComType,
)
from collsim.ring_topology import Dimension, RingTopology


class LocalRingGlobalBinaryTree(ComplexLogicalTopology):
    """A local ring, an empty middle dimension and a global tree or ring."""

    def __init__(
        self,
        id: int,
        local_dim: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        super().__init__()
        self.local_dimension = RingTopology(
            Dimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.global_dimension_all_reduce = BinaryTree(
            id, tree_type, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            Dimension.HORIZONTAL, id, total_tree_nodes, id // local_dim, local_dim
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return 1
        if dimension == 2:
            return self.global_dimension_all_reduce.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce
            return self.global_dimension_other
        return None


class LocalRingNodeA2AGlobalDBT(ComplexLogicalTopology):
    """Local ring, node-level ring and a global double binary tree or ring."""

    def __init__(
        self,
        id: int,
        local_dim: int,
        node_dim: int,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        super().__init__()
        group = local_dim * node_dim
        self.global_dimension_all_reduce = DoubleBinaryTreeTopology(
            id, total_tree_nodes, start, stride
        )
        self.global_dimension_other = RingTopology(
            Dimension.VERTICAL, id, total_tree_nodes, id // group, group
        )
        self.local_dimension = RingTopology(
            Dimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.node_dimension = RingTopology(
            Dimension.HORIZONTAL,
            id,
            node_dim,
            (id % group) // local_dim,
            local_dim,
        )

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if dimension == 0:
            return self.local_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 1:
            return self.node_dimension.get_num_of_nodes_in_dimension(0)
        if dimension == 2:
            return self.global_dimension_other.get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if dimension == 0:
            return self.local_dimension
        if dimension == 1:
            return self.node_dimension
        if dimension == 2:
            if com_type is ComType.ALL_REDUCE:
                return self.global_dimension_all_reduce.get_basic_topology_at_dimension(
                    2, com_type
                )
            return self.global_dimension_other
        return None


class Torus3D(ComplexLogicalTopology):
    """A three-dimensional torus made of local, vertical and horizontal rings."""

    def __init__(self, id: int, total_nodes: int, local_dim: int, vertical_dim: int) -> None:
        super().__init__()
        horizontal_dim = total_nodes // (vertical_dim * local_dim)
        self.local_dimension = RingTopology(
            Dimension.LOCAL, id, local_dim, id % local_dim, 1
        )
        self.vertical_dimension = RingTopology(
            Dimension.VERTICAL,
            id,
            vertical_dim,
            id // (local_dim * horizontal_dim),
            local_dim * horizontal_dim,
        )
        self.horizontal_dimension = RingTopology(
            Dimension.HORIZONTAL,
            id,
            horizontal_dim,
            (id // local_dim) % horizontal_dim,
            local_dim,
        )

    def _rings(self) -> tuple[RingTopology, RingTopology, RingTopology]:
        return (self.local_dimension, self.vertical_dimension, self.horizontal_dimension)

    def get_num_of_dimensions(self) -> int:
        return 3

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        if 0 <= dimension < 3:
            return self._rings()[dimension].get_num_of_nodes_in_dimension(0)
        return -1

    def get_basic_topology_at_dimension(
        self, dimension: int, com_type: ComType
    ) -> BasicLogicalTopology | None:
        if 0 <= dimension < 3:
            return self._rings()[dimension]
        return None
"""Ring logical topology."""

from __future__ import annotations

import logging
from enum import Enum, auto

from collsim.logical_topology import BasicLogicalTopology, BasicTopology

_log = logging.getLogger(__name__)


class Direction(Enum):
    """Direction data travels around a ring."""

    CLOCKWISE = auto()
    ANTICLOCKWISE = auto()


class Dimension(Enum):
    """Which physical dimension a ring spans."""

    LOCAL = auto()
    VERTICAL = auto()
    HORIZONTAL = auto()
    NA = auto()


class RingTopology(BasicLogicalTopology):
    """A ring of nodes spaced ``offset`` ids apart."""

    def __init__(
        self,
        dimension: Dimension,
        id: int,
        total_nodes_in_ring: int,
        index_in_ring: int,
        offset: int,
    ) -> None:
        super().__init__(BasicTopology.RING)
        if dimension is Dimension.VERTICAL:
            self.name = "vertical"
        elif dimension is Dimension.HORIZONTAL:
            self.name = "horizontal"
        else:
            self.name = "local"
        if id == 0:
            _log.debug(
                "ring of node 0, dimension: %s total nodes in ring: %d "
                "index in ring: %d offset: %d",
                self.name,
                total_nodes_in_ring,
                index_in_ring,
                offset,
            )
        self.id = id
        self.total_nodes_in_ring = total_nodes_in_ring
        self.index_in_ring = index_in_ring
        self.offset = offset
        self.dimension = dimension
        self.next_node_id = 0
        self.previous_node_id = 0
        self.find_neighbors()
        self._id_to_index: dict[int, int] = {id: index_in_ring}

    def find_neighbors(self) -> None:
        """Compute the ids of the next and previous nodes around the ring."""
        span = self.total_nodes_in_ring * self.offset
        self.next_node_id = self.id + self.offset
        if self.index_in_ring == self.total_nodes_in_ring - 1:
            self.next_node_id -= span
            if self.next_node_id < 0:
                raise ValueError(f"negative next node id {self.next_node_id}")
        self.previous_node_id = self.id - self.offset
        if self.index_in_ring == 0:
            self.previous_node_id += span
            if self.previous_node_id < 0:
                raise ValueError(
                    f"negative previous node id {self.previous_node_id}"
                )

    def _step(self, node_id: int, forward: bool) -> int:
        if node_id not in self._id_to_index:
            raise KeyError(f"node {node_id} is not known to ring {self.name}")
        index = self._id_to_index[node_id]
        last = self.total_nodes_in_ring - 1
        if forward:
            neighbour = node_id + self.offset
            if index == last:
                neighbour -= self.total_nodes_in_ring * self.offset
                index = 0
            else:
                index += 1
        else:
            neighbour = node_id - self.offset
            if index == 0:
                neighbour += self.total_nodes_in_ring * self.offset
                index = last
            else:
                index -= 1
        if neighbour < 0:
            raise ValueError(
                f"ring {self.name} at id {self.id}: neighbour of node {node_id} "
                f"is negative ({neighbour})"
            )
        self._id_to_index[neighbour] = index
        return neighbour

    def get_receiver_node(self, node_id: int, direction: Direction) -> int:
        """Node that ``node_id`` sends to when moving in ``direction``."""
        return self._step(node_id, direction is Direction.CLOCKWISE)

    def get_sender_node(self, node_id: int, direction: Direction) -> int:
        """Node that ``node_id`` receives from when moving in ``direction``."""
        return self._step(node_id, direction is Direction.ANTICLOCKWISE)

    def get_nodes_in_ring(self) -> int:
        return self.total_nodes_in_ring

    def is_enabled(self) -> bool:
        """True when the first node of this ring has id 0."""
        return self.id - self.index_in_ring * self.offset == 0

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.get_nodes_in_ring()
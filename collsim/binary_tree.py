"""Binary tree logical topology."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator

from collsim.logical_topology import BasicLogicalTopology, BasicTopology


@dataclass(eq=False)
class Node:
    """A compute node placed in a tree."""

    id: int
    parent: Node | None = field(default=None, repr=False)
    left_child: Node | None = None
    right_child: Node | None = None


class TreeType(Enum):
    """Whether the root takes the largest or the smallest id."""

    ROOT_MAX = auto()
    ROOT_MIN = auto()


class NodeType(Enum):
    """Role of a node inside the tree."""

    LEAF = auto()
    ROOT = auto()
    INTERMEDIATE = auto()


class BinaryTree(BasicLogicalTopology):
    """A binary tree whose node ids are laid out in order from ``start``."""

    def __init__(
        self,
        id: int,
        tree_type: TreeType,
        total_tree_nodes: int,
        start: int,
        stride: int,
    ) -> None:
        super().__init__(BasicTopology.BINARY_TREE)
        self.total_tree_nodes = total_tree_nodes
        self.start = start
        self.tree_type = tree_type
        self.stride = stride
        self.node_list: dict[int, Node] = {}
        self.tree = Node(-1)

        depth = 1
        remaining = total_tree_nodes
        while remaining > 1:
            depth += 1
            remaining //= 2
        subtree = self._initialize_tree(depth - 1, self.tree)
        if tree_type is TreeType.ROOT_MIN:
            self.tree.right_child = subtree
        else:
            self.tree.left_child = subtree
        self._next_id = start
        self._build_tree(self.tree)

    def _initialize_tree(self, depth: int, parent: Node) -> Node:
        node = Node(-1, parent)
        if depth > 1:
            node.left_child = self._initialize_tree(depth - 1, node)
            node.right_child = self._initialize_tree(depth - 1, node)
        return node

    def _build_tree(self, node: Node) -> None:
        if node.left_child is not None:
            self._build_tree(node.left_child)
        node.id = self._next_id
        self.node_list[self._next_id] = node
        self._next_id += self.stride
        if node.right_child is not None:
            self._build_tree(node.right_child)

    def get_num_of_nodes_in_dimension(self, dimension: int) -> int:
        return self.total_tree_nodes

    def get_parent_id(self, id: int) -> int:
        """Id of the parent of ``id``, or -1 for the root."""
        parent = self.node_list[id].parent
        return parent.id if parent is not None else -1

    def get_left_child_id(self, id: int) -> int:
        """Id of the left child of ``id``, or -1 if there is none."""
        child = self.node_list[id].left_child
        return child.id if child is not None else -1

    def get_right_child_id(self, id: int) -> int:
        """Id of the right child of ``id``, or -1 if there is none."""
        child = self.node_list[id].right_child
        return child.id if child is not None else -1

    def get_node_type(self, id: int) -> NodeType:
        node = self.node_list[id]
        if node.parent is None:
            return NodeType.ROOT
        if node.left_child is None and node.right_child is None:
            return NodeType.LEAF
        return NodeType.INTERMEDIATE

    def is_enabled(self, id: int) -> bool:
        return id % self.stride == 0

    def _describe_lines(self, node: Node) -> Iterator[str]:
        parts = [f"I am node: {node.id}"]
        if node.left_child is not None:
            parts.append(f" and my left child is: {node.left_child.id}")
        if node.right_child is not None:
            parts.append(f" and my right child is: {node.right_child.id}")
        if node.parent is not None:
            parts.append(f" and my parent is: {node.parent.id}")
        role = {
            NodeType.ROOT: "Root",
            NodeType.INTERMEDIATE: "Intermediate",
            NodeType.LEAF: "Leaf",
        }[self.get_node_type(node.id)]
        parts.append(f" and I am {role} ")
        yield "".join(parts)
        if node.left_child is not None:
            yield from self._describe_lines(node.left_child)
        if node.right_child is not None:
            yield from self._describe_lines(node.right_child)

    def describe(self, node: Node | None = None) -> str:
        """Describe ``node`` and its subtree (the whole tree by default)."""
        return "\n".join(self._describe_lines(node if node is not None else self.tree))
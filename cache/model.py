"""Graph data model for storing content dependency relationships."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Set


class ForeignNodeError(ValueError):
    """A node passed to a store was not created by that store."""


@dataclass(eq=False)
class DependencyNode:
    """
    A single content item in the dependency graph.

    Nodes are only created through GraphStore.create_or_get() and only
    mutated through GraphStore.connect() and assign_local_sub_id().

    Attributes:
        id: Stable content identifier of the item.
        local_sub_id: Sub-object identifier, set when first seen as a target.
        dependencies: IDs of the items this node points to.
        references: IDs of the items pointing to this node.
    """

    id: str
    local_sub_id: Optional[int] = None
    dependencies: Set[str] = field(default_factory=set)
    references: Set[str] = field(default_factory=set)

    def assign_local_sub_id(self, local_sub_id: Optional[int]) -> None:
        """Record the sub-object identifier unless one is already set."""
        if self.local_sub_id is None and local_sub_id is not None:
            self.local_sub_id = local_sub_id

    def has_direct_dependency(self, other_id: str) -> bool:
        """Check if this node points straight at other_id."""
        return other_id in self.dependencies

    def __repr__(self) -> str:
        return (
            f"DependencyNode(id={self.id!r}, dependencies={len(self.dependencies)}, "
            f"references={len(self.references)})"
        )


class GraphStore:
    """
    Owner of every DependencyNode, keyed by content ID.

    Edges are kept as two mirrored sets per node, so for any nodes A and B
    B.id in A.dependencies exactly when A.id in B.references.
    """

    def __init__(self):
        self._nodes: Dict[str, DependencyNode] = {}

    def clear(self) -> None:
        """Discard every node."""
        self._nodes = {}

    def create_or_get(self, content_id: str) -> DependencyNode:
        """
        Return the node for content_id, creating an empty one if needed.

        Args:
            content_id: Content identifier. Any string is a valid key.

        Returns:
            The node owned by this store.
        """
        node = self._nodes.get(content_id)
        if node is None:
            node = DependencyNode(id=content_id)
            self._nodes[content_id] = node
        return node

    def try_get(self, content_id: str) -> Optional[DependencyNode]:
        """Look up a node without inserting it."""
        return self._nodes.get(content_id)

    def all_nodes(self) -> Iterator[DependencyNode]:
        """Iterate over all nodes. Order is unspecified."""
        return iter(list(self._nodes.values()))

    def connect(self, source: DependencyNode, target: DependencyNode) -> None:
        """
        Add a directed edge from source to target.

        Both sides of the edge are written together. Connecting the same
        pair again is a no-op, and source may equal target.

        Raises:
            ForeignNodeError: If either node is not owned by this store.
        """
        self._check_owned(source)
        self._check_owned(target)
        source.dependencies.add(target.id)
        target.references.add(source.id)

    def edge_count(self) -> int:
        """Return the number of directed edges."""
        return sum(len(node.dependencies) for node in self._nodes.values())

    def _check_owned(self, node: DependencyNode) -> None:
        if self._nodes.get(node.id) is not node:
            raise ForeignNodeError(f"Node {node.id!r} does not belong to this store")

    def __len__(self) -> int:
        """Return the number of nodes in the store."""
        return len(self._nodes)

    def __contains__(self, content_id: str) -> bool:
        """Check if a content ID has a node."""
        return content_id in self._nodes

    def __repr__(self) -> str:
        return f"GraphStore(nodes={len(self._nodes)}, edges={self.edge_count()})"

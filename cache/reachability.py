"""Direct and depth-limited dependency queries over a GraphStore."""

from collections import deque
from typing import Deque, Set, Tuple

from .model import GraphStore


UNLIMITED_DEPTH = -1


class ReachabilityEngine:
    """Read-only queries answering "does A depend on B"."""

    def __init__(self, store: GraphStore):
        self._store = store

    def has_direct_dependency(self, from_id: str, to_id: str) -> bool:
        """Check if from_id has an edge straight to to_id."""
        node = self._store.try_get(from_id)
        if node is None:
            return False
        return node.has_direct_dependency(to_id)

    def has_dependency(
        self,
        from_id: str,
        to_id: str,
        max_depth: int = UNLIMITED_DEPTH,
    ) -> bool:
        """
        Check if to_id is reachable from from_id in at most max_depth hops.

        A direct edge is one hop. A depth of 0 reaches nothing and a negative
        depth means unlimited. from_id only reaches itself through a cycle.

        Args:
            from_id: Content ID to start from.
            to_id: Content ID to look for.
            max_depth: Maximum number of edges to follow.

        Returns:
            True if a path of allowed length exists.
        """
        if max_depth == 0:
            return False

        start = self._store.try_get(from_id)
        if start is None:
            return False

        visited: Set[str] = {from_id}
        queue: Deque[Tuple[str, int]] = deque([(from_id, 0)])

        while queue:
            current_id, depth = queue.popleft()
            current = self._store.try_get(current_id)
            if current is None:
                continue

            next_depth = depth + 1
            for dependency_id in current.dependencies:
                if dependency_id == to_id:
                    return True
                if dependency_id in visited:
                    continue
                visited.add(dependency_id)
                if max_depth < 0 or next_depth < max_depth:
                    queue.append((dependency_id, next_depth))

        return False

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, Iterator, List, Set, Tuple

from .path import Path

logger = logging.getLogger(__name__)

# Depth placeholder for rows whose reachability is being re-derived.
UNREACHED = float("inf")


class Node:
    """
    Vertex of the closure graph.

    Nodes are stored in an arena (a plain list owned by the registry) and
    refer to each other by arena index only:

    - ``parents``  : indices of nodes that have this node as a direct child.
    - ``children`` : indices of direct children.
    - ``depths``   : descendant id -> minimum depth; always holds the self
                     row ``{node_id: 0}``.

    The node owns the two mutation algorithms: ``add_child`` (incremental
    propagation to ancestors) and ``remove_child`` (local rebuild of every
    ancestor).
    """

    __slots__ = ("node_id", "index", "parents", "children", "depths", "_arena")

    def __init__(self, node_id: Any, index: int, arena: List["Node"]) -> None:
        self.node_id = node_id
        self.index = index
        self.parents: Set[int] = set()
        self.children: Set[int] = set()
        self.depths: Dict[Any, int] = {node_id: 0}
        self._arena = arena

    def __repr__(self) -> str:
        return f"Node({self.node_id!r}, children={len(self.children)}, rows={len(self.depths)})"

    # ------------------------------------------------------------------ #
    # Rows
    # ------------------------------------------------------------------ #

    def paths(self) -> Iterator[Path]:
        for dest, depth in self.depths.items():
            yield Path(self.node_id, dest, int(depth))

    def snapshot(self) -> List[Path]:
        """Immutable copy of this node's rows, sorted by destination."""
        return sorted(self.paths())

    def _lower(self, dest: Any, depth: int) -> bool:
        """
        Install or improve the row to ``dest``.

        Returns True when the row was created or its depth decreased. An
        existing row is never raised.
        """
        current = self.depths.get(dest)
        if current is None or depth < current:
            self.depths[dest] = depth
            return True
        return False

    def _merge(self, dest: Any, depth: int, via: Iterable[int]) -> None:
        if not self._lower(dest, depth):
            return
        # Re-derive everything reachable through the direct children of the
        # node that received the new edge. Rows already at an equal or
        # better depth stay untouched.
        for index in via:
            for sub_dest, sub_depth in self._arena[index].depths.items():
                self._lower(sub_dest, sub_depth + depth)

    # ------------------------------------------------------------------ #
    # Edge insertion
    # ------------------------------------------------------------------ #

    def add_child(self, child: "Node") -> bool:
        """
        Link ``child`` below this node and propagate the new rows upwards.

        Walks the ancestors breadth-first, starting here at distance 1 from
        the child, visiting each ancestor once. Returns False when the edge
        already existed (no rows change in that case).
        """
        if child.index in self.children:
            return False

        self.children.add(child.index)
        child.parents.add(self.index)

        via = tuple(self.children)
        queue: Deque[Tuple[Node, int]] = deque([(self, 1)])
        seen = {self.index}
        visited = 0

        while queue:
            current, depth = queue.popleft()
            current._merge(child.node_id, depth, via)
            visited += 1

            for index in current.parents:
                if index not in seen:
                    seen.add(index)
                    queue.append((self._arena[index], depth + 1))

        logger.debug(
            "Added edge %r -> %r; propagated to %d ancestor(s)",
            self.node_id,
            child.node_id,
            visited,
        )
        return True

    # ------------------------------------------------------------------ #
    # Edge removal
    # ------------------------------------------------------------------ #

    def remove_child(self, child: "Node") -> bool:
        """
        Unlink ``child`` and rebuild the rows of this node and all ancestors.

        Returns False when there was no such edge. The rebuild still runs in
        that case; it is idempotent and yields identical rows.
        """
        existed = child.index in self.children
        self.children.discard(child.index)
        child.parents.discard(self.index)

        rebuilt = 0
        for node in self._ancestors_bottom_up():
            node._rebuild()
            rebuilt += 1

        logger.debug(
            "Removed edge %r -> %r (existed=%s); rebuilt %d node(s)",
            self.node_id,
            child.node_id,
            existed,
            rebuilt,
        )
        return existed

    def _ancestors_bottom_up(self) -> Iterator["Node"]:
        """
        Yield this node and every ancestor exactly once, children first.

        A node is yielded only after all of its children that are themselves
        ancestors of ``self`` have been yielded.
        """
        affected: Set[int] = {self.index}
        queue: Deque[int] = deque([self.index])
        while queue:
            for index in self._arena[queue.popleft()].parents:
                if index not in affected:
                    affected.add(index)
                    queue.append(index)

        waiting: Dict[int, int] = {
            index: sum(1 for c in self._arena[index].children if c in affected)
            for index in affected
        }
        ready: Deque[int] = deque(i for i, count in waiting.items() if count == 0)
        while ready:
            node = self._arena[ready.popleft()]
            yield node
            for index in node.parents:
                waiting[index] -= 1
                if waiting[index] == 0:
                    ready.append(index)

    def _rebuild(self) -> None:
        """Recompute ``depths`` from the direct children's rows."""
        pending = {dest for dest in self.depths if dest != self.node_id}
        for dest in pending:
            self.depths[dest] = UNREACHED  # type: ignore[assignment]

        for index in self.children:
            for dest, depth in self._arena[index].depths.items():
                pending.discard(dest)
                self._lower(dest, depth + 1)

        for dest in pending:
            del self.depths[dest]


__all__ = ["Node", "UNREACHED"]

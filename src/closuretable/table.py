from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .diff import ChangeSet, PathCallback, calculate_diff
from .node import Node
from .path import Path, path_key

logger = logging.getLogger(__name__)


class ClosureTable:
    """
    In-memory closure table of a DAG built from individually added and
    removed edges.

    Structure:
      - Registry: id -> arena index, created lazily on first reference.
      - Arena: list of Node; nodes are never removed, only their edges.
      - Every node keeps its own rows (descendant id -> minimum depth).

    Synchronisation with a persisted table goes through ``diff``: it
    compares the current rows against a snapshot returned by the previous
    call and reports the minimal set of add/remove/update events.

    Not thread-safe; callers must serialise access. Ids must be hashable
    and totally ordered among themselves. Introducing a directed cycle is
    not detected and leaves the rows undefined.
    """

    __slots__ = ("_nodes", "_index")

    def __init__(self, edges: Optional[Iterable[Tuple[Any, Any]]] = None) -> None:
        self._nodes: List[Node] = []
        self._index: Dict[Any, int] = {}
        if edges is not None:
            for parent_id, child_id in edges:
                self.add_edges(parent_id, child_id)

    # ------------------------------------------------------------------ #
    # Registry
    # ------------------------------------------------------------------ #

    def get_or_create(self, node_id: Any) -> Node:
        """
        Return the node for ``node_id``, creating it when unseen.

        This lookup has a side effect: a new node (holding only its self
        row) is registered and shows up in every later snapshot. Use the
        read-only queries below to inspect without creating.
        """
        index = self._index.get(node_id)
        if index is None:
            index = len(self._nodes)
            self._nodes.append(Node(node_id, index, self._nodes))
            self._index[node_id] = index
            logger.debug("Registered node %r at index %d", node_id, index)
        return self._nodes[index]

    def _lookup(self, node_id: Any) -> Node:
        try:
            return self._nodes[self._index[node_id]]
        except KeyError:
            raise KeyError(f"Unknown node id {node_id!r}") from None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self._nodes)

    def ids(self) -> List[Any]:
        """Registered ids in registration order."""
        return [node.node_id for node in self._nodes]

    # ------------------------------------------------------------------ #
    # Edge mutation
    # ------------------------------------------------------------------ #

    def add_edges(self, parent_id: Any, *child_ids: Any) -> None:
        """Insert ``parent_id -> child_id`` for every child; self-edges are ignored."""
        parent = self.get_or_create(parent_id)
        for child_id in child_ids:
            if child_id == parent_id:
                continue
            parent.add_child(self.get_or_create(child_id))

    def remove_edges(self, parent_id: Any, *child_ids: Any) -> None:
        """
        Remove ``parent_id -> child_id`` for every child; self-edges are ignored.

        Unknown ids (parent or child) are registered rather than rejected;
        removing an edge that does not exist changes no rows.
        """
        if parent_id not in self._index:
            logger.debug("remove_edges on unseen parent %r; registering it", parent_id)
        parent = self.get_or_create(parent_id)
        for child_id in child_ids:
            if child_id == parent_id:
                continue
            parent.remove_child(self.get_or_create(child_id))

    # ------------------------------------------------------------------ #
    # Read-only queries
    # ------------------------------------------------------------------ #

    def has_edge(self, parent_id: Any, child_id: Any) -> bool:
        if parent_id not in self._index or child_id not in self._index:
            return False
        return self._index[child_id] in self._lookup(parent_id).children

    def children(self, node_id: Any) -> Set[Any]:
        return {self._nodes[i].node_id for i in self._lookup(node_id).children}

    def parents(self, node_id: Any) -> Set[Any]:
        return {self._nodes[i].node_id for i in self._lookup(node_id).parents}

    def descendants(self, node_id: Any) -> Dict[Any, int]:
        """Descendant id -> depth, excluding ``node_id`` itself."""
        node = self._lookup(node_id)
        return {dest: depth for dest, depth in node.depths.items() if dest != node_id}

    def ancestors(self, node_id: Any) -> Dict[Any, int]:
        """Ancestor id -> depth, excluding ``node_id`` itself."""
        self._lookup(node_id)
        return {
            node.node_id: node.depths[node_id]
            for node in self._nodes
            if node.node_id != node_id and node_id in node.depths
        }

    def depth(self, src: Any, dest: Any) -> Optional[int]:
        """Minimum depth from ``src`` to ``dest``, or None when unreachable/unknown."""
        index = self._index.get(src)
        if index is None:
            return None
        return self._nodes[index].depths.get(dest)

    def paths(self) -> Iterator[Path]:
        for node in self._nodes:
            yield from node.paths()

    def snapshot(self) -> List[Path]:
        """All rows as immutable ``Path`` values, sorted by ``(src, dest)``."""
        return sorted(self.paths(), key=path_key)

    # ------------------------------------------------------------------ #
    # Diff
    # ------------------------------------------------------------------ #

    def diff(
        self,
        previous: Iterable[Path],
        on_add: PathCallback,
        on_remove: PathCallback,
        on_update: PathCallback,
    ) -> List[Path]:
        """
        Report the row changes since ``previous`` and return the new snapshot.

        ``previous`` is normally the list returned by the last call (an
        empty list the first time). Callbacks receive immutable ``Path``
        rows: ``on_add`` and ``on_update`` with the current depth,
        ``on_remove`` with the row as it was in ``previous``.
        """
        return calculate_diff(previous, self.paths(), on_add, on_remove, on_update)

    def changes(self, previous: Iterable[Path]) -> Tuple[ChangeSet, List[Path]]:
        """Like ``diff`` but collects the events into a ``ChangeSet``."""
        changes = ChangeSet()
        snapshot = self.diff(previous, changes.on_add, changes.on_remove, changes.on_update)
        return changes, snapshot


__all__ = ["ClosureTable"]

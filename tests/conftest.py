from __future__ import annotations

from collections import deque
from typing import Any, Dict, Iterable, Set, Tuple

import pytest

from closuretable import ClosureTable


def brute_force_closure(
    ids: Iterable[Any], edges: Set[Tuple[Any, Any]]
) -> Set[Tuple[Any, Any, int]]:
    """Reference closure: BFS from every id over the current edge set."""
    children: Dict[Any, list] = {}
    for parent, child in edges:
        children.setdefault(parent, []).append(child)

    rows = set()
    for src in ids:
        dist = {src: 0}
        queue = deque([src])
        while queue:
            node = queue.popleft()
            for child in children.get(node, ()):
                if child not in dist:
                    dist[child] = dist[node] + 1
                    queue.append(child)
        rows.update((src, dest, d) for dest, d in dist.items())
    return rows


def rows_of(table: ClosureTable) -> Set[Tuple[Any, Any, int]]:
    return {p.as_tuple() for p in table.snapshot()}


@pytest.fixture
def chain_table() -> ClosureTable:
    """1 -> 2 -> 3 -> 4 -> 5 plus the shortcut 2 -> 5."""
    table = ClosureTable()
    table.add_edges(1, 2)
    table.add_edges(2, 3)
    table.add_edges(3, 4)
    table.add_edges(4, 5)
    table.add_edges(2, 5)
    return table


@pytest.fixture
def reference_closure():
    return brute_force_closure


@pytest.fixture
def closure_rows():
    return rows_of

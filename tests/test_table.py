from __future__ import annotations

import random

import pytest

from closuretable import ChangeSet, ClosureTable, Path


def render_events(table: ClosureTable, previous: list[Path]) -> tuple[str, list[Path]]:
    out: list[str] = []
    snapshot = table.diff(
        previous,
        on_add=lambda p: out.append(f"+{p.src},{p.dest},{p.depth}|"),
        on_remove=lambda p: out.append(f"-{p.src},{p.dest}|"),
        on_update=lambda p: out.append(f"U{p.src},{p.dest},{p.depth}|"),
    )
    return "".join(out), snapshot


def test_chain_with_merge_adds_every_row(chain_table):
    events, _ = render_events(chain_table, [])
    assert events == (
        "+1,1,0|+1,2,1|+1,3,2|+1,4,3|+1,5,2|"
        "+2,2,0|+2,3,1|+2,4,2|+2,5,1|"
        "+3,3,0|+3,4,1|+3,5,2|"
        "+4,4,0|+4,5,1|"
        "+5,5,0|"
    )


def test_removing_shortcut_only_updates_depths(chain_table):
    _, before = render_events(chain_table, [])

    chain_table.remove_edges(2, 5)

    events, after = render_events(chain_table, before)
    assert events == "U1,5,4|U2,5,3|"
    assert len(after) == len(before)


def test_snapshot_matches_diff_result(chain_table):
    _, snapshot = render_events(chain_table, [])
    assert [p.as_tuple() for p in snapshot] == [p.as_tuple() for p in chain_table.snapshot()]


def test_self_edges_are_ignored():
    table = ClosureTable()
    table.add_edges(1, 1)
    table.remove_edges(1, 1)

    assert [p.as_tuple() for p in table.snapshot()] == [(1, 1, 0)]
    assert not table.has_edge(1, 1)


def test_self_edge_among_children_is_skipped():
    table = ClosureTable()
    table.add_edges("a", "a", "b", "c")

    assert table.children("a") == {"b", "c"}
    assert table.depth("a", "a") == 0


def test_readding_edge_is_idempotent(chain_table, closure_rows):
    before = closure_rows(chain_table)

    chain_table.add_edges(2, 5)
    chain_table.add_edges(1, 2, 2)

    assert closure_rows(chain_table) == before


def test_shortcut_improves_descendants_of_child():
    """A shorter route to a node must shorten the rows to its descendants too."""
    table = ClosureTable()
    for parent, child in [(1, 2), (2, 3), (3, 4), (4, 5)]:
        table.add_edges(parent, child)
    assert table.depth(1, 5) == 4

    table.add_edges(1, 4)

    assert table.depth(1, 4) == 1
    assert table.depth(1, 5) == 2
    assert table.depth(2, 5) == 3


def test_new_edge_links_subtrees_for_all_ancestors(closure_rows, reference_closure):
    table = ClosureTable()
    table.add_edges("root", "left", "right")
    table.add_edges("left", "mid")
    table.add_edges("x", "y", "z")
    table.add_edges("y", "w")

    table.add_edges("mid", "x")

    assert table.depth("root", "w") == 5
    assert table.depth("left", "z") == 3
    edges = {
        ("root", "left"), ("root", "right"), ("left", "mid"),
        ("x", "y"), ("x", "z"), ("y", "w"), ("mid", "x"),
    }
    assert closure_rows(table) == reference_closure(table.ids(), edges)


def test_remove_unique_path_drops_unreachable_rows():
    table = ClosureTable()
    table.add_edges(1, 2)
    table.add_edges(2, 3)
    previous = table.snapshot()

    table.remove_edges(2, 3)

    changes, _ = table.changes(previous)
    assert [p.as_tuple() for p in changes.removed] == [(1, 3, 2), (2, 3, 1)]
    assert changes.added == []
    assert changes.updated == []
    assert table.descendants(1) == {2: 1}


def test_removal_rebuilds_children_before_their_ancestors(closure_rows, reference_closure):
    """
    "a" reaches "p" directly and through "b". Removing p -> c must not leave
    a -> c behind because of b's rows.
    """
    table = ClosureTable()
    table.add_edges("a", "b", "p")
    table.add_edges("b", "p")
    table.add_edges("p", "c")
    assert table.depth("a", "c") == 2

    table.remove_edges("p", "c")

    assert table.depth("a", "c") is None
    assert table.depth("b", "c") is None
    edges = {("a", "b"), ("a", "p"), ("b", "p")}
    assert closure_rows(table) == reference_closure(table.ids(), edges)


def test_remove_missing_edge_changes_nothing(chain_table):
    previous = chain_table.snapshot()

    chain_table.remove_edges(1, 5)
    chain_table.remove_edges(5, 1)

    changes, _ = chain_table.changes(previous)
    assert len(changes) == 0


def test_remove_on_unseen_parent_registers_it():
    table = ClosureTable()
    table.add_edges(1, 2)
    previous = table.snapshot()

    table.remove_edges(9, 1)

    assert 9 in table
    changes, _ = table.changes(previous)
    assert [p.as_tuple() for p in changes.added] == [(9, 9, 0)]
    assert changes.removed == []
    assert changes.updated == []


def test_every_node_has_one_self_row(chain_table):
    chain_table.remove_edges(3, 4)
    chain_table.add_edges(6, 1)

    for node_id in chain_table.ids():
        self_rows = [p for p in chain_table.snapshot() if p.src == node_id and p.dest == node_id]
        assert [p.depth for p in self_rows] == [0]


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4, 5])
def test_random_edits_match_reference(seed, closure_rows, reference_closure):
    """Edges only point from lower to higher ids, so the graph stays acyclic."""
    rng = random.Random(seed)
    table = ClosureTable()
    edges: set[tuple[int, int]] = set()
    previous: list[Path] = []

    for _ in range(150):
        if edges and rng.random() < 0.4:
            parent, child = rng.choice(sorted(edges))
            table.remove_edges(parent, child)
            edges.discard((parent, child))
        else:
            parent, child = sorted(rng.sample(range(12), 2))
            table.add_edges(parent, child)
            edges.add((parent, child))

        assert closure_rows(table) == reference_closure(table.ids(), edges)

        changes = ChangeSet()
        current = table.diff(previous, changes.on_add, changes.on_remove, changes.on_update)
        assert [p.as_tuple() for p in changes.apply(previous)] == [
            p.as_tuple() for p in current
        ]
        previous = current


# ---------------------------------------------------------------------------
# Registry and queries
# ---------------------------------------------------------------------------


def test_get_or_create_registers_node_once():
    table = ClosureTable()

    node = table.get_or_create("x")

    assert "x" in table
    assert len(table) == 1
    assert table.get_or_create("x") is node
    assert node.depths == {"x": 0}


def test_queries_do_not_create_nodes():
    table = ClosureTable()
    table.add_edges(1, 2)

    assert table.depth(7, 1) is None
    assert table.depth(1, 7) is None
    assert not table.has_edge(1, 7)
    assert not table.has_edge(7, 1)
    with pytest.raises(KeyError):
        table.children(7)
    with pytest.raises(KeyError):
        table.ancestors(7)

    assert 7 not in table
    assert len(table) == 2


def test_structure_queries(chain_table):
    assert chain_table.children(2) == {3, 5}
    assert chain_table.parents(5) == {2, 4}
    assert chain_table.descendants(3) == {4: 1, 5: 2}
    assert chain_table.ancestors(5) == {1: 2, 2: 1, 3: 2, 4: 1}
    assert chain_table.has_edge(4, 5)
    assert not chain_table.has_edge(5, 4)
    assert chain_table.ids() == [1, 2, 3, 4, 5]


def test_constructor_accepts_edges():
    table = ClosureTable([("a", "b"), ("b", "c")])

    assert table.depth("a", "c") == 2
    assert table.ids() == ["a", "b", "c"]

# tests/test_graph.py
import random

import pytest

from tdm.domain.errors import CycleDetectedError, DuplicateVertexError, UnknownVertexError
from tdm.engine.graph import DependencyGraph


def _graph(*vertices: str) -> DependencyGraph:
    g = DependencyGraph()
    for v in vertices:
        g.add_vertex(v)
    return g


def _assert_linear_extension(g: DependencyGraph) -> None:
    order = g.topological_sort()
    assert sorted(order) == sorted(g.vertices())
    pos = {v: i for i, v in enumerate(order)}
    for a, b in g.edges():
        assert pos[a] < pos[b], f"{a} must precede {b} in {order}"


def test_chain_sort_and_ready():
    g = _graph("X", "Y", "Z")
    g.add_edge("X", "Y")
    g.add_edge("Y", "Z")

    assert g.topological_sort() == ["X", "Y", "Z"]
    assert g.get_ready_tasks() == ["X"]


def test_reverse_edge_is_rejected_and_graph_unchanged():
    g = _graph("X", "Y")
    g.add_edge("X", "Y")

    with pytest.raises(CycleDetectedError) as exc:
        g.add_edge("Y", "X")

    assert exc.value.code == "CYCLE_DETECTED"
    assert g.edges() == [("X", "Y")]
    assert g.edge_count == 1


def test_long_cycle_is_rejected():
    g = _graph("A", "B", "C", "D")
    g.add_edge("A", "B")
    g.add_edge("B", "C")
    g.add_edge("C", "D")

    with pytest.raises(CycleDetectedError):
        g.add_edge("D", "A")
    assert not g.has_edge("D", "A")

    # a shortcut in the same direction is fine
    g.add_edge("A", "D")
    _assert_linear_extension(g)


def test_self_edge_is_a_cycle():
    g = _graph("A")
    with pytest.raises(CycleDetectedError):
        g.add_edge("A", "A")
    assert g.edge_count == 0


def test_remove_middle_vertex_strips_both_directions():
    g = _graph("X", "Y", "Z")
    g.add_edge("X", "Y")
    g.add_edge("Y", "Z")

    g.remove_vertex("Y")

    assert g.get_dependents("X") == []
    assert g.get_dependencies("Z") == []
    assert "Y" not in g
    assert g.edges() == []
    assert g.get_ready_tasks() == ["X", "Z"]


def test_duplicate_vertex_rejected():
    g = _graph("A")
    with pytest.raises(DuplicateVertexError) as exc:
        g.add_vertex("A", payload="again")
    assert exc.value.code == "DUPLICATE_VERTEX"
    assert g.payload("A") is None


def test_unknown_vertex_rejected():
    g = _graph("A")
    with pytest.raises(UnknownVertexError) as exc:
        g.add_edge("A", "B")
    assert exc.value.details == {"missing": ["B"]}
    assert g.edge_count == 0


def test_duplicate_edge_is_noop():
    g = _graph("A", "B")
    g.add_edge("A", "B")
    g.add_edge("A", "B")
    assert g.edges() == [("A", "B")]


def test_remove_edge_idempotent():
    g = _graph("A", "B")
    g.add_edge("A", "B")

    g.remove_edge("A", "B")
    g.remove_edge("A", "B")
    g.remove_edge("B", "A")
    g.remove_edge("nope", "A")

    assert g.edges() == []
    assert g.get_ready_tasks() == ["A", "B"]


def test_remove_unknown_vertex_is_noop():
    g = _graph("A", "B")
    g.add_edge("A", "B")
    g.remove_vertex("nope")
    assert g.vertices() == ["A", "B"]
    assert g.edges() == [("A", "B")]


def test_sort_without_edges_is_deterministic():
    # Each root is prepended when it finishes, so unrelated vertices come
    # out in reverse insertion order.
    g = _graph("A", "B", "C")
    assert g.topological_sort() == ["C", "B", "A"]
    assert g.topological_sort() == ["C", "B", "A"]


def test_diamond():
    g = _graph("A", "B", "C", "D")
    g.add_edge("A", "B")
    g.add_edge("A", "C")
    g.add_edge("B", "D")
    g.add_edge("C", "D")

    _assert_linear_extension(g)
    assert g.get_ready_tasks() == ["A"]
    assert g.get_dependencies("D") == ["B", "C"]
    assert g.get_dependents("A") == ["B", "C"]


def test_ready_with_satisfied_vertices():
    g = _graph("A", "B", "C")
    g.add_edge("A", "B")
    g.add_edge("B", "C")

    assert g.get_ready_tasks(satisfied={"A"}) == ["B"]
    assert g.get_ready_tasks(satisfied={"A", "B"}) == ["C"]
    assert g.get_ready_tasks() == ["A"]


def test_dependencies_of_unknown_vertex_are_empty():
    g = _graph("A")
    assert g.get_dependencies("nope") == []
    assert g.get_dependents("nope") == []


def test_copy_is_independent():
    g = _graph("A", "B")
    g.add_edge("A", "B")

    snap = g.copy()
    g.add_vertex("C")
    g.remove_edge("A", "B")

    assert snap.vertices() == ["A", "B"]
    assert snap.edges() == [("A", "B")]


def test_deep_chain_does_not_recurse():
    n = 1200  # above the default recursion limit
    ids = [f"v{i}" for i in range(n)]
    g = _graph(*ids)
    for a, b in zip(ids, ids[1:]):
        g.add_edge(a, b)

    assert g.topological_sort() == ids
    with pytest.raises(CycleDetectedError):
        g.add_edge(ids[-1], ids[0])


def test_random_insertions_stay_acyclic():
    rng = random.Random(1234)
    ids = [f"n{i}" for i in range(25)]
    g = _graph(*ids)

    accepted = rejected = 0
    for _ in range(300):
        a, b = rng.sample(ids, 2)
        try:
            g.add_edge(a, b)
            accepted += 1
        except CycleDetectedError:
            rejected += 1
            assert not g.has_edge(a, b)

    assert accepted and rejected
    _assert_linear_extension(g)

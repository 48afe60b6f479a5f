# src/tdm/engine/graph.py
from __future__ import annotations

from collections import deque
from typing import Any, Iterable, Iterator, Optional

from tdm.domain.errors import CycleDetectedError, DuplicateVertexError, UnknownVertexError
from tdm.logging import get_logger

_LOG = get_logger(__name__)

Edge = tuple[str, str]


class DependencyGraph:
    """
    Directed acyclic graph of task ids.

    An edge (A -> B) means "A must complete before B may start". Outgoing
    edges are stored per vertex; vertices keep insertion order, which makes
    topological_sort() and get_ready_tasks() deterministic.

    Invariants (hold between every public call):
    - the edge relation has no directed cycle (enforced in add_edge)
    - every edge endpoint is a live vertex (enforced in remove_vertex)
    """

    def __init__(self) -> None:
        self._vertices: dict[str, Any] = {}
        self._edges: dict[str, list[str]] = {}

    # -------------------------
    # Mutations
    # -------------------------

    def add_vertex(self, vertex_id: str, payload: Any = None) -> None:
        if vertex_id in self._vertices:
            raise DuplicateVertexError(
                f"Vertex already exists: {vertex_id}",
                details={"id": vertex_id},
            )
        self._vertices[vertex_id] = payload
        self._edges[vertex_id] = []
        _LOG.debug("Added vertex %s", vertex_id)

    def add_edge(self, from_id: str, to_id: str) -> None:
        """
        Adds the prerequisite edge from_id -> to_id.

        Raises UnknownVertexError if an endpoint is missing and
        CycleDetectedError if the edge would close a cycle. In both cases the
        graph is left untouched. Re-adding an existing edge is a no-op.
        """
        missing = [v for v in (from_id, to_id) if v not in self._vertices]
        if missing:
            raise UnknownVertexError(
                "Both vertices must exist",
                details={"missing": sorted(set(missing))},
            )

        if to_id in self._edges[from_id]:
            return

        if self._would_create_cycle(from_id, to_id):
            _LOG.info("Rejected edge %s -> %s: would create a cycle", from_id, to_id)
            raise CycleDetectedError(
                "Adding this dependency would create a circular dependency",
                details={"from": from_id, "to": to_id},
            )

        self._edges[from_id].append(to_id)
        _LOG.debug("Added edge %s -> %s", from_id, to_id)

    def remove_edge(self, from_id: str, to_id: str) -> None:
        targets = self._edges.get(from_id)
        if targets and to_id in targets:
            targets.remove(to_id)
            _LOG.debug("Removed edge %s -> %s", from_id, to_id)

    def remove_vertex(self, vertex_id: str) -> None:
        if vertex_id not in self._vertices:
            return

        del self._vertices[vertex_id]
        del self._edges[vertex_id]

        # Strip incoming edges so nothing dangles.
        for targets in self._edges.values():
            if vertex_id in targets:
                targets.remove(vertex_id)

        _LOG.debug("Removed vertex %s", vertex_id)

    # -------------------------
    # Ordering
    # -------------------------

    def topological_sort(self) -> list[str]:
        """
        DFS postorder over all vertices, roots taken in insertion order; each
        vertex is prepended once its subtree finishes.

        Relies on the acyclicity enforced by add_edge instead of re-checking.
        Uses an explicit stack so long chains don't hit the recursion limit.
        """
        visited: set[str] = set()
        order: deque[str] = deque()

        for root in self._vertices:
            if root in visited:
                continue
            visited.add(root)
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self._edges[root]))]

            while stack:
                vertex, neighbors = stack[-1]
                for nxt in neighbors:
                    if nxt not in visited:
                        visited.add(nxt)
                        stack.append((nxt, iter(self._edges[nxt])))
                        break
                else:
                    stack.pop()
                    order.appendleft(vertex)

        return list(order)

    def get_ready_tasks(self, satisfied: Iterable[str] = ()) -> list[str]:
        """
        Vertices with in-degree zero, in insertion order. O(V+E).

        Edges leaving a vertex in `satisfied` don't count as incoming edges of
        their targets, and the satisfied vertices themselves are left out.
        """
        done = set(satisfied)
        has_incoming: set[str] = set()
        for source, targets in self._edges.items():
            if source in done:
                continue
            has_incoming.update(targets)

        return [v for v in self._vertices if v not in has_incoming and v not in done]

    # -------------------------
    # Structural queries
    # -------------------------

    def get_dependencies(self, vertex_id: str) -> list[str]:
        """All vertices with an edge into vertex_id (its prerequisites)."""
        return [source for source, targets in self._edges.items() if vertex_id in targets]

    def get_dependents(self, vertex_id: str) -> list[str]:
        """All vertices vertex_id has an edge into."""
        return list(self._edges.get(vertex_id, ()))

    def has_edge(self, from_id: str, to_id: str) -> bool:
        return to_id in self._edges.get(from_id, ())

    def payload(self, vertex_id: str) -> Any:
        if vertex_id not in self._vertices:
            raise UnknownVertexError(f"Unknown vertex: {vertex_id}", details={"id": vertex_id})
        return self._vertices[vertex_id]

    def vertices(self) -> list[str]:
        return list(self._vertices)

    def edges(self) -> list[Edge]:
        return [(source, target) for source, targets in self._edges.items() for target in targets]

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges.values())

    def copy(self) -> "DependencyGraph":
        """Independent snapshot; payload objects are shared, containers are not."""
        clone = DependencyGraph()
        clone._vertices = dict(self._vertices)
        clone._edges = {v: list(targets) for v, targets in self._edges.items()}
        return clone

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vertex_id: object) -> bool:
        return vertex_id in self._vertices

    # -------------------------
    # Helpers
    # -------------------------

    def _neighbors(self, vertex_id: str, extra: Optional[Edge]) -> list[str]:
        targets = self._edges.get(vertex_id, [])
        if extra is not None and extra[0] == vertex_id:
            return [*targets, extra[1]]
        return targets

    def _would_create_cycle(self, from_id: str, to_id: str) -> bool:
        """
        DFS from every vertex with an "on the recursion stack" set. The
        candidate edge is passed in as a virtual edge instead of copying the
        edge map, so live state is never touched.
        """
        extra: Edge = (from_id, to_id)
        visited: set[str] = set()
        on_stack: set[str] = set()

        for root in self._vertices:
            if root in visited:
                continue
            visited.add(root)
            on_stack.add(root)
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self._neighbors(root, extra)))]

            while stack:
                vertex, neighbors = stack[-1]
                for nxt in neighbors:
                    if nxt in on_stack:
                        return True
                    if nxt not in visited:
                        visited.add(nxt)
                        on_stack.add(nxt)
                        stack.append((nxt, iter(self._neighbors(nxt, extra))))
                        break
                else:
                    stack.pop()
                    on_stack.discard(vertex)

        return False

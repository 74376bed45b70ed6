from __future__ import annotations

from typing import Iterator


def edge_key(first: str, second: str) -> frozenset[str]:
    """Key of the unordered pair {first, second}."""
    return frozenset((first, second))


class ComparisonGraph:
    """
    Symmetric map from unordered pairs of model names to divergence values.

    Nodes are the registered model names; an edge exists only between two
    nodes of the graph. A name may be paired with itself. Not thread-safe:
    only the manager's own loop touches it.
    """

    def __init__(self) -> None:
        self._neighbours: dict[str, set[str]] = {}
        self._values: dict[frozenset[str], float] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._neighbours

    def __len__(self) -> int:
        return len(self._neighbours)

    @property
    def nodes(self) -> list[str]:
        """Names in insertion order."""
        return list(self._neighbours)

    def add_node(self, name: str) -> bool:
        """Add an isolated node. Returns False if the name already exists."""
        if name in self._neighbours:
            return False
        self._neighbours[name] = set()
        return True

    def remove_node(self, name: str) -> bool:
        """Remove a node together with all its edges. Returns False if absent."""
        partners = self._neighbours.pop(name, None)
        if partners is None:
            return False
        for partner in partners:
            self._values.pop(edge_key(name, partner), None)
            if partner != name:
                self._neighbours[partner].discard(name)
        return True

    def set_edge(self, first: str, second: str, value: float) -> None:
        """
        Create or update the edge {first, second}.

        Raises:
            KeyError: Either endpoint is not a node of the graph.
        """
        for name in (first, second):
            if name not in self._neighbours:
                raise KeyError(name)
        self._neighbours[first].add(second)
        self._neighbours[second].add(first)
        self._values[edge_key(first, second)] = value

    def remove_edge(self, first: str, second: str) -> bool:
        """Remove the edge {first, second}. Returns False if there was none."""
        if self._values.pop(edge_key(first, second), None) is None:
            return False
        self._neighbours[first].discard(second)
        self._neighbours[second].discard(first)
        return True

    def has_edge(self, first: str, second: str) -> bool:
        return edge_key(first, second) in self._values

    def get_edge(self, first: str, second: str) -> float:
        return self._values[edge_key(first, second)]

    def edges(self) -> Iterator[tuple[str, str]]:
        """Every edge once, as a (first, second) pair."""
        for key in list(self._values):
            if len(key) == 1:
                (name,) = key
                yield name, name
            else:
                first, second = sorted(key)
                yield first, second

    def edges_of(self, name: str) -> list[tuple[str, float]]:
        """(partner, value) for every edge touching `name`."""
        return [(partner, self._values[edge_key(name, partner)]) for partner in sorted(self._neighbours[name])]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nodes={len(self._neighbours)}, edges={len(self._values)})"

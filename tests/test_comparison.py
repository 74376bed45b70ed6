import pytest

from diffusionsim.controller.comparison import ComparisonGraph


@pytest.fixture
def graph():
    graph = ComparisonGraph()
    for name in ("a", "b", "c"):
        graph.add_node(name)
    return graph


def test_add_node_is_unique(graph):
    assert graph.add_node("a") is False
    assert graph.add_node("d") is True
    assert graph.nodes == ["a", "b", "c", "d"]
    assert len(graph) == 4
    assert "d" in graph


def test_edges_are_symmetric(graph):
    graph.set_edge("a", "b", 1.5)
    assert graph.has_edge("b", "a")
    assert graph.get_edge("b", "a") == 1.5
    assert graph.edges_of("a") == [("b", 1.5)]
    assert graph.edges_of("b") == [("a", 1.5)]


def test_at_most_one_edge_per_pair(graph):
    graph.set_edge("a", "b", 1.0)
    graph.set_edge("b", "a", 2.0)
    assert list(graph.edges()) == [("a", "b")]
    assert graph.get_edge("a", "b") == 2.0


def test_set_edge_requires_both_nodes(graph):
    with pytest.raises(KeyError):
        graph.set_edge("a", "missing", 0.0)
    assert graph.edges_of("a") == []


def test_remove_edge(graph):
    graph.set_edge("a", "b", 1.0)
    assert graph.remove_edge("b", "a") is True
    assert not graph.has_edge("a", "b")
    assert graph.edges_of("a") == []
    assert graph.remove_edge("a", "b") is False


def test_remove_node_cascades_to_edges(graph):
    graph.set_edge("a", "b", 1.0)
    graph.set_edge("a", "c", 2.0)
    graph.set_edge("b", "c", 3.0)

    assert graph.remove_node("a") is True
    assert "a" not in graph
    assert list(graph.edges()) == [("b", "c")]
    assert graph.edges_of("b") == [("c", 3.0)]
    assert graph.edges_of("c") == [("b", 3.0)]
    assert graph.remove_node("a") is False


def test_self_edge(graph):
    graph.set_edge("a", "a", 0.0)
    assert list(graph.edges()) == [("a", "a")]
    assert graph.edges_of("a") == [("a", 0.0)]
    graph.remove_node("a")
    assert list(graph.edges()) == []

"""Tests for :mod:`stepgraph.graph.indexer`."""

from __future__ import annotations

import pytest

from stepgraph.errors import ModelConsistencyError
from stepgraph.graph.indexer import index_model
from stepgraph.graph.model import Model


def test_single_edge_populates_children_and_parents(dfa_plugin):
    model = Model(dfa_plugin)
    a = model.add_node("StateNode", id="A", label="A")
    b = model.add_node("StateNode", id="B", label="B")
    edge = model.add_edge("Transition", a, b, id="AB", symbol="x")

    index_model(model)

    assert a.get("children").items == [edge]
    assert a.get("parents").items == []
    assert b.get("children").items == []
    assert b.get("parents").items == [edge]


def test_graph_receives_flat_collections_in_declaration_order(parity_model):
    index_model(parity_model)

    assert parity_model.graph.get("nodes").items == parity_model.nodes
    assert parity_model.graph.get("edges").items == parity_model.edges


def test_each_edge_indexed_exactly_once(parity_model):
    index_model(parity_model)

    children = [edge for node in parity_model.nodes for edge in node.get("children")]
    parents = [edge for node in parity_model.nodes for edge in node.get("parents")]

    assert len(children) == len(parity_model.edges)
    assert len(parents) == len(parity_model.edges)
    assert sorted(edge.handle for edge in children) == sorted(edge.handle for edge in parity_model.edges)
    assert sorted(edge.handle for edge in parents) == sorted(edge.handle for edge in parity_model.edges)


def test_adjacency_preserves_edge_order(parity_model):
    index_model(parity_model)

    even = parity_model.node("even")
    odd = parity_model.node("odd")
    assert [parity_model.id_of(edge) for edge in even.get("children")] == ["e1", "e0"]
    assert [parity_model.id_of(edge) for edge in even.get("parents")] == ["o1", "e0"]
    assert [parity_model.id_of(edge) for edge in odd.get("children")] == ["o1", "o0"]


def test_self_loop_appears_in_both_lists(dfa_plugin):
    model = Model(dfa_plugin)
    node = model.add_node("StateNode", id="loop")
    edge = model.add_edge("Transition", node, node, symbol="a")

    index_model(model)

    assert node.get("children").items == [edge]
    assert node.get("parents").items == [edge]


def test_unresolved_endpoint_fails_fast(dfa_plugin):
    model = Model(dfa_plugin)
    a = model.add_node("StateNode", id="A")
    b = model.add_node("StateNode", id="B")
    edge = model.add_edge("Transition", a, b, id="AB")
    model.nodes.remove(b)
    model._roles.pop(b.handle)

    with pytest.raises(ModelConsistencyError):
        index_model(model)
    assert edge.get("destination") == b

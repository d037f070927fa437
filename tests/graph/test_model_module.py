"""Tests covering :mod:`stepgraph.graph.model`."""

from __future__ import annotations

import json

import pytest

from stepgraph.errors import ModelConsistencyError
from stepgraph.graph.model import Model
from stepgraph.values.environment import PrimitiveValue
from stepgraph.values.types import NUMBER, OBJECT, STRING, RecordType


def test_add_node_assigns_typed_fields(dfa_plugin):
    model = Model(dfa_plugin)
    node = model.add_node("StateNode", id="q0", label="start", start=True)

    assert node.type.name == "StateNode"
    assert node.get("label").data == "start"
    assert node.get("start").data is True
    assert model.node("q0") == node
    assert model.id_of(node) == "q0"


def test_add_node_generates_identifiers(dfa_plugin):
    model = Model(dfa_plugin)
    node = model.add_node("StateNode")

    assert model.id_of(node).startswith("node_")


def test_add_node_rejects_undeclared_kind(dfa_plugin):
    model = Model(dfa_plugin)
    with pytest.raises(KeyError):
        model.add_node("Nope")


def test_add_node_rejects_mistyped_field(dfa_plugin):
    model = Model(dfa_plugin)
    with pytest.raises(TypeError):
        model.add_node("StateNode", label=3)


def test_duplicate_identifier_rejected(dfa_plugin):
    model = Model(dfa_plugin)
    model.add_node("StateNode", id="q")
    with pytest.raises(ValueError):
        model.add_node("StateNode", id="q")


def test_edge_endpoints_are_direct_node_references(parity_model):
    edge = parity_model.edge("e1")

    assert edge.get("source") == parity_model.node("even")
    assert edge.get("destination") == parity_model.node("odd")


def test_edge_endpoint_must_be_a_model_node(dfa_plugin):
    model = Model(dfa_plugin)
    node = model.add_node("StateNode", id="q")
    other = Model(dfa_plugin).add_node("StateNode", id="x")

    with pytest.raises(ModelConsistencyError):
        model.add_edge("Transition", node, "missing")
    with pytest.raises(ModelConsistencyError):
        model.add_edge("Transition", node, other)


def test_serialize_is_json_compatible(parity_model):
    serial = parity_model.serialize()

    assert json.loads(json.dumps(serial)) == serial
    assert [entry["id"] for entry in serial["nodes"]] == ["even", "odd"]
    assert serial["edges"][0] == {
        "id": "e1",
        "kind": "Transition",
        "source": "even",
        "destination": "odd",
        "fields": {"symbol": "1"},
    }


def test_from_serial_rebuilds_in_fresh_environment(dfa_plugin, parity_model):
    copy = Model.from_serial(parity_model.serialize(), dfa_plugin)

    assert copy.environment is not parity_model.environment
    assert copy.serialize() == parity_model.serialize()
    assert copy.edge("o1").get("destination") == copy.node("even")


def test_from_serial_rejects_dangling_endpoint(dfa_plugin, parity_model):
    serial = parity_model.serialize()
    serial["edges"][0]["destination"] = "ghost"

    with pytest.raises(ModelConsistencyError):
        Model.from_serial(serial, dfa_plugin)


def test_serialize_skips_derived_fields(dfa_plugin, parity_model):
    from stepgraph.graph.indexer import index_model

    before = parity_model.serialize()
    index_model(parity_model)

    assert parity_model.serialize() == before


def test_node_reference_fields_round_trip(dfa_plugin):
    dfa_plugin.types.graph.members["initial"] = dfa_plugin.types.nodes
    model = Model(dfa_plugin)
    model.add_node("StateNode", id="q")
    model.set_graph_fields(initial={"node": "q"})

    copy = Model.from_serial(model.serialize(), dfa_plugin)

    assert model.serialize()["graph"] == {"initial": {"node": "q"}}
    assert copy.graph.get("initial") == copy.node("q")


def test_convert_infers_array_types(dfa_plugin):
    model = Model(dfa_plugin)
    array = model.convert(["a", "b"])

    assert array.type.element is STRING
    assert all(isinstance(item, PrimitiveValue) for item in array)


def test_helper_record_fields_survive_copy(dfa_plugin):
    point = RecordType("Point", {"x": NUMBER})
    dfa_plugin.types.lookup("StateNode").members["pos"] = point
    model = Model(dfa_plugin)
    model.add_node("StateNode", id="q", pos={"type": "Point", "fields": {"x": 3}})

    copy = Model.from_serial(model.serialize(), dfa_plugin)

    pos = copy.node("q").get("pos")
    assert pos.type is point
    assert pos.get("x").data == 3


def test_plain_mappings_become_open_records(dfa_plugin):
    model = Model(dfa_plugin)

    value = model.convert({"x": 1, "type": "label", "tags": ["a"]})

    assert value.type is OBJECT
    assert value.get("x").data == 1
    assert value.get("type").data == "label"
    assert [item.data for item in value.get("tags")] == ["a"]


def test_open_record_fields_survive_copy(dfa_plugin):
    dfa_plugin.types.graph.members["meta"] = OBJECT
    model = Model(dfa_plugin)
    model.set_graph_fields(meta={"owner": "lab", "size": 2})

    copy = Model.from_serial(json.loads(json.dumps(model.serialize())), dfa_plugin)

    meta = copy.graph.get("meta")
    assert meta.type is OBJECT
    assert {name: item.data for name, item in meta.fields().items()} == {"owner": "lab", "size": 2}


def test_convert_rejects_non_string_mapping_keys(dfa_plugin):
    with pytest.raises(TypeError):
        Model(dfa_plugin).convert({1: "one"})

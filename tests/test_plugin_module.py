"""Tests for :mod:`stepgraph.plugin`."""

from __future__ import annotations

import pytest

from stepgraph.errors import PluginDefinitionError
from stepgraph.plugin import Plugin, PluginTypes
from stepgraph.values.types import NUMBER, ArrayType, RecordType, UnionType


def make_types() -> PluginTypes:
    node = RecordType("Node")
    edge = RecordType("Edge")
    return PluginTypes(
        graph=RecordType("Graph"),
        state=RecordType("State"),
        nodes=UnionType((node,)),
        edges=UnionType((edge,)),
        arguments=(NUMBER,),
    )


def test_plugin_types_install_engine_members():
    types = make_types()
    node = types.lookup("Node")
    edge = types.lookup("Edge")

    assert node.member("children") == ArrayType(types.edges)
    assert node.member("parents") == ArrayType(types.edges)
    assert edge.member("source") == types.nodes
    assert edge.member("destination") == types.nodes
    assert types.graph.member("nodes") == ArrayType(types.nodes)
    assert types.arguments == [NUMBER]


def test_plugin_types_keep_declared_members():
    node = RecordType("Node", {"children": ArrayType(NUMBER)})
    types = PluginTypes(
        graph=RecordType("Graph"),
        state=RecordType("State"),
        nodes=UnionType((node,)),
        edges=UnionType((RecordType("Edge"),)),
    )

    assert node.member("children") == ArrayType(NUMBER)


def test_plugin_types_reject_non_record_members():
    with pytest.raises(TypeError):
        PluginTypes(
            graph=RecordType("Graph"),
            state=RecordType("State"),
            nodes=UnionType((NUMBER,)),
            edges=UnionType((RecordType("Edge"),)),
        )


def test_lookup_unknown_type_raises():
    with pytest.raises(KeyError):
        make_types().lookup("Missing")


def test_register_as_decorator_and_direct_call():
    plugin = Plugin(name="demo", types=make_types())

    @plugin.register("start")
    def start(graph, value):
        return value

    plugin.register("step", len)

    assert plugin.start is start
    assert plugin.step is len


def test_native_reports_missing_implementation():
    plugin = Plugin(name="demo", types=make_types())

    with pytest.raises(PluginDefinitionError) as excinfo:
        plugin.native("Graph")
    assert "demo" in str(excinfo.value)
    assert isinstance(excinfo.value, KeyError)


def test_lookup_finds_helper_records_reachable_from_members():
    point = RecordType("Point", {"x": NUMBER})
    area = RecordType("Area", {"corners": ArrayType(point)})
    types = make_types()
    types.lookup("Node").members["area"] = area

    assert types.lookup("Area") is area
    assert types.lookup("Point") is point
    assert [record.name for record in types.reachable()][:4] == ["Graph", "State", "Node", "Edge"]

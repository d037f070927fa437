"""Shared fixtures built on :mod:`tests.plugins`."""

from __future__ import annotations

import pytest

from stepgraph.graph.model import Model
from stepgraph.plugin import Plugin
from tests.plugins import make_dfa_plugin, make_parity_model


@pytest.fixture
def dfa_plugin() -> Plugin:
    return make_dfa_plugin()


@pytest.fixture
def parity_model(dfa_plugin: Plugin) -> Model:
    return make_parity_model(dfa_plugin)

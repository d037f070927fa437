"""Step-driven execution of a plugin over an indexed graph model."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from stepgraph.config import INCLUDE_TRACEBACK, get_bool_env
from stepgraph.errors import ArgumentArityError, ArgumentTypeError
from stepgraph.exec.natural import Marshaller
from stepgraph.exec.outcome import Continue, Fault, invoke
from stepgraph.exec.rules import build_rule_table
from stepgraph.graph.indexer import index_model
from stepgraph.graph.model import Model
from stepgraph.obs.events import RUN_DONE, RUN_FAULT, RUN_START, RUN_STEP, EventBus
from stepgraph.plugin import Plugin
from stepgraph.values.environment import PrimitiveValue, RecordValue, Value, make_primitive
from stepgraph.values.types import Type, is_subtype

LOGGER = logging.getLogger(__name__)

VALIDATE_SENTINEL = ""


@dataclass
class RunResult:
    """Outcome of :meth:`Program.run`.

    ``steps`` holds every captured state, oldest first. Exactly one of
    ``result`` and ``error`` is set.
    """

    steps: List[RecordValue] = field(default_factory=list)
    result: Optional[Value] = None
    error: Optional[PrimitiveValue] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Program:
    """A model compiled against a plugin, ready to run.

    The program keeps a private copy of ``model``: it is rebuilt from its
    serialized form, indexed, and never modified afterwards. Construction
    fails outright when the plugin lacks a native implementation for a
    declared type or for ``start``/``step``.
    """

    def __init__(self, model: Model, plugin: Plugin, *, event_bus: Optional[EventBus] = None) -> None:
        self.plugin = plugin
        self.event_bus = event_bus
        self.model = Model.from_serial(model.serialize(), plugin)
        self.environment = self.model.environment
        index_model(self.model)

        self.rules = build_rule_table(plugin)
        self.marshaller = Marshaller(self.rules, self.environment)
        self._start = plugin.start
        self._step = plugin.step
        LOGGER.debug(
            "Compiled program for plugin '%s' (%d rules, %d nodes, %d edges)",
            plugin.name,
            len(self.rules),
            len(self.model.nodes),
            len(self.model.edges),
        )

    @property
    def state_class(self) -> type:
        return self.rules.state.native

    @property
    def argument_types(self) -> List[Type]:
        return list(self.plugin.types.arguments)

    def make_value(self, data: Any, expected: Optional[Type] = None) -> Value:
        """Build a value in this program's environment, e.g. a run argument."""

        return self.model.convert(data, expected)

    def run(self, arguments: Sequence[Value]) -> RunResult:
        """Run the plugin to completion and return the captured trace.

        Arity and argument type errors raise before any plugin code runs.
        Faults raised by ``start`` or ``step`` are returned as
        :attr:`RunResult.error` along with the states captured so far.
        """

        arguments = list(arguments)
        self._check_arguments(arguments)

        memo: dict = {}
        graph = self.marshaller.to_native(self.model.graph, memo)
        inputs = [self.marshaller.to_native(argument, memo) for argument in arguments]

        self._emit(RUN_START, "Starting run", extras={"arguments": len(inputs)})
        outcome = invoke(self._start, graph, *inputs, state_class=self.state_class)

        steps: List[RecordValue] = []
        while isinstance(outcome, Continue):
            steps.append(self._capture(outcome.state))
            LOGGER.debug("Captured step %d of plugin '%s'", len(steps), self.plugin.name)
            self._emit(RUN_STEP, "Captured state", step=len(steps) - 1)
            outcome = invoke(self._step, outcome.state, state_class=self.state_class)

        if isinstance(outcome, Fault):
            error = self._error(outcome)
            self._emit(RUN_FAULT, error.data, step=len(steps), extras={"steps": len(steps)})
            return RunResult(steps=steps, error=error)

        result = self.marshaller.to_value(outcome.result)
        self._emit(RUN_DONE, "Run finished", extras={"steps": len(steps)})
        return RunResult(steps=steps, result=result)

    def validate(self) -> Optional[PrimitiveValue]:
        """Call ``start`` with a placeholder argument and report whether it fails.

        The step loop is not executed. Returns the error primitive or ``None``.
        """

        graph = self.marshaller.to_native(self.model.graph)
        outcome = invoke(self._start, graph, VALIDATE_SENTINEL, state_class=self.state_class)
        if isinstance(outcome, Fault):
            return self._error(outcome)
        return None

    def _check_arguments(self, arguments: List[Value]) -> None:
        declared = self.plugin.types.arguments
        if len(arguments) != len(declared):
            raise ArgumentArityError(len(declared), len(arguments))
        for index, (argument, parameter) in enumerate(zip(arguments, declared)):
            if not is_subtype(argument.type, parameter):
                raise ArgumentTypeError(index, parameter.name, argument.type.name)

    def _capture(self, state: Any) -> RecordValue:
        return self.marshaller.to_value(state, expected=self.rules.state.type)  # type: ignore[return-value]

    def _error(self, fault: Fault) -> PrimitiveValue:
        message = fault.message(include_traceback=get_bool_env(INCLUDE_TRACEBACK))
        LOGGER.debug("Plugin '%s' fault: %s", self.plugin.name, message)
        return make_primitive(self.environment, message)

    def _emit(self, kind: str, msg: str, *, step: Optional[int] = None, extras: Optional[dict] = None) -> None:
        if self.event_bus is None:
            return
        self.event_bus.emit(kind=kind, msg=msg, program=self.plugin.name, step=step, extras=extras)

    def __repr__(self) -> str:
        return f"Program({self.plugin.name}, {self.model!r})"


__all__ = ["Program", "RunResult", "VALIDATE_SENTINEL"]

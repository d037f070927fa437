"""Exception types raised by the execution engine.

Plugin faults during a run are not represented here: they are returned to
the caller as data on :class:`stepgraph.exec.program.RunResult`.
"""
from __future__ import annotations


class StepgraphError(Exception):
    """Base class for engine errors."""


class ArgumentArityError(StepgraphError, ValueError):
    """``run`` received a different number of arguments than declared."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Program.run: incorrect arity, expected {expected} argument(s), got {actual}")
        self.expected = expected
        self.actual = actual


class ArgumentTypeError(StepgraphError, TypeError):
    """An argument is not a subtype of the declared parameter type."""

    def __init__(self, index: int, expected: str, actual: str) -> None:
        super().__init__(
            f"Program.run: argument at index {index} is of incorrect type "
            f"(expected {expected}, got {actual})"
        )
        self.index = index
        self.expected = expected
        self.actual = actual


class PluginDefinitionError(StepgraphError, KeyError):
    """A declared plugin type has no native implementation."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ModelConsistencyError(StepgraphError, RuntimeError):
    """A model edge refers to a node the model does not contain."""


class MarshalError(StepgraphError, TypeError):
    """A value has no conversion rule in either direction."""


__all__ = [
    "ArgumentArityError",
    "ArgumentTypeError",
    "MarshalError",
    "ModelConsistencyError",
    "PluginDefinitionError",
    "StepgraphError",
]

"""Explicit outcomes of calling a plugin's ``start`` or ``step`` function."""
from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Continue:
    """The plugin returned another state; the run goes on."""

    state: Any


@dataclass(frozen=True)
class Done:
    """The plugin returned a non-state value: the final result."""

    result: Any


@dataclass(frozen=True)
class Fault:
    """The plugin failed, either by raising or by returning a ``Fault``.

    Plugins may return ``Fault("message")`` themselves instead of raising.
    """

    payload: Any
    exception: Optional[BaseException] = None

    @classmethod
    def from_exception(cls, exc: Exception) -> "Fault":
        return cls(payload=exc, exception=exc)

    def message(self, *, include_traceback: bool = False) -> str:
        """Return a human readable description of the fault."""

        if isinstance(self.payload, BaseException):
            text = str(self.payload) or type(self.payload).__name__
        else:
            text = self.payload if isinstance(self.payload, str) else repr(self.payload)
        if include_traceback and self.exception is not None:
            formatted = "".join(
                traceback.format_exception(
                    type(self.exception), self.exception, self.exception.__traceback__
                )
            )
            text = f"{text}\n{formatted}"
        return text


Outcome = Union[Continue, Done, Fault]


def classify(value: Any, state_class: type) -> Outcome:
    """Map a value returned by the plugin to its outcome."""

    if isinstance(value, Fault):
        return value
    if isinstance(value, state_class):
        return Continue(value)
    return Done(value)


def invoke(fn: Callable[..., Any], *args: Any, state_class: type) -> Outcome:
    """Call ``fn`` and capture whatever it raises as a :class:`Fault`."""

    try:
        value = fn(*args)
    except Exception as exc:
        LOGGER.debug("Plugin call %s raised %s", getattr(fn, "__name__", fn), exc, exc_info=True)
        return Fault.from_exception(exc)
    return classify(value, state_class)


__all__ = ["Continue", "Done", "Fault", "Outcome", "classify", "invoke"]

"""Run lifecycle events for hosts observing a program."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from stepgraph.graph.ids import utc_now

RUN_START = "run.start"
RUN_STEP = "run.step"
RUN_FAULT = "run.fault"
RUN_DONE = "run.done"


@dataclass
class Event:
    """A single lifecycle notification emitted while a program runs."""

    ts: str
    kind: str
    msg: str
    program: Optional[str] = None
    step: Optional[int] = None
    extras: dict = field(default_factory=dict)


@dataclass
class EventBus:
    """Append-only in-memory event bus owned by the caller."""

    events: List[Event] = field(default_factory=list)

    def emit(
        self,
        *,
        kind: str,
        msg: str,
        program: Optional[str] = None,
        step: Optional[int] = None,
        extras: Optional[dict] = None,
    ) -> Event:
        """Create and store a new :class:`Event`."""

        event = Event(
            ts=utc_now(),
            kind=kind,
            msg=msg,
            program=program,
            step=step,
            extras=dict(extras or {}),
        )
        self.events.append(event)
        return event

    def history(self, kind: Optional[str] = None) -> Iterable[Event]:
        """Return the chronological history, optionally limited to ``kind``."""

        if kind is None:
            return tuple(self.events)
        return tuple(event for event in self.events if event.kind == kind)

    def clear(self) -> None:
        self.events.clear()


__all__ = ["Event", "EventBus", "RUN_DONE", "RUN_FAULT", "RUN_START", "RUN_STEP"]

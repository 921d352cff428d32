"""Structured trace events for the inference core.

The classifier and inferrer report what they decided through a ``TraceSink``
instead of writing output themselves. Hosts pick the sink: the server installs
``logging_sink`` and tests can collect events with ``TraceRecorder``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEvent:
    name: str
    data: Dict[str, Any] = field(default_factory=dict)


TraceSink = Callable[[TraceEvent], None]


def logging_sink(level: int = logging.DEBUG) -> TraceSink:
    def _sink(event: TraceEvent) -> None:
        if log.isEnabledFor(level):
            details = " ".join(f"{key}={value!r}" for key, value in event.data.items())
            log.log(level, "%s %s", event.name, details)

    return _sink


def emit(sink: Optional[TraceSink], name: str, /, **data: Any) -> None:
    if sink is not None:
        sink(TraceEvent(name=name, data=data))


class TraceRecorder:
    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def __call__(self, event: TraceEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> List[TraceEvent]:
        return [event for event in self.events if event.name == name]

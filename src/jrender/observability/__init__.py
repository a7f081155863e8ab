"""Render observability — structured events for every pipeline step.

Aggregates events from:
- **Render pipeline**: evaluate/parse/convert timings per render
- **Live sessions**: open, update, superseded result, failure, close
- **Comparison checkouts**: creation, removal, cleanup failures

All events are frozen dataclasses with nanosecond timestamps.

Quick Start:
    >>> from jrender.observability import EventLog, RenderCollector
    >>> log = EventLog()
    >>> collector = RenderCollector(log)
    >>> # Pass collector to Renderer; inspect log.query(...) afterwards

"""

from jrender.observability.collector import RenderCollector
from jrender.observability.events import (
    CheckoutEvent,
    CommandFailed,
    RenderCompleted,
    SessionEvent,
    StackEvent,
    now_ns,
)
from jrender.observability.log import EventLog
from jrender.observability.profiler import RenderProfiler

__all__ = [
    "CheckoutEvent",
    "CommandFailed",
    "EventLog",
    "RenderCollector",
    "RenderCompleted",
    "RenderProfiler",
    "SessionEvent",
    "StackEvent",
    "now_ns",
]

"""Event log — bounded history of render, session, and checkout events.

The collector appends; hosts and the CLI read it back, either as the
newest events of one kind or as per-action totals (how many live updates
were published, dropped as superseded, or failed).

Thread Safety:
    Appends and reads take a ``threading.Lock``; renders may be recorded
    from worker threads.

"""

import threading
from collections import Counter, deque

from jrender.observability.events import StackEvent


class EventLog:
    """Ring buffer of events; the oldest are dropped past *max_events*.

    Args:
        max_events: Number of events retained.

    """

    __slots__ = ("_events", "_lock")

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        with self._lock:
            self._events.append(event)

    def _snapshot(self, event_type: type | None) -> list[StackEvent]:
        with self._lock:
            events = list(self._events)
        if event_type is None:
            return events
        return [e for e in events if isinstance(e, event_type)]

    def query(self, *, event_type: type | None = None, limit: int = 100) -> list[StackEvent]:
        """Newest events first, optionally of one type only."""
        return self._snapshot(event_type)[::-1][:limit]

    def action_counts(self, event_type: type) -> dict[str, int]:
        """Events of *event_type* counted by their ``action`` field.

        Only ``SessionEvent`` and ``CheckoutEvent`` carry an action; other
        types count as empty.
        """
        events = self._snapshot(event_type)
        return dict(Counter(getattr(e, "action", "") for e in events if hasattr(e, "action")))

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

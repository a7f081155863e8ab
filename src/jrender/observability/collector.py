"""Render collector — records pipeline, session, and checkout events.

Provides one method per event kind so components never construct events
themselves.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from jrender.observability.events import (
    CheckoutEvent,
    CommandFailed,
    RenderCompleted,
    SessionEvent,
    now_ns,
)
from jrender.observability.log import EventLog


class RenderCollector:
    """Unified event collector.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Render pipeline events -----

    def record_render(
        self,
        path: str,
        *,
        documents: int = 0,
        evaluate_ms: float = 0.0,
        parse_ms: float = 0.0,
        convert_ms: float = 0.0,
        total_ms: float = 0.0,
    ) -> RenderCompleted:
        """Record a completed render."""
        event = RenderCompleted(
            path=path,
            documents=documents,
            evaluate_ms=evaluate_ms,
            parse_ms=parse_ms,
            convert_ms=convert_ms,
            total_ms=total_ms,
            timestamp_ns=now_ns(),
        )
        self._log.append(event)
        return event

    def record_failure(self, command: str, path: str, error: str) -> None:
        """Record an error reported to the user."""
        self._log.append(
            CommandFailed(
                command=command,  # type: ignore[arg-type]
                path=path,
                error=error,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Live session events -----

    def record_session(
        self,
        path: str,
        uri: str,
        action: str,
        *,
        dependencies: int = 0,
    ) -> None:
        """Record a live session state change."""
        self._log.append(
            SessionEvent(
                path=path,
                uri=uri,
                action=action,  # type: ignore[arg-type]
                dependencies=dependencies,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Checkout events -----

    def record_checkout(self, path: str, action: str, *, detail: str = "") -> None:
        """Record a comparison checkout lifecycle step."""
        self._log.append(
            CheckoutEvent(
                path=path,
                action=action,  # type: ignore[arg-type]
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )

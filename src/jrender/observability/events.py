"""Unified event model for render observability.

Defines event types for the render pipeline, live sessions, and comparison
checkouts.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Render pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenderCompleted:
    """A source file was evaluated and converted.

    Attributes:
        path: Absolute path to the rendered source file.
        documents: Number of documents in the output.
        evaluate_ms: Time spent in the evaluator.
        parse_ms: Time spent parsing evaluator output.
        convert_ms: Time spent in the converter (all documents).
        total_ms: End-to-end render time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    documents: int
    evaluate_ms: float
    parse_ms: float
    convert_ms: float
    total_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CommandFailed:
    """A user-facing command reported an error.

    Attributes:
        command: Which trigger failed.
        path: Source file the command was invoked on.
        error: The message shown to the user.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    command: Literal["render", "compare", "live"]
    path: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Live session events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """A live preview session changed state.

    Attributes:
        path: Source file of the session.
        uri: The session's synthetic identifier.
        action: What happened.
        dependencies: Size of the dependency set at the time of the event.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    uri: str
    action: Literal["opened", "updated", "superseded", "failed", "closed"]
    dependencies: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Comparison checkout events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CheckoutEvent:
    """A disposable HEAD checkout was created or removed.

    Attributes:
        path: Checkout directory.
        action: Lifecycle step.
        detail: Error text for ``cleanup_failed``, empty otherwise.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    action: Literal["created", "removed", "cleanup_failed"]
    detail: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

StackEvent: TypeAlias = "RenderCompleted | CommandFailed | SessionEvent | CheckoutEvent"


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()

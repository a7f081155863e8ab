"""Save events — message passing from a file-watch source to subscribers.

The host (or the filesystem watcher in CLI mode) publishes one event per
saved file.  Subscribers receive every event and decide for themselves
whether it concerns them.  ``subscribe`` returns a ``Subscription`` whose
``dispose`` detaches the handler; disposing twice is a no-op.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable

SaveHandler: TypeAlias = "Callable[[Path], None]"


class Subscription:
    """Handle for a registered callback.

    Args:
        on_dispose: Called once, on the first ``dispose()``.

    """

    __slots__ = ("_on_dispose",)

    def __init__(self, on_dispose: Callable[[], None]) -> None:
        self._on_dispose: Callable[[], None] | None = on_dispose

    @property
    def disposed(self) -> bool:
        """Whether ``dispose()`` has been called."""
        return self._on_dispose is None

    def dispose(self) -> None:
        """Detach the callback."""
        callback, self._on_dispose = self._on_dispose, None
        if callback is not None:
            callback()


class SaveEvents:
    """Fan-out of file-saved notifications.

    Handlers run synchronously in publication order and must not block;
    live sessions only enqueue the path for their own consumer task.

    """

    def __init__(self) -> None:
        self._handlers: dict[int, SaveHandler] = {}
        self._next_id = 0

    @property
    def subscriber_count(self) -> int:
        """Number of attached handlers."""
        return len(self._handlers)

    def subscribe(self, handler: SaveHandler) -> Subscription:
        """Attach *handler*; keep the returned subscription to detach it."""
        key = self._next_id
        self._next_id += 1
        self._handlers[key] = handler
        return Subscription(lambda: self._handlers.pop(key, None))

    def publish(self, path: Path | str) -> int:
        """Deliver a save of *path* to every handler.

        Returns:
            Number of handlers notified.

        """
        saved = Path(os.path.abspath(path))
        # Snapshot: a handler may dispose subscriptions while we iterate.
        handlers = list(self._handlers.values())
        for handler in handlers:
            handler(saved)
        return len(handlers)

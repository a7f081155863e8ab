"""File watcher — turns filesystem writes into save events.

Used when jrender runs outside an editor: there is no host to report
saves, so the directories holding the previewed file and its dependencies
are watched with watchfiles and every written file is published to
``SaveEvents``.  Live sessions filter the events against their own
dependency sets.

The watched set can change while running (a save may add an import from a
directory nobody watched yet); ``update()`` restarts ``awatch`` on the new
set.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jrender.reactive.saves import SaveEvents

# Editors that save atomically produce "added" for the replacement file.
_SAVE_CHANGES = frozenset({Change.added, Change.modified})


def saved_paths(raw_changes: Iterable[tuple[Change, str]]) -> list[Path]:
    """Paths written in one watchfiles batch, deduplicated, in sorted order."""
    return sorted({Path(p) for change, p in raw_changes if change in _SAVE_CHANGES})


def covering_paths(paths: Iterable[Path]) -> tuple[Path, ...]:
    """Existing *paths* with any path nested inside another one removed.

    Watching is recursive, so ``/w`` already covers ``/w/lib``.
    """
    existing = sorted({p for p in paths if p.exists()}, key=lambda p: len(p.parts))
    kept: list[Path] = []
    for path in existing:
        if not any(path.is_relative_to(parent) for parent in kept):
            kept.append(path)
    return tuple(sorted(kept))


class FileWatcher:
    """Publishes a save event for every file written under the watched paths.

    Args:
        saves: Destination for save events.
        paths: Directories (or files) to watch recursively.
        debounce: Milliseconds to group rapid writes into one batch.

    """

    def __init__(
        self,
        saves: SaveEvents,
        paths: Iterable[Path],
        *,
        debounce: int = 300,
    ) -> None:
        self._saves = saves
        self._paths = covering_paths(paths)
        self._debounce = debounce
        self._stop_event = asyncio.Event()
        self._restart_event = asyncio.Event()

    @property
    def paths(self) -> tuple[Path, ...]:
        """Watched paths (missing and nested ones are dropped)."""
        return self._paths

    def update(self, paths: Iterable[Path]) -> bool:
        """Replace the watched paths.  Returns True if the set changed."""
        new_paths = covering_paths(paths)
        if new_paths == self._paths:
            return False
        self._paths = new_paths
        self._restart_event.set()
        return True

    def stop(self) -> None:
        """Ask ``run()`` to return after the current batch."""
        self._stop_event.set()
        self._restart_event.set()

    async def run(self) -> None:
        """Watch until ``stop()`` is called."""
        while not self._stop_event.is_set():
            self._restart_event.clear()
            if not self._paths:
                return
            async for raw_changes in awatch(
                *self._paths,
                stop_event=self._restart_event,
                debounce=self._debounce,
                step=100,
            ):
                for path in saved_paths(raw_changes):
                    self._saves.publish(path)

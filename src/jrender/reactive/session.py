"""Live preview sessions — re-render on save, in place.

One session per source file.  A session owns:

- a stable synthetic URI (the open view updates instead of opening new tabs)
- the current dependency set, recomputed before every re-render
- a save-event subscription, disposed exactly once at teardown
- a queue of relevant saves, drained by the session's own consumer task

Updates within a session are serialised.  Saves that pile up while a render
is running are coalesced into one follow-up render, and a result that was
overtaken by a newer save is dropped instead of published, so the view
always converges on the latest save.

A failed re-render is reported and the session keeps watching: the next
save after a fix recovers it.  The only way out is ``close()``, driven by
the host closing the document.
"""

from __future__ import annotations

import asyncio
import os
import sys
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from jrender._errors import JrenderError
from jrender.reactive.uris import VirtualUri, live_uri
from jrender.render.dependencies import collect_dependencies

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jrender._types import Reporter
    from jrender.observability.collector import RenderCollector
    from jrender.reactive.registry import VirtualDocumentRegistry
    from jrender.reactive.saves import SaveEvents, Subscription
    from jrender.render.pipeline import RenderPipeline


def _print_warning(message: str) -> None:
    print(f"  {message}", file=sys.stderr)


@dataclass(slots=True)
class LiveSession:
    """State of one live preview.

    Attributes:
        source: Absolute path of the previewed file.
        uri: Synthetic identifier, fixed for the session's lifetime.
        dependencies: Files whose save triggers a re-render (includes source).
        subscription: Save-event subscription; None once torn down.
        queue: Pending save paths; ``None`` tells the consumer to exit.
        lock: Held while rendering, so renders never overlap.
        task: Consumer task draining ``queue``.
        closed: Set at teardown; a closed session publishes nothing.

    """

    source: Path
    uri: VirtualUri
    dependencies: frozenset[Path]
    subscription: Subscription | None = None
    queue: asyncio.Queue[Path | None] = field(default_factory=asyncio.Queue)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    task: asyncio.Task[None] | None = None
    closed: bool = False

    def is_relevant(self, path: Path) -> bool:
        """Whether a save of *path* should re-render this session."""
        return path == self.source or path in self.dependencies


class SessionManager:
    """Creates, updates, and tears down live preview sessions.

    Args:
        registry: Where rendered content is published.
        saves: Source of file-saved notifications.
        pipeline: Renders the source file.
        search_paths: Library directories for import resolution.
        report: Receives warnings for failed save-triggered renders.
        collector: Optional event collector.

    """

    def __init__(
        self,
        registry: VirtualDocumentRegistry,
        saves: SaveEvents,
        pipeline: RenderPipeline,
        *,
        search_paths: Iterable[Path] = (),
        report: Reporter = _print_warning,
        collector: RenderCollector | None = None,
    ) -> None:
        self._registry = registry
        self._saves = saves
        self._pipeline = pipeline
        self._search_paths = tuple(search_paths)
        self._report = report
        self._collector = collector
        self._sessions: dict[Path, LiveSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, source: Path) -> LiveSession | None:
        """The active session for *source*, if any."""
        return self._sessions.get(Path(os.path.abspath(source)))

    def find(self, uri: VirtualUri | str) -> LiveSession | None:
        """The active session presenting *uri*, if any."""
        key = str(uri)
        for session in self._sessions.values():
            if str(session.uri) == key:
                return session
        return None

    async def open(self, source: Path) -> VirtualUri:
        """Start (or refresh) the live preview of *source*.

        A new session is registered before its first render; if that render
        fails the session is torn down again and the error propagates.  For
        an existing session a failure propagates but the session survives.

        Raises:
            JrenderError: The render failed.

        """
        source = Path(os.path.abspath(source))
        session = self._sessions.get(source)
        if session is not None:
            await self._render_and_publish(session)
            return session.uri

        session = LiveSession(
            source=source,
            uri=live_uri(source),
            dependencies=frozenset({source}),
        )
        self._sessions[source] = session
        session.subscription = self._saves.subscribe(partial(self._on_save, session))
        session.task = asyncio.create_task(self._consume(session))

        try:
            session.dependencies = await collect_dependencies(
                source, search_paths=self._search_paths,
            )
            await self._render_and_publish(session)
        except JrenderError:
            self._teardown(session)
            raise

        self._record(session, "opened")
        return session.uri

    def close(self, uri: VirtualUri | str) -> bool:
        """Tear down the session presenting *uri*.  Returns False if none does."""
        session = self.find(uri)
        if session is None:
            return False
        self._teardown(session)
        return True

    async def close_all(self) -> None:
        """Tear down every session and wait for in-flight renders to settle."""
        sessions = list(self._sessions.values())
        for session in sessions:
            self._teardown(session)
        tasks = [s.task for s in sessions if s.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ----- internals -----

    def _on_save(self, session: LiveSession, path: Path) -> None:
        if not session.closed and session.is_relevant(path):
            session.queue.put_nowait(path)

    def _teardown(self, session: LiveSession) -> None:
        if session.closed:
            return
        session.closed = True
        if session.subscription is not None:
            session.subscription.dispose()
            session.subscription = None
        # In-flight renders are not aborted; the closed flag stops publication.
        session.queue.put_nowait(None)
        self._sessions.pop(session.source, None)
        self._record(session, "closed")

    async def _consume(self, session: LiveSession) -> None:
        """Drain the session's save queue until teardown."""
        while True:
            trigger = await session.queue.get()
            # Coalesce saves that arrived while we were idle or rendering.
            while trigger is not None and not session.queue.empty():
                trigger = session.queue.get_nowait()
            if trigger is None or session.closed:
                return
            try:
                await self._update(session)
            except Exception as exc:
                print(f"  Live preview error: {exc}", file=sys.stderr)

    async def _update(self, session: LiveSession) -> None:
        """Save-triggered refresh: rescan imports, render, publish."""
        async with session.lock:
            session.dependencies = await collect_dependencies(
                session.source, search_paths=self._search_paths,
            )
            try:
                text = await self._pipeline.render(session.source)
            except JrenderError as exc:
                if session.closed:
                    return
                self._record(session, "failed")
                if self._collector is not None:
                    self._collector.record_failure("live", str(session.source), str(exc))
                self._report(f"Render failed: {exc}")
                return

            if session.closed:
                return
            if not session.queue.empty():
                # A newer save is queued; its render replaces this one.
                self._record(session, "superseded")
                return
            self._registry.set(session.uri, text)
            self._record(session, "updated")

    async def _render_and_publish(self, session: LiveSession) -> None:
        async with session.lock:
            text = await self._pipeline.render(session.source)
            if not session.closed:
                self._registry.set(session.uri, text)

    def _record(self, session: LiveSession, action: str) -> None:
        if self._collector is not None:
            self._collector.record_session(
                str(session.source),
                str(session.uri),
                action,
                dependencies=len(session.dependencies),
            )

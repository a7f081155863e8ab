"""Jrender application — wires the render, compare, and live-preview triggers.

``Renderer`` owns every piece of process-scoped state (document registry,
save events, live sessions, event log) and hands it by reference to the
components that need it.  A ``Host`` supplies the presentation side: the
editor integration, or the terminal host in ``jrender._cli``.

Every trigger reports its failure once through the host and returns None;
nothing raises into the host.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Literal, Protocol, TypeAlias

from jrender._errors import InvalidInput, JrenderError, ToolUnavailable
from jrender.compare.orchestrator import CompareOrchestrator
from jrender.observability.collector import RenderCollector
from jrender.process import missing_tools, run_command
from jrender.reactive.registry import VirtualDocumentRegistry
from jrender.reactive.saves import SaveEvents
from jrender.reactive.session import SessionManager
from jrender.reactive.uris import SCHEME, VirtualUri, local_timestamp, one_shot_uri
from jrender.render.pipeline import RenderPipeline

if TYPE_CHECKING:
    from jrender._types import Runner
    from jrender.config import JrenderConfig

Command: TypeAlias = 'Literal["render", "compare", "live"]'

_FAILURE_PREFIX: dict[Command, str] = {
    "render": "Render failed",
    "compare": "Compare failed",
    "live": "Render failed",
}


class Host(Protocol):
    """What jrender needs from the environment presenting its documents."""

    def workspace_root(self, path: Path) -> Path | None:
        """Workspace folder containing *path*, or None if it is outside all of them."""
        ...

    async def show_document(self, uri: VirtualUri, *, beside: bool = False) -> None:
        """Open the registered document *uri*."""
        ...

    async def show_diff(self, original: VirtualUri, current: VirtualUri, title: str) -> None:
        """Present two registered documents side by side."""
        ...

    def show_error(self, message: str) -> None: ...

    def show_warning(self, message: str) -> None: ...


class Renderer:
    """Top-level orchestrator for one host.

    Call ``activate()`` once before any trigger: it probes the external tools
    and leaves the renderer disabled (with one warning) if any is missing.

    Args:
        host: Presentation side.
        config: Tools and paths.
        registry: Document registry; a fresh one unless shared with the host.
        runner: Process runner for every external tool.
        collector: Event collector; a fresh one by default.

    """

    def __init__(
        self,
        host: Host,
        config: JrenderConfig,
        *,
        registry: VirtualDocumentRegistry | None = None,
        runner: Runner = run_command,
        collector: RenderCollector | None = None,
    ) -> None:
        self.host = host
        self.config = config
        self.registry = registry if registry is not None else VirtualDocumentRegistry()
        self.saves = SaveEvents()
        self.collector = collector if collector is not None else RenderCollector()
        self._runner = runner

        self.pipeline = RenderPipeline(config, runner=runner, collector=self.collector)
        self.sessions = SessionManager(
            self.registry,
            self.saves,
            self.pipeline,
            search_paths=config.jpath,
            report=host.show_warning,
            collector=self.collector,
        )
        self.orchestrator = CompareOrchestrator(
            config,
            self.pipeline,
            self.registry,
            runner=runner,
            collector=self.collector,
        )

        self._disabled_reason: str | None = "Jrender has not been activated."
        self._compare_disabled_reason: str | None = None

    @property
    def enabled(self) -> bool:
        """Whether ``activate()`` found every required tool."""
        return self._disabled_reason is None

    async def activate(self) -> bool:
        """Probe the evaluator, converter, and VCS binaries.

        Returns:
            False if the evaluator or converter is missing (everything is
            disabled); a missing VCS binary only disables ``compare``.

        """
        missing = await missing_tools(self.config.required_tools, runner=self._runner)
        if missing:
            self._disabled_reason = (
                f"Jrender: Missing required tools: {', '.join(missing)}. "
                "Please install them and reload."
            )
            self.host.show_warning(self._disabled_reason)
            return False
        self._disabled_reason = None

        if await missing_tools([self.config.vcs], runner=self._runner):
            self._compare_disabled_reason = (
                f"Jrender: {self.config.vcs} is not available; compare is disabled."
            )
            self.host.show_warning(self._compare_disabled_reason)
        return True

    # ----- triggers -----

    async def render(self, path: Path | str) -> VirtualUri | None:
        """Render *path* into a new timestamped document and show it."""
        source = Path(os.path.abspath(path))
        try:
            self._check_ready(source)
            text = await self.pipeline.render(source)
        except JrenderError as exc:
            self._fail("render", source, exc)
            return None

        timestamp = local_timestamp()
        serial = self.registry.vacant_serial(
            lambda n: [one_shot_uri("rendered", source, timestamp, n)],
        )
        uri = one_shot_uri("rendered", source, timestamp, serial)
        self.registry.set(uri, text)
        await self.host.show_document(uri)
        return uri

    async def compare(self, path: Path | str) -> tuple[VirtualUri, VirtualUri] | None:
        """Show the HEAD render of *path* next to its working-tree render."""
        source = Path(os.path.abspath(path))
        try:
            self._check_ready(source)
            if self._compare_disabled_reason is not None:
                raise ToolUnavailable(self._compare_disabled_reason)
            workspace_root = self.host.workspace_root(source)
            if workspace_root is None:
                raise InvalidInput("File must be inside a workspace folder.")
            comparison = await self.orchestrator.compare(source, workspace_root)
        except JrenderError as exc:
            self._fail("compare", source, exc)
            return None

        await self.host.show_diff(comparison.original_uri, comparison.current_uri, comparison.title)
        return comparison.original_uri, comparison.current_uri

    async def live_preview(self, path: Path | str) -> VirtualUri | None:
        """Open (or refresh) the live preview of *path* beside the editor."""
        source = Path(os.path.abspath(path))
        try:
            self._check_ready(source)
            uri = await self.sessions.open(source)
        except JrenderError as exc:
            self._fail("live", source, exc)
            return None

        await self.host.show_document(uri, beside=True)
        return uri

    # ----- host notifications -----

    def provide(self, uri: VirtualUri | str) -> str:
        """Content-provider read: registered text, or ``""``."""
        return self.registry.get(uri)

    def document_closed(self, uri: VirtualUri | str) -> bool:
        """Release a closed ``rendered:`` document and any live session behind it.

        Returns:
            True if the URI belonged to jrender.

        """
        parsed = uri if isinstance(uri, VirtualUri) else VirtualUri.parse(uri)
        if parsed.scheme != SCHEME:
            return False
        self.registry.delete(parsed)
        self.sessions.close(parsed)
        return True

    def file_saved(self, path: Path | str) -> int:
        """Forward a save notification to live sessions."""
        return self.saves.publish(path)

    async def shutdown(self) -> None:
        """Close every live session."""
        await self.sessions.close_all()

    # ----- internals -----

    def _check_ready(self, source: Path) -> None:
        if not self.config.is_supported(source):
            raise InvalidInput("Not a Jsonnet/libsonnet file.")
        if self._disabled_reason is not None:
            raise ToolUnavailable(self._disabled_reason)

    def _fail(self, command: Command, source: Path, exc: JrenderError) -> None:
        if isinstance(exc, (InvalidInput, ToolUnavailable)):
            message = str(exc)
        else:
            message = f"{_FAILURE_PREFIX[command]}: {exc}"
        self.collector.record_failure(command, str(source), message)
        self.host.show_error(message)

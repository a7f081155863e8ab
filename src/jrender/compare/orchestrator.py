"""Version-compare orchestrator — working tree vs. HEAD, rendered.

Strictly ordered:
    1. Resolve the repository root and the file's path relative to it
    2. Check out HEAD into a disposable directory
    3. Render the checkout's copy ("original"), then the working copy ("current")
    4. Remove the checkout (always, even if a render failed)
    5. Publish both renders to the registry

Nothing is published when any step before cleanup fails.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from jrender._errors import InvalidInput
from jrender.compare.checkout import HeadCheckout
from jrender.process import run_command
from jrender.reactive.uris import local_timestamp, one_shot_uri

if TYPE_CHECKING:
    from jrender._types import Runner
    from jrender.config import JrenderConfig
    from jrender.observability.collector import RenderCollector
    from jrender.reactive.registry import VirtualDocumentRegistry
    from jrender.reactive.uris import VirtualUri
    from jrender.render.pipeline import RenderPipeline


@dataclass(frozen=True, slots=True)
class Comparison:
    """Both sides of a comparison, already stored in the registry.

    Attributes:
        original_uri: Render of the file as committed at HEAD.
        current_uri: Render of the working-tree file.
        title: Caption for the side-by-side view.
        relative_path: The file's path inside the repository.

    """

    original_uri: VirtualUri
    current_uri: VirtualUri
    title: str
    relative_path: str


class CompareOrchestrator:
    """Renders a file at HEAD and in the working tree.

    Args:
        config: VCS binary and checkout location.
        pipeline: Renders each side.
        registry: Receives the two renders.
        runner: Process runner for VCS calls.
        collector: Optional event collector.

    """

    def __init__(
        self,
        config: JrenderConfig,
        pipeline: RenderPipeline,
        registry: VirtualDocumentRegistry,
        *,
        runner: Runner = run_command,
        collector: RenderCollector | None = None,
    ) -> None:
        self._config = config
        self._pipeline = pipeline
        self._registry = registry
        self._runner = runner
        self._collector = collector

    async def repository_root(self, workspace_root: Path) -> Path:
        """Top-level directory of the repository containing *workspace_root*."""
        top = await self._runner(
            self._config.vcs,
            ["rev-parse", "--show-toplevel"],
            cwd=workspace_root,
        )
        return Path(top).resolve()

    async def compare(self, path: Path, workspace_root: Path) -> Comparison:
        """Render *path* at HEAD and as saved, and publish both.

        Raises:
            InvalidInput: The file is not inside the repository.
            ExecutionFailure: A VCS or render process failed.
            ParseFailure: The evaluator produced invalid JSON.

        """
        current = Path(os.path.abspath(path))
        repo_root = await self.repository_root(workspace_root)
        try:
            relative = current.resolve().relative_to(repo_root)
        except ValueError as exc:
            msg = f"{current} is not inside repository {repo_root}"
            raise InvalidInput(msg) from exc

        async with HeadCheckout(
            repo_root,
            parent=self._config.checkout_parent,
            vcs=self._config.vcs,
            runner=self._runner,
            collector=self._collector,
        ) as checkout:
            original_text = await self._pipeline.render(checkout / relative)
            current_text = await self._pipeline.render(current)

        timestamp = local_timestamp()
        # One serial for both sides of the pair.
        serial = self._registry.vacant_serial(
            lambda n: [
                one_shot_uri("original", current, timestamp, n),
                one_shot_uri("current", current, timestamp, n),
            ],
        )
        original_uri = one_shot_uri("original", current, timestamp, serial)
        current_uri = one_shot_uri("current", current, timestamp, serial)
        self._registry.set(original_uri, original_text)
        self._registry.set(current_uri, current_text)

        return Comparison(
            original_uri=original_uri,
            current_uri=current_uri,
            title=f"Diff: original ↔ current ({current.stem})",
            relative_path=relative.as_posix(),
        )

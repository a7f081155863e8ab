"""Render pipeline — Jsonnet source to multi-document YAML.

Flow for one render:
    1. Run the evaluator on the source file (JSON on stdout)
    2. Parse the JSON; a parse error is the evaluator's fault, not the caller's
    3. Split the value into documents (list-kind convention)
    4. Pipe each document through the converter, in order
    5. Join the converted documents with a separator line

List-kind convention:
    - a top-level array is one document per element
    - an object whose ``items`` field is an array is one document per item
    - anything else is a single document
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from jrender._errors import ParseFailure
from jrender.observability.profiler import RenderProfiler
from jrender.process import run_command

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from jrender._types import Runner
    from jrender.config import JrenderConfig
    from jrender.observability.collector import RenderCollector


def split_documents(data: Any) -> list[Any]:
    """Split one evaluation result into its logical documents, preserving order."""
    if isinstance(data, list):
        return list(data)
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return list(data["items"])
    return [data]


def join_documents(texts: Iterable[str], separator: str = "---") -> str:
    """Join rendered documents with a separator line between consecutive ones."""
    return f"\n{separator}\n".join(texts)


class RenderPipeline:
    """Evaluates, splits, and converts Jsonnet sources.

    Stateless apart from its configuration: concurrent renders of different
    files share one pipeline safely.

    Args:
        config: Tool names and arguments.
        runner: Process runner (``run_command`` unless a test substitutes one).
        collector: Optional event collector for render timings.

    """

    def __init__(
        self,
        config: JrenderConfig,
        *,
        runner: Runner = run_command,
        collector: RenderCollector | None = None,
    ) -> None:
        self._config = config
        self._runner = runner
        self._collector = collector

    def evaluator_argv(self, path: Path) -> list[str]:
        """Arguments for the evaluator when rendering *path*."""
        args = list(self._config.evaluator_args)
        for directory in self._config.jpath:
            args.extend(["-J", str(directory)])
        args.append(str(path))
        return args

    async def evaluate(self, path: Path, *, profiler: RenderProfiler | None = None) -> Any:
        """Run the evaluator on *path* and return the parsed value.

        Raises:
            ExecutionFailure: The evaluator exited non-zero.
            ParseFailure: The evaluator's output was not JSON.

        """
        if profiler is not None:
            profiler.start("evaluate")
        raw = await self._runner(self._config.evaluator, self.evaluator_argv(path))
        if profiler is not None:
            profiler.stop("evaluate")
            profiler.start("parse")
        try:
            data = json.loads(raw)
        except ValueError as exc:
            msg = f"Failed to parse JSON output from {self._config.evaluator}."
            raise ParseFailure(msg) from exc
        if profiler is not None:
            profiler.stop("parse")
        return data

    async def convert(self, document: Any) -> str:
        """Serialize one document through the converter."""
        return await self._runner(
            self._config.converter,
            list(self._config.converter_args),
            input=json.dumps(document),
        )

    async def render(self, path: Path) -> str:
        """Render *path* to separator-joined YAML documents."""
        profiler = RenderProfiler(self._collector, str(path), verbose=self._config.verbose)
        data = await self.evaluate(path, profiler=profiler)
        documents = split_documents(data)

        rendered: list[str] = []
        for document in documents:
            profiler.start("convert")
            rendered.append(await self.convert(document))
            profiler.stop("convert")

        profiler.finish(documents=len(rendered))
        return join_documents(rendered, self._config.separator)

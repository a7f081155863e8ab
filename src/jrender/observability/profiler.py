"""Render profiler — measures per-stage render latency.

Records evaluate/parse/convert timing for one render and emits a
``RenderCompleted`` event through the collector.

Thread Safety:
    One profiler per render call; never shared.

"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import PurePath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jrender.observability.collector import RenderCollector
    from jrender.observability.events import RenderCompleted


@dataclass(slots=True)
class _Timer:
    """Accumulates timing for a named render stage."""

    name: str
    _start: float = 0.0
    elapsed_ms: float = 0.0

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> None:
        # Accumulates: convert runs once per document.
        if self._start > 0:
            self.elapsed_ms += (time.perf_counter() - self._start) * 1000
            self._start = 0.0


class RenderProfiler:
    """Records per-stage timing for a single render.

    Usage::

        profiler = RenderProfiler(collector, "main.jsonnet")
        profiler.start("evaluate")
        # ... run evaluator ...
        profiler.stop("evaluate")
        profiler.finish(documents=2)

    After ``finish()``, a ``RenderCompleted`` event is recorded and, when
    verbose, a one-line summary is printed to stderr.

    """

    __slots__ = ("_collector", "_path", "_t0", "_timers", "_verbose")

    def __init__(
        self,
        collector: RenderCollector | None,
        path: str,
        *,
        verbose: bool = False,
    ) -> None:
        self._collector = collector
        self._path = path
        self._verbose = verbose
        self._t0 = time.perf_counter()
        self._timers = {name: _Timer(name=name) for name in ("evaluate", "parse", "convert")}

    def start(self, stage: str) -> None:
        """Start timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.start()

    def stop(self, stage: str) -> None:
        """Stop timing a named stage."""
        timer = self._timers.get(stage)
        if timer is not None:
            timer.stop()

    def elapsed(self, stage: str) -> float:
        """Milliseconds accumulated for *stage* so far."""
        return self._timers[stage].elapsed_ms

    def finish(self, *, documents: int) -> RenderCompleted | None:
        """Finish profiling and record the render.

        Returns the recorded event, or None without a collector.

        """
        total_ms = (time.perf_counter() - self._t0) * 1000
        if self._verbose:
            self._print_summary(documents, total_ms)
        if self._collector is None:
            return None
        return self._collector.record_render(
            self._path,
            documents=documents,
            evaluate_ms=self.elapsed("evaluate"),
            parse_ms=self.elapsed("parse"),
            convert_ms=self.elapsed("convert"),
            total_ms=total_ms,
        )

    def _print_summary(self, documents: int, total_ms: float) -> None:
        """Print a one-line timing summary to stderr."""
        name = PurePath(self._path).name
        noun = "document" if documents == 1 else "documents"
        stages = (
            f"evaluate: {self.elapsed('evaluate'):.0f}ms, "
            f"parse: {self.elapsed('parse'):.0f}ms, "
            f"convert: {self.elapsed('convert'):.0f}ms"
        )
        print(
            f"  [{total_ms:.0f}ms] {name} -> {documents} {noun} ({stages})",
            file=sys.stderr,
        )

"""Disposable HEAD checkouts for comparisons.

``HeadCheckout`` is an async context manager around ``git worktree add``:
the checkout exists only inside the ``async with`` block and is removed on
exit, whether or not the block raised.  Cleanup problems are printed and
recorded, never raised, so they cannot mask the comparison's own result.
"""

from __future__ import annotations

import asyncio
import shutil
import sys
import time
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from jrender._errors import CleanupFailure, ExecutionFailure
from jrender.process import run_command

if TYPE_CHECKING:
    from types import TracebackType

    from jrender._types import Runner
    from jrender.observability.collector import RenderCollector


def checkout_path(parent: Path) -> Path:
    """A fresh, collision-resistant checkout directory name under *parent*."""
    millis = time.time_ns() // 1_000_000
    return parent / f"jrender-head-{millis}-{uuid.uuid4().hex[:8]}"


class HeadCheckout:
    """A throwaway working tree of *repo_root* pinned at HEAD.

    Usage::

        async with HeadCheckout(repo_root, parent=tmp) as checkout:
            original = checkout / "deploy/main.jsonnet"

    Args:
        repo_root: Repository whose HEAD is checked out.
        parent: Directory that will contain the checkout.
        vcs: Version-control binary.
        runner: Process runner.
        collector: Optional event collector.

    """

    def __init__(
        self,
        repo_root: Path,
        *,
        parent: Path,
        vcs: str = "git",
        runner: Runner = run_command,
        collector: RenderCollector | None = None,
    ) -> None:
        self._repo_root = repo_root
        self._vcs = vcs
        self._runner = runner
        self._collector = collector
        self.path = checkout_path(parent)

    async def __aenter__(self) -> Path:
        try:
            await self._runner(
                self._vcs,
                ["worktree", "add", "--detach", str(self.path), "HEAD"],
                cwd=self._repo_root,
            )
        except BaseException:
            # A half-created directory must not outlive the failed attempt.
            failure = await self._remove_directory()
            if failure is not None:
                print(f"  Cleanup error: {self.path.name}: {failure}", file=sys.stderr)
                self._record("cleanup_failed", detail=str(failure))
            raise
        self._record("created")
        return self.path

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.cleanup()

    async def cleanup(self) -> list[CleanupFailure]:
        """Remove the worktree registration and the directory.

        Returns:
            The problems encountered (already printed and recorded).

        """
        failures: list[CleanupFailure] = []
        unregistered = True
        try:
            await self._runner(
                self._vcs,
                ["worktree", "remove", "--force", str(self.path)],
                cwd=self._repo_root,
            )
        except ExecutionFailure as exc:
            unregistered = False
            failures.append(CleanupFailure(f"worktree remove: {exc}"))

        failure = await self._remove_directory()
        if failure is not None:
            failures.append(failure)

        if not unregistered:
            # Registration of a directory that is gone can be pruned.
            try:
                await self._runner(self._vcs, ["worktree", "prune"], cwd=self._repo_root)
            except ExecutionFailure as exc:
                failures.append(CleanupFailure(f"worktree prune: {exc}"))

        for failure in failures:
            print(f"  Cleanup error: {self.path.name}: {failure}", file=sys.stderr)
            self._record("cleanup_failed", detail=str(failure))
        if not failures:
            self._record("removed")
        return failures

    async def _remove_directory(self) -> CleanupFailure | None:
        if not self.path.exists():
            return None
        try:
            await asyncio.to_thread(shutil.rmtree, self.path)
        except OSError as exc:
            return CleanupFailure(f"remove {self.path}: {exc}")
        return None

    def _record(self, action: str, *, detail: str = "") -> None:
        if self._collector is not None:
            self._collector.record_checkout(str(self.path), action, detail=detail)

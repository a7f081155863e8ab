"""Jrender CLI — jrender render / jrender compare / jrender watch.

Entry point for the ``jrender`` command-line interface.  The terminal plays
the host: documents are printed to stdout, diffs as unified diffs, and
errors and warnings go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import difflib
import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from jrender._errors import ConfigError

if TYPE_CHECKING:
    from jrender.app import Renderer
    from jrender.config import JrenderConfig
    from jrender.observability.log import EventLog
    from jrender.reactive.registry import VirtualDocumentRegistry
    from jrender.reactive.uris import VirtualUri


class TerminalHost:
    """Host implementation that writes to the terminal.

    Args:
        registry: Registry the renderer publishes into.
        root: The single workspace folder.
        out: Stream for documents and diffs.
        err: Stream for errors, warnings, and update banners.

    """

    def __init__(
        self,
        registry: VirtualDocumentRegistry,
        root: Path,
        *,
        out: TextIO | None = None,
        err: TextIO | None = None,
    ) -> None:
        self._registry = registry
        self._root = root
        self._out = out if out is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self.errors: list[str] = []

    def workspace_root(self, path: Path) -> Path | None:
        if path.is_relative_to(self._root):
            return self._root
        return None

    async def show_document(self, uri: VirtualUri, *, beside: bool = False) -> None:
        print(self._registry.get(uri), file=self._out, flush=True)

    async def show_diff(self, original: VirtualUri, current: VirtualUri, title: str) -> None:
        print(title, file=self._err)
        diff = difflib.unified_diff(
            self._registry.get(original).splitlines(),
            self._registry.get(current).splitlines(),
            fromfile=original.name,
            tofile=current.name,
            lineterm="",
        )
        lines = list(diff)
        if not lines:
            print("  No differences.", file=self._err)
            return
        print("\n".join(lines), file=self._out, flush=True)

    def show_error(self, message: str) -> None:
        self.errors.append(message)
        print(f"  Error: {message}", file=self._err)

    def show_warning(self, message: str) -> None:
        print(f"  Warning: {message}", file=self._err)

    def document_changed(self, uri: VirtualUri) -> None:
        """Registry listener: reprint a document after a live update."""
        stamp = time.strftime("%H:%M:%S")
        print(f"  [{stamp}] {uri.name} updated", file=self._err)
        print(self._registry.get(uri), file=self._out, flush=True)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the jrender CLI."""
    parser = argparse.ArgumentParser(
        prog="jrender",
        description="Render Jsonnet to YAML, live or against HEAD.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("file", help="Jsonnet or libsonnet source file")
    common.add_argument("--root", default=".", help="Workspace root directory")
    common.add_argument(
        "-J", "--jpath", action="append", default=[], help="Library search directory",
    )
    common.add_argument(
        "--verbose", action="store_true", help="Print render timings to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # jrender render
    subparsers.add_parser(
        "render", parents=[common], help="Render a file to YAML once",
    )

    # jrender compare
    subparsers.add_parser(
        "compare", parents=[common], help="Diff the HEAD render against the working copy",
    )

    # jrender watch
    watch_parser = subparsers.add_parser(
        "watch", parents=[common], help="Re-render whenever the file or its imports change",
    )
    watch_parser.add_argument(
        "--debounce", type=int, default=300, help="Milliseconds to group rapid saves",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from jrender import __version__

    return __version__


def _watch_paths(renderer: Renderer, file: Path) -> list[Path]:
    """Directories holding *file*, its tracked dependencies, and the libraries."""
    config = renderer.config
    session = renderer.sessions.get(file)
    files = session.dependencies if session is not None else {Path(os.path.abspath(file))}
    return [config.root, *config.jpath, *(path.parent for path in files)]


def _session_summary(log: EventLog) -> str:
    """One line of live-preview totals from the event log."""
    from jrender.observability.events import SessionEvent

    counts = log.action_counts(SessionEvent)
    return (
        f"  Live preview: {counts.get('updated', 0)} updated, "
        f"{counts.get('failed', 0)} failed, "
        f"{counts.get('superseded', 0)} superseded"
    )


async def _watch(renderer: Renderer, host: TerminalHost, file: Path, debounce: int) -> int:
    """Live preview until interrupted."""
    from jrender.reactive.watcher import FileWatcher

    uri = await renderer.live_preview(file)
    if uri is None:
        return 1

    watcher = FileWatcher(renderer.saves, _watch_paths(renderer, file), debounce=debounce)

    def refresh(_uri: VirtualUri) -> None:
        # Imports may have moved to directories nobody watches yet.
        watcher.update(_watch_paths(renderer, file))

    subscriptions = [
        renderer.registry.subscribe(host.document_changed),
        renderer.registry.subscribe(refresh),
    ]
    try:
        await watcher.run()
    finally:
        for subscription in subscriptions:
            subscription.dispose()
        renderer.document_closed(uri)
        await renderer.shutdown()
        if renderer.config.verbose:
            print(_session_summary(renderer.collector.log), file=sys.stderr)
    return 0


def _load_config(args: argparse.Namespace) -> JrenderConfig:
    """Config file under --root, overridden by flags.

    Like ``jsonnet -J``, relative library directories given on the command
    line are relative to the current directory, not to --root.
    """
    from jrender.config_loader import load_config

    jpath = tuple(Path(os.path.abspath(p)) for p in args.jpath)
    return load_config(
        Path(args.root),
        jpath=jpath or None,
        verbose=args.verbose or None,
    )


async def _run(args: argparse.Namespace) -> int:
    from jrender.app import Renderer
    from jrender.reactive.registry import VirtualDocumentRegistry

    config = _load_config(args)
    registry = VirtualDocumentRegistry()
    host = TerminalHost(registry, config.root)
    renderer = Renderer(host, config, registry=registry)

    if not await renderer.activate():
        return 1

    file = Path(args.file)
    if args.command == "render":
        await renderer.render(file)
    elif args.command == "compare":
        await renderer.compare(file)
    elif args.command == "watch":
        return await _watch(renderer, host, file, args.debounce)
    return 1 if host.errors else 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        code = asyncio.run(_run(args))
    except ConfigError as exc:
        print(f"  Config error: {exc}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()

"""Shared test fixtures for jrender."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from jrender._errors import ExecutionFailure
from jrender.config import JrenderConfig
from jrender.reactive.registry import VirtualDocumentRegistry
from jrender.reactive.uris import VirtualUri


@dataclass(frozen=True, slots=True)
class Call:
    """One recorded process invocation."""

    program: str
    args: tuple[str, ...]
    input: str | None
    cwd: Path | None


class FakeRunner:
    """Scripted stand-in for ``run_command``.

    Records every call.  *handler* receives the ``Call`` and returns stdout
    or raises ``ExecutionFailure``; without a handler every call prints "".
    """

    def __init__(self, handler: Callable[[Call], str] | None = None) -> None:
        self.calls: list[Call] = []
        self._handler = handler

    async def __call__(
        self,
        program: str,
        args: Any = (),
        *,
        input: str | None = None,  # noqa: A002
        cwd: Path | str | None = None,
    ) -> str:
        call = Call(program, tuple(args), input, Path(cwd) if cwd is not None else None)
        self.calls.append(call)
        if self._handler is None:
            return ""
        return self._handler(call)

    def calls_to(self, program: str) -> list[Call]:
        return [c for c in self.calls if c.program == program]


def to_yaml(document: Any) -> str:
    """Tiny YAML-ish serialization standing in for ``yq -P``."""
    if isinstance(document, dict):
        return "\n".join(f"{k}: {json.dumps(v)}" for k, v in document.items())
    return json.dumps(document)


def toolchain(
    evaluate: Callable[[Path], str],
    *,
    git: Callable[[Call], str] | None = None,
    missing: tuple[str, ...] = (),
) -> FakeRunner:
    """FakeRunner answering for jsonnet (via *evaluate*), yq, and optionally git.

    Programs named in *missing* fail to start, as if not installed.
    """

    def handler(call: Call) -> str:
        if call.program in missing:
            msg = f"{call.program}: No such file or directory"
            raise ExecutionFailure(msg, program=call.program)
        if call.args == ("--version",):
            return f"{call.program} v0"
        if call.program == "jsonnet":
            return evaluate(Path(call.args[-1]))
        if call.program == "yq":
            assert call.input is not None
            return to_yaml(json.loads(call.input))
        if call.program == "git" and git is not None:
            return git(call)
        msg = f"unexpected call: {call}"
        raise ExecutionFailure(msg, program=call.program, returncode=127)

    return FakeRunner(handler)


async def eventually(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll *predicate* on the running loop until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            msg = "condition not reached"
            raise AssertionError(msg)
        await asyncio.sleep(0.01)


def evaluate_files(call_path: Path) -> str:
    """Evaluator double: the file's own text is its JSON output."""
    return call_path.read_text()


class FakeHost:
    """Host that records what it was asked to present."""

    def __init__(self, registry: VirtualDocumentRegistry, root: Path | None) -> None:
        self.registry = registry
        self.root = root
        self.shown: list[tuple[VirtualUri, bool]] = []
        self.diffs: list[tuple[VirtualUri, VirtualUri, str]] = []
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def workspace_root(self, path: Path) -> Path | None:
        if self.root is not None and path.is_relative_to(self.root):
            return self.root
        return None

    async def show_document(self, uri: VirtualUri, *, beside: bool = False) -> None:
        self.shown.append((uri, beside))

    async def show_diff(self, original: VirtualUri, current: VirtualUri, title: str) -> None:
        self.diffs.append((original, current, title))

    def show_error(self, message: str) -> None:
        self.errors.append(message)

    def show_warning(self, message: str) -> None:
        self.warnings.append(message)


@pytest.fixture
def config(tmp_path: Path) -> JrenderConfig:
    """A JrenderConfig rooted at a temp directory."""
    return JrenderConfig(root=tmp_path)


@pytest.fixture
def registry() -> VirtualDocumentRegistry:
    return VirtualDocumentRegistry()


@pytest.fixture
def jsonnet_tree(tmp_path: Path) -> Path:
    """A small import graph: main -> lib/a -> lib/b -> lib/a (cycle), main -> data.txt.

    Returns the path of main.jsonnet.
    """
    lib = tmp_path / "lib"
    lib.mkdir()
    (tmp_path / "main.jsonnet").write_text(
        "local a = import 'lib/a.libsonnet';\n"
        "local raw = importstr \"data.txt\";\n"
        "{ a: a, raw: raw }\n"
    )
    (lib / "a.libsonnet").write_text("local b = import \"b.libsonnet\";\n{ b: b }\n")
    (lib / "b.libsonnet").write_text("local a = import('a.libsonnet');\n{}\n")
    (tmp_path / "data.txt").write_text("hello\n")
    return tmp_path / "main.jsonnet"

"""Dependency scanner — static discovery of a Jsonnet file's imports.

Finds every file reachable from a root source through ``import``,
``importstr`` and ``importbin`` statements written with a literal path.
This is a textual approximation: computed or conditional imports are not
resolved, and an import inside a comment is still followed.

The scan is an explicit worklist, so termination does not depend on the
call stack: each path is read at most once, which also makes import cycles
harmless.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jrender._types import SourcePath

# import "x", importstr 'x', importbin("x")
IMPORT_PATTERN = re.compile(r"""\bimport(?:str|bin)?\s*(?:\(\s*)?(["'])(?P<path>[^"'\n]+)\1""")


def find_imports(text: str) -> list[str]:
    """Return the literal import paths in *text*, in order of appearance."""
    return [match.group("path") for match in IMPORT_PATTERN.finditer(text)]


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except OSError:
        # e.g. EACCES on a parent directory or ENAMETOOLONG
        return False


def resolve_import(
    importer: Path,
    target: str,
    search_paths: Iterable[Path] = (),
) -> Path:
    """Resolve *target* as written in *importer* to an absolute path.

    Relative to the importing file's directory first; if nothing exists
    there, the first library search path that contains it wins.  When no
    candidate exists the relative resolution is returned anyway, so the
    missing file still shows up in the dependency set.

    """
    candidate = Path(os.path.normpath(importer.parent / target))
    if _exists(candidate):
        return candidate
    for directory in search_paths:
        fallback = Path(os.path.normpath(directory / target))
        if _exists(fallback):
            return fallback
    return candidate


def _scan_file(path: Path, search_paths: tuple[Path, ...]) -> list[Path]:
    """Read *path* and resolve its imports."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        # Missing or unreadable files contribute no further imports.
        return []
    return [resolve_import(path, target, search_paths) for target in find_imports(text)]


async def collect_dependencies(
    root: SourcePath,
    *,
    search_paths: Iterable[Path] = (),
) -> frozenset[Path]:
    """Return the transitive dependency set of *root*, including *root* itself.

    Args:
        root: Source file to scan from.
        search_paths: Library directories tried after the importer's directory.

    """
    libraries = tuple(search_paths)
    start = Path(os.path.abspath(root))
    visited: set[Path] = set()
    pending: list[Path] = [start]

    while pending:
        path = pending.pop()
        if path in visited:
            continue
        visited.add(path)

        for dep in await asyncio.to_thread(_scan_file, path, libraries):
            if dep not in visited:
                pending.append(dep)

    return frozenset(visited)

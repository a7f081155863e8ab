"""Shared type definitions for jrender."""

from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from pathlib import Path

# Path to a Jsonnet source file
SourcePath: TypeAlias = "Path"

# Serialized synthetic identifier, e.g. "rendered:live_x.yaml"
URIString: TypeAlias = "str"

# Async process runner: (program, args, *, input, cwd) -> stdout
Runner: TypeAlias = "Callable[..., Awaitable[str]]"

# Argument vector handed to an external program
Args: TypeAlias = "Sequence[str]"

# Sink for user-visible messages (errors, warnings)
Reporter: TypeAlias = "Callable[[str], Any]"

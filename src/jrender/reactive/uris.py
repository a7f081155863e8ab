"""Synthetic document identifiers under the ``rendered`` scheme.

One-shot renders and comparisons are timestamped, so every invocation gets
a fresh document.  Live previews derive their name from the source path,
so the identifier is stable for as long as the session lives and the open
view updates in place.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

SCHEME = "rendered"

_UNSAFE = re.compile(r"[^a-z0-9]", re.IGNORECASE)

Purpose: TypeAlias = 'Literal["rendered", "original", "current"]'


@dataclass(frozen=True, slots=True)
class VirtualUri:
    """An addressable name for generated content.

    Attributes:
        name: Opaque identifier, e.g. ``live__src_main_jsonnet.yaml``.
        scheme: URI scheme; always ``rendered`` for jrender documents.

    """

    name: str
    scheme: str = SCHEME

    def __str__(self) -> str:
        return f"{self.scheme}:{self.name}"

    @classmethod
    def parse(cls, value: str) -> VirtualUri:
        """Parse ``scheme:name``.  A value without a scheme has an empty one."""
        scheme, sep, name = value.partition(":")
        if not sep:
            return cls(name=value, scheme="")
        return cls(name=name, scheme=scheme)


def local_timestamp(now: float | None = None) -> str:
    """Local time as ``YYYY-MM-DD_HHMMSS``."""
    return time.strftime("%Y-%m-%d_%H%M%S", time.localtime(now))


def sanitize(path: Path | str) -> str:
    """Replace every character outside ``[A-Za-z0-9]`` with an underscore."""
    return _UNSAFE.sub("_", str(path))


def one_shot_uri(purpose: Purpose, source: Path, timestamp: str, serial: int = 1) -> VirtualUri:
    """Timestamped identifier, e.g. ``rendered_2024-01-31_120000_main.yaml``.

    A *serial* above 1 tells apart renders of same-named files (or of the
    same file) within one second: ``rendered_2024-01-31_120000_main_2.yaml``.
    """
    suffix = f"_{serial}" if serial > 1 else ""
    return VirtualUri(f"{purpose}_{timestamp}_{source.stem}{suffix}.yaml")


def live_uri(source: Path) -> VirtualUri:
    """Stable identifier for the live preview of *source*."""
    return VirtualUri(f"live_{sanitize(source)}.yaml")

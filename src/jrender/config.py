"""Jrender configuration.

JrenderConfig is the central configuration object, frozen after creation.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class JrenderConfig:
    """Configuration for a Jrender session.

    Attributes:
        root: Workspace root. Files outside it cannot be compared against HEAD.
              Always resolved to an absolute path on construction.
        evaluator: Jsonnet evaluator binary.
        evaluator_args: Extra arguments placed before the source path.
        converter: JSON-to-YAML converter binary (reads the document on stdin).
        converter_args: Arguments for the converter.
        vcs: Version-control binary used for the HEAD checkout.
        extensions: File suffixes accepted by render, compare and watch.
        jpath: Library search directories, passed to the evaluator as ``-J``
            and used as a fallback when resolving imports.
        separator: Document separator line between rendered documents.
        checkout_dir: Parent directory for disposable HEAD checkouts
            (None = system temp directory).
        verbose: Print a timing summary for every render.

    """

    root: Path = field(default_factory=Path.cwd)
    evaluator: str = "jsonnet"
    evaluator_args: tuple[str, ...] = ()
    converter: str = "yq"
    converter_args: tuple[str, ...] = ("-P",)
    vcs: str = "git"
    extensions: tuple[str, ...] = (".jsonnet", ".libsonnet")
    jpath: tuple[Path, ...] = ()
    separator: str = "---"
    checkout_dir: Path | None = None
    verbose: bool = False

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        resolved = tuple(p if p.is_absolute() else self.root / p for p in self.jpath)
        object.__setattr__(self, "jpath", resolved)

    @property
    def checkout_parent(self) -> Path:
        """Absolute directory that holds comparison checkouts."""
        if self.checkout_dir is None:
            return Path(tempfile.gettempdir())
        if self.checkout_dir.is_absolute():
            return self.checkout_dir
        return self.root / self.checkout_dir

    @property
    def required_tools(self) -> tuple[str, ...]:
        """Tools without which nothing can be rendered."""
        return (self.evaluator, self.converter)

    def is_supported(self, path: Path) -> bool:
        """Whether *path* has a Jsonnet or library file extension."""
        return path.name.endswith(self.extensions)

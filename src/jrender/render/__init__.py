"""Rendering — Jsonnet evaluation, document splitting, and import scanning."""

from jrender.render.dependencies import collect_dependencies, find_imports
from jrender.render.pipeline import RenderPipeline, join_documents, split_documents

__all__ = [
    "RenderPipeline",
    "collect_dependencies",
    "find_imports",
    "join_documents",
    "split_documents",
]

"""Jrender — Jsonnet rendering with live previews and HEAD comparisons.

Renders a Jsonnet file to YAML through the ``jsonnet`` evaluator and the
``yq`` converter, keeps a live preview in sync with the file and every file
it imports, and diffs the working-tree render against the render of the
last commit.

Quick start::

    import asyncio
    from pathlib import Path

    from jrender import JrenderConfig, Renderer

    renderer = Renderer(host, JrenderConfig(root=Path("deploy")))
    asyncio.run(renderer.activate())

Three triggers::

    await renderer.render("deploy/main.jsonnet")        # one-shot document
    await renderer.compare("deploy/main.jsonnet")       # HEAD vs. working tree
    await renderer.live_preview("deploy/main.jsonnet")  # re-render on save

The same triggers are available from the shell as ``jrender render``,
``jrender compare`` and ``jrender watch``.

"""

__version__ = "0.1.0"
__all__ = [
    "JrenderConfig",
    "Renderer",
    "__version__",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import jrender`` fast (``jrender --version`` needs nothing else).
    """
    if name == "JrenderConfig":
        from jrender.config import JrenderConfig

        return JrenderConfig

    if name == "Renderer":
        from jrender.app import Renderer

        return Renderer

    if name == "load_config":
        from jrender.config_loader import load_config

        return load_config

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)

"""Reactive layer — live previews and the documents they publish.

Connects file saves to re-renders through per-session dependency sets, and
stores every rendered result in the virtual document registry.
"""

from jrender.reactive.registry import VirtualDocumentRegistry
from jrender.reactive.saves import SaveEvents, Subscription
from jrender.reactive.session import LiveSession, SessionManager
from jrender.reactive.uris import VirtualUri, live_uri, one_shot_uri
from jrender.reactive.watcher import FileWatcher

__all__ = [
    "FileWatcher",
    "LiveSession",
    "SaveEvents",
    "SessionManager",
    "Subscription",
    "VirtualDocumentRegistry",
    "VirtualUri",
    "live_uri",
    "one_shot_uri",
]

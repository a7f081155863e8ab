"""Virtual document registry — rendered text addressed by synthetic URI.

The host's content provider reads from the registry; render, compare and
live-preview write into it.  Listeners are told whenever an entry changes,
which is how an already-open view learns to refresh.

Lookup of an unknown URI returns empty text: the host may ask before the
content exists.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

from jrender.reactive.saves import Subscription

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from jrender._types import URIString
    from jrender.reactive.uris import VirtualUri

ChangeListener: TypeAlias = "Callable[[VirtualUri], None]"


class VirtualDocumentRegistry:
    """In-memory map of synthetic URI to rendered text.

    Owned by the ``Renderer``; entries live until the host reports the
    document closed.

    """

    def __init__(self) -> None:
        self._documents: dict[URIString, str] = {}
        self._listeners: dict[int, ChangeListener] = {}
        self._next_id = 0

    def get(self, uri: VirtualUri | str) -> str:
        """Content for *uri*, or ``""`` when nothing is registered."""
        return self._documents.get(str(uri), "")

    def set(self, uri: VirtualUri, text: str) -> None:
        """Insert or replace the content of *uri* and notify listeners."""
        self._documents[str(uri)] = text
        for listener in list(self._listeners.values()):
            listener(uri)

    def delete(self, uri: VirtualUri | str) -> bool:
        """Remove *uri*.  Returns False if it was not registered."""
        return self._documents.pop(str(uri), None) is not None

    def subscribe(self, listener: ChangeListener) -> Subscription:
        """Call *listener* with the URI after every ``set``."""
        key = self._next_id
        self._next_id += 1
        self._listeners[key] = listener
        return Subscription(lambda: self._listeners.pop(key, None))

    def vacant_serial(self, make: Callable[[int], Iterable[VirtualUri]]) -> int:
        """Smallest serial (from 1) for which no URI in ``make(serial)`` is registered."""
        serial = 1
        while any(str(uri) in self._documents for uri in make(serial)):
            serial += 1
        return serial

    def uris(self) -> frozenset[str]:
        """Snapshot of every registered URI."""
        return frozenset(self._documents)

    def __contains__(self, uri: object) -> bool:
        return str(uri) in self._documents

    def __len__(self) -> int:
        return len(self._documents)

"""A least-recently-used cache of nodes keyed by their byte keys."""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Protocol, TypeVar

__all__ = ["CacheNode", "LRUCache"]


class CacheNode(Protocol):
    """Anything that can be cached: it exposes its key as bytes."""

    @property
    def key(self) -> bytes: ...


N = TypeVar("N", bound=CacheNode)


class LRUCache(Generic[N]):
    """LRU cache bounded by a maximum number of nodes."""

    def __init__(self, max_element_count: int) -> None:
        self._max = max_element_count
        self._entries: OrderedDict[bytes, N] = OrderedDict()

    def add(self, node: N) -> N | None:
        """Add ``node``, returning the node it replaced or evicted, if any.

        If the key is already cached, the old node is replaced and returned.
        If adding overflows the cache, the least recently used node is evicted
        and returned (which may be ``node`` itself when the limit is zero).
        """
        key = bytes(node.key)
        old = self._entries.get(key)
        if old is not None:
            self._entries[key] = node
            self._entries.move_to_end(key)
            return old
        self._entries[key] = node
        if len(self._entries) > self._max:
            _, oldest = self._entries.popitem(last=False)
            return oldest
        return None

    def get(self, key: bytes) -> N | None:
        """Return the cached node for ``key`` and mark it recently used, or None."""
        k = bytes(key)
        node = self._entries.get(k)
        if node is not None:
            self._entries.move_to_end(k)
        return node

    def has(self, key: bytes) -> bool:
        """Return whether ``key`` is cached, without touching its recency."""
        return bytes(key) in self._entries

    def remove(self, key: bytes) -> N | None:
        """Remove and return the node for ``key``, or None if it is not cached."""
        return self._entries.pop(bytes(key), None)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, (bytes, bytearray)) and bytes(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
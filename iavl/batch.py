"""A batch that flushes itself to the database once it grows past a threshold."""

from __future__ import annotations

import threading
from typing import Any

__all__ = ["BatchWithFlusher"]

# Some batch implementations grow by more than the key and value sizes;
# over-account for that when estimating.
_ENTRY_OVERHEAD = 100


class BatchWithFlusher:
    """Wraps a database batch, writing it out whenever it would exceed ``flush_threshold``."""

    def __init__(self, db: Any, flush_threshold: int) -> None:
        self._lock = threading.RLock()
        self._db = db
        self._flush_threshold = flush_threshold
        self._batch = db.new_batch_with_size(flush_threshold)

    def _estimate_size_after(self, key: bytes, value: bytes) -> int:
        return self._batch.byte_size() + len(key) + len(value) + _ENTRY_OVERHEAD

    def set(self, key: bytes, value: bytes) -> None:
        """Queue a write, flushing the batch first if it would grow too large."""
        with self._lock:
            if self._estimate_size_after(key, value) > self._flush_threshold:
                self.write()
            self._batch.set(key, value)

    def delete(self, key: bytes) -> None:
        """Queue a deletion, flushing the batch first if it would grow too large."""
        with self._lock:
            if self._estimate_size_after(key, b"") > self._flush_threshold:
                self.write()
            self._batch.delete(key)

    def write(self) -> None:
        """Write the current batch and start a fresh one."""
        with self._lock:
            self._batch.write()
            self._batch.close()
            self._batch = self._db.new_batch_with_size(self._flush_threshold)

    def write_sync(self) -> None:
        """Write the current batch synchronously and start a fresh one."""
        with self._lock:
            self._batch.write_sync()
            self._batch.close()
            self._batch = self._db.new_batch_with_size(self._flush_threshold)

    def close(self) -> None:
        """Close the current batch, discarding unwritten operations."""
        with self._lock:
            self._batch.close()

    def byte_size(self) -> int:
        """Return the byte size of the current, unwritten batch."""
        return self._batch.byte_size()

    def __enter__(self) -> BatchWithFlusher:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
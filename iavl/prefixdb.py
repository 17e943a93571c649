"""A logical database living under a key prefix of another database."""

from __future__ import annotations

import threading
from typing import Any, Iterator

from iavl.hexbytes import cp_incr
from iavl.memdb import DBError, KeyEmptyError, ValueNilError

__all__ = ["PrefixDB", "PrefixIterator", "PrefixBatch", "iterate_prefix"]


def _require_key(key: bytes | None) -> bytes:
    if not key:
        raise KeyEmptyError("key is empty")
    return bytes(key)


def _check_bound(bound: bytes | None) -> None:
    if bound is not None and len(bound) == 0:
        raise KeyEmptyError("key is empty")


class PrefixDB:
    """Namespace a key-value store: every key is stored under ``prefix``."""

    def __init__(self, db: Any, prefix: bytes) -> None:
        self._lock = threading.Lock()
        self._prefix = bytes(prefix)
        self._db = db

    @property
    def prefix(self) -> bytes:
        return self._prefix

    def _prefixed(self, key: bytes) -> bytes:
        return self._prefix + bytes(key)

    def get(self, key: bytes) -> bytes | None:
        """Return the value stored at ``key``, or None."""
        return self._db.get(self._prefixed(_require_key(key)))

    def has(self, key: bytes) -> bool:
        """Return whether ``key`` exists."""
        return self._db.has(self._prefixed(_require_key(key)))

    def set(self, key: bytes, value: bytes) -> None:
        """Store ``value`` at ``key``."""
        self._db.set(self._prefixed(_require_key(key)), value)

    def delete(self, key: bytes) -> None:
        """Remove ``key``."""
        self._db.delete(self._prefixed(_require_key(key)))

    def _bounds(
        self, start: bytes | None, end: bytes | None
    ) -> tuple[bytes, bytes | None]:
        _check_bound(start)
        _check_bound(end)
        pstart = self._prefix + (bytes(start) if start is not None else b"")
        pend = cp_incr(self._prefix) if end is None else self._prefix + bytes(end)
        return pstart, pend

    def iterator(self, start: bytes | None, end: bytes | None) -> PrefixIterator:
        """Iterate ascending over keys in [start, end) within the prefix."""
        pstart, pend = self._bounds(start, end)
        source = self._db.iterator(pstart, pend)
        return PrefixIterator(self._prefix, start, end, source)

    def reverse_iterator(
        self, start: bytes | None, end: bytes | None
    ) -> PrefixIterator:
        """Iterate descending over keys in [start, end) within the prefix."""
        pstart, pend = self._bounds(start, end)
        source = self._db.reverse_iterator(pstart, pend)
        return PrefixIterator(self._prefix, start, end, source)

    def new_batch(self) -> PrefixBatch:
        """Return a batch that writes under the prefix."""
        return PrefixBatch(self._prefix, self._db.new_batch())

    def new_batch_with_size(self, size: int) -> PrefixBatch:
        """Return a batch that writes under the prefix, with a size hint."""
        return PrefixBatch(self._prefix, self._db.new_batch_with_size(size))

    def close(self) -> None:
        """Close the underlying database."""
        with self._lock:
            self._db.close()

    def print(self) -> None:
        """Print the prefix and every entry beneath it as upper-case hex."""
        print(f"prefix: {self._prefix.hex().upper()}")
        itr = self.iterator(None, None)
        try:
            for key, value in itr:
                print(f"[{key.hex().upper()}]:\t[{value.hex().upper()}]")
        finally:
            itr.close()


def iterate_prefix(db: Any, prefix: bytes) -> Any:
    """Return an iterator over the keys of ``db`` that start with ``prefix``."""
    if not prefix:
        return db.iterator(None, None)
    return db.iterator(bytes(prefix), cp_incr(bytes(prefix)))


class PrefixIterator:
    """Wraps an iterator of the underlying store and strips the prefix from keys."""

    def __init__(
        self,
        prefix: bytes,
        start: bytes | None,
        end: bytes | None,
        source: Any,
    ) -> None:
        self._prefix = prefix
        self._start = start
        self._end = end
        self._source = source
        self._err: Exception | None = None

        # Empty keys are not allowed, so a key equal to the prefix is skipped.
        if source.valid() and source.key() == prefix:
            source.next()
        self._valid = source.valid() and source.key().startswith(prefix)

    def domain(self) -> tuple[bytes | None, bytes | None]:
        """Return the (start, end) the iterator was created with."""
        return self._start, self._end

    def valid(self) -> bool:
        """Return whether the iterator points at an entry under the prefix."""
        if not self._valid or self._err is not None or not self._source.valid():
            return False
        key = self._source.key()
        if not key.startswith(self._prefix):
            self._err = DBError(
                f"received invalid key from backend: {key.hex()} "
                f"(expected prefix {self._prefix.hex()})"
            )
            return False
        return True

    def _assert_valid(self) -> None:
        if not self.valid():
            raise DBError("iterator is invalid")

    def next(self) -> None:
        """Advance to the next entry, skipping a key equal to the prefix."""
        self._assert_valid()
        while True:
            self._source.next()
            if not self._source.valid() or not self._source.key().startswith(
                self._prefix
            ):
                self._valid = False
                return
            if self._source.key() != self._prefix:
                return

    def key(self) -> bytes:
        """Return the current key with the prefix removed."""
        self._assert_valid()
        return self._source.key()[len(self._prefix):]

    def value(self) -> bytes:
        """Return the current value."""
        self._assert_valid()
        return self._source.value()

    def error(self) -> Exception | None:
        """Return the source's error, or this iterator's own."""
        err = self._source.error()
        if err is not None:
            return err
        return self._err

    def close(self) -> None:
        """Close the underlying iterator."""
        self._source.close()

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        while self.valid():
            item = (self.key(), self.value())
            self.next()
            yield item

    def __enter__(self) -> PrefixIterator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class PrefixBatch:
    """A batch that writes every key under a prefix."""

    def __init__(self, prefix: bytes, source: Any) -> None:
        self._prefix = prefix
        self._source = source

    def set(self, key: bytes, value: bytes) -> None:
        """Queue setting ``key`` to ``value``."""
        k = _require_key(key)
        if value is None:
            raise ValueNilError("value is nil")
        self._source.set(self._prefix + k, value)

    def delete(self, key: bytes) -> None:
        """Queue deleting ``key``."""
        k = _require_key(key)
        self._source.delete(self._prefix + k)

    def write(self) -> None:
        """Write the underlying batch."""
        self._source.write()

    def write_sync(self) -> None:
        """Write the underlying batch synchronously."""
        self._source.write_sync()

    def close(self) -> None:
        """Close the underlying batch."""
        self._source.close()

    def byte_size(self) -> int:
        """Return the underlying batch's byte size."""
        if self._source is None:
            raise DBError("source batch is nil")
        return self._source.byte_size()

    def __enter__(self) -> PrefixBatch:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
"""An in-memory, sorted key-value store with batches and range iterators."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from sortedcontainers import SortedDict

__all__ = [
    "DBError",
    "KeyEmptyError",
    "ValueNilError",
    "BatchClosedError",
    "MemDB",
    "MemDBIterator",
    "MemDBBatch",
]


class DBError(Exception):
    """Base class for database errors."""


class KeyEmptyError(DBError):
    """Raised when an empty or missing key is used."""

    def __init__(self, message: str = "key cannot be empty") -> None:
        super().__init__(message)


class ValueNilError(DBError):
    """Raised when a missing value is set."""

    def __init__(self, message: str = "value cannot be nil") -> None:
        super().__init__(message)


class BatchClosedError(DBError):
    """Raised when a written or closed batch is used."""

    def __init__(self, message: str = "batch has been written or closed") -> None:
        super().__init__(message)


def _check_key(key: bytes | None) -> bytes:
    if not key:
        raise KeyEmptyError()
    return bytes(key)


def _check_bound(bound: bytes | None) -> bytes | None:
    if bound is None:
        return None
    if len(bound) == 0:
        raise KeyEmptyError()
    return bytes(bound)


class MemDB:
    """A thread-safe in-memory database ordered by key."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._data: SortedDict = SortedDict()

    def get(self, key: bytes) -> bytes | None:
        """Return the value stored at ``key``, or None if there is none."""
        k = _check_key(key)
        with self._lock:
            return self._data.get(k)

    def has(self, key: bytes) -> bool:
        """Return whether ``key`` exists."""
        k = _check_key(key)
        with self._lock:
            return k in self._data

    def set(self, key: bytes, value: bytes) -> None:
        """Store ``value`` at ``key``."""
        k = _check_key(key)
        if value is None:
            raise ValueNilError()
        with self._lock:
            self._data[k] = bytes(value)

    def set_sync(self, key: bytes, value: bytes) -> None:
        """Same as set; there is nothing to flush."""
        self.set(key, value)

    def delete(self, key: bytes) -> None:
        """Remove ``key`` if present."""
        k = _check_key(key)
        with self._lock:
            self._data.pop(k, None)

    def delete_sync(self, key: bytes) -> None:
        """Same as delete; there is nothing to flush."""
        self.delete(key)

    def close(self) -> None:
        """Do nothing: closing must not lose the in-memory contents."""

    def print(self) -> None:
        """Print every entry as upper-case hex."""
        with self._lock:
            for key, value in self._data.items():
                print(f"[{key.hex().upper()}]:\t[{value.hex().upper()}]")

    def stats(self) -> dict[str, str]:
        """Return the database type and its number of entries."""
        with self._lock:
            return {"database.type": "memDB", "database.size": str(len(self._data))}

    def new_batch(self) -> MemDBBatch:
        """Return a new batch writing into this database."""
        return MemDBBatch(self)

    def new_batch_with_size(self, size: int) -> MemDBBatch:
        """Return a new batch; the size hint is ignored."""
        return MemDBBatch(self)

    def iterator(self, start: bytes | None, end: bytes | None) -> MemDBIterator:
        """Iterate ascending over keys in [start, end); None leaves a side open."""
        return MemDBIterator(self, _check_bound(start), _check_bound(end), False)

    def reverse_iterator(
        self, start: bytes | None, end: bytes | None
    ) -> MemDBIterator:
        """Iterate descending over keys in [start, end); None leaves a side open."""
        return MemDBIterator(self, _check_bound(start), _check_bound(end), True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _snapshot(
        self, start: bytes | None, end: bytes | None, reverse: bool
    ) -> list[tuple[bytes, bytes]]:
        with self._lock:
            keys = self._data.irange(
                minimum=start, maximum=end, inclusive=(True, False), reverse=reverse
            )
            return [(k, self._data[k]) for k in keys]

    def _apply(self, ops: list[_Operation]) -> None:
        with self._lock:
            for op in ops:
                if op.op_type is _OpType.SET:
                    self._data[op.key] = op.value
                elif op.op_type is _OpType.DELETE:
                    self._data.pop(op.key, None)
                else:
                    raise DBError(f"unknown operation type {op.op_type!r} ({op!r})")


class MemDBIterator:
    """A cursor over a range of a MemDB, taken as a snapshot when created."""

    def __init__(
        self,
        db: MemDB,
        start: bytes | None,
        end: bytes | None,
        reverse: bool,
    ) -> None:
        self._start = start
        self._end = end
        self._items: Iterator[tuple[bytes, bytes]] = iter(
            db._snapshot(start, end, reverse)
        )
        self._item: tuple[bytes, bytes] | None = next(self._items, None)

    def domain(self) -> tuple[bytes | None, bytes | None]:
        """Return the (start, end) the iterator was created with."""
        return self._start, self._end

    def valid(self) -> bool:
        """Return whether the iterator points at an entry."""
        return self._item is not None

    def _current(self) -> tuple[bytes, bytes]:
        if self._item is None:
            raise DBError("iterator is invalid")
        return self._item

    def next(self) -> None:
        """Advance to the next entry."""
        self._current()
        self._item = next(self._items, None)

    def key(self) -> bytes:
        """Return the current key."""
        return self._current()[0]

    def value(self) -> bytes:
        """Return the current value."""
        return self._current()[1]

    def error(self) -> Exception | None:
        """Return the iterator's error; a memory iterator never fails."""
        return None

    def close(self) -> None:
        """Release the iterator; it becomes invalid."""
        self._item = None
        self._items = iter(())

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        while self._item is not None:
            item = self._item
            self._item = next(self._items, None)
            yield item

    def __enter__(self) -> MemDBIterator:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class _OpType(Enum):
    SET = 1
    DELETE = 2


@dataclass(frozen=True)
class _Operation:
    op_type: _OpType
    key: bytes
    value: bytes | None = None


class MemDBBatch:
    """A set of writes applied to a MemDB at once."""

    def __init__(self, db: MemDB) -> None:
        self._db = db
        self._ops: list[_Operation] | None = []
        self._size = 0

    def _require_open(self) -> list[_Operation]:
        if self._ops is None:
            raise BatchClosedError()
        return self._ops

    def set(self, key: bytes, value: bytes) -> None:
        """Queue setting ``key`` to ``value``."""
        k = _check_key(key)
        if value is None:
            raise ValueNilError()
        ops = self._require_open()
        v = bytes(value)
        self._size += len(k) + len(v)
        ops.append(_Operation(_OpType.SET, k, v))

    def delete(self, key: bytes) -> None:
        """Queue deleting ``key``."""
        k = _check_key(key)
        ops = self._require_open()
        self._size += len(k)
        ops.append(_Operation(_OpType.DELETE, k))

    def write(self) -> None:
        """Apply every queued operation, then close the batch."""
        ops = self._require_open()
        self._db._apply(ops)
        self.close()

    def write_sync(self) -> None:
        """Same as write."""
        self.write()

    def close(self) -> None:
        """Discard the batch; further use raises BatchClosedError."""
        self._ops = None
        self._size = 0

    def byte_size(self) -> int:
        """Return the total size of keys and values queued."""
        self._require_open()
        return self._size

    def __enter__(self) -> MemDBBatch:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
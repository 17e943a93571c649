import pytest

from iavl.batch import BatchWithFlusher
from iavl.memdb import BatchClosedError, MemDB

VALUE_10KB = bytes(10000)
THRESHOLD = 100_000


def make_key(n: int) -> bytes:
    return n.to_bytes(2, "big")


def test_batch_with_flusher_writes_everything():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    for nonce in range(1000):
        batch.set(make_key(nonce), VALUE_10KB)
    batch.write()

    itr = db.iterator(None, None)
    count = 0
    for expected_nonce, (key, value) in enumerate(itr):
        assert key == make_key(expected_nonce)
        assert value == VALUE_10KB
        count += 1
    assert count == 1000


def test_flushes_before_exceeding_threshold():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    for nonce in range(20):
        batch.set(make_key(nonce), VALUE_10KB)
        assert batch.byte_size() <= THRESHOLD
    # Part of the data was already flushed before any explicit write.
    assert db.has(make_key(0))
    assert not db.has(make_key(19))
    batch.write()
    assert all(db.has(make_key(n)) for n in range(20))


def test_small_entries_stay_buffered():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    batch.set(b"a", b"1")
    batch.set(b"b", b"2")
    assert batch.byte_size() == 4
    assert db.get(b"a") is None
    batch.write_sync()
    assert db.get(b"a") == b"1"
    assert db.get(b"b") == b"2"
    assert batch.byte_size() == 0


def test_delete_through_flusher():
    db = MemDB()
    db.set(b"gone", b"x")
    db.set(b"kept", b"y")
    batch = BatchWithFlusher(db, THRESHOLD)
    batch.delete(b"gone")
    assert db.has(b"gone")
    batch.write()
    assert not db.has(b"gone")
    assert db.get(b"kept") == b"y"


def test_tiny_threshold_flushes_previous_entry():
    db = MemDB()
    batch = BatchWithFlusher(db, 0)
    batch.set(b"k1", b"v")
    assert db.get(b"k1") is None
    batch.set(b"k2", b"v")
    assert db.get(b"k1") == b"v"
    assert db.get(b"k2") is None


def test_closed_batch_rejects_use():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    batch.set(b"k", b"v")
    batch.close()
    with pytest.raises(BatchClosedError):
        batch.set(b"other", b"v")
    with pytest.raises(BatchClosedError):
        batch.byte_size()
    assert db.get(b"k") is None
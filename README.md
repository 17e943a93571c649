# iavl

Building blocks for a versioned AVL+ key-value store, in pure Python.

## What it provides

- `iavl.encoding`: unsigned varint, zig-zag signed varint and length-prefixed
  byte encoding (`encode_uvarint`, `encode_varint`, `encode_bytes`,
  `encode_bytes_slice`, `encode_32bytes_hash`, the matching `*_size`
  functions, and `decode_uvarint`, `decode_varint`, `decode_bytes`).
  Malformed input raises `DecodeError`, whose `consumed` attribute holds the
  number of bytes read before the failure.
- `iavl.hexbytes`: `HexBytes`, a `bytes` subclass whose `str()` and
  `to_json()` forms are upper-case hex; `parse_hex_json` reads that JSON form
  back; `cp_incr` increments a byte string as a big-endian number and returns
  `None` on overflow.
- `iavl.color`: ANSI colouring helpers `green`, `blue` and `cyan`, which leave
  already-coloured strings alone, and `colored_bytes`. `colored_bytes` only
  colours when the `TENDERMINT_IAVL_COLORS_ON` environment variable is
  non-empty; otherwise it returns just the first byte as a character.
- `iavl.rand`: `Rand`, a lock-guarded, seedable pseudo-random source seeded
  from OS randomness by default, with module-level helpers on a shared
  instance (`seed`, `rand_str`, `rand_int`, `rand_int31`, `rand_bytes`,
  `rand_perm`). Not for cryptographic use.
- `iavl.cache`: `LRUCache`, a least-recently-used cache bounded by a number of
  entries and keyed by each node's `key`. `add` returns the node it replaced
  or evicted, if any.
- `iavl.fastnode`: `FastNode` (key, value and the version it was last updated
  at), its serialisation (`write_bytes`, `to_bytes`, `encoded_size`) and
  `deserialize_node`.
- `iavl.compress`: `ExportNode`, and `CompressExporter` / `CompressImporter`,
  which compress a post-order stream of exported nodes by dropping branch
  keys, delta-encoding leaf keys against the previous leaf and storing branch
  versions relative to their children. Helpers: `delta_encode`,
  `delta_decode`, `diff_offset`.
- `iavl.memdb`: `MemDB`, a sorted, thread-safe in-memory key-value store with
  forward and reverse range iterators (`MemDBIterator`, a snapshot taken when
  it is created) and write batches (`MemDBBatch`). Errors derive from
  `DBError`: `KeyEmptyError`, `ValueNilError`, `BatchClosedError`.
- `iavl.prefixdb`: `PrefixDB`, a namespaced view over another store that
  stores every key under a prefix, with `PrefixIterator`, `PrefixBatch` and
  `iterate_prefix`.
- `iavl.batch`: `BatchWithFlusher`, which wraps a store's batch and writes it
  out before any set or delete that would push its estimated size past a
  threshold.

## Install

```
pip install .
```

## Example

```python
from iavl.memdb import MemDB
from iavl.prefixdb import PrefixDB
from iavl.batch import BatchWithFlusher

db = MemDB()
store = PrefixDB(db, b"s/k:bank/")
store.set(b"alice", b"100")
store.set(b"bob", b"50")

for key, value in store.iterator(None, None):
    print(key, value)

batch = BatchWithFlusher(db, 1024)
batch.set(b"k1", b"v1")
batch.write()
print(db.get(b"k1"))  # b"v1"
```

Encoding round trip:

```python
import io
from iavl.encoding import encode_varint, decode_varint

buf = io.BytesIO()
encode_varint(buf, -100)
value, n = decode_varint(buf.getvalue())  # (-100, 2)
```

## What it does not do

This package holds the supporting pieces only. It has no AVL+ tree itself:
no mutable or immutable tree, no versions, no root hashes or proofs, and no
exporter or importer that walks a tree (the compressing exporter and importer
wrap any iterable of `ExportNode` and any object with an `add` method). Its
only store is the in-memory `MemDB`; nothing is persisted to disk. There is
no command-line tool.

## Tests

```
pip install .[test]
pytest
```
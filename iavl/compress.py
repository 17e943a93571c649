"""Exported tree nodes and a compressing exporter/importer pair.

The compression drops branch keys (recomputed on import), delta-encodes leaf
keys against the previous leaf, and stores branch versions as a delta against
the larger version of their children.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Protocol

from iavl.encoding import DecodeError, decode_uvarint, encode_uvarint

import io

__all__ = [
    "ExportNode",
    "NodeImporter",
    "CompressExporter",
    "CompressImporter",
    "delta_encode",
    "delta_decode",
    "diff_offset",
]


@dataclass
class ExportNode:
    """A tree node as exported depth-first in post-order."""

    key: bytes | None = None
    value: bytes | None = None
    version: int = 0
    height: int = 0


class NodeImporter(Protocol):
    def add(self, node: ExportNode) -> None: ...


class CompressExporter:
    """Iterate over an exporter's nodes, yielding them compressed."""

    def __init__(self, exporter: Iterable[ExportNode]) -> None:
        self._inner: Iterator[ExportNode] = iter(exporter)
        self._last_key = b""
        self._version_stack: list[int] = []

    def __iter__(self) -> CompressExporter:
        return self

    def __next__(self) -> ExportNode:
        node = next(self._inner)
        if node.height == 0:
            key = bytes(node.key or b"")
            encoded = delta_encode(key, self._last_key)
            self._last_key = key
            self._version_stack.append(node.version)
            return replace(node, key=encoded)

        stack = self._version_stack
        if len(stack) < 2:
            raise ValueError("branch node exported before its two children")
        max_version = max(stack[-1], stack[-2])
        stack.pop()
        stack[-1] = node.version
        return replace(node, key=None, version=node.version - max_version)


class CompressImporter:
    """Decompress nodes produced by CompressExporter and pass them to ``importer``."""

    def __init__(self, importer: NodeImporter) -> None:
        self._inner = importer
        self._last_key = b""
        self._min_key_stack: list[bytes] = []
        self._version_stack: list[int] = []

    def add(self, node: ExportNode) -> None:
        """Decompress ``node`` and add it to the wrapped importer."""
        if node.height == 0:
            key = delta_decode(bytes(node.key or b""), self._last_key)
            self._last_key = key
            self._min_key_stack.append(key)
            self._version_stack.append(node.version)
            decoded = replace(node, key=key)
        else:
            if len(self._min_key_stack) < 2 or len(self._version_stack) < 2:
                raise ValueError("branch node imported before its two children")
            # The min-key of the right branch becomes the node key; the left
            # branch's min-key stays on the stack for the parent.
            key = self._min_key_stack.pop()
            stack = self._version_stack
            version = node.version + max(stack[-1], stack[-2])
            stack.pop()
            stack[-1] = version
            decoded = replace(node, key=key, version=version)
        self._inner.add(decoded)


def delta_encode(key: bytes, last_key: bytes) -> bytes:
    """Encode ``key`` as the shared-prefix length with ``last_key`` plus the suffix."""
    shared = diff_offset(last_key, key)
    buf = io.BytesIO()
    encode_uvarint(buf, shared)
    return buf.getvalue() + key[shared:]


def delta_decode(key: bytes, last_key: bytes) -> bytes:
    """Reverse delta_encode given the previous key."""
    try:
        shared, n = decode_uvarint(key)
    except DecodeError as exc:
        raise DecodeError(f"uvarint parse failed: {exc}", exc.consumed) from exc
    rest = bytes(key[n:])
    if shared == 0:
        return rest
    if shared > len(last_key):
        raise DecodeError(
            f"shared prefix length {shared} exceeds previous key length {len(last_key)}",
            n,
        )
    return bytes(last_key[:shared]) + rest


def diff_offset(a: bytes, b: bytes) -> int:
    """Return the index of the first byte at which ``a`` and ``b`` differ."""
    off = 0
    for x, y in zip(a, b):
        if x != y:
            break
        off += 1
    return off
"""Fast nodes: the latest value of a key together with the version it was set at."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import BinaryIO

from iavl.encoding import (
    DecodeError,
    decode_bytes,
    decode_varint,
    encode_bytes,
    encode_bytes_size,
    encode_varint,
    encode_varint_size,
)

__all__ = ["FastNode", "deserialize_node"]


@dataclass
class FastNode:
    """A key's live value and the version at which it was last updated."""

    key: bytes
    value: bytes
    version_last_updated_at: int

    def encoded_size(self) -> int:
        """Return the size of the serialized form."""
        return encode_varint_size(self.version_last_updated_at) + encode_bytes_size(
            self.value
        )

    def write_bytes(self, w: BinaryIO) -> None:
        """Write the serialized node (version, then length-prefixed value) to ``w``."""
        encode_varint(w, self.version_last_updated_at)
        encode_bytes(w, self.value)

    def to_bytes(self) -> bytes:
        """Return the serialized node."""
        buf = io.BytesIO()
        self.write_bytes(buf)
        return buf.getvalue()


def deserialize_node(key: bytes, buf: bytes) -> FastNode:
    """Build a FastNode for ``key`` from its serialized form."""
    try:
        version, n = decode_varint(buf)
    except DecodeError as exc:
        raise DecodeError(f"decoding fastnode.version, {exc}", exc.consumed) from exc
    try:
        value, _ = decode_bytes(buf[n:])
    except DecodeError as exc:
        raise DecodeError(f"decoding fastnode.value, {exc}", exc.consumed) from exc
    return FastNode(key=key, value=value, version_last_updated_at=version)
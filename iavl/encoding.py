"""Varint and length-prefixed byte encodings used for node serialization."""

from __future__ import annotations

import io
from typing import BinaryIO

MAX_VARINT_LEN64 = 10
_MASK64 = (1 << 64) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

__all__ = [
    "DecodeError",
    "MAX_VARINT_LEN64",
    "decode_bytes",
    "decode_uvarint",
    "decode_varint",
    "encode_bytes",
    "encode_32bytes_hash",
    "encode_bytes_slice",
    "encode_bytes_size",
    "encode_uvarint",
    "encode_uvarint_size",
    "encode_varint",
    "encode_varint_size",
]


class DecodeError(ValueError):
    """Raised when a byte string cannot be decoded.

    ``consumed`` holds the number of input bytes read before the failure.
    """

    def __init__(self, message: str, consumed: int = 0) -> None:
        super().__init__(message)
        self.consumed = consumed


def _uvarint(bz: bytes) -> tuple[int, int]:
    """Decode a uvarint; n == 0 means too short, n < 0 means overflow after -n bytes."""
    value = 0
    shift = 0
    for i, b in enumerate(bz):
        if i == MAX_VARINT_LEN64:
            return 0, -(i + 1)
        if b < 0x80:
            if i == MAX_VARINT_LEN64 - 1 and b > 1:
                return 0, -(i + 1)
            return value | (b << shift), i + 1
        value |= (b & 0x7F) << shift
        shift += 7
    return 0, 0


def _put_uvarint(u: int) -> bytes:
    if not 0 <= u <= _MASK64:
        raise ValueError(f"value {u} out of range for uint64")
    out = bytearray()
    while u >= 0x80:
        out.append((u & 0x7F) | 0x80)
        u >>= 7
    out.append(u)
    return bytes(out)


def _zigzag(i: int) -> int:
    if not _INT64_MIN <= i <= _INT64_MAX:
        raise ValueError(f"value {i} out of range for int64")
    return ((i << 1) ^ (i >> 63)) & _MASK64


def decode_uvarint(bz: bytes) -> tuple[int, int]:
    """Decode an unsigned varint, returning the value and the number of bytes read."""
    value, n = _uvarint(bz)
    if n == 0:
        raise DecodeError("buffer too small", 0)
    if n < 0:
        raise DecodeError("EOF decoding uvarint", -n)
    return value, n


def decode_varint(bz: bytes) -> tuple[int, int]:
    """Decode a zig-zag signed varint, returning the value and the number of bytes read."""
    ux, n = _uvarint(bz)
    if n == 0:
        raise DecodeError("buffer too small", 0)
    if n < 0:
        raise DecodeError("EOF decoding varint", -n)
    value = ux >> 1
    if ux & 1:
        value = ~value
    return value, n


def decode_bytes(bz: bytes) -> tuple[bytes, int]:
    """Decode a varint length-prefixed byte string, returning it and the bytes read."""
    size, n = decode_uvarint(bz)
    if size >= _INT64_MAX:
        raise DecodeError(f"invalid out of range length {size} decoding []byte", n)
    end = n + size
    if len(bz) < end:
        raise DecodeError(f"insufficient bytes decoding []byte of length {size}", n)
    return bytes(bz[n:end]), end


def encode_uvarint(w: BinaryIO, u: int) -> None:
    """Write an unsigned varint to ``w``."""
    w.write(_put_uvarint(u))


def encode_uvarint_size(u: int) -> int:
    """Return the encoded size of ``u`` as a uvarint."""
    if u == 0:
        return 1
    return (u.bit_length() + 6) // 7


def encode_varint(w: BinaryIO, i: int) -> None:
    """Write a zig-zag signed varint to ``w``."""
    w.write(_put_uvarint(_zigzag(i)))


def encode_varint_size(i: int) -> int:
    """Return the encoded size of ``i`` as a signed varint."""
    return encode_uvarint_size(_zigzag(i))


def encode_bytes(w: BinaryIO, bz: bytes) -> None:
    """Write ``bz`` prefixed with its varint length."""
    encode_uvarint(w, len(bz))
    w.write(bytes(bz))


def encode_32bytes_hash(w: BinaryIO, bz: bytes) -> None:
    """Write a 32-byte hash with its constant length prefix."""
    w.write(_put_uvarint(32))
    w.write(bytes(bz))


def encode_bytes_slice(bz: bytes) -> bytes:
    """Return ``bz`` with its varint length prefix."""
    buf = io.BytesIO()
    encode_bytes(buf, bz)
    return buf.getvalue()


def encode_bytes_size(bz: bytes) -> int:
    """Return the size of ``bz`` once length-prefixed."""
    return encode_uvarint_size(len(bz)) + len(bz)
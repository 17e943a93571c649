"""Byte strings rendered as upper-case hex, plus a big-endian increment helper."""

from __future__ import annotations

import binascii

__all__ = ["HexBytes", "parse_hex_json", "cp_incr"]


class HexBytes(bytes):
    """Bytes whose text and JSON forms are upper-case hex."""

    def marshal(self) -> bytes:
        """Return the raw bytes."""
        return bytes(self)

    def to_json(self) -> str:
        """Return the JSON string literal holding the upper-case hex form."""
        return '"' + self.hex().upper() + '"'

    def __str__(self) -> str:
        return self.hex().upper()

    def __repr__(self) -> str:
        return f"HexBytes({self.hex().upper()})"


def parse_hex_json(data: str | bytes) -> HexBytes:
    """Parse a JSON string literal of hex digits into HexBytes."""
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("latin-1")
    if len(data) < 2 or data[0] != '"' or data[-1] != '"':
        raise ValueError(f"invalid hex string: {data}")
    try:
        return HexBytes(binascii.unhexlify(data[1:-1]))
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid hex string: {data}") from exc


def cp_incr(bz: bytes) -> bytes | None:
    """Return ``bz`` incremented by one as a big-endian number, or None on overflow."""
    if not bz:
        raise ValueError("cp_incr expects non-zero bz length")
    out = bytearray(bz)
    for i in range(len(out) - 1, -1, -1):
        if out[i] < 0xFF:
            out[i] += 1
            return bytes(out)
        out[i] = 0
    return None
import io

import pytest

from iavl.encoding import (
    DecodeError,
    decode_bytes,
    decode_uvarint,
    decode_varint,
    encode_32bytes_hash,
    encode_bytes,
    encode_bytes_size,
    encode_bytes_slice,
    encode_uvarint,
    encode_uvarint_size,
    encode_varint,
    encode_varint_size,
)

BZ = bytes([0, 1, 2, 3, 4, 5, 6, 7])
MAX_INT32 = 2**31 - 1
MAX_UINT32 = 2**32 - 1
MAX_INT64 = 2**63 - 1
MAX_UINT64 = 2**64 - 1

DECODE_CASES = {
    "full": (BZ, 8, BZ, False),
    "empty": (BZ, 0, b"", False),
    "partial": (BZ, 3, bytes([0, 1, 2]), False),
    "out of bounds": (BZ, 9, None, True),
    "empty input": (b"", 0, b"", False),
    "empty input out of bounds": (b"", 1, None, True),
    "max int32": (BZ, MAX_INT32, None, True),
    "max int32 -1": (BZ, MAX_INT32 - 1, None, True),
    "max int32 -10": (BZ, MAX_INT32 - 10, None, True),
    "max int32 +1": (BZ, MAX_INT32 + 1, None, True),
    "max int32 +10": (BZ, MAX_INT32 + 10, None, True),
    "max int32*2": (BZ, MAX_INT32 * 2, None, True),
    "max int32*2 -1": (BZ, MAX_INT32 * 2 - 1, None, True),
    "max int32*2 -10": (BZ, MAX_INT32 * 2 - 10, None, True),
    "max int32*2 +1": (BZ, MAX_INT32 * 2 + 1, None, True),
    "max int32*2 +10": (BZ, MAX_INT32 * 2 + 10, None, True),
    "max uint32": (BZ, MAX_UINT32, None, True),
    "max uint32 -1": (BZ, MAX_UINT32 - 1, None, True),
    "max uint32 -10": (BZ, MAX_UINT32 - 10, None, True),
    "max uint32 +1": (BZ, MAX_UINT32 + 1, None, True),
    "max uint32 +10": (BZ, MAX_UINT32 + 10, None, True),
    "max uint32*2": (BZ, MAX_UINT32 * 2, None, True),
    "max uint32*2 -1": (BZ, MAX_UINT32 * 2 - 1, None, True),
    "max uint32*2 -10": (BZ, MAX_UINT32 * 2 - 10, None, True),
    "max uint32*2 +1": (BZ, MAX_UINT32 * 2 + 1, None, True),
    "max uint32*2 +10": (BZ, MAX_UINT32 * 2 + 10, None, True),
    "max int64": (BZ, MAX_INT64, None, True),
    "max int64 -1": (BZ, MAX_INT64 - 1, None, True),
    "max int64 -10": (BZ, MAX_INT64 - 10, None, True),
    "max int64 +1": (BZ, MAX_INT64 + 1, None, True),
    "max int64 +10": (BZ, MAX_INT64 + 10, None, True),
    "max uint64": (BZ, MAX_UINT64, None, True),
    "max uint64 -1": (BZ, MAX_UINT64 - 1, None, True),
    "max uint64 -10": (BZ, MAX_UINT64 - 10, None, True),
}


@pytest.mark.parametrize("name", list(DECODE_CASES))
def test_decode_bytes(name):
    bz, length_prefix, expect, expect_err = DECODE_CASES[name]
    prefix = io.BytesIO()
    encode_uvarint(prefix, length_prefix)
    varint_bytes = len(prefix.getvalue())
    buf = prefix.getvalue() + bz

    if expect_err:
        with pytest.raises(DecodeError) as info:
            decode_bytes(buf)
        assert info.value.consumed == varint_bytes
    else:
        b, n = decode_bytes(buf)
        assert n == varint_bytes + length_prefix
        assert b == bz[:length_prefix]
        assert b == expect


def test_decode_bytes_invalid_varint():
    with pytest.raises(DecodeError):
        decode_bytes(bytes([0xFF]))


ENC_VALUES = [
    -1, -100, -(1 << 32),
    0, 1, 100, 1 << 32,
    -(1 << 52), 1 << 52, 17,
    19, 28, 37, 388888888,
    -99999999999, 99999999999,
    2**63 - 1, -(2**63),
]


@pytest.mark.parametrize("value", ENC_VALUES)
def test_encode_varint_round_trip(value):
    buf = io.BytesIO()
    encode_varint(buf, value)
    data = buf.getvalue()
    assert decode_varint(data) == (value, len(data))
    assert encode_varint_size(value) == len(data)


@pytest.mark.parametrize(
    "value, expected",
    [(0, b"\x00"), (-1, b"\x01"), (1, b"\x02"), (100, b"\xc8\x01")],
)
def test_encode_varint_wire_bytes(value, expected):
    buf = io.BytesIO()
    encode_varint(buf, value)
    assert buf.getvalue() == expected


def test_encode_varint_out_of_range():
    with pytest.raises(ValueError):
        encode_varint(io.BytesIO(), 2**63)


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**32, 2**64 - 1])
def test_uvarint_round_trip(value):
    buf = io.BytesIO()
    encode_uvarint(buf, value)
    data = buf.getvalue()
    assert decode_uvarint(data) == (value, len(data))
    assert encode_uvarint_size(value) == len(data)


def test_decode_uvarint_errors():
    with pytest.raises(DecodeError) as info:
        decode_uvarint(b"")
    assert info.value.consumed == 0
    with pytest.raises(DecodeError) as info:
        decode_uvarint(b"\xff" * 11)
    assert info.value.consumed == 11


def test_encode_uvarint_negative():
    with pytest.raises(ValueError):
        encode_uvarint(io.BytesIO(), -1)


def test_encode_bytes_slice_round_trip():
    data = b"hello"
    encoded = encode_bytes_slice(data)
    assert encoded == b"\x05hello"
    assert len(encoded) == encode_bytes_size(data)
    assert decode_bytes(encoded) == (data, len(encoded))


def test_encode_bytes_writer():
    buf = io.BytesIO()
    encode_bytes(buf, b"")
    assert buf.getvalue() == b"\x00"


def test_encode_32bytes_hash():
    buf = io.BytesIO()
    digest = bytes(range(32))
    encode_32bytes_hash(buf, digest)
    assert buf.getvalue() == b"\x20" + digest
    assert decode_bytes(buf.getvalue()) == (digest, 33)
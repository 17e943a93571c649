"""A locked pseudo-random generator seeded from OS randomness.

None of these values are suitable for cryptographic use.
"""

from __future__ import annotations

import os
import random
import threading

STR_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"

_MASK64 = (1 << 64) - 1

__all__ = [
    "Rand",
    "seed",
    "rand_str",
    "rand_int",
    "rand_int31",
    "rand_bytes",
    "rand_perm",
]


def _to_signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _os_seed() -> int:
    value = 0
    for b in os.urandom(8):
        value |= b
        value <<= 8
    return _to_signed(value, 64)


class Rand:
    """Thread-safe pseudo-random generator."""

    def __init__(self, seed: int | None = None) -> None:
        self._lock = threading.Lock()
        self._rng = random.Random(_os_seed() if seed is None else seed)

    def seed(self, seed: int) -> None:
        """Reset the generator to a fixed seed."""
        with self._lock:
            self._rng = random.Random(seed)

    def random_str(self, length: int) -> str:
        """Return a random alphanumeric string of the given length."""
        if length <= 0:
            return ""
        chars: list[str] = []
        while True:
            val = self.int63()
            for _ in range(10):
                v = val & 0x3F
                if v < len(STR_CHARS):
                    chars.append(STR_CHARS[v])
                    if len(chars) == length:
                        return "".join(chars)
                val >>= 6

    def uint16(self) -> int:
        return self.uint32() & 0xFFFF

    def uint32(self) -> int:
        with self._lock:
            return self._rng.getrandbits(32)

    def uint64(self) -> int:
        return ((self.uint32() << 32) + self.uint32()) & _MASK64

    def int16(self) -> int:
        return _to_signed(self.uint32(), 16)

    def int32(self) -> int:
        return _to_signed(self.uint32(), 32)

    def int64(self) -> int:
        return _to_signed(self.uint64(), 64)

    def int(self) -> int:
        """Return a non-negative 63-bit integer."""
        return self.int63()

    def int31(self) -> int:
        with self._lock:
            return self._rng.getrandbits(31)

    def int31n(self, n: int) -> int:
        """Return an integer in [0, n); n must be positive."""
        if n <= 0:
            raise ValueError("invalid argument to int31n")
        with self._lock:
            return self._rng.randrange(n)

    def int63(self) -> int:
        with self._lock:
            return self._rng.getrandbits(63)

    def int63n(self, n: int) -> int:
        """Return an integer in [0, n); n must be positive."""
        if n <= 0:
            raise ValueError("invalid argument to int63n")
        with self._lock:
            return self._rng.randrange(n)

    def float64(self) -> float:
        with self._lock:
            return self._rng.random()

    def time(self) -> int:
        """Return a random Unix timestamp in seconds, as a signed 64-bit value."""
        return _to_signed(self.uint64(), 64)

    def random_bytes(self, n: int) -> bytes:
        """Return n bytes drawn from the generator."""
        return bytes(self.int63() & 0xFF for _ in range(n))

    def intn(self, n: int) -> int:
        """Return an integer in [0, n); n must be positive."""
        if n <= 0:
            raise ValueError("invalid argument to intn")
        with self._lock:
            return self._rng.randrange(n)

    def random_bool(self) -> bool:
        return self.int63() % 2 == 0

    def perm(self, n: int) -> list[int]:
        """Return a random permutation of range(n)."""
        if n < 0:
            raise ValueError("invalid argument to perm")
        items = list(range(n))
        with self._lock:
            self._rng.shuffle(items)
        return items


_global = Rand()


def seed(seed: int) -> None:
    """Reset the shared generator to a fixed seed."""
    _global.seed(seed)


def rand_str(length: int) -> str:
    return _global.random_str(length)


def rand_int() -> int:
    return _global.int()


def rand_int31() -> int:
    return _global.int31()


def rand_bytes(n: int) -> bytes:
    return _global.random_bytes(n)


def rand_perm(n: int) -> list[int]:
    return _global.perm(n)
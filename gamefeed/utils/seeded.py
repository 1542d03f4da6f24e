"""
Seeded randomness: reproducible draws keyed by (seed, discriminator).

The seed and discriminator are joined as "<seed>-<discriminator>", hashed with a
31-multiplier rolling hash over UTF-16 code units (unsigned 32-bit), and the
hash is used as state for one mulberry32 step. Same pair, same value, in any process.
"""

import time
from typing import List, Sequence, TypeVar, Union

_MASK32 = 0xFFFFFFFF
_TWO_32 = 4294967296.0

Seed = Union[int, str]
T = TypeVar("T")


def _seed_text(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def hash_string(value: str) -> int:
    """Rolling hash h = h*31 + code_unit, truncated to an unsigned 32-bit integer."""
    data = value.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        h = (h * 31 + (data[i] | (data[i + 1] << 8))) & _MASK32
    return h


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class SeededStream:
    """mulberry32 sequence. next() returns floats in [0, 1)."""

    def __init__(self, state: int):
        self._state = state & _MASK32

    def next_uint32(self) -> int:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        r = _imul(t ^ (t >> 15), 1 | t)
        r ^= (r + _imul(r ^ (r >> 7), 61 | r)) & _MASK32
        return (r ^ (r >> 14)) & _MASK32

    def next(self) -> float:
        return self.next_uint32() / _TWO_32

    @classmethod
    def for_key(cls, seed: Seed, discriminator: object) -> "SeededStream":
        return cls(hash_string(f"{_seed_text(seed)}-{_seed_text(discriminator)}"))


def derive(seed: Seed, discriminator: object) -> float:
    """Deterministic draw in [0, 1) for a (seed, discriminator) pair."""
    return SeededStream.for_key(seed, discriminator).next()


def seeded_shuffle(items: Sequence[T], seed: Seed, salt: object = "shuffle") -> List[T]:
    """Fisher-Yates shuffle driven by the stream for (seed, salt). Input is not mutated."""
    out = list(items)
    stream = SeededStream.for_key(seed, salt)
    for i in range(len(out) - 1, 0, -1):
        j = int(stream.next() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def clock_seed() -> int:
    """Seed taken once from the wall clock (milliseconds) when the caller supplies none."""
    return time.time_ns() // 1_000_000

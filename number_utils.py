"""Deterministic number helpers: FNV-1a hashing and a seeded 32-bit PRNG."""
from __future__ import annotations

import math
from typing import Callable, Iterator

UINT32_MASK = 0xFFFFFFFF

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

_SPLITMIX_INCREMENT = 0x6D2B79F5


def fnv1a32(text: str) -> int:
    """
    Hash a string to a 32-bit unsigned integer using FNV-1a.

    The input is walked by UTF-16 code unit so that a browser client calling
    ``charCodeAt`` on the same seed arrives at the same hash.
    """
    value = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", "surrogatepass")
    for index in range(0, len(data), 2):
        value ^= data[index] | (data[index + 1] << 8)
        value = (value * FNV_PRIME) & UINT32_MASK
    return value


def _coerce_seed(seed: int | float) -> int:
    if isinstance(seed, float):
        if not math.isfinite(seed):
            return 0
        seed = int(seed)  # truncates toward zero
    return int(seed) & UINT32_MASK


class SplitMix32:
    """
    Counter-based 32-bit PRNG.

    Each instance owns its single 32-bit state word. Calling the instance
    returns the next value; iterating it yields an unbounded sequence.
    """

    __slots__ = ("state",)

    def __init__(self, seed: int | float) -> None:
        self.state = _coerce_seed(seed)

    def next(self) -> int:
        self.state = (self.state + _SPLITMIX_INCREMENT) & UINT32_MASK
        z = self.state
        z = ((z ^ (z >> 15)) * (z | 1)) & UINT32_MASK
        z ^= (z + ((z ^ (z >> 7)) * (z | 61))) & UINT32_MASK
        return (z ^ (z >> 14)) & UINT32_MASK

    __call__ = next

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()


def splitmix32(seed: int | float) -> SplitMix32:
    """Return a fresh generator seeded with ``seed``."""

    return SplitMix32(seed)


def generate_digits(rng: Callable[[], int], length: int) -> str:
    """
    Draw ``length`` values from ``rng`` and keep the last decimal digit of each.

    Exactly one draw is consumed per digit. Python's modulo keeps negative
    draws in 0-9, but RNGs are expected to return unsigned integers.
    """
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    return "".join(str(rng() % 10) for _ in range(length))

"""Counter-based seed derivation.

Draws that must be reproducible regardless of query order are seeded from
``(seed, counter...)`` through splitmix64 instead of sharing one stateful
generator.
"""
from __future__ import annotations

import hashlib
import random
from typing import Callable

from almanac.types import RandomSource

_MASK64 = (1 << 64) - 1
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15

RandomFactory = Callable[[int], RandomSource]


def splitmix64(value: int) -> int:
    """One splitmix64 finalization step. 64-bit in, 64-bit out."""
    z = (value + _GOLDEN_GAMMA) & _MASK64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
    return z ^ (z >> 31)


def seed_to_int(seed: int | str) -> int:
    """Integers pass through (masked to 64 bits); strings are hashed stably."""
    if isinstance(seed, str):
        digest = hashlib.blake2b(seed.encode("utf-8"), digest_size=8).digest()
        return int.from_bytes(digest, "big")
    return seed & _MASK64


def derive_seed(seed: int | str, *counters: int) -> int:
    """Pure ``seed x counters -> 64-bit value``."""
    value = splitmix64(seed_to_int(seed))
    for counter in counters:
        value = splitmix64(value ^ (counter & _MASK64))
    return value


def seeded_random(
    seed: int | str, *counters: int, factory: RandomFactory = random.Random
) -> RandomSource:
    """A fresh generator for one ``(seed, counters)`` coordinate."""
    return factory(derive_seed(seed, *counters))

"""Deterministic hashing, shuffling and seed derivation.

Every content choice in the generator is keyed off these primitives so that the
same inputs always render the same workout text. All arithmetic is unsigned
32-bit: intermediate values are masked with ``MASK32`` after each step.
"""

from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")

MASK32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 0x811C9DC5
SHUFFLE_MULTIPLIER = 9973
MULBERRY_INCREMENT = 0x6D2B79F5

# Multipliers for seedA..seedD. Changing them changes every persisted fixture.
SEED_MULTIPLIERS = (1, 7919, 104729, 224737)


def hash32(text: str) -> int:
    """FNV-1a over the string's code points, 32-bit unsigned."""
    h = FNV_OFFSET_BASIS
    for ch in text or "":
        h ^= ord(ch)
        h = (h + (h << 1) + (h << 4) + (h << 7) + (h << 8) + (h << 24)) & MASK32
    return h & MASK32


def shuffle_with_seed(items: Sequence[T], seed: int) -> list[T]:
    """Seeded Fisher-Yates returning a new list; ``items`` is left untouched."""
    result = list(items)
    seed = int(seed) & MASK32
    for i in range(len(result) - 1, 0, -1):
        j = ((seed * (i + 1) * SHUFFLE_MULTIPLIER) & MASK32) % (i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def mulberry32(seed: int) -> Callable[[], float]:
    """Return a generator of floats in [0, 1) seeded with a 32-bit state."""
    state = int(seed) & MASK32

    def _next() -> float:
        nonlocal state
        state = (state + MULBERRY_INCREMENT) & MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / 4294967296

    return _next


@dataclass(frozen=True)
class DerivedSeeds:
    a: int
    b: int
    c: int
    d: int


def derive_seeds(seed: int) -> DerivedSeeds:
    """Split one base seed into four decorrelated 32-bit streams."""
    base = int(seed) & MASK32
    a, b, c, d = ((base * m) & MASK32 for m in SEED_MULTIPLIERS)
    return DerivedSeeds(a=a, b=b, c=c, d=d)


def seeded_index(seed: float, n: int) -> int:
    """Index used by the closure catalogue: ``abs(floor(seed * 9973))`` (min 1) mod n."""
    if n <= 0:
        return 0
    x = abs(math.floor(seed * SHUFFLE_MULTIPLIER)) or 1
    return int(x % n)


def pick_from(items: Sequence[T], seed: float) -> T:
    return items[seeded_index(seed, len(items))]


def now_seed() -> int:
    """Fresh base seed from the wall clock and the OS RNG (seed origination only)."""
    a = int(time.time() * 1000) & MASK32
    b = random.getrandbits(32)
    return (a ^ b) & MASK32


def fingerprint_workout_text(text: str) -> str:
    return str(hash32(str(text or "")))

"""
RandomSource - the only source of randomness in the pipeline.

Wraps a seeded numpy Generator (PCG64) and exposes the primitives the stage
generators need. Every draw advances one internal stream, so the same seed
and the same sequence of calls always produce the same values on every
platform.

Usage:
    rng = RandomSource(42)
    tier = rng.weighted_pick([("Tier 1", 20), ("Tier 2", 50), ("Tier 3", 30)])
    when = rng.date_between(start, end)

    # Independent, reproducible stream per pipeline stage
    stimuli_rng = rng.spawn("stimuli")
"""

from __future__ import annotations

import zlib
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta
from typing import TypeVar
from uuid import UUID

import numpy as np

T = TypeVar("T")

# Issuer prefix used by the NPI check-digit scheme (ISO 7812 card issuer 80840)
NPI_PREFIX = "80840"


def luhn_check_digit(payload: str) -> int:
    """Return the Luhn check digit that makes ``payload + digit`` valid."""
    total = 0
    for i, ch in enumerate(reversed(payload)):
        d = int(ch)
        if i % 2 == 0:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return (10 - total % 10) % 10


def is_valid_npi(value: str) -> bool:
    """Check a 10-digit NPI against its Luhn check digit."""
    if len(value) != 10 or not value.isdigit():
        return False
    return luhn_check_digit(NPI_PREFIX + value[:9]) == int(value[9])


class RandomSource:
    """
    Seeded random primitives for synthetic data generation.

    Attributes:
        seed: Seed the root stream was built from
        stream: Name of the derived stream ("" for the root)
    """

    def __init__(self, seed: int, stream: str = "") -> None:
        self.seed = seed
        self.stream = stream
        if stream:
            seq = np.random.SeedSequence(seed, spawn_key=(zlib.crc32(stream.encode()),))
        else:
            seq = np.random.SeedSequence(seed)
        self._gen = np.random.default_rng(seq)

    def spawn(self, stream: str) -> RandomSource:
        """
        Derive an independent source keyed by stream name.

        The child depends only on (seed, stream), never on how much of the
        parent has been consumed.
        """
        return RandomSource(self.seed, stream)

    # ------------------------------------------------------------------
    # Numeric primitives
    # ------------------------------------------------------------------

    def integer(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], both ends inclusive."""
        if lo > hi:
            raise ValueError(f"integer() called with lo={lo} > hi={hi}")
        return int(self._gen.integers(lo, hi, endpoint=True))

    def uniform(self, lo: float, hi: float) -> float:
        """Uniform float in [lo, hi)."""
        if lo > hi:
            raise ValueError(f"uniform() called with lo={lo} > hi={hi}")
        return float(self._gen.uniform(lo, hi))

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return float(self._gen.normal(mean, std))

    def normal_int(self, mean: float, std: float, lo: int, hi: int) -> int:
        """Normal draw rounded to an integer and clamped to [lo, hi]."""
        return max(lo, min(hi, round(self.normal(mean, std))))

    def boolean(self, p: float = 0.5) -> bool:
        """True with probability p."""
        return bool(self._gen.random() < p)

    # ------------------------------------------------------------------
    # Sequence primitives
    # ------------------------------------------------------------------

    def weighted_pick(self, items: Mapping[T, float] | Sequence[tuple[T, float]]) -> T:
        """
        Pick one item with probability weight / total.

        Weights do not need to sum to 1.

        Args:
            items: Mapping of item -> weight, or sequence of (item, weight)

        Returns:
            The selected item
        """
        pairs = list(items.items()) if isinstance(items, Mapping) else list(items)
        if not pairs:
            raise ValueError("weighted_pick() called with no items")
        total = sum(w for _, w in pairs)
        if total <= 0:
            raise ValueError("weighted_pick() needs a positive total weight")

        r = self._gen.random() * total
        for item, weight in pairs:
            r -= weight
            if r <= 0:
                return item
        return pairs[-1][0]

    def pick(self, seq: Sequence[T]) -> T:
        if not seq:
            raise ValueError("pick() called with an empty sequence")
        return seq[self.integer(0, len(seq) - 1)]

    def shuffle(self, seq: Sequence[T]) -> list[T]:
        """Return a shuffled copy of seq."""
        return [seq[i] for i in self._gen.permutation(len(seq))]

    def pick_many(self, seq: Sequence[T], k: int) -> list[T]:
        """Pick k distinct positions from seq (without replacement)."""
        if k < 0:
            raise ValueError(f"pick_many() called with k={k}")
        return self.shuffle(seq)[:k]

    # ------------------------------------------------------------------
    # Domain primitives
    # ------------------------------------------------------------------

    def date_between(self, start: datetime, end: datetime) -> datetime:
        """Uniform timestamp in [start, end] at one-second resolution."""
        if end < start:
            raise ValueError(f"date_between() called with end {end} before start {start}")
        span = int((end - start).total_seconds())
        return start + timedelta(seconds=self.integer(0, span))

    def uuid(self) -> str:
        """RFC 4122 version-4 UUID built from the seeded stream."""
        return str(UUID(bytes=self._gen.bytes(16), version=4))

    def npi(self) -> str:
        """
        Synthesize a 10-digit National Provider Identifier.

        Nine random digits (leading 1 or 2, as issued NPIs do) followed by the
        Luhn check digit computed over the 80840 issuer prefix.
        """
        base = str(self.integer(1, 2)) + "".join(
            str(d) for d in self._gen.integers(0, 10, size=8)
        )
        return base + str(luhn_check_digit(NPI_PREFIX + base))

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed}, stream={self.stream or 'root'!r})"

"""
StaticDataPool - Pre-generated Faker names sampled through a RandomSource.

Faker is only called while the pool is built, with its own seeded instance.
Every pick made during generation goes through the stage's RandomSource, so
name choice stays part of the single reproducible random stream.

Usage:
    pool = StaticDataPool(seed=42)
    first = pool.sample("first_names", rng)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from faker import Faker

if TYPE_CHECKING:
    from .random_source import RandomSource

DEFAULT_POOL_SIZES = {
    "first_names": 1_500,
    "last_names": 2_000,
}


class StaticDataPool:
    """
    Pre-generated pools of person names.

    Attributes:
        seed: Seed the Faker instance was initialised with
        first_names: Pool of first names
        last_names: Pool of last names
    """

    def __init__(
        self,
        seed: int = 42,
        pool_sizes: dict[str, int] | None = None,
    ) -> None:
        self.seed = seed
        sizes = {**DEFAULT_POOL_SIZES, **(pool_sizes or {})}

        self._faker = Faker("en_US")
        self._faker.seed_instance(seed)

        self.first_names: list[str] = self._generate_pool(
            self._faker.first_name, sizes["first_names"]
        )
        self.last_names: list[str] = self._generate_pool(
            self._faker.last_name, sizes["last_names"]
        )
        self._pools: dict[str, list[str]] = {
            "first_names": self.first_names,
            "last_names": self.last_names,
        }

    def _generate_pool(self, generator_func: Callable[[], str], size: int) -> list[str]:
        """
        Collect up to ``size`` distinct values from a Faker provider.

        Faker's name providers hold a few thousand entries, so the pool stops
        early rather than spinning once they are exhausted.
        """
        pool: list[str] = []
        seen: set[str] = set()
        max_attempts = size * 3
        attempts = 0

        while len(pool) < size and attempts < max_attempts:
            value = generator_func()
            if value not in seen:
                seen.add(value)
                pool.append(value)
            attempts += 1
        return pool

    def sample(self, pool_name: str, rng: RandomSource) -> str:
        """Pick one value from a named pool."""
        if pool_name not in self._pools:
            raise KeyError(f"Unknown pool: {pool_name}. Available: {list(self._pools)}")
        return rng.pick(self._pools[pool_name])

    def full_name(self, rng: RandomSource) -> tuple[str, str]:
        """Return a (first, last) name pair."""
        return self.sample("first_names", rng), self.sample("last_names", rng)

    def __len__(self) -> int:
        return sum(len(p) for p in self._pools.values())

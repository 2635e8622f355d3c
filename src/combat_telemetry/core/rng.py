"""Seedable random number generator for template selection.

Wraps Python's random.Random so that description text is reproducible
under a fixed seed (tests, replays) and uniformly random otherwise.  Each
consumer should use a *forked* RNG so that drawing in one place does not
perturb another.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class TelemetryRNG:
    """RNG that can be forked into independent sub-streams.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.  ``None`` seeds
        from system entropy, and forks of an unseeded RNG are unseeded too.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int | None:
        """Return the seed this RNG was initialised with."""
        return self._seed

    def random_choice(self, seq: Sequence[T]) -> T:
        """Return a uniformly chosen element from a non-empty sequence."""
        return self._rng.choice(seq)

    def fork(self, name: str) -> TelemetryRNG:
        """Create a child RNG whose seed is derived from this seed and *name*.

        Forking with the same *name* always produces the same child seed.
        """
        if self._seed is None:
            return TelemetryRNG()
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        child_seed = int.from_bytes(digest[:8], "big")
        return TelemetryRNG(child_seed)

    def __repr__(self) -> str:
        return f"TelemetryRNG(seed={self._seed})"

"""
Seedable randomness source for tree generation.

Every branch in the hierarchy owns its own RandomSource, seeded from a value
drawn by its parent. No global random state is used anywhere in the package.
"""

from typing import Optional
import numpy as np

MAX_SEED = 2**64
_CHILD_SEED_BOUND = 2**63 - 1


class RandomSource:
    """
    Deterministic random generator wrapping ``np.random.default_rng``.

    Parameters
    ----------
    seed : int, optional
        64-bit unsigned seed. If None, a seed is drawn from OS entropy and
        kept on ``self.seed`` so the run can be reproduced later.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(np.random.SeedSequence().generate_state(1, dtype=np.uint64)[0])
        seed = int(seed)
        if seed < 0 or seed >= MAX_SEED:
            raise ValueError(f"Seed must be in [0, 2**64), got {seed}")
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def uniform(self, lo: float, hi: float) -> float:
        """Uniform float in [lo, hi]. Returns ``lo`` exactly when lo == hi."""
        if lo == hi:
            return float(lo)
        if lo > hi:
            lo, hi = hi, lo
        return float(self._rng.uniform(lo, hi))

    def boolean(self) -> bool:
        return bool(self._rng.random() < 0.5)

    def integer(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi)."""
        if hi <= lo:
            return int(lo)
        return int(self._rng.integers(lo, hi))

    def next_seed(self) -> int:
        """Draw a raw integer suitable for seeding a child generator."""
        return int(self._rng.integers(0, _CHILD_SEED_BOUND, dtype=np.int64))

    def spawn(self) -> "RandomSource":
        return RandomSource(self.next_seed())

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed})"

"""Seeded permutation table used for lattice index scrambling."""

import numpy as np
import structlog

from .squirrel_prng import squirrel_noise5
from ..utils.random import fold_seed

logger = structlog.get_logger()

TABLE_SIZE = 256
TABLE_MASK = TABLE_SIZE - 1


def shuffle(values: np.ndarray, seed: int) -> np.ndarray:
    """
    Fisher-Yates shuffle driven by the SquirrelNoise5 hash.

    Each swap index is a pure function of (position, seed), so the resulting
    permutation is identical on every platform.

    Args:
        values: 1D array to shuffle in place
        seed: 32-bit seed

    Returns:
        The shuffled array
    """
    for i in range(len(values) - 1, 0, -1):
        j = squirrel_noise5(i, seed) % (i + 1)
        values[i], values[j] = values[j], values[i]
    return values


class PermutationTable:
    """
    Permutation of 0..255, doubled to 512 entries for overflow-free lookups.

    Immutable after construction: the backing array is marked read-only and
    lookups go through a tuple copy.
    """

    def __init__(self, values: np.ndarray, seed: int = 0):
        if values.shape != (TABLE_SIZE,):
            raise ValueError(f"Permutation must have {TABLE_SIZE} entries")
        doubled = np.concatenate([values, values]).astype(np.int64)
        doubled.setflags(write=False)
        self.seed = seed
        self.values = doubled
        self._lookup = tuple(int(v) for v in doubled)

    @classmethod
    def build(cls, seed: int) -> "PermutationTable":
        """
        Build the table for a seed.

        Args:
            seed: Any 64-bit integer

        Returns:
            New PermutationTable
        """
        folded = fold_seed(seed)
        values = shuffle(np.arange(TABLE_SIZE, dtype=np.int64), folded)
        logger.debug("Built permutation table", seed=seed, folded_seed=folded)
        return cls(values, seed=seed)

    def __len__(self):
        return TABLE_SIZE

    def __getitem__(self, i: int) -> int:
        return self._lookup[i & TABLE_MASK]

    def hash(self, i: int) -> int:
        """Look up ``i`` wrapped modulo 256."""
        return self._lookup[i & TABLE_MASK]

    def hash2(self, x: int, y: int) -> int:
        """Combined hash of a 2D lattice point."""
        p = self._lookup
        return p[p[x & TABLE_MASK] + (y & TABLE_MASK)]

    def hash3(self, x: int, y: int, z: int) -> int:
        """Combined hash of a 3D lattice point."""
        p = self._lookup
        return p[p[p[x & TABLE_MASK] + (y & TABLE_MASK)] + (z & TABLE_MASK)]

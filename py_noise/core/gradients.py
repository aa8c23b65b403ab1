"""
Gradient tables for gradient-noise generators.

The fixed sets follow the classic choices: eight compass directions in 2D and
Perlin's twelve cube-edge directions (padded to sixteen) in 3D. All vectors
are stored normalised to unit length.
"""

import math
from typing import Tuple

import numpy as np

from .squirrel_prng import SquirrelPRNG

_DIAGONAL = 1.0 / math.sqrt(2.0)

GRADIENTS_2D = np.array([
    [1.0, 0.0],
    [_DIAGONAL, _DIAGONAL],
    [0.0, 1.0],
    [-_DIAGONAL, _DIAGONAL],
    [-1.0, 0.0],
    [-_DIAGONAL, -_DIAGONAL],
    [0.0, -1.0],
    [_DIAGONAL, -_DIAGONAL],
])

# 12 cube edges plus 4 repeats so the table size is a power of two
_EDGES_3D = [
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
    [1, 1, 0], [-1, 1, 0], [0, -1, 1], [0, -1, -1],
]
GRADIENTS_3D = np.array(_EDGES_3D, dtype=np.float64) * _DIAGONAL


class GradientSet:
    """
    Immutable set of unit direction vectors indexed by a lattice hash.

    The set size must be a power of two so that ``hash & mask`` picks a
    gradient without modulo bias.
    """

    def __init__(self, vectors: np.ndarray):
        vectors = np.asarray(vectors, dtype=np.float64)
        if vectors.ndim != 2 or vectors.shape[1] not in (2, 3):
            raise ValueError("Gradients must be an (n, 2) or (n, 3) array")
        count = vectors.shape[0]
        if count == 0 or count & (count - 1):
            raise ValueError("Gradient count must be a power of two")

        norms = np.linalg.norm(vectors, axis=1)
        if np.any(norms == 0):
            raise ValueError("Gradients must be non-zero vectors")
        unit = vectors / norms[:, None]
        unit.setflags(write=False)

        self.vectors = unit
        self.dimensions = unit.shape[1]
        self.mask = count - 1
        self._lookup: Tuple[Tuple[float, ...], ...] = tuple(
            tuple(float(c) for c in row) for row in unit
        )

    @classmethod
    def default_2d(cls) -> "GradientSet":
        return cls(GRADIENTS_2D)

    @classmethod
    def default_3d(cls) -> "GradientSet":
        return cls(GRADIENTS_3D)

    @classmethod
    def seeded(cls, seed: int, count: int = 16, dimensions: int = 2) -> "GradientSet":
        """
        Build a set of pseudo-random unit vectors.

        2D vectors are spaced evenly around the circle with a seeded rotation;
        3D vectors are drawn uniformly on the sphere.
        """
        prng = SquirrelPRNG(seed)
        if dimensions == 2:
            start = prng.random() * 2.0 * math.pi
            step = 2.0 * math.pi / count
            angles = start + step * np.arange(count)
            vectors = np.column_stack([np.cos(angles), np.sin(angles)])
        elif dimensions == 3:
            rows = []
            for _ in range(count):
                z = prng.uniform(-1.0, 1.0)
                phi = prng.random() * 2.0 * math.pi
                r = math.sqrt(max(0.0, 1.0 - z * z))
                rows.append([r * math.cos(phi), r * math.sin(phi), z])
            vectors = np.array(rows)
        else:
            raise ValueError("dimensions must be 2 or 3")
        return cls(vectors)

    def __len__(self):
        return self.mask + 1

    def __getitem__(self, hash_value: int) -> Tuple[float, ...]:
        return self._lookup[hash_value & self.mask]

    def dot2(self, hash_value: int, x: float, y: float) -> float:
        """Dot product of the hashed gradient with a 2D offset."""
        g = self._lookup[hash_value & self.mask]
        return g[0] * x + g[1] * y

    def dot3(self, hash_value: int, x: float, y: float, z: float) -> float:
        """Dot product of the hashed gradient with a 3D offset."""
        g = self._lookup[hash_value & self.mask]
        return g[0] * x + g[1] * y + g[2] * z

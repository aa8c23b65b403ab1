"""
Simplex noise in 2D and 3D.

Based on Stefan Gustavson's formulation: the input is skewed onto a lattice
of simplices, the containing simplex is found by ordering the fractional
skewed coordinates, and each vertex contributes its gradient dot product
attenuated by a radial (r^2 - d^2)^4 kernel.
"""

import math
from typing import Optional

from .base import NoiseGenerator, fast_floor, wrap_coordinate
from .gradients import GradientSet
from .permutation import PermutationTable

F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0
F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

# Squared kernel radius per dimension
RADIUS_SQ_2D = 0.5
RADIUS_SQ_3D = 0.6

# Gustavson's constants (70 and 32) assume gradients of length sqrt(2);
# the gradient sets here are unit length.
SCALE_2D = 70.0 * math.sqrt(2.0)
SCALE_3D = 32.0 * math.sqrt(2.0)


class SimplexNoise(NoiseGenerator):
    """Simplex noise over a seeded permutation table."""

    value_range = (-1.0, 1.0)

    def __init__(
        self,
        seed: int,
        gradients_2d: Optional[GradientSet] = None,
        gradients_3d: Optional[GradientSet] = None,
    ):
        self.seed = seed
        self.permutation = PermutationTable.build(seed)
        self.gradients_2d = gradients_2d or GradientSet.default_2d()
        self.gradients_3d = gradients_3d or GradientSet.default_3d()

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        if z is None:
            return self.noise2(x, y)
        return self.noise3(x, y, z)

    def noise2(self, x: float, y: float) -> float:
        """2D simplex noise, approximately in [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        s = (x + y) * F2
        i = fast_floor(x + s)
        j = fast_floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)

        # Lower triangle only on strict x0 > y0; ties go to the upper one
        if x0 > y0:
            i1, j1 = 1, 0
        else:
            i1, j1 = 0, 1

        x1 = x0 - i1 + G2
        y1 = y0 - j1 + G2
        x2 = x0 - 1.0 + 2.0 * G2
        y2 = y0 - 1.0 + 2.0 * G2

        perm = self.permutation
        grad = self.gradients_2d.dot2

        total = 0.0
        t0 = RADIUS_SQ_2D - x0 * x0 - y0 * y0
        if t0 > 0.0:
            t0 *= t0
            total += t0 * t0 * grad(perm.hash2(i, j), x0, y0)

        t1 = RADIUS_SQ_2D - x1 * x1 - y1 * y1
        if t1 > 0.0:
            t1 *= t1
            total += t1 * t1 * grad(perm.hash2(i + i1, j + j1), x1, y1)

        t2 = RADIUS_SQ_2D - x2 * x2 - y2 * y2
        if t2 > 0.0:
            t2 *= t2
            total += t2 * t2 * grad(perm.hash2(i + 1, j + 1), x2, y2)

        return SCALE_2D * total

    def noise3(self, x: float, y: float, z: float) -> float:
        """3D simplex noise, approximately in [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        z = wrap_coordinate(z)
        s = (x + y + z) * F3
        i = fast_floor(x + s)
        j = fast_floor(y + s)
        k = fast_floor(z + s)
        t = (i + j + k) * G3
        x0 = x - (i - t)
        y0 = y - (j - t)
        z0 = z - (k - t)

        i1, j1, k1, i2, j2, k2 = simplex_order_3d(x0, y0, z0)

        x1 = x0 - i1 + G3
        y1 = y0 - j1 + G3
        z1 = z0 - k1 + G3
        x2 = x0 - i2 + 2.0 * G3
        y2 = y0 - j2 + 2.0 * G3
        z2 = z0 - k2 + 2.0 * G3
        x3 = x0 - 1.0 + 3.0 * G3
        y3 = y0 - 1.0 + 3.0 * G3
        z3 = z0 - 1.0 + 3.0 * G3

        perm = self.permutation
        grad = self.gradients_3d.dot3

        total = 0.0
        t0 = RADIUS_SQ_3D - x0 * x0 - y0 * y0 - z0 * z0
        if t0 > 0.0:
            t0 *= t0
            total += t0 * t0 * grad(perm.hash3(i, j, k), x0, y0, z0)

        t1 = RADIUS_SQ_3D - x1 * x1 - y1 * y1 - z1 * z1
        if t1 > 0.0:
            t1 *= t1
            total += t1 * t1 * grad(perm.hash3(i + i1, j + j1, k + k1), x1, y1, z1)

        t2 = RADIUS_SQ_3D - x2 * x2 - y2 * y2 - z2 * z2
        if t2 > 0.0:
            t2 *= t2
            total += t2 * t2 * grad(perm.hash3(i + i2, j + j2, k + k2), x2, y2, z2)

        t3 = RADIUS_SQ_3D - x3 * x3 - y3 * y3 - z3 * z3
        if t3 > 0.0:
            t3 *= t3
            total += t3 * t3 * grad(perm.hash3(i + 1, j + 1, k + 1), x3, y3, z3)

        return SCALE_3D * total

    def simplex_corners(self, x: float, y: float):
        """
        Lattice corners and gradient hashes of the 2D simplex containing a point.

        Returns:
            Tuple of three (i, j, hash) triples
        """
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        s = (x + y) * F2
        i = fast_floor(x + s)
        j = fast_floor(y + s)
        t = (i + j) * G2
        x0 = x - (i - t)
        y0 = y - (j - t)
        i1, j1 = (1, 0) if x0 > y0 else (0, 1)
        perm = self.permutation
        return (
            (i, j, perm.hash2(i, j)),
            (i + i1, j + j1, perm.hash2(i + i1, j + j1)),
            (i + 1, j + 1, perm.hash2(i + 1, j + 1)),
        )


def simplex_order_3d(x0: float, y0: float, z0: float):
    """
    Offsets of the second and third tetrahedron corners.

    The six orderings of (x0, y0, z0) partition the skewed cube. Comparisons
    resolve ties in a fixed order so every point belongs to exactly one
    tetrahedron.
    """
    if x0 >= y0:
        if y0 >= z0:
            return 1, 0, 0, 1, 1, 0  # X Y Z
        if x0 >= z0:
            return 1, 0, 0, 1, 0, 1  # X Z Y
        return 0, 0, 1, 1, 0, 1  # Z X Y
    if y0 < z0:
        return 0, 0, 1, 0, 1, 1  # Z Y X
    if x0 < z0:
        return 0, 1, 0, 0, 1, 1  # Y Z X
    return 0, 1, 0, 1, 1, 0  # Y X Z

"""
Classic gradient (Perlin) noise in 2D and 3D.

Lattice corners are hashed through the permutation table into a gradient
set, each corner contributes the dot product of its gradient with the offset
to the query point, and the contributions are blended with the quintic fade
curve. With unit gradients the raw value is bounded by sqrt(n)/2, so the
result is scaled by 2/sqrt(n) to cover [-1, 1].
"""

import math
from typing import Optional

from .base import NoiseGenerator, fade, fast_floor, lerp, wrap_coordinate
from .gradients import GradientSet
from .permutation import PermutationTable

SCALE_2D = math.sqrt(2.0)
SCALE_3D = 2.0 / math.sqrt(3.0)


class PerlinNoise(NoiseGenerator):
    """Perlin noise over a seeded permutation table."""

    value_range = (-1.0, 1.0)

    def __init__(
        self,
        seed: int,
        gradients_2d: Optional[GradientSet] = None,
        gradients_3d: Optional[GradientSet] = None,
    ):
        """
        Initialize the generator.

        Args:
            seed: 64-bit seed for the permutation table
            gradients_2d: Optional 2D gradient set (defaults to 8 directions)
            gradients_3d: Optional 3D gradient set (defaults to cube edges)
        """
        self.seed = seed
        self.permutation = PermutationTable.build(seed)
        self.gradients_2d = gradients_2d or GradientSet.default_2d()
        self.gradients_3d = gradients_3d or GradientSet.default_3d()

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        if z is None:
            return self.noise2(x, y)
        return self.noise3(x, y, z)

    def noise2(self, x: float, y: float) -> float:
        """2D Perlin noise in [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        xi = fast_floor(x)
        yi = fast_floor(y)
        xf = x - xi
        yf = y - yi

        u = fade(xf)
        v = fade(yf)

        perm = self.permutation
        grad = self.gradients_2d.dot2
        aa = perm.hash2(xi, yi)
        ab = perm.hash2(xi, yi + 1)
        ba = perm.hash2(xi + 1, yi)
        bb = perm.hash2(xi + 1, yi + 1)

        x1 = lerp(u, grad(aa, xf, yf), grad(ba, xf - 1.0, yf))
        x2 = lerp(u, grad(ab, xf, yf - 1.0), grad(bb, xf - 1.0, yf - 1.0))
        return lerp(v, x1, x2) * SCALE_2D

    def noise3(self, x: float, y: float, z: float) -> float:
        """3D Perlin noise in [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        z = wrap_coordinate(z)
        xi = fast_floor(x)
        yi = fast_floor(y)
        zi = fast_floor(z)
        xf = x - xi
        yf = y - yi
        zf = z - zi

        u = fade(xf)
        v = fade(yf)
        w = fade(zf)

        perm = self.permutation
        grad = self.gradients_3d.dot3
        aaa = perm.hash3(xi, yi, zi)
        aba = perm.hash3(xi, yi + 1, zi)
        aab = perm.hash3(xi, yi, zi + 1)
        abb = perm.hash3(xi, yi + 1, zi + 1)
        baa = perm.hash3(xi + 1, yi, zi)
        bba = perm.hash3(xi + 1, yi + 1, zi)
        bab = perm.hash3(xi + 1, yi, zi + 1)
        bbb = perm.hash3(xi + 1, yi + 1, zi + 1)

        x1 = lerp(u, grad(aaa, xf, yf, zf), grad(baa, xf - 1.0, yf, zf))
        x2 = lerp(u, grad(aba, xf, yf - 1.0, zf), grad(bba, xf - 1.0, yf - 1.0, zf))
        y1 = lerp(v, x1, x2)

        x1 = lerp(u, grad(aab, xf, yf, zf - 1.0), grad(bab, xf - 1.0, yf, zf - 1.0))
        x2 = lerp(
            u,
            grad(abb, xf, yf - 1.0, zf - 1.0),
            grad(bbb, xf - 1.0, yf - 1.0, zf - 1.0),
        )
        y2 = lerp(v, x1, x2)

        return lerp(w, y1, y2) * SCALE_3D

    def evaluate_dot_product(self, x: float, y: float) -> float:
        """
        Contribution of the nearest lattice corner only.

        Each cell is split into quadrants; a quadrant shows the gradient of
        its own corner dotted with the faded local offset. Used to visualise
        the raw gradient field before blending.
        """
        xi = fast_floor(x)
        yi = fast_floor(y)
        xf = x - xi
        yf = y - yi

        corner_x = xi if xf < 0.5 else xi + 1
        corner_y = yi if yf < 0.5 else yi + 1
        u = fade(xf * 2.0 if xf < 0.5 else (xf - 0.5) * 2.0)
        v = fade(yf * 2.0 if yf < 0.5 else (yf - 0.5) * 2.0)

        h = self.permutation.hash2(corner_x, corner_y)
        return self.gradients_2d.dot2(h, u, v)

    def gradient_at(self, xi: int, yi: int):
        """Gradient vector assigned to a 2D lattice point."""
        return self.gradients_2d[self.permutation.hash2(xi, yi)]

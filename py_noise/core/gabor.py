"""
Sparse Gabor convolution noise (Lagae et al. 2009).

The plane is divided into square cells whose side equals the kernel radius,
so a query only sees impulses from its own cell and the eight neighbours.
Each cell draws a Poisson-distributed number of impulses from a stream that
depends on nothing but (seed, cell); every impulse carries a position,
weight, phase and carrier direction. The value at a point is the sum of the
impulses' Gabor kernels evaluated at the offset to that point.
"""

import math
from typing import Callable, List, Optional, Tuple, Union

from ..utils.random import cell_rng, fold_seed
from .base import NoiseGenerator, fast_floor, wrap_coordinate

TWO_PI = 2.0 * math.pi

Orientation = Union[None, float, Callable[[float, float], float]]

# (x, y, z, weight, phase, omega_x, omega_y, omega_z) in world units
Impulse = Tuple[float, float, float, float, float, float, float, float]


def kernel_radius(bandwidth: float, truncation: float) -> float:
    """Distance at which the Gaussian envelope drops to ``truncation``."""
    return math.sqrt(-math.log(truncation) / math.pi) / bandwidth


def gabor_kernel(dx: float, dy: float, dz: float, bandwidth: float, frequency: float,
                 omega: Tuple[float, float, float], phase: float) -> float:
    """exp(-pi a^2 |d|^2) * cos(2 pi F0 <d, omega> + phase)"""
    envelope = math.exp(-math.pi * bandwidth * bandwidth * (dx * dx + dy * dy + dz * dz))
    carrier = math.cos(
        TWO_PI * frequency * (dx * omega[0] + dy * omega[1] + dz * omega[2]) + phase
    )
    return envelope * carrier


def poisson(rng, mean: float, limit: int) -> int:
    """Knuth's multiplication method, capped at ``limit`` draws."""
    threshold = math.exp(-mean)
    count = 0
    product = rng.random()
    while product > threshold and count < limit:
        count += 1
        product *= rng.random()
    return count


class GaborNoise(NoiseGenerator):
    """
    Gabor noise with isotropic or externally oriented impulses.

    ``orientation`` may be None (each impulse picks a random direction), a
    fixed angle in radians, or a callable ``f(x, y) -> angle`` evaluated at
    each impulse position.
    """

    value_range = (-1.0, 1.0)

    def __init__(
        self,
        seed: int,
        impulse_density: float = 16.0,
        kernel_bandwidth: float = 1.0,
        carrier_frequency: float = 1.5,
        truncation: float = 0.05,
        orientation: Orientation = None,
        max_impulses_per_cell: int = 64,
    ):
        """
        Initialize the generator.

        Args:
            seed: Generator seed
            impulse_density: Expected impulses per unit area (per unit volume in 3D)
            kernel_bandwidth: Gaussian envelope width ``a``
            carrier_frequency: Cosine carrier frequency ``F0``
            truncation: Envelope value at which the kernel is cut off
            orientation: None, angle in radians, or callable(x, y) -> angle
            max_impulses_per_cell: Hard cap on the per-cell impulse count
        """
        self.seed = seed
        self._seed32 = fold_seed(seed)
        self.impulse_density = impulse_density
        self.kernel_bandwidth = kernel_bandwidth
        self.carrier_frequency = carrier_frequency
        self.truncation = truncation
        self.orientation = orientation
        self.max_impulses_per_cell = max_impulses_per_cell

        self.radius = kernel_radius(kernel_bandwidth, truncation)
        self._mean_2d = impulse_density * self.radius ** 2
        self._mean_3d = impulse_density * self.radius ** 3

        a2 = kernel_bandwidth * kernel_bandwidth
        # Variance of the sum: density * E[w^2] * integral of the squared kernel
        sigma_2d = math.sqrt(impulse_density / 3.0 * 0.5 / (2.0 * a2))
        sigma_3d = math.sqrt(impulse_density / 3.0 * 0.5 * (2.0 * a2) ** -1.5)
        self._scale_2d = 1.0 / (3.0 * sigma_2d)
        self._scale_3d = 1.0 / (3.0 * sigma_3d)

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        if z is None:
            return self.noise2(x, y)
        return self.noise3(x, y, z)

    def noise2(self, x: float, y: float) -> float:
        """2D Gabor noise, clipped to [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        r = self.radius
        r2 = r * r
        a = self.kernel_bandwidth
        f0 = self.carrier_frequency
        cx = fast_floor(x / r)
        cy = fast_floor(y / r)

        total = 0.0
        for j in (cy - 1, cy, cy + 1):
            for i in (cx - 1, cx, cx + 1):
                for px, py, _, weight, phase, ox, oy, _ in self.cell_impulses(i, j):
                    dx = x - px
                    dy = y - py
                    if dx * dx + dy * dy < r2:
                        total += weight * gabor_kernel(dx, dy, 0.0, a, f0, (ox, oy, 0.0), phase)

        return _clip(total * self._scale_2d)

    def noise3(self, x: float, y: float, z: float) -> float:
        """3D Gabor noise, clipped to [-1, 1]."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        z = wrap_coordinate(z)
        r = self.radius
        r2 = r * r
        a = self.kernel_bandwidth
        f0 = self.carrier_frequency
        cx = fast_floor(x / r)
        cy = fast_floor(y / r)
        cz = fast_floor(z / r)

        total = 0.0
        for k in (cz - 1, cz, cz + 1):
            for j in (cy - 1, cy, cy + 1):
                for i in (cx - 1, cx, cx + 1):
                    for px, py, pz, weight, phase, ox, oy, oz in self.cell_impulses(i, j, k):
                        dx = x - px
                        dy = y - py
                        dz = z - pz
                        if dx * dx + dy * dy + dz * dz < r2:
                            total += weight * gabor_kernel(dx, dy, dz, a, f0, (ox, oy, oz), phase)

        return _clip(total * self._scale_3d)

    def cell_impulses(self, cx: int, cy: int, cz: Optional[int] = None) -> List[Impulse]:
        """
        Impulses owned by one cell.

        The draw order within a cell is fixed (count, then per impulse:
        position, weight, phase, direction), so the result depends only on
        (seed, cell).
        """
        rng = cell_rng(self._seed32, cx, cy, cz)
        r = self.radius
        mean = self._mean_2d if cz is None else self._mean_3d
        count = poisson(rng, mean, self.max_impulses_per_cell)

        impulses = []
        for _ in range(count):
            px = (cx + rng.random()) * r
            py = (cy + rng.random()) * r
            pz = 0.0 if cz is None else (cz + rng.random()) * r
            weight = rng.uniform(-1.0, 1.0)
            phase = rng.random() * TWO_PI
            ox, oy, oz = self._direction(rng, px, py, cz is not None)
            impulses.append((px, py, pz, weight, phase, ox, oy, oz))
        return impulses

    def _direction(self, rng, px: float, py: float, volumetric: bool):
        # Both random draws are always consumed so the stream layout does not
        # depend on the orientation mode
        u = rng.random()
        v = rng.random()
        orientation = self.orientation

        if orientation is None:
            if volumetric:
                oz = 2.0 * u - 1.0
                s = math.sqrt(max(0.0, 1.0 - oz * oz))
                phi = v * TWO_PI
                return s * math.cos(phi), s * math.sin(phi), oz
            angle = u * TWO_PI
        elif callable(orientation):
            angle = float(orientation(px, py))
        else:
            angle = float(orientation)

        return math.cos(angle), math.sin(angle), 0.0


def _clip(value: float) -> float:
    if value > 1.0:
        return 1.0
    if value < -1.0:
        return -1.0
    return value

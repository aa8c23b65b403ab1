"""
Anisotropic noise: a direction-field driven coordinate transform.

At each query point the direction field gives a local flow angle. The point
is expressed in the frame (along, across) of that flow, the along component
is divided by the anisotropy factor, and the base generator is sampled at
the transformed point. Features therefore come out stretched along the flow
and compressed across it.
"""

import math
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

import numpy as np

from .base import NoiseGenerator, fast_floor, wrap_coordinate

# Carrier direction for a Gabor base in the transformed frame: oscillating
# across the flow gives stripes that run along it
FLOW_NORMAL_ANGLE = 0.5 * math.pi


class DirectionField(ABC):
    """Maps a 2D position to a flow angle in radians."""

    @abstractmethod
    def angle_at(self, x: float, y: float) -> float:
        pass

    def __call__(self, x: float, y: float) -> float:
        return self.angle_at(x, y)


class ConstantDirection(DirectionField):
    """Same flow angle everywhere."""

    def __init__(self, angle: float):
        self.angle = float(angle)

    def angle_at(self, x: float, y: float) -> float:
        return self.angle


class VectorDirection(DirectionField):
    """Flow along a fixed vector."""

    def __init__(self, dx: float, dy: float):
        if dx == 0.0 and dy == 0.0:
            raise ValueError("Direction vector must be non-zero")
        self.angle = math.atan2(dy, dx)

    def angle_at(self, x: float, y: float) -> float:
        return self.angle


class FunctionDirection(DirectionField):
    """Flow angle from a closed-form function of position."""

    def __init__(self, func: Callable[[float, float], float]):
        self.func = func

    def angle_at(self, x: float, y: float) -> float:
        return float(self.func(x, y))


class RegionDirection(DirectionField):
    """
    Piecewise constant flow over square regions.

    ``angles[row][col]`` is the angle of the region covering
    ``[col * size, (col + 1) * size) x [row * size, (row + 1) * size)``;
    the grid repeats outside its extent.
    """

    def __init__(self, angles: Sequence[Sequence[float]], region_size: float = 1.0):
        grid = np.asarray(angles, dtype=np.float64)
        if grid.ndim != 2 or grid.size == 0:
            raise ValueError("Region angles must be a non-empty 2D grid")
        if region_size <= 0:
            raise ValueError("Region size must be positive")
        grid.setflags(write=False)
        self.angles = grid
        self.region_size = float(region_size)
        self._rows = tuple(tuple(float(a) for a in row) for row in grid)

    def angle_at(self, x: float, y: float) -> float:
        rows, cols = self.angles.shape
        col = fast_floor(x / self.region_size) % cols
        row = fast_floor(y / self.region_size) % rows
        return self._rows[row][col]


class AnisotropicNoise(NoiseGenerator):
    """Stretches a base generator along a direction field."""

    def __init__(self, base: NoiseGenerator, direction: DirectionField, anisotropy: float = 4.0):
        if anisotropy < 1.0:
            raise ValueError("Anisotropy must be >= 1")
        self.base = base
        self.direction = direction
        self.anisotropy = anisotropy
        self.value_range = base.value_range

    def transform(self, x: float, y: float):
        """Map a point into the stretched flow frame."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        angle = self.direction.angle_at(x, y)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        along = x * cos_a + y * sin_a
        across = -x * sin_a + y * cos_a
        return along / self.anisotropy, across

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        u, v = self.transform(x, y)
        return self.base.evaluate(u, v, z)

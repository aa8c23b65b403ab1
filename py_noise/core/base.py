"""Common interface and helpers shared by all noise generators."""

import math
from abc import ABC, abstractmethod
from typing import Optional, Tuple

# Doubles of magnitude 2**53 and above are all integers, so larger coordinates
# carry no position inside a cell. The limit is a multiple of every lattice
# and tile period used by the generators.
COORDINATE_LIMIT = 2.0 ** 53


def fade(t: float) -> float:
    """6t^5 - 15t^4 + 10t^3"""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(t: float, a: float, b: float) -> float:
    """Linear interpolation."""
    return a + t * (b - a)


def fast_floor(x: float) -> int:
    """Floor for positive and negative floats."""
    xi = int(x)
    return xi if x >= xi else xi - 1


def wrap_coordinate(v: float) -> float:
    """Fold a finite coordinate into (-2**53, 2**53)."""
    if -COORDINATE_LIMIT < v < COORDINATE_LIMIT:
        return v
    return math.fmod(v, COORDINATE_LIMIT)


class NoiseGenerator(ABC):
    """
    A scalar noise field over 2D or 3D coordinates.

    Implementations are pure functions of their constructor arguments: all
    tables are built in ``__init__`` and never written afterwards, so one
    instance may be evaluated from any number of threads at once.
    """

    #: Nominal output interval, documented per generator
    value_range: Tuple[float, float] = (-1.0, 1.0)

    @abstractmethod
    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        """Evaluate the field at a 2D point, or a 3D point when ``z`` is given."""

    def __call__(self, x: float, y: float, z: Optional[float] = None) -> float:
        return self.evaluate(x, y, z)

"""
Worley (cellular) noise.

Every unit cell owns one feature point, derived on demand from (seed, cell).
A query collects the k smallest distances to feature points under the chosen
metric and folds them with a combination rule.

Search window
-------------
Cells are visited in square rings around the query cell. Each feature point
lies inside its own cell, so every point in a cell at ring distance r + 1 or
more is at least ``r + g`` away along one axis, where ``g`` is the distance
from the query to the nearest face of its own cell. For every Lp metric
(p >= 1) the distance is at least the largest single-axis offset, so once the
k-th best distance found is <= r + g after ring r, no unvisited cell can
improve the result. Within a ring, cells whose box lower bound already
exceeds the k-th best distance are skipped.
"""

import math
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from ..utils.random import cell_rng, fold_seed
from .base import NoiseGenerator, fast_floor, wrap_coordinate


class DistanceMetric(str, Enum):
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    CHEBYSHEV = "chebyshev"
    MINKOWSKI = "minkowski"


class CombineRule(str, Enum):
    F1 = "f1"
    F2 = "f2"
    F2_MINUS_F1 = "f2_minus_f1"
    WEIGHTED = "weighted"
    CRACKLE = "crackle"


def distance(metric: DistanceMetric, dx: float, dy: float, dz: float = 0.0, p: float = 3.0) -> float:
    """Distance of an offset vector under a metric."""
    dx = abs(dx)
    dy = abs(dy)
    dz = abs(dz)
    if metric is DistanceMetric.EUCLIDEAN:
        return math.sqrt(dx * dx + dy * dy + dz * dz)
    if metric is DistanceMetric.MANHATTAN:
        return dx + dy + dz
    if metric is DistanceMetric.CHEBYSHEV:
        return max(dx, dy, dz)
    # Scaled by the largest offset so large exponents cannot overflow
    peak = max(dx, dy, dz)
    if peak == 0.0:
        return 0.0
    return peak * ((dx / peak) ** p + (dy / peak) ** p + (dz / peak) ** p) ** (1.0 / p)


def cell_diameter(metric: DistanceMetric, dimensions: int = 2, p: float = 3.0) -> float:
    """Largest distance between two points of one unit cell."""
    if metric is DistanceMetric.EUCLIDEAN:
        return math.sqrt(dimensions)
    if metric is DistanceMetric.MANHATTAN:
        return float(dimensions)
    if metric is DistanceMetric.CHEBYSHEV:
        return 1.0
    return dimensions ** (1.0 / p)


class FeaturePointField:
    """
    One jittered feature point per unit cell.

    With ``jitter = 1`` the point is uniform over its cell; smaller values
    pull it toward the cell centre. Points never leave their cell.
    """

    def __init__(self, seed: int, jitter: float = 1.0):
        if not 0.0 < jitter <= 1.0:
            raise ValueError("Jitter must be in (0, 1]")
        self.seed = seed
        self.jitter = jitter
        self._seed32 = fold_seed(seed)

    def point(self, cx: int, cy: int, cz: Optional[int] = None) -> Tuple[float, ...]:
        rng = cell_rng(self._seed32, cx, cy, cz)
        j = self.jitter
        px = cx + 0.5 + j * (rng.random() - 0.5)
        py = cy + 0.5 + j * (rng.random() - 0.5)
        if cz is None:
            return px, py
        return px, py, cz + 0.5 + j * (rng.random() - 0.5)


class WorleyNoise(NoiseGenerator):
    """Cellular noise over a feature point field."""

    def __init__(
        self,
        seed: int,
        k: int = 2,
        metric: DistanceMetric = DistanceMetric.EUCLIDEAN,
        combine: CombineRule = CombineRule.F1,
        weights: Sequence[float] = (-1.0, 1.0),
        jitter: float = 1.0,
        minkowski_p: float = 3.0,
        crackle_power: float = 0.5,
        dimensions: int = 2,
        field=None,
    ):
        """
        Initialize the generator.

        Args:
            seed: Generator seed
            k: Number of nearest distances to collect (raised to what the
                combine rule needs)
            metric: Distance metric
            combine: How the sorted distances become one value
            weights: Coefficients for the weighted rule, nearest first
            jitter: Feature point jitter in (0, 1]
            minkowski_p: Exponent of the Minkowski metric, >= 1
            crackle_power: Exponent of the crackle rule
            dimensions: Used for the documented value range only
            field: Optional feature point source with a ``point(cx, cy, cz)``
                method; points must lie inside their own cell
        """
        self.seed = seed
        self.metric = DistanceMetric(metric)
        if self.metric is DistanceMetric.MINKOWSKI and minkowski_p < 1.0:
            raise ValueError("Minkowski exponent must be >= 1")
        self.combine = CombineRule(combine)
        self.weights = tuple(float(w) for w in weights)
        self.minkowski_p = minkowski_p
        self.crackle_power = crackle_power
        self.field = field or FeaturePointField(seed, jitter)

        required = {
            CombineRule.F1: 1,
            CombineRule.F2: 2,
            CombineRule.F2_MINUS_F1: 2,
            CombineRule.WEIGHTED: len(self.weights),
            CombineRule.CRACKLE: 1,
        }[self.combine]
        self.k = max(k, required, 1)

        diameter = cell_diameter(self.metric, dimensions, minkowski_p)
        if self.combine is CombineRule.CRACKLE:
            self.value_range = (0.0, 1.0)
        elif self.combine is CombineRule.F1:
            self.value_range = (0.0, diameter)
        elif self.combine is CombineRule.WEIGHTED:
            bound = 2.0 * diameter * sum(abs(w) for w in self.weights)
            self.value_range = (-bound, bound)
        else:
            self.value_range = (0.0, 2.0 * diameter)

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        return self.combine_distances(self.nearest_distances(x, y, z))

    def combine_distances(self, distances: List[float]) -> float:
        rule = self.combine
        if rule is CombineRule.F1:
            return distances[0]
        if rule is CombineRule.F2:
            return distances[1]
        if rule is CombineRule.F2_MINUS_F1:
            return distances[1] - distances[0]
        if rule is CombineRule.WEIGHTED:
            return sum(w * d for w, d in zip(self.weights, distances))
        return min(distances[0], 1.0) ** self.crackle_power

    def nearest_distances(self, x: float, y: float, z: Optional[float] = None) -> List[float]:
        """The ``k`` smallest feature point distances, ascending."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        if z is None:
            return self._search2(x, y)
        return self._search3(x, y, wrap_coordinate(z))

    def _distance(self, dx: float, dy: float, dz: float = 0.0) -> float:
        return distance(self.metric, dx, dy, dz, self.minkowski_p)

    def _search2(self, x: float, y: float) -> List[float]:
        k = self.k
        cx = fast_floor(x)
        cy = fast_floor(y)
        fx = x - cx
        fy = y - cy
        gap = min(fx, 1.0 - fx, fy, 1.0 - fy)
        best: List[float] = []

        ring = 0
        while True:
            for i, j in _ring_2d(ring):
                if len(best) == k:
                    bound = self._distance(_axis_gap(i, fx), _axis_gap(j, fy))
                    if bound >= best[-1]:
                        continue
                px, py = self.field.point(cx + i, cy + j)
                _insert(best, self._distance(px - x, py - y), k)
            if len(best) == k and best[-1] <= ring + gap:
                return best
            ring += 1

    def _search3(self, x: float, y: float, z: float) -> List[float]:
        k = self.k
        cx = fast_floor(x)
        cy = fast_floor(y)
        cz = fast_floor(z)
        fx = x - cx
        fy = y - cy
        fz = z - cz
        gap = min(fx, 1.0 - fx, fy, 1.0 - fy, fz, 1.0 - fz)
        best: List[float] = []

        ring = 0
        while True:
            for i, j, m in _ring_3d(ring):
                if len(best) == k:
                    bound = self._distance(_axis_gap(i, fx), _axis_gap(j, fy), _axis_gap(m, fz))
                    if bound >= best[-1]:
                        continue
                px, py, pz = self.field.point(cx + i, cy + j, cz + m)
                _insert(best, self._distance(px - x, py - y, pz - z), k)
            if len(best) == k and best[-1] <= ring + gap:
                return best
            ring += 1


def _axis_gap(offset: int, frac: float) -> float:
    """Smallest per-axis distance from the query to a cell ``offset`` cells away."""
    if offset == 0:
        return 0.0
    if offset > 0:
        return offset - frac
    return -offset - 1 + frac


def _insert(best: List[float], value: float, k: int):
    """Insert into an ascending list, keeping at most k entries."""
    if len(best) == k:
        if value >= best[-1]:
            return
        best.pop()
    index = len(best)
    while index > 0 and best[index - 1] > value:
        index -= 1
    best.insert(index, value)


def _ring_2d(r: int):
    """Cell offsets at Chebyshev distance exactly r."""
    if r == 0:
        yield 0, 0
        return
    for i in range(-r, r + 1):
        yield i, -r
        yield i, r
    for j in range(-r + 1, r):
        yield -r, j
        yield r, j


def _ring_3d(r: int):
    if r == 0:
        yield 0, 0, 0
        return
    for m in range(-r, r + 1):
        on_face = abs(m) == r
        for j in range(-r, r + 1):
            for i in range(-r, r + 1):
                if on_face or abs(i) == r or abs(j) == r:
                    yield i, j, m

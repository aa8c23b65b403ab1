"""
Fractal composition over any base generator.

FractalNoise sums octaves of a base generator at geometrically increasing
frequency and decreasing amplitude, optionally folding each octave (ridge,
turbulence), rotating the domain per octave, and restricting the output to
one octave or a prefix of octaves for inspection. The sum is divided by the
total amplitude of the included octaves, so a base bounded by [-1, 1] gives
a standard fBm bounded by [-1, 1] for any octave count.

DomainWarp displaces the query point by an independent noise field before
the octave loop.
"""

import math
from enum import Enum
from typing import Optional, Tuple

from .base import NoiseGenerator, wrap_coordinate


class FractalMode(str, Enum):
    STANDARD = "standard"
    RIDGE = "ridge"
    TURBULENCE = "turbulence"


class OctaveView(str, Enum):
    FINAL = "final"
    SINGLE = "single"
    ACCUMULATED = "accumulated"


# Highest octave frequency a configuration may reach; keeps scaled
# coordinates finite for every coordinate below the folding limit
MAX_OCTAVE_FREQUENCY = 1e100

# Offsets that decorrelate the x, y and z warp components
WARP_OFFSETS = (
    (0.0, 0.0, 0.0),
    (5.2, 1.3, 0.0),
    (1.7, 9.2, 0.0),
)


def octave_amplitudes(persistence: float, h_exponent: float, octaves: int) -> Tuple[float, ...]:
    """Amplitude of each octave, starting at 1 and stepping by ``persistence ** h_exponent``."""
    gain = persistence ** h_exponent
    amplitudes = []
    amplitude = 1.0
    for _ in range(octaves):
        amplitudes.append(amplitude)
        amplitude *= gain
    return tuple(amplitudes)


class DomainWarp:
    """
    Displace points by a vector noise field.

    Each component is the warp generator sampled at a fixed offset from the
    point. With several passes the displacement is nested: every pass
    samples at the previously warped point and displaces the original one,
    ``p + s * q(p + s * q(p))`` for two passes.
    """

    def __init__(self, generator: NoiseGenerator, strength: float, passes: int = 1):
        if passes < 1:
            raise ValueError("Warp needs at least one pass")
        self.generator = generator
        self.strength = strength
        self.passes = passes

    def displacement(self, x: float, y: float, z: Optional[float] = None):
        """Warp vector at a point, before scaling by strength."""
        g = self.generator.evaluate
        (ax, ay, az), (bx, by, bz), (cx, cy, cz) = WARP_OFFSETS
        if z is None:
            return g(x + ax, y + ay), g(x + bx, y + by), None
        return (
            g(x + ax, y + ay, z + az),
            g(x + bx, y + by, z + bz),
            g(x + cx, y + cy, z + cz),
        )

    def apply(self, x: float, y: float, z: Optional[float] = None):
        s = self.strength
        wx, wy, wz = x, y, z
        for _ in range(self.passes):
            qx, qy, qz = self.displacement(wx, wy, wz)
            wx = x + s * qx
            wy = y + s * qy
            if z is not None:
                wz = z + s * qz
        return wx, wy, wz


class FractalNoise(NoiseGenerator):
    """Multi-octave composition of a base generator."""

    def __init__(
        self,
        base: NoiseGenerator,
        octaves: int = 1,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        frequency: float = 1.0,
        mode: FractalMode = FractalMode.STANDARD,
        ridge_offset: float = 1.0,
        ridge_weighting: bool = False,
        h_exponent: float = 1.0,
        octave_rotation: float = 0.0,
        octave_view: OctaveView = OctaveView.FINAL,
        view_octave: Optional[int] = None,
        warp: Optional[DomainWarp] = None,
    ):
        """
        Initialize the composition.

        Args:
            base: Generator sampled once per octave
            octaves: Number of octaves, >= 1
            persistence: Amplitude ratio between octaves, in (0, 1]
            lacunarity: Frequency ratio between octaves, >= 1
            frequency: Frequency of the first octave
            mode: Per-octave fold (standard, ridge or turbulence)
            ridge_offset: Offset in ``(offset - |s|)^2``
            ridge_weighting: Scale each ridge octave by the previous one
            h_exponent: Amplitude step is ``persistence ** h_exponent``
            octave_rotation: Domain rotation in radians added per octave
            octave_view: Which octaves contribute to the output
            view_octave: 1-based octave for the single and accumulated views
            warp: Optional domain warp applied before the octave loop
        """
        if octaves < 1:
            raise ValueError("Fractal noise needs at least one octave")
        view = OctaveView(octave_view)
        if view is not OctaveView.FINAL:
            if view_octave is None or not 1 <= view_octave <= octaves:
                raise ValueError("view_octave must be in 1..octaves")

        self.base = base
        self.octaves = octaves
        self.persistence = persistence
        self.lacunarity = lacunarity
        self.frequency = frequency
        self.mode = FractalMode(mode)
        self.ridge_offset = ridge_offset
        self.ridge_weighting = ridge_weighting
        self.h_exponent = h_exponent
        self.octave_rotation = octave_rotation
        self.octave_view = view
        self.view_octave = view_octave
        self.warp = warp

        self.gain = persistence ** h_exponent
        self._amplitudes = octave_amplitudes(persistence, h_exponent, octaves)
        self._norm = 0.0
        for i, amplitude in enumerate(self._amplitudes):
            if self.includes(i + 1):
                self._norm += amplitude
        if self._norm == 0.0:
            raise ValueError("The included octaves have zero amplitude")
        self._rotations = tuple(
            (math.cos(i * octave_rotation), math.sin(i * octave_rotation))
            for i in range(octaves)
        )
        self.value_range = self._range()

    def _range(self) -> Tuple[float, float]:
        low, high = self.base.value_range
        if self.mode is FractalMode.STANDARD:
            return low, high
        peak = max(abs(low), abs(high))
        if self.mode is FractalMode.TURBULENCE:
            return 0.0, peak
        return 0.0, max(self.ridge_offset, peak - self.ridge_offset) ** 2

    def includes(self, octave: int) -> bool:
        """Whether the 1-based octave contributes under the current view."""
        if self.octave_view is OctaveView.FINAL:
            return True
        if self.octave_view is OctaveView.SINGLE:
            return octave == self.view_octave
        return octave <= self.view_octave

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        if z is not None:
            z = wrap_coordinate(z)
        if self.warp is not None:
            x, y, z = self.warp.apply(x, y, z)
        return self.sum_octaves(x, y, z)

    def sum_octaves(self, x: float, y: float, z: Optional[float] = None) -> float:
        """Octave loop without the domain warp."""
        x = wrap_coordinate(x)
        y = wrap_coordinate(y)
        if z is not None:
            z = wrap_coordinate(z)
        sample_base = self.base.evaluate
        amplitudes = self._amplitudes
        mode = self.mode
        offset = self.ridge_offset

        frequency = self.frequency
        total = 0.0
        weight = 1.0

        for i in range(self.octaves):
            cos_r, sin_r = self._rotations[i]
            sx = (x * cos_r - y * sin_r) * frequency
            sy = (x * sin_r + y * cos_r) * frequency
            sz = None if z is None else z * frequency

            sample = sample_base(sx, sy, sz)
            if mode is FractalMode.RIDGE:
                sample = offset - abs(sample)
                sample = sample * sample
                if self.ridge_weighting:
                    sample *= weight
                    weight = min(max(sample * 2.0, 0.0), 1.0)
            elif mode is FractalMode.TURBULENCE:
                sample = abs(sample)

            if self.includes(i + 1):
                total += amplitudes[i] * sample

            frequency *= self.lacunarity

        return total / self._norm

"""
Wavelet noise (Cook & DeRose 2005).

A white-noise tile is projected onto the coarser wavelet level by a
down-sample / up-sample pair and the projection is subtracted, leaving a tile
whose energy sits in a single octave band. The tile is built once per
(seed, tile size, dimensions) and then sampled with periodic wrapping, so
the field repeats seamlessly every ``tile_size`` units.
"""

import time
from typing import Optional

import numpy as np
import structlog
from scipy.ndimage import correlate1d

from ..exceptions import ConfigurationError, DimensionError
from ..utils.random import fold_seed
from .base import NoiseGenerator, fast_floor, lerp
from .squirrel_prng import squirrel_noise5_array

logger = structlog.get_logger()

# Analysis filter for the quadratic B-spline wavelet, 32 taps
DOWNSAMPLE_COEFFS = np.array([
    0.000334, -0.001528, 0.000410, 0.003545, -0.000938, -0.008233, 0.002172, 0.019120,
    -0.005040, -0.044412, 0.011655, 0.103311, -0.025936, -0.243780, 0.033979, 0.655340,
    0.655340, 0.033979, -0.243780, -0.025936, 0.103311, 0.011655, -0.044412, -0.005040,
    0.019120, 0.002172, -0.008233, -0.000938, 0.003546, 0.000410, -0.001528, 0.000334,
])

# Refinement mask of the quadratic B-spline
UPSAMPLE_COEFFS = (0.25, 0.75, 0.75, 0.25)

MIN_TILE_SIZE = 4


def downsample(data: np.ndarray, axis: int) -> np.ndarray:
    """
    Project onto the next coarser level along one axis.

    ``out[i] = sum(a[k - 2i + 16] * data[k mod n])`` for k in [2i-16, 2i+16).
    """
    filtered = correlate1d(data, DOWNSAMPLE_COEFFS, axis=axis, mode="wrap")
    return np.take(filtered, np.arange(0, data.shape[axis], 2), axis=axis)


def upsample(data: np.ndarray, axis: int) -> np.ndarray:
    """
    Refine back to full resolution along one axis.

    Even samples take 3/4 of their parent and 1/4 of the next one, odd
    samples the reverse; the parent index wraps at the coarse size.
    """
    following = np.roll(data, -1, axis=axis)
    p0, p1, p2, p3 = UPSAMPLE_COEFFS
    even = p2 * data + p0 * following
    odd = p3 * data + p1 * following

    shape = list(data.shape)
    shape[axis] *= 2
    out = np.empty(shape, dtype=np.float64)

    even_index = [slice(None)] * data.ndim
    odd_index = [slice(None)] * data.ndim
    even_index[axis] = slice(0, None, 2)
    odd_index[axis] = slice(1, None, 2)
    out[tuple(even_index)] = even
    out[tuple(odd_index)] = odd
    return out


def white_noise_tile(seed: int, tile_size: int, dimensions: int) -> np.ndarray:
    """Uniform [-1, 1] noise, one hash per texel index, zero mean."""
    count = tile_size ** dimensions
    hashed = squirrel_noise5_array(np.arange(count, dtype=np.int64), fold_seed(seed))
    values = -1.0 + 2.0 * (hashed.astype(np.float64) / 0xFFFFFFFF)
    values -= values.mean()
    return values.reshape((tile_size,) * dimensions)


def band_limit(noise: np.ndarray) -> np.ndarray:
    """
    Remove the coarse-level projection from a noise tile.

    The projection is separable: down-sample then up-sample along each axis
    in turn, and subtract the result from the input.
    """
    projection = noise
    for axis in range(noise.ndim):
        projection = upsample(downsample(projection, axis), axis)
    band = noise - projection

    # An odd shift of the tile balances the variance of even and odd texels
    offset = noise.shape[0] // 2
    if offset % 2 == 0:
        offset += 1
    shifted = np.roll(band, shift=[-offset] * noise.ndim, axis=tuple(range(noise.ndim)))
    return band + shifted


def build_tile(seed: int, tile_size: int, dimensions: int = 2) -> np.ndarray:
    """
    Synthesise a normalised, read-only wavelet noise tile.

    Args:
        seed: Generator seed
        tile_size: Edge length in texels, a power of two >= 4
        dimensions: 2 or 3

    Returns:
        Array of shape ``(tile_size,) * dimensions`` with values in [-1, 1]
    """
    start = time.perf_counter()
    tile = band_limit(white_noise_tile(seed, tile_size, dimensions))

    peak = float(np.max(np.abs(tile)))
    if peak > 0.0:
        tile /= peak
    tile.setflags(write=False)

    logger.info(
        "Wavelet tile synthesised",
        shape=tile.shape,
        elapsed_ms=round((time.perf_counter() - start) * 1000.0, 2),
    )
    return tile


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


class WaveletNoise(NoiseGenerator):
    """
    Band-limited noise sampled from a periodic tile.

    Coordinates are in texel units: the field repeats every ``tile_size``
    units along each axis.
    """

    value_range = (-1.0, 1.0)

    def __init__(self, seed: int, tile_size: int = 128, dimensions: int = 2):
        if not _is_power_of_two(tile_size) or tile_size < MIN_TILE_SIZE:
            raise ConfigurationError(
                f"Wavelet tile size must be a power of two >= {MIN_TILE_SIZE}, got {tile_size}",
                [{"field": "tile_size", "message": "not a power of two >= 4", "type": "value_error"}],
            )
        if dimensions not in (2, 3):
            raise ConfigurationError(
                f"Wavelet dimensions must be 2 or 3, got {dimensions}",
                [{"field": "dimensions", "message": "must be 2 or 3", "type": "value_error"}],
            )

        self.seed = seed
        self.tile_size = tile_size
        self.dimensions = dimensions
        self.tile = build_tile(seed, tile_size, dimensions)
        # Flat tuple for scalar lookups in the evaluation loop
        self._flat = tuple(float(v) for v in self.tile.ravel())

    @property
    def period(self) -> int:
        return self.tile_size

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        if z is None:
            if self.dimensions == 2:
                return self.noise2(x, y)
            return self.noise3(x, y, 0.0)
        if self.dimensions != 3:
            raise DimensionError("This wavelet tile is 2D; build it with dimensions=3 for 3D queries")
        return self.noise3(x, y, z)

    def noise2(self, x: float, y: float) -> float:
        """Bilinear sample of the 2D tile with periodic wrapping."""
        n = self.tile_size
        t = self._flat

        xi = fast_floor(x)
        yi = fast_floor(y)
        fx = x - xi
        fy = y - yi

        x0 = xi % n
        x1 = (xi + 1) % n
        y0 = yi % n
        y1 = (yi + 1) % n

        v0 = lerp(fx, t[y0 * n + x0], t[y0 * n + x1])
        v1 = lerp(fx, t[y1 * n + x0], t[y1 * n + x1])
        return lerp(fy, v0, v1)

    def noise3(self, x: float, y: float, z: float) -> float:
        """Trilinear sample of the 3D tile with periodic wrapping."""
        n = self.tile_size
        t = self._flat

        xi = fast_floor(x)
        yi = fast_floor(y)
        zi = fast_floor(z)
        fx = x - xi
        fy = y - yi
        fz = z - zi

        x0 = xi % n
        x1 = (xi + 1) % n
        y0 = (yi % n) * n
        y1 = ((yi + 1) % n) * n
        z0 = (zi % n) * n * n
        z1 = ((zi + 1) % n) * n * n

        a0 = lerp(fx, t[z0 + y0 + x0], t[z0 + y0 + x1])
        a1 = lerp(fx, t[z0 + y1 + x0], t[z0 + y1 + x1])
        b0 = lerp(fx, t[z1 + y0 + x0], t[z1 + y0 + x1])
        b1 = lerp(fx, t[z1 + y1 + x0], t[z1 + y1 + x1])
        return lerp(fz, lerp(fy, a0, a1), lerp(fy, b0, b1))

"""Tests for wavelet noise."""

import math

import pytest
import numpy as np
from py_noise.core.wavelet import (
    WaveletNoise, build_tile, band_limit, downsample, upsample, white_noise_tile
)
from py_noise.exceptions import ConfigurationError, DimensionError


class TestTileSynthesis:
    """Test band-limited tile construction."""

    def test_tile_shape_and_range(self):
        """Test tile shape and normalisation."""
        tile = build_tile(42, 32, 2)
        assert tile.shape == (32, 32)
        assert np.max(np.abs(tile)) == pytest.approx(1.0)
        assert abs(np.mean(tile)) < 0.05

    def test_tile_read_only(self):
        """Test that the tile cannot be modified."""
        tile = build_tile(1, 16, 2)
        with pytest.raises(ValueError):
            tile[0, 0] = 0.0

    def test_3d_tile(self):
        """Test 3D tile shape."""
        tile = build_tile(42, 8, 3)
        assert tile.shape == (8, 8, 8)
        assert np.all(np.isfinite(tile))

    def test_deterministic(self):
        """Test that the same seed builds the same tile."""
        np.testing.assert_array_equal(build_tile(5, 16, 2), build_tile(5, 16, 2))

    def test_different_seeds(self):
        """Test that different seeds build different tiles."""
        assert not np.array_equal(build_tile(5, 16, 2), build_tile(6, 16, 2))

    def test_white_noise_zero_mean(self):
        """Test that the white noise is centred."""
        noise = white_noise_tile(3, 16, 2)
        assert noise.shape == (16, 16)
        assert abs(np.mean(noise)) < 1e-12
        assert np.max(np.abs(noise)) <= 2.0

    def test_band_limit_removes_constant(self):
        """Test that a constant tile has no energy left in the band."""
        result = band_limit(np.full((8, 8), 3.0))
        assert np.max(np.abs(result)) < 1e-4

    def test_band_limit_removes_coarse_signal(self):
        """Test that a slow sinusoid is mostly removed while noise is kept."""
        n = 64
        x = np.arange(n)
        slow = np.sin(2 * np.pi * x / n)[None, :] * np.ones((n, 1))
        assert np.max(np.abs(band_limit(slow))) < 0.2 * np.max(np.abs(slow))

        noise = white_noise_tile(1, n, 2)
        assert np.std(band_limit(noise)) > 0.1 * np.std(noise)

    def test_resampling_shapes(self):
        """Test down- and up-sampling along each axis."""
        data = np.random.default_rng(0).standard_normal((16, 8))
        assert downsample(data, 0).shape == (8, 8)
        assert downsample(data, 1).shape == (16, 4)
        assert upsample(data, 0).shape == (32, 8)
        assert upsample(data, 1).shape == (16, 16)

    def test_upsample_constant(self):
        """Test that refinement preserves constants."""
        np.testing.assert_allclose(upsample(np.full(4, 2.0), 0), np.full(8, 2.0))


class TestWaveletNoise:
    """Test wavelet noise evaluation."""

    @pytest.mark.parametrize("tile_size", [4, 8, 16, 32, 64])
    def test_tiling_2d(self, tile_size):
        """Test that the field repeats exactly every tile_size units."""
        noise = WaveletNoise(7, tile_size=tile_size)
        n = float(tile_size)
        assert noise.evaluate(0.0, 0.0) == noise.evaluate(n, 0.0)
        assert noise.evaluate(0.0, 0.0) == noise.evaluate(0.0, n)
        assert noise.evaluate(0.0, 0.0) == noise.evaluate(-n, n)
        assert noise.evaluate(0.25, 0.5) == noise.evaluate(n + 0.25, 0.5 - n)
        assert noise.period == tile_size

    @pytest.mark.parametrize("tile_size", [4, 8, 16])
    def test_tiling_3d(self, tile_size):
        """Test 3D periodicity."""
        noise = WaveletNoise(7, tile_size=tile_size, dimensions=3)
        n = float(tile_size)
        assert noise.evaluate(0.0, 0.0, 0.0) == noise.evaluate(n, n, n)
        assert noise.evaluate(0.5, 0.25, 0.75) == noise.evaluate(0.5, 0.25 + n, 0.75 - n)

    def test_texel_values(self):
        """Test that integer coordinates read the tile directly."""
        noise = WaveletNoise(3, tile_size=16)
        assert noise.evaluate(3.0, 5.0) == noise.tile[5, 3]

    def test_range(self):
        """Test that interpolated values stay within [-1, 1]."""
        noise = WaveletNoise(11, tile_size=32)
        rng = np.random.default_rng(1)
        for x, y in rng.uniform(-100, 100, size=(500, 2)):
            value = noise.evaluate(x, y)
            assert math.isfinite(value)
            assert -1.0 <= value <= 1.0

    def test_3d_query_on_2d_tile(self):
        """Test that a 2D tile rejects 3D coordinates."""
        noise = WaveletNoise(1, tile_size=8)
        with pytest.raises(DimensionError):
            noise.evaluate(0.5, 0.5, 0.5)

    def test_2d_query_on_3d_tile(self):
        """Test that a 3D tile answers 2D queries from its z = 0 slice."""
        noise = WaveletNoise(1, tile_size=8, dimensions=3)
        assert noise.evaluate(1.5, 2.5) == noise.evaluate(1.5, 2.5, 0.0)

    @pytest.mark.parametrize("tile_size", [0, 2, 6, 48, 100])
    def test_invalid_tile_size(self, tile_size):
        """Test that tile sizes must be powers of two >= 4."""
        with pytest.raises(ConfigurationError):
            WaveletNoise(1, tile_size=tile_size)

    def test_invalid_dimensions(self):
        """Test that only 2D and 3D tiles exist."""
        with pytest.raises(ConfigurationError):
            WaveletNoise(1, tile_size=8, dimensions=4)

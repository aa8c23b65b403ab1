"""Tests for the fractal composition engine and domain warp."""

import math

import pytest
import numpy as np
from py_noise import create_noise_field
from py_noise.core.base import NoiseGenerator
from py_noise.core.fractal import FractalNoise, DomainWarp, FractalMode, OctaveView, octave_amplitudes
from py_noise.core.perlin import PerlinNoise
from py_noise.core.worley import WorleyNoise


class ConstantNoise(NoiseGenerator):
    """Returns the same value everywhere."""

    def __init__(self, value):
        self.value = value

    def evaluate(self, x, y, z=None):
        return self.value


@pytest.fixture(scope="module")
def perlin():
    return PerlinNoise(1)


class TestFractalScenario:
    """Test the reference fractal configuration."""

    def test_fbm_within_unit_range(self):
        """Test 10,000 samples of 4-octave Perlin fBm."""
        field = create_noise_field(seed=1, octaves=4, persistence=0.5, lacunarity=2.0, ridge=False)
        rng = np.random.default_rng(2024)
        values = np.array([field.evaluate(x, y) for x, y in rng.uniform(-1000, 1000, size=(10000, 2))])
        assert np.all(np.isfinite(values))
        assert np.all(values >= -1.0)
        assert np.all(values <= 1.0)

    @pytest.mark.parametrize("octaves,persistence", [(1, 1.0), (3, 0.9), (8, 0.3), (12, 1.0)])
    def test_normalisation_any_octaves(self, perlin, octaves, persistence):
        """Test that standard fBm stays in [-1, 1] for any octave count."""
        noise = FractalNoise(perlin, octaves=octaves, persistence=persistence, lacunarity=2.0)
        rng = np.random.default_rng(octaves)
        for x, y in rng.uniform(-50, 50, size=(300, 2)):
            assert -1.0 <= noise.evaluate(x, y) <= 1.0


class TestFractalNoise:
    """Test octave summation."""

    def test_single_octave_is_base(self, perlin):
        """Test that one octave samples the base at the base frequency."""
        noise = FractalNoise(perlin, octaves=1, frequency=0.5)
        for x, y in [(0.3, 0.7), (-4.2, 9.1)]:
            assert noise.evaluate(x, y) == perlin.evaluate(x * 0.5, y * 0.5)

    def test_two_octave_sum(self, perlin):
        """Test the weighted average of two octaves."""
        noise = FractalNoise(perlin, octaves=2, persistence=0.5, lacunarity=2.0)
        x, y = 1.37, -2.41
        expected = (perlin.evaluate(x, y) + 0.5 * perlin.evaluate(2 * x, 2 * y)) / 1.5
        assert noise.evaluate(x, y) == pytest.approx(expected)

    def test_3d(self, perlin):
        """Test 3D octave sampling."""
        noise = FractalNoise(perlin, octaves=2, persistence=0.5, lacunarity=3.0)
        x, y, z = 0.2, 0.4, 0.9
        expected = (perlin.evaluate(x, y, z) + 0.5 * perlin.evaluate(3 * x, 3 * y, 3 * z)) / 1.5
        assert noise.evaluate(x, y, z) == pytest.approx(expected)

    def test_h_exponent(self, perlin):
        """Test that the amplitude step is persistence ** h."""
        noise = FractalNoise(perlin, octaves=2, persistence=0.25, h_exponent=0.5)
        assert noise.gain == pytest.approx(0.5)
        x, y = 0.77, 0.12
        expected = (perlin.evaluate(x, y) + 0.5 * perlin.evaluate(2 * x, 2 * y)) / 1.5
        assert noise.evaluate(x, y) == pytest.approx(expected)

    def test_ridge(self, perlin):
        """Test the ridge fold and its range."""
        noise = FractalNoise(perlin, octaves=1, mode=FractalMode.RIDGE)
        x, y = 0.31, 0.52
        assert noise.evaluate(x, y) == pytest.approx((1.0 - abs(perlin.evaluate(x, y))) ** 2)

        multi = FractalNoise(perlin, octaves=5, mode=FractalMode.RIDGE, ridge_weighting=True)
        rng = np.random.default_rng(8)
        for px, py in rng.uniform(-20, 20, size=(300, 2)):
            assert 0.0 <= multi.evaluate(px, py) <= 1.0
        assert multi.value_range == (0.0, 1.0)

    def test_ridge_offset(self, perlin):
        """Test a custom ridge offset."""
        noise = FractalNoise(perlin, octaves=1, mode=FractalMode.RIDGE, ridge_offset=0.8)
        x, y = 0.31, 0.52
        assert noise.evaluate(x, y) == pytest.approx((0.8 - abs(perlin.evaluate(x, y))) ** 2)

    def test_turbulence(self, perlin):
        """Test the absolute-value fold."""
        noise = FractalNoise(perlin, octaves=4, mode=FractalMode.TURBULENCE)
        rng = np.random.default_rng(9)
        for x, y in rng.uniform(-20, 20, size=(300, 2)):
            assert 0.0 <= noise.evaluate(x, y) <= 1.0
        assert noise.value_range == (0.0, 1.0)

    def test_octave_rotation(self, perlin):
        """Test that the second octave samples a rotated domain."""
        angle = 0.4
        noise = FractalNoise(perlin, octaves=2, persistence=1.0, octave_rotation=angle)
        x, y = 0.9, 0.3
        rx = x * math.cos(angle) - y * math.sin(angle)
        ry = x * math.sin(angle) + y * math.cos(angle)
        expected = (perlin.evaluate(x, y) + perlin.evaluate(2 * rx, 2 * ry)) / 2.0
        assert noise.evaluate(x, y) == pytest.approx(expected)

    def test_single_octave_view(self, perlin):
        """Test viewing one octave on its own."""
        noise = FractalNoise(perlin, octaves=3, octave_view=OctaveView.SINGLE, view_octave=2)
        x, y = 0.41, 1.93
        assert noise.evaluate(x, y) == pytest.approx(perlin.evaluate(2 * x, 2 * y))

    def test_accumulated_view(self, perlin):
        """Test that accumulating all octaves equals the final view."""
        final = FractalNoise(perlin, octaves=3)
        accumulated = FractalNoise(perlin, octaves=3, octave_view="accumulated", view_octave=3)
        first = FractalNoise(perlin, octaves=3, octave_view="accumulated", view_octave=1)
        x, y = 2.2, -0.6
        assert accumulated.evaluate(x, y) == pytest.approx(final.evaluate(x, y))
        assert first.evaluate(x, y) == pytest.approx(perlin.evaluate(x, y))

    @pytest.mark.parametrize("view_octave", [None, 0, 4])
    def test_invalid_view_octave(self, perlin, view_octave):
        """Test that the viewed octave must exist."""
        with pytest.raises(ValueError):
            FractalNoise(perlin, octaves=3, octave_view=OctaveView.SINGLE, view_octave=view_octave)

    def test_zero_octaves_rejected(self, perlin):
        """Test that normalisation needs at least one octave."""
        with pytest.raises(ValueError):
            FractalNoise(perlin, octaves=0)

    def test_zero_amplitude_view_rejected(self, perlin):
        """Test that a view of underflowed octaves cannot be built."""
        with pytest.raises(ValueError):
            FractalNoise(perlin, octaves=2, h_exponent=2000.0,
                         octave_view=OctaveView.SINGLE, view_octave=2)
        # The first octave keeps the accumulated view normalisable
        noise = FractalNoise(perlin, octaves=2, h_exponent=2000.0,
                             octave_view=OctaveView.ACCUMULATED, view_octave=2)
        assert noise.evaluate(0.3, 0.7) == perlin.evaluate(0.3, 0.7)

    def test_octave_amplitudes(self):
        """Test the amplitude sequence."""
        assert octave_amplitudes(0.5, 1.0, 4) == (1.0, 0.5, 0.25, 0.125)
        assert octave_amplitudes(0.25, 0.5, 3) == pytest.approx((1.0, 0.5, 0.25))
        assert octave_amplitudes(0.5, 2000.0, 3) == (1.0, 0.0, 0.0)

    def test_huge_coordinates(self, perlin):
        """Test that huge coordinates stay finite across octaves."""
        noise = FractalNoise(perlin, octaves=6, lacunarity=3.0, octave_rotation=0.4)
        for coords in [(1e308, 0.5), (-1.7e308, 1.7e308), (1e308, -1e308, 1e308)]:
            value = noise.evaluate(*coords)
            assert math.isfinite(value)
            assert -1.0 <= value <= 1.0

    def test_cellular_base(self):
        """Test that the engine composes any generator."""
        noise = FractalNoise(WorleyNoise(3), octaves=3)
        value = noise.evaluate(1.5, 2.5)
        assert 0.0 <= value <= math.sqrt(2)


class TestDomainWarp:
    """Test domain warping."""

    def test_constant_displacement(self):
        """Test the displacement by a constant field."""
        warp = DomainWarp(ConstantNoise(0.5), strength=2.0)
        assert warp.apply(1.0, 2.0) == (2.0, 3.0, None)
        assert warp.apply(1.0, 2.0, 3.0) == (2.0, 3.0, 4.0)

    def test_nested_passes(self, perlin):
        """Test that passes nest the warp field."""
        warp = DomainWarp(perlin, strength=0.7, passes=2)
        x, y = 0.35, 0.8
        first = (x + 0.7 * perlin.evaluate(x, y), y + 0.7 * perlin.evaluate(x + 5.2, y + 1.3))
        fx, fy = first
        expected = (x + 0.7 * perlin.evaluate(fx, fy), y + 0.7 * perlin.evaluate(fx + 5.2, fy + 1.3))
        result = warp.apply(x, y)
        assert result[0] == pytest.approx(expected[0])
        assert result[1] == pytest.approx(expected[1])

    def test_warped_fractal(self, perlin):
        """Test that the warp is applied before the octave loop."""
        warp = DomainWarp(ConstantNoise(0.25), strength=1.0)
        warped = FractalNoise(perlin, octaves=2, warp=warp)
        plain = FractalNoise(perlin, octaves=2)
        assert warped.evaluate(1.0, 1.0) == pytest.approx(plain.evaluate(1.25, 1.25))

    def test_strong_warp_of_huge_coordinates(self):
        """Test that a large displacement of a large coordinate stays finite."""
        noise = FractalNoise(PerlinNoise(4), octaves=2,
                             warp=DomainWarp(ConstantNoise(1.0), strength=1e308))
        assert math.isfinite(noise.evaluate(1.7e308, -1.7e308))

    def test_invalid_passes(self, perlin):
        """Test that a warp needs a pass."""
        with pytest.raises(ValueError):
            DomainWarp(perlin, strength=1.0, passes=0)

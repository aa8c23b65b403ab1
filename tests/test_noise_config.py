"""Tests for noise configuration and settings."""

import pytest
from pydantic import ValidationError
from py_noise.config import (
    NoiseConfig, NoiseVariant, WorleySettings, WaveletSettings, WarpSettings,
    AnisotropicSettings, FractalMode, Settings, settings
)
from py_noise.exceptions import ConfigurationError, NoiseError


class TestNoiseConfigDefaults:
    """Test default construction."""

    def test_defaults(self):
        """Test that the default configuration is valid."""
        config = NoiseConfig()
        assert config.variant == NoiseVariant.PERLIN
        assert config.octaves == 1
        assert config.frequency == 1.0
        assert config.seed == settings.default_seed
        assert config.warp is None
        assert config.fractal_mode == FractalMode.STANDARD

    def test_frozen(self):
        """Test that configurations cannot be mutated."""
        config = NoiseConfig()
        with pytest.raises(ValidationError):
            config.octaves = 3

    def test_string_enums(self):
        """Test that enum fields accept their string values."""
        config = NoiseConfig(variant="worley", worley={"metric": "manhattan", "combine": "f2_minus_f1"})
        assert config.variant == NoiseVariant.WORLEY
        assert config.worley.metric.value == "manhattan"

    def test_fractal_mode(self):
        """Test the derived fractal mode."""
        assert NoiseConfig(ridge=True).fractal_mode == FractalMode.RIDGE
        assert NoiseConfig(turbulence=True).fractal_mode == FractalMode.TURBULENCE

    def test_64_bit_seeds(self):
        """Test the seed range."""
        assert NoiseConfig(seed=2**63 - 1).seed == 2**63 - 1
        assert NoiseConfig(seed=-2**63).seed == -2**63
        assert NoiseConfig(seed=2**64 - 1).seed == 2**64 - 1


class TestNoiseConfigValidation:
    """Test that invalid parameters raise ConfigurationError."""

    @pytest.mark.parametrize("changes", [
        {"octaves": 0},
        {"frequency": 0.0},
        {"frequency": -1.0},
        {"frequency": float("nan")},
        {"frequency": float("inf")},
        {"persistence": 0.0},
        {"persistence": 1.5},
        {"lacunarity": 0.5},
        {"ridge": True, "turbulence": True},
        {"ridge_offset": 0.0},
        {"h_exponent": 0.0},
        {"dimensions": 4},
        {"seed": 2**64},
        {"seed": -2**63 - 1},
        {"variant": "value"},
        {"unknown": 1},
        {"octave_view": "single"},
        {"octave_view": "single", "octaves": 2, "view_octave": 3},
        {"wavelet": {"tile_size": 48}},
        {"wavelet": {"tile_size": 2}},
        {"worley": {"k": 0}},
        {"worley": {"k": 1, "combine": "f2"}},
        {"worley": {"combine": "weighted", "weights": []}},
        {"worley": {"jitter": 0.0}},
        {"gabor": {"truncation": 1.0}},
        {"gabor": {"impulse_density": 0.0}},
        {"anisotropic": {"anisotropy": 0.5}},
        {"anisotropic": {"direction_field": "vector", "vector": (0.0, 0.0)}},
        {"anisotropic": {"direction_field": "function"}},
        {"anisotropic": {"direction_field": "region", "region_angles": [[0.0, 1.0], [2.0]]}},
        {"warp": {"strength": 0.0}},
        {"worley": {"metric": "minkowski", "minkowski_p": 1e-4}},
        {"worley": {"metric": "minkowski", "minkowski_p": 0.5}},
        {"octaves": 2, "h_exponent": 2000.0, "octave_view": "single", "view_octave": 2},
        {"octaves": 3, "persistence": 1e-200, "octave_view": "single", "view_octave": 3},
        {"frequency": 1e90, "octaves": 40},
        {"frequency": 1e99, "warp": {"octaves": 8}},
        {"variant": "anisotropic", "anisotropic": {"base": "gabor"}, "gabor": {"orientation": 0.5}},
        {"warp": {"passes": 0}},
    ])
    def test_invalid(self, changes):
        """Test rejection of each invalid parameter."""
        with pytest.raises(ConfigurationError):
            NoiseConfig(**changes)

    def test_error_hierarchy(self):
        """Test that configuration errors are value errors."""
        with pytest.raises(ValueError):
            NoiseConfig(octaves=0)
        with pytest.raises(NoiseError):
            NoiseConfig(octaves=0)

    def test_error_details(self):
        """Test that field errors are kept."""
        with pytest.raises(ConfigurationError) as exc_info:
            NoiseConfig(octaves=0, frequency=-2.0)
        fields = {error["field"] for error in exc_info.value.errors}
        assert fields == {"octaves", "frequency"}
        assert "octaves" in str(exc_info.value)

    def test_nested_error_location(self):
        """Test that nested errors carry their path."""
        with pytest.raises(ConfigurationError) as exc_info:
            NoiseConfig(worley={"k": 0})
        assert exc_info.value.errors[0]["field"] == "worley.k"

    def test_nested_model_validates_directly(self):
        """Test that per-variant models validate on their own."""
        with pytest.raises(ConfigurationError):
            WorleySettings(k=0)
        with pytest.raises(ConfigurationError):
            WaveletSettings(tile_size=100)
        with pytest.raises(ConfigurationError):
            WarpSettings(strength=-1.0)

    def test_tile_size_limit_per_dimension(self):
        """Test the 3D tile size limit."""
        with pytest.raises(ConfigurationError):
            NoiseConfig(variant="wavelet", dimensions=3, wavelet={"tile_size": 2 * settings.max_tile_size_3d})
        with pytest.raises(ConfigurationError):
            NoiseConfig(variant="wavelet", wavelet={"tile_size": 2 * settings.max_tile_size_2d})
        # Only enforced when a wavelet tile is built
        NoiseConfig(variant="perlin", dimensions=3, wavelet={"tile_size": 2 * settings.max_tile_size_3d})
        NoiseConfig(variant="wavelet", dimensions=3, wavelet={"tile_size": settings.max_tile_size_3d})

    def test_tile_size_limit_for_warp(self):
        """Test that a wavelet warp field is limited too."""
        with pytest.raises(ConfigurationError):
            NoiseConfig(
                dimensions=3,
                warp={"variant": "wavelet"},
                wavelet={"tile_size": 2 * settings.max_tile_size_3d},
            )

    def test_amplitude_underflow_only_for_excluded_octaves(self):
        """Test that vanishing octaves outside the view are allowed."""
        config = NoiseConfig(octaves=3, h_exponent=2000.0, octave_view="accumulated", view_octave=3)
        assert config.h_exponent == 2000.0
        NoiseConfig(octaves=2, h_exponent=2000.0)

    def test_octave_frequency_limit(self):
        """Test the highest octave frequency bound."""
        NoiseConfig(frequency=1e90, octaves=10, lacunarity=2.0)
        with pytest.raises(ConfigurationError):
            NoiseConfig(frequency=1e90, octaves=40, lacunarity=2.0)

    def test_minkowski_exponent_bounds(self):
        """Test that the Minkowski exponent must make a metric."""
        assert WorleySettings(metric="minkowski", minkowski_p=1.0).minkowski_p == 1.0
        with pytest.raises(ConfigurationError) as exc_info:
            NoiseConfig(variant="worley", worley={"metric": "minkowski", "minkowski_p": 1e-4})
        assert exc_info.value.errors[0]["field"] == "worley.minkowski_p"

    def test_anisotropic_gabor_orientation(self):
        """Test that a Gabor orientation only conflicts with an anisotropic Gabor base."""
        NoiseConfig(variant="gabor", gabor={"orientation": 0.5})
        NoiseConfig(variant="anisotropic", gabor={"orientation": 0.5})
        NoiseConfig(variant="anisotropic", anisotropic={"base": "gabor"})

    def test_view_octave_in_range(self):
        """Test a valid single-octave view."""
        config = NoiseConfig(octaves=4, octave_view="single", view_octave=4)
        assert config.view_octave == 4

    def test_anisotropic_direction_inputs(self):
        """Test valid direction field settings."""
        AnisotropicSettings(direction_field="vector", vector=(1.0, 1.0))
        AnisotropicSettings(direction_field="function", angle_function=lambda x, y: 0.0)
        AnisotropicSettings(direction_field="region", region_angles=[[0.0, 1.0]])


class TestReplace:
    """Test re-validated copies."""

    def test_replace(self):
        """Test that replace builds a new instance."""
        config = NoiseConfig(seed=5)
        other = config.replace(octaves=3)
        assert other.octaves == 3
        assert other.seed == 5
        assert config.octaves == 1

    def test_replace_validates(self):
        """Test that replace re-runs validation."""
        with pytest.raises(ConfigurationError):
            NoiseConfig().replace(octaves=0)
        with pytest.raises(ConfigurationError):
            NoiseConfig(ridge=True).replace(turbulence=True)

    def test_replace_nested(self):
        """Test replacing a nested block with a mapping."""
        config = NoiseConfig().replace(worley={"k": 3})
        assert config.worley.k == 3


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        """Test default limits."""
        fresh = Settings()
        assert fresh.max_tile_size_2d >= fresh.max_tile_size_3d
        assert fresh.gabor_max_impulses_per_cell > 0

    def test_environment_override(self, monkeypatch):
        """Test reading PY_NOISE_ variables."""
        monkeypatch.setenv("PY_NOISE_DEFAULT_SEED", "7")
        monkeypatch.setenv("PY_NOISE_LOG_FORMAT", "plain")
        fresh = Settings()
        assert fresh.default_seed == 7
        assert fresh.log_format == "plain"

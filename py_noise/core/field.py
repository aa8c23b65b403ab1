"""
Noise field construction.

``create_noise_field`` turns a validated NoiseConfig into a NoiseField: the
base generator for the configured variant, wrapped in the fractal engine and
an optional domain warp. All tables are built here, before the handle is
returned; the handle itself is read-only and safe to share between threads.
"""

import math
from typing import Callable, Dict, Optional, Union

import structlog

from ..config import settings
from ..config.noise_settings import (
    AnisotropicBase,
    AnisotropicSettings,
    DirectionFieldKind,
    NoiseConfig,
    NoiseVariant,
)
from ..exceptions import DimensionError
from ..utils.random import mix_seed
from .anisotropic import (
    FLOW_NORMAL_ANGLE,
    AnisotropicNoise,
    ConstantDirection,
    DirectionField,
    FunctionDirection,
    RegionDirection,
    VectorDirection,
)
from .base import NoiseGenerator
from .gradients import GradientSet
from .fractal import DomainWarp, FractalNoise
from .gabor import GaborNoise
from .perlin import PerlinNoise
from .simplex import SimplexNoise
from .wavelet import WaveletNoise
from .worley import WorleyNoise

logger = structlog.get_logger()

Builder = Callable[[NoiseConfig, int], NoiseGenerator]

_BUILDERS: Dict[NoiseVariant, Builder] = {}

# Offset mixed into the seed of seeded gradient sets
GRADIENT_SEED_OFFSET = 0x6772


def register_variant(variant: NoiseVariant):
    """Register the builder for one variant."""
    def decorator(func: Builder) -> Builder:
        _BUILDERS[variant] = func
        return func
    return decorator


def gradient_sets(config: NoiseConfig, seed: int):
    """2D and 3D gradient sets for lattice generators; None selects the fixed sets."""
    if not config.seeded_gradients:
        return None, None
    gradient_seed = mix_seed(seed, GRADIENT_SEED_OFFSET)
    return (
        GradientSet.seeded(gradient_seed, dimensions=2),
        GradientSet.seeded(gradient_seed, dimensions=3),
    )


@register_variant(NoiseVariant.PERLIN)
def _build_perlin(config: NoiseConfig, seed: int) -> NoiseGenerator:
    return PerlinNoise(seed, *gradient_sets(config, seed))


@register_variant(NoiseVariant.SIMPLEX)
def _build_simplex(config: NoiseConfig, seed: int) -> NoiseGenerator:
    return SimplexNoise(seed, *gradient_sets(config, seed))


@register_variant(NoiseVariant.WAVELET)
def _build_wavelet(config: NoiseConfig, seed: int) -> NoiseGenerator:
    return WaveletNoise(seed, tile_size=config.wavelet.tile_size, dimensions=config.dimensions)


def _gabor(config: NoiseConfig, seed: int, orientation=None) -> GaborNoise:
    params = config.gabor
    if orientation is None:
        orientation = params.orientation
    return GaborNoise(
        seed,
        impulse_density=params.impulse_density,
        kernel_bandwidth=params.kernel_bandwidth,
        carrier_frequency=params.carrier_frequency,
        truncation=params.truncation,
        orientation=orientation,
        max_impulses_per_cell=settings.gabor_max_impulses_per_cell,
    )


@register_variant(NoiseVariant.GABOR)
def _build_gabor(config: NoiseConfig, seed: int) -> NoiseGenerator:
    return _gabor(config, seed)


def direction_field(params: AnisotropicSettings) -> DirectionField:
    """Build the direction field described by anisotropic settings."""
    kind = params.direction_field
    if kind is DirectionFieldKind.VECTOR:
        return VectorDirection(*params.vector)
    if kind is DirectionFieldKind.FUNCTION:
        return FunctionDirection(params.angle_function)
    if kind is DirectionFieldKind.REGION:
        return RegionDirection(params.region_angles, params.region_size)
    return ConstantDirection(params.angle)


@register_variant(NoiseVariant.ANISOTROPIC)
def _build_anisotropic(config: NoiseConfig, seed: int) -> NoiseGenerator:
    params = config.anisotropic
    if params.base is AnisotropicBase.GABOR:
        # Carriers across the flow in the stretched frame
        base = _gabor(config, seed, orientation=FLOW_NORMAL_ANGLE)
    else:
        base = PerlinNoise(seed, *gradient_sets(config, seed))
    return AnisotropicNoise(base, direction_field(params), params.anisotropy)


@register_variant(NoiseVariant.WORLEY)
def _build_worley(config: NoiseConfig, seed: int) -> NoiseGenerator:
    params = config.worley
    return WorleyNoise(
        seed,
        k=params.k,
        metric=params.metric,
        combine=params.combine,
        weights=params.weights,
        jitter=params.jitter,
        minkowski_p=params.minkowski_p,
        crackle_power=params.crackle_power,
        dimensions=config.dimensions,
    )


def build_base_generator(
    config: NoiseConfig,
    variant: Optional[NoiseVariant] = None,
    seed: Optional[int] = None,
) -> NoiseGenerator:
    """
    Build the single-octave generator for a variant.

    Args:
        config: Validated configuration
        variant: Overrides ``config.variant``
        seed: Overrides ``config.seed``

    Returns:
        Base NoiseGenerator
    """
    variant = NoiseVariant(variant or config.variant)
    builder = _BUILDERS[variant]
    return builder(config, config.seed if seed is None else seed)


def build_warp(config: NoiseConfig) -> Optional[DomainWarp]:
    """Build the domain warp, or None when the config disables it."""
    warp = config.warp
    if warp is None:
        return None
    warp_seed = mix_seed(config.seed, warp.seed_offset)
    base = build_base_generator(config, warp.variant, warp_seed)
    field = FractalNoise(
        base,
        octaves=warp.octaves,
        persistence=config.persistence,
        lacunarity=config.lacunarity,
        frequency=config.frequency,
    )
    return DomainWarp(field, warp.strength, warp.passes)


class NoiseField:
    """
    Opaque handle for evaluating a configured noise field.

    Wraps the fractal engine around the base generator; a config with one
    octave evaluates the base generator once at the base frequency.
    """

    def __init__(self, config: NoiseConfig, generator: FractalNoise):
        self.config = config
        self.generator = generator

    @property
    def variant(self) -> NoiseVariant:
        return self.config.variant

    @property
    def seed(self) -> int:
        return self.config.seed

    @property
    def value_range(self):
        """Documented output interval for this variant and composition."""
        return self.generator.value_range

    def evaluate(self, x: float, y: float, z: Optional[float] = None) -> float:
        """
        Evaluate the field at one coordinate.

        Raises:
            DimensionError: If a coordinate is not a finite number, or if a
                3D point is requested from a 2D-only wavelet tile
        """
        try:
            coords = (float(x), float(y)) if z is None else (float(x), float(y), float(z))
        except (TypeError, ValueError) as exc:
            raise DimensionError(f"Coordinates must be numbers: {exc}") from exc
        if not all(math.isfinite(c) for c in coords):
            raise DimensionError(f"Coordinates must be finite, got {coords}")
        return self.generator.evaluate(*coords)

    def __call__(self, x: float, y: float, z: Optional[float] = None) -> float:
        return self.evaluate(x, y, z)

    def __repr__(self):
        return (
            f"NoiseField(variant={self.config.variant.value}, seed={self.config.seed}, "
            f"octaves={self.config.octaves})"
        )


def create_noise_field(config: Union[NoiseConfig, dict, None] = None, **overrides) -> NoiseField:
    """
    Construct a noise field.

    Args:
        config: NoiseConfig, or a mapping of its fields; None uses defaults
        **overrides: Fields replacing those of ``config``

    Returns:
        NoiseField ready for concurrent evaluation

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if config is None:
        config = NoiseConfig(**overrides)
    elif isinstance(config, dict):
        config = NoiseConfig(**{**config, **overrides})
    elif overrides:
        config = config.replace(**overrides)

    base = build_base_generator(config)
    generator = FractalNoise(
        base,
        octaves=config.octaves,
        persistence=config.persistence,
        lacunarity=config.lacunarity,
        frequency=config.frequency,
        mode=config.fractal_mode,
        ridge_offset=config.ridge_offset,
        ridge_weighting=config.ridge_weighting,
        h_exponent=config.h_exponent,
        octave_rotation=config.octave_rotation,
        octave_view=config.octave_view,
        view_octave=config.view_octave,
        warp=build_warp(config),
    )

    logger.info(
        "Noise field created",
        variant=config.variant.value,
        seed=config.seed,
        octaves=config.octaves,
        dimensions=config.dimensions,
        warp=config.warp is not None,
    )
    return NoiseField(config, generator)

"""
Noise configuration models.

A NoiseConfig is an immutable, validated value holding everything needed to
build a noise field: seed, base frequency, generator variant, fractal
parameters and the per-variant parameter blocks. Every model validates on
construction and reports failures as ConfigurationError; reconfiguring means
building a new instance (see ``NoiseConfig.replace``).
"""

import math
import sys
from enum import Enum
from typing import Any, Callable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..core.fractal import MAX_OCTAVE_FREQUENCY, FractalMode, OctaveView, octave_amplitudes
from ..core.worley import CombineRule, DistanceMetric
from ..exceptions import ConfigurationError
from .config import settings

INT64_MIN = -(2 ** 63)
UINT64_MAX = 2 ** 64 - 1


class NoiseVariant(str, Enum):
    """Base generator families."""

    PERLIN = "perlin"
    SIMPLEX = "simplex"
    WAVELET = "wavelet"
    GABOR = "gabor"
    ANISOTROPIC = "anisotropic"
    WORLEY = "worley"


class AnisotropicBase(str, Enum):
    """Generators the anisotropic transform can wrap."""

    PERLIN = "perlin"
    GABOR = "gabor"


class DirectionFieldKind(str, Enum):
    """How the anisotropic flow direction is given."""

    CONSTANT = "constant"
    VECTOR = "vector"
    FUNCTION = "function"
    REGION = "region"


class _ValidatedModel(BaseModel):
    """Frozen model that reports validation failures as ConfigurationError."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        allow_inf_nan=False,
        arbitrary_types_allowed=True,
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise ConfigurationError.from_validation_error(exc) from exc

    def replace(self, **changes: Any):
        """Return a new, re-validated instance with some fields changed."""
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self)(**values)


class WorleySettings(_ValidatedModel):
    """Cellular noise parameters."""

    k: int = Field(default=2, ge=1, description="Number of nearest feature distances collected")
    metric: DistanceMetric = Field(default=DistanceMetric.EUCLIDEAN, description="Distance metric")
    combine: CombineRule = Field(default=CombineRule.F1, description="Combination rule for the sorted distances")
    weights: Tuple[float, ...] = Field(
        default=(-1.0, 1.0), description="Weights for the weighted rule, nearest first"
    )
    jitter: float = Field(default=1.0, gt=0.0, le=1.0, description="Feature point jitter within its cell")
    minkowski_p: float = Field(default=3.0, ge=1.0, description="Exponent of the Minkowski metric")
    crackle_power: float = Field(default=0.5, gt=0.0, description="Exponent of the crackle rule")

    @model_validator(mode="after")
    def check_k_covers_combine(self):
        if self.combine in (CombineRule.F2, CombineRule.F2_MINUS_F1) and self.k < 2:
            raise ValueError(f"combine={self.combine.value} needs k >= 2")
        if self.combine is CombineRule.WEIGHTED:
            if not self.weights:
                raise ValueError("weighted combine needs at least one weight")
            if len(self.weights) > self.k:
                raise ValueError("weighted combine has more weights than k")
        return self


class GaborSettings(_ValidatedModel):
    """Sparse Gabor convolution parameters."""

    impulse_density: float = Field(default=16.0, gt=0.0, description="Expected impulses per unit area")
    kernel_bandwidth: float = Field(default=1.0, gt=0.0, description="Gaussian envelope width")
    carrier_frequency: float = Field(default=1.5, gt=0.0, description="Cosine carrier frequency")
    truncation: float = Field(default=0.05, gt=0.0, lt=1.0, description="Envelope cut-off value")
    orientation: Optional[float] = Field(
        default=None, description="Carrier angle in radians; None for isotropic impulses"
    )


class WaveletSettings(_ValidatedModel):
    """Wavelet tile parameters."""

    tile_size: int = Field(default=128, ge=4, description="Tile edge in texels, a power of two")

    @field_validator("tile_size")
    @classmethod
    def check_power_of_two(cls, v: int) -> int:
        if v & (v - 1):
            raise ValueError("tile_size must be a power of two")
        return v


class AnisotropicSettings(_ValidatedModel):
    """Direction field and stretch for the anisotropic variant."""

    base: AnisotropicBase = Field(
        default=AnisotropicBase.PERLIN,
        description="Wrapped generator; a Gabor base oscillates across the flow, so gabor.orientation must be unset",
    )
    anisotropy: float = Field(default=4.0, ge=1.0, description="Stretch factor along the flow")
    direction_field: DirectionFieldKind = Field(
        default=DirectionFieldKind.CONSTANT, description="How the flow direction is given"
    )
    angle: float = Field(default=0.0, description="Flow angle in radians for constant fields")
    vector: Optional[Tuple[float, float]] = Field(default=None, description="Flow vector")
    angle_function: Optional[Callable[[float, float], float]] = Field(
        default=None, description="Callable (x, y) -> flow angle in radians"
    )
    region_angles: Optional[List[List[float]]] = Field(
        default=None, description="Grid of flow angles, one per region"
    )
    region_size: float = Field(default=1.0, gt=0.0, description="Edge length of one region")

    @model_validator(mode="after")
    def check_direction_inputs(self):
        kind = self.direction_field
        if kind is DirectionFieldKind.VECTOR:
            if self.vector is None:
                raise ValueError("vector direction field needs 'vector'")
            if self.vector[0] == 0.0 and self.vector[1] == 0.0:
                raise ValueError("flow vector must be non-zero")
        elif kind is DirectionFieldKind.FUNCTION and self.angle_function is None:
            raise ValueError("function direction field needs 'angle_function'")
        elif kind is DirectionFieldKind.REGION:
            rows = self.region_angles
            if not rows or not rows[0]:
                raise ValueError("region direction field needs a non-empty 'region_angles' grid")
            if any(len(row) != len(rows[0]) for row in rows):
                raise ValueError("region_angles rows must have equal length")
        return self


class WarpSettings(_ValidatedModel):
    """Domain warp parameters."""

    strength: float = Field(default=1.0, gt=0.0, description="Displacement scale")
    passes: int = Field(default=1, ge=1, description="Nested warp passes")
    octaves: int = Field(default=2, ge=1, description="Octaves of the warp field")
    seed_offset: int = Field(default=1, description="Offset mixed into the seed of the warp field")
    variant: Optional[NoiseVariant] = Field(
        default=None, description="Warp field generator; None uses the main variant"
    )


class NoiseConfig(_ValidatedModel):
    """Complete, validated description of a noise field."""

    seed: int = Field(
        default_factory=lambda: settings.default_seed,
        ge=INT64_MIN,
        le=UINT64_MAX,
        description="64-bit seed",
    )
    frequency: float = Field(default=1.0, gt=0.0, description="Base frequency")
    variant: NoiseVariant = Field(default=NoiseVariant.PERLIN, description="Base generator")
    dimensions: Literal[2, 3] = Field(default=2, description="Field dimensionality")
    seeded_gradients: bool = Field(
        default=False, description="Draw Perlin and Simplex gradients from the seed instead of the fixed sets"
    )

    # Fractal composition
    octaves: int = Field(default=1, ge=1, description="Number of octaves")
    persistence: float = Field(default=0.5, gt=0.0, le=1.0, description="Amplitude ratio between octaves")
    lacunarity: float = Field(default=2.0, ge=1.0, description="Frequency ratio between octaves")
    ridge: bool = Field(default=False, description="Fold octaves into ridges")
    turbulence: bool = Field(default=False, description="Fold octaves by absolute value")
    ridge_offset: float = Field(default=1.0, gt=0.0, description="Offset of the ridge fold")
    ridge_weighting: bool = Field(default=False, description="Weight ridge octaves by the previous one")
    h_exponent: float = Field(default=1.0, gt=0.0, description="Exponent on the amplitude step")
    octave_rotation: float = Field(default=0.0, description="Domain rotation per octave in radians")
    octave_view: OctaveView = Field(default=OctaveView.FINAL, description="Which octaves contribute")
    view_octave: Optional[int] = Field(default=None, ge=1, description="Octave for single/accumulated views")
    warp: Optional[WarpSettings] = Field(default=None, description="Domain warp; None disables it")

    # Per-variant parameters
    worley: WorleySettings = Field(default_factory=WorleySettings)
    gabor: GaborSettings = Field(default_factory=GaborSettings)
    wavelet: WaveletSettings = Field(default_factory=WaveletSettings)
    anisotropic: AnisotropicSettings = Field(default_factory=AnisotropicSettings)

    @model_validator(mode="after")
    def check_fractal(self):
        if self.ridge and self.turbulence:
            raise ValueError("ridge and turbulence are mutually exclusive")
        if self.octave_view is not OctaveView.FINAL:
            if self.view_octave is None:
                raise ValueError(f"octave_view={self.octave_view.value} needs view_octave")
            if self.view_octave > self.octaves:
                raise ValueError("view_octave must not exceed octaves")

        first_included = self.view_octave if self.octave_view is OctaveView.SINGLE else 1
        amplitudes = octave_amplitudes(self.persistence, self.h_exponent, first_included)
        if amplitudes[-1] < sys.float_info.min:
            raise ValueError(f"persistence ** h_exponent underflows the amplitude of octave {first_included}")

        octaves = self.octaves if self.warp is None else max(self.octaves, self.warp.octaves)
        top = math.log10(self.frequency) + (octaves - 1) * math.log10(self.lacunarity)
        if top > math.log10(MAX_OCTAVE_FREQUENCY):
            raise ValueError(f"highest octave frequency exceeds {MAX_OCTAVE_FREQUENCY:g}")
        return self

    @model_validator(mode="after")
    def check_anisotropic_base(self):
        if (
            self.variant is NoiseVariant.ANISOTROPIC
            and self.anisotropic.base is AnisotropicBase.GABOR
            and self.gabor.orientation is not None
        ):
            raise ValueError("an anisotropic Gabor base follows the direction field; leave gabor.orientation unset")
        return self

    @model_validator(mode="after")
    def check_tile_limit(self):
        uses_wavelet = self.variant is NoiseVariant.WAVELET or (
            self.warp is not None and self.warp.variant is NoiseVariant.WAVELET
        )
        if uses_wavelet:
            limit = settings.max_tile_size_2d if self.dimensions == 2 else settings.max_tile_size_3d
            if self.wavelet.tile_size > limit:
                raise ValueError(
                    f"tile_size {self.wavelet.tile_size} exceeds the {self.dimensions}D limit of {limit}"
                )
        return self

    @property
    def fractal_mode(self) -> FractalMode:
        if self.ridge:
            return FractalMode.RIDGE
        if self.turbulence:
            return FractalMode.TURBULENCE
        return FractalMode.STANDARD

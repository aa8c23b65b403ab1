"""
Configuration for the noise engine.
"""

from .config import Settings, settings
from .noise_settings import (
    AnisotropicBase,
    AnisotropicSettings,
    CombineRule,
    DirectionFieldKind,
    DistanceMetric,
    FractalMode,
    GaborSettings,
    NoiseConfig,
    NoiseVariant,
    OctaveView,
    WarpSettings,
    WaveletSettings,
    WorleySettings,
)

__all__ = [
    'Settings',
    'settings',
    'AnisotropicBase',
    'AnisotropicSettings',
    'CombineRule',
    'DirectionFieldKind',
    'DistanceMetric',
    'FractalMode',
    'GaborSettings',
    'NoiseConfig',
    'NoiseVariant',
    'OctaveView',
    'WarpSettings',
    'WaveletSettings',
    'WorleySettings',
]

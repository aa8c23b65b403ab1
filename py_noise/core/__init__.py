"""
Core noise generators.
"""

from .base import NoiseGenerator
from .perlin import PerlinNoise
from .simplex import SimplexNoise
from .wavelet import WaveletNoise
from .gabor import GaborNoise
from .anisotropic import (AnisotropicNoise, ConstantDirection, VectorDirection,
                          FunctionDirection, RegionDirection)
from .worley import WorleyNoise, FeaturePointField, DistanceMetric, CombineRule
from .fractal import FractalNoise, DomainWarp, FractalMode, OctaveView

__all__ = ['NoiseGenerator', 'PerlinNoise', 'SimplexNoise', 'WaveletNoise', 'GaborNoise',
           'AnisotropicNoise', 'ConstantDirection', 'VectorDirection', 'FunctionDirection',
           'RegionDirection', 'WorleyNoise', 'FeaturePointField', 'DistanceMetric',
           'CombineRule', 'FractalNoise', 'DomainWarp', 'FractalMode', 'OctaveView']

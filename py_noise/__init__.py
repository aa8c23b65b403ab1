"""
Deterministic procedural noise fields.

Generators are imported before the configuration package, which depends on
their enums; the field factory comes last.
"""

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .config import NoiseConfig, NoiseVariant, settings
from .core.field import NoiseField, create_noise_field
from .exceptions import ConfigurationError, DimensionError, NoiseError

__version__ = "0.1.0"

__all__ = _core_all + [
    'NoiseConfig', 'NoiseVariant', 'settings', 'NoiseField', 'create_noise_field',
    'ConfigurationError', 'DimensionError', 'NoiseError',
]

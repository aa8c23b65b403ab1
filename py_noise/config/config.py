"""Runtime settings pulled from the environment."""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "PY_NOISE_"

# Load .env for local/dev environments only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {
        k: v for k, v in file_env.items()
        if k.startswith(ENV_PREFIX) and k not in os.environ and v is not None
    }
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Engine settings pulled from ``PY_NOISE_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Generation Defaults
    default_seed: int = Field(default=1337, description="Seed used when a config omits one")

    # Resource Limits
    max_tile_size_2d: int = Field(default=512, description="Largest 2D wavelet tile edge")
    max_tile_size_3d: int = Field(default=64, description="Largest 3D wavelet tile edge")
    gabor_max_impulses_per_cell: int = Field(
        default=64, description="Cap on Gabor impulses drawn per cell"
    )


# Instantiate singleton settings object
settings = Settings()

from functools import lru_cache
from pathlib import Path
from typing import List, Tuple

from dotenv import dotenv_values
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


class Settings(BaseSettings):
    """Application settings pulled from TERRAIN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TERRAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Persistence Configuration
    data_dir: Path = Field(default=Path("./terrain_data"), description="Directory holding saved terrains")
    default_slot_name: str = Field(default="Default", description="Reserved name for the built-in terrain")

    # Default Terrain Configuration
    heightmap_resolution: int = Field(default=513, description="Elevation grid resolution")
    alphamap_resolution: int = Field(default=512, description="Material weight grid resolution")
    terrain_size: Tuple[float, float, float] = Field(
        default=(1000.0, 600.0, 1000.0), description="World extent of the terrain (x, y, z)"
    )
    terrain_origin: Tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0), description="World position of the terrain corner"
    )
    layer_ids: List[str] = Field(
        default=["grass", "dirt", "rock", "sand"], description="Material layers, in weight order"
    )
    default_elevation: float = Field(default=0.0, ge=0.0, le=1.0, description="Initial elevation")
    weight_tolerance: float = Field(default=1e-4, gt=0.0, description="Allowed drift of per-cell weight sums")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # API Configuration
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")

    @field_validator("heightmap_resolution", "alphamap_resolution")
    @classmethod
    def check_resolution(cls, value: int) -> int:
        if not (_is_power_of_two(value) or _is_power_of_two(value - 1)):
            raise ValueError(f"Resolution {value} is not a power of two (or power of two plus one)")
        return value

    @field_validator("log_format")
    @classmethod
    def check_log_format(cls, value: str) -> str:
        if value not in ("plain", "json"):
            raise ValueError("log_format must be 'plain' or 'json'")
        return value


@lru_cache
def get_settings() -> Settings:
    """Settings instance built once from the environment."""
    return Settings()

"""Configuration management for treepatch."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MANIFEST_NAME = "patch.json"
DEFAULT_HIGH_WATER_MARK = 16384
DEFAULT_CHUNK_SIZE = 8192


class PatchConfig(BaseSettings):
    """Settings shared by the diff, write, read and apply stages."""

    high_water_mark: int = Field(
        default=DEFAULT_HIGH_WATER_MARK,
        ge=1,
        description="Maximum number of file records buffered between pipeline stages",
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        description="Read size in bytes used when hashing and copying content",
    )
    manifest_name: str = Field(
        default=MANIFEST_NAME,
        description="Name of the manifest file at the root of a patch directory",
    )
    log_level: str = Field(default="INFO", description="Log level for the stderr sink")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")

    model_config = SettingsConfigDict(
        env_prefix="TREEPATCH_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @field_validator("manifest_name")
    @classmethod
    def ensure_bare_name(cls, v: str) -> str:
        """Manifest must live at the root of the patch directory."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"manifest_name must be a bare file name, got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper()


# Load default config
config = PatchConfig()

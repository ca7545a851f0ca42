"""
VaultMerkle Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


def _split_csv_setting(v: str | list[str]) -> list[str]:
    if isinstance(v, str):
        return [p.strip() for p in v.split(",") if p.strip()]
    return v


class CsvSettings(BaseSettings):
    """CSV loading settings."""

    model_config = SettingsConfigDict(env_prefix="CSV_")

    max_file_size_mb: float = Field(default=25.0, ge=0.01, description="Max export size to load")
    encoding: str = Field(default="utf-8", description="Text encoding of exports")


class NormalizerSettings(BaseSettings):
    """Field normalization settings."""

    model_config = SettingsConfigDict(env_prefix="NORMALIZER_")

    # Unset means the process local timezone is used for unzoned timestamps
    local_timezone: str | None = Field(
        default=None,
        description="IANA zone used to read timestamps that carry no offset",
    )


class PipelineSettings(BaseSettings):
    """Hashing pipeline settings."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    default_fields: Annotated[list[str], NoDecode] = Field(
        default=["title", "username", "password", "last modified"],
        description="Fields selected for hashing when a file is first loaded",
    )

    @field_validator("default_fields", mode="before")
    @classmethod
    def parse_default_fields(cls, v: str | list[str]) -> list[str]:
        """Parse default fields from comma-separated string or list."""
        return [f.lower() for f in _split_csv_setting(v)]


class DisplaySettings(BaseSettings):
    """Settings for rendering trees in the CLI and API."""

    model_config = SettingsConfigDict(env_prefix="DISPLAY_")

    prefix_length: int = Field(default=7, ge=1, le=64)


class APISettings(BaseSettings):
    """API server configuration settings."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)
    debug: bool = Field(default=False)
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        return _split_csv_setting(v)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="json")  # "json" or "console"
    file_path: Path | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="VaultMerkle")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    # Sub-settings
    csv: CsvSettings = Field(default_factory=CsvSettings)
    normalizer: NormalizerSettings = Field(default_factory=NormalizerSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    Use dependency injection in FastAPI routes.
    """
    return Settings()

"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Required environment variables:
        - SUPABASE_URL: Supabase project URL
        - SUPABASE_SERVICE_KEY: Supabase service role key

    Optional environment variables:
        - HOST: Server host (default: 0.0.0.0)
        - PORT: Server port (default: 8080)
        - ENVIRONMENT: Environment name (development, staging, production)
        - STORAGE_BUCKET: Storage bucket for clothing images
        - STORE_TIMEOUT_SECONDS: Timeout applied to every database/storage call
        - CATALOG_BACKEND: supabase (default) or memory
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of uvicorn workers")
    api_version: str = Field(default="1.0.0", description="Reported in X-API-Version")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Supabase Configuration
    # ==========================================================================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")
    catalog_backend: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Catalog/blob backend; \"memory\" keeps rows in process (local development)"
    )
    store_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for each database and storage request (seconds)"
    )

    # ==========================================================================
    # Storage Configuration
    # ==========================================================================
    storage_bucket: str = Field(
        default="clothing-images",
        description="Supabase Storage bucket for uploaded images"
    )
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted upload size in bytes"
    )
    allowed_image_types: List[str] = Field(
        default=["image/jpeg", "image/jpg", "image/png", "image/webp"],
        description="Accepted upload content types"
    )

    @field_validator("allowed_image_types", mode="before")
    @classmethod
    def parse_allowed_image_types(cls, v):
        if isinstance(v, str):
            return [t.strip().lower() for t in v.split(",") if t.strip()]
        return v

    # ==========================================================================
    # Response Cache
    # ==========================================================================
    cache_enabled: bool = Field(
        default=True,
        description="Cache successful GET responses in process"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Process-wide settings, read once from the environment and the project
    root `.env`.

    Raises:
        ValidationError: SUPABASE_URL or SUPABASE_SERVICE_KEY is missing
    """
    env_file = PROJECT_ROOT / ".env"
    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.
    """
    test_defaults = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_key": "test-key",
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)

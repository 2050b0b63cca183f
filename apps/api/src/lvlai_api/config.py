import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # API Configuration
    api_title: str = "LVL.AI API"
    api_version: str = "0.1.0"
    api_description: str = "Gamified task management with an AI organizer agent"

    # Server Configuration
    host: str = "0.0.0.0"  # nosec B104
    port: int = 8000
    debug: bool = False

    # Supabase Configuration (authentication)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_anon_key: str = Field(..., description="Supabase anonymous/public key")

    # Database Configuration
    database_url: str = Field(..., description="PostgreSQL database URL")

    # AI provider configuration
    # DeepSeek is used directly when its key is set, OpenRouter otherwise
    deepseek_api_key: str | None = Field(default=None, description="DeepSeek API key")
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"
    openrouter_api_key: str | None = Field(
        default=None, description="OpenRouter API key"
    )
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "deepseek/deepseek-chat"

    # Workload optimization
    optimization_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Upper bound for one optimization request"
    )

    # Environment
    environment: str = Field(
        default="development", pattern="^(development|staging|production|test)$"
    )

    # CORS Configuration
    cors_origins: list[str] | str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Allowed CORS origins (list or comma-separated string)",
    )

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Validate Supabase URL format"""
        if not v.startswith(("https://", "http://")):
            raise ValueError("Supabase URL must start with https:// or http://")
        return v

    @field_validator("supabase_anon_key")
    @classmethod
    def validate_supabase_anon_key(cls, v: str) -> str:
        """Validate the Supabase key is not empty"""
        if not v or v.strip() == "":
            raise ValueError("Supabase anon key cannot be empty")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL format"""
        # SQLite is fine for local development and tests
        if os.environ.get("ENVIRONMENT") != "production" and v.startswith("sqlite://"):
            return v
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError(
                "Database URL must be a valid PostgreSQL connection string"
            )
        return v

    @field_validator("deepseek_api_key", "openrouter_api_key")
    @classmethod
    def blank_key_is_unset(cls, v: str | None) -> str | None:
        """Treat empty provider keys as not configured"""
        if v is None or v.strip() == "":
            return None
        return v.strip()

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list, supporting both list and comma-separated string"""
        if isinstance(self.cors_origins, str):
            return [
                origin.strip() for origin in self.cors_origins.split(",") if origin
            ]
        return self.cors_origins

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )


# Global settings instance
# Settings will automatically load from environment variables via pydantic_settings
settings = Settings()  # type: ignore[call-arg]


# Production security check
def validate_production_config():
    """Validate configuration for production deployment."""
    if settings.is_production and not (
        settings.deepseek_api_key or settings.openrouter_api_key
    ):
        raise RuntimeError(
            "No AI provider configured. "
            "Please set either DEEPSEEK_API_KEY or OPENROUTER_API_KEY."
        )

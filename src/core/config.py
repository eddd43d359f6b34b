"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Efficio Workspaces API")
    app_env: str = Field(default="development")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/efficio",
        description="PostgreSQL connection URL with asyncpg driver",
    )

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Secret key for HS256 tokens (local development and tests)",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)
    auth_issuer_url: str = Field(
        default="",
        description="Identity provider base URL (e.g. https://efficio.eu.auth0.com/)",
    )
    auth_audience: str = Field(
        default="",
        description="Expected audience claim for provider-issued tokens",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console", pattern="^(console|json)$")

    # Collaboration
    group_write_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Load/mutate/save attempts per group before a version conflict is surfaced",
    )
    activity_default_limit: int = Field(default=50, ge=1)
    activity_max_limit: int = Field(default=200, ge=1)

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )
    rate_limit_read: str = Field(default="30/minute")
    rate_limit_write: str = Field(default="10/minute")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:4000",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def jwks_url(self) -> str:
        """JWKS endpoint for RS256 token verification."""
        if self.auth_issuer_url:
            return f"{self.auth_issuer_url.rstrip('/')}/.well-known/jwks.json"
        return ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()

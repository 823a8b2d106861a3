"""Configuration module using Pydantic Settings."""

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Attributes:
        host: Host address for the server.
        port: Port number for the server.
        database_url: SQLite database URL.
        lts_series: Series names given priority when resolving references.
        jwt_secret: Shared secret for bearer token validation.
        admin_group: Group whose members pass every ACL check.
        cors_origins: Allowed CORS origins.
        log_level: Root logging level.
        debug: Enable debug mode.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="catalog_",
        extra="ignore",
        case_sensitive=False,
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host address")
    port: int = Field(default=4026, description="Server port")

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./data/catalog.db",
        description="Database connection URL",
    )

    # Resolution
    lts_series: Annotated[list[str], NoDecode] = Field(
        default=["lucid", "precise", "trusty"],
        description="Series preferred over non-LTS series during resolution",
    )

    # Authentication
    jwt_secret: str = Field(
        default="",
        description="Shared secret for HS256 bearer tokens",
    )
    admin_group: str = Field(
        default="charmstore-admin",
        description="Group allowed to bypass entity ACLs",
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="List of allowed CORS origins",
    )

    # Logging / Debug
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("lts_series", mode="before")
    @classmethod
    def split_series(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

"""
service_lifecycle/core/config.py
Configuration management using Pydantic Settings

Two layers:
- ServiceConfig / DatabaseConfig: immutable values handed to ServiceLifecycle
- Settings: environment driven bootstrapping that produces a ServiceConfig
"""

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


DEFAULT_VERSION = "1.0.0"


# ============================================================================
# Immutable Service Configuration
# ============================================================================

class DatabaseConfig(BaseModel):
    """Connection parameters for the database collaborator."""
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(default=5432, ge=1, le=65535)
    username: str
    password: SecretStr
    database: str


class ServiceConfig(BaseModel):
    """
    Configuration for a single ServiceLifecycle instance.
    Constructed once and never mutated.
    """
    model_config = ConfigDict(frozen=True)

    service_name: str = Field(min_length=1)
    port: int = Field(ge=1, le=65535)
    host: str = "0.0.0.0"
    log_level: str = "info"
    version: str = DEFAULT_VERSION
    database: Optional[DatabaseConfig] = None

    # Bounds on each connect/close/bind call, in seconds. None waits forever.
    startup_timeout: Optional[float] = Field(default=30.0, gt=0)
    shutdown_timeout: Optional[float] = Field(default=10.0, gt=0)

    def model_dump_safe(self) -> dict:
        """Export config without the database password"""
        data = self.model_dump()
        if data.get("database"):
            data["database"]["password"] = "**********"
        return data


# ============================================================================
# Environment Settings
# ============================================================================

class Settings(BaseSettings):
    """
    Service Settings
    Environment variables can override these defaults
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # Application Settings
    # ========================================================================
    SERVICE_NAME: str = "api"
    APP_VERSION: str = DEFAULT_VERSION

    # ========================================================================
    # HTTP Listener Settings
    # ========================================================================
    API_HOST: str = "0.0.0.0"
    API_PORT: int = Field(default=8080, ge=1, le=65535)

    # ========================================================================
    # Lifecycle Timeouts (seconds, 0 disables)
    # ========================================================================
    STARTUP_TIMEOUT: float = Field(default=30.0, ge=0)
    SHUTDOWN_TIMEOUT: float = Field(default=10.0, ge=0)

    # ========================================================================
    # Database Settings (optional - only used when DB_HOST is set)
    # ========================================================================
    DB_HOST: Optional[str] = None
    DB_PORT: int = Field(default=5432, ge=1, le=65535)
    DB_USERNAME: str = "user"
    DB_PASSWORD: SecretStr = SecretStr("")
    DB_NAME: str = "apidb"

    # ========================================================================
    # Logging Settings
    # ========================================================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # ========================================================================
    # Properties
    # ========================================================================

    @property
    def database_enabled(self) -> bool:
        return bool(self.DB_HOST)

    def to_service_config(self) -> ServiceConfig:
        """Build the immutable ServiceConfig consumed by ServiceLifecycle"""
        database = None
        if self.database_enabled:
            database = DatabaseConfig(
                host=self.DB_HOST,
                port=self.DB_PORT,
                username=self.DB_USERNAME,
                password=self.DB_PASSWORD,
                database=self.DB_NAME,
            )

        return ServiceConfig(
            service_name=self.SERVICE_NAME,
            port=self.API_PORT,
            host=self.API_HOST,
            log_level=self.LOG_LEVEL.lower(),
            version=self.APP_VERSION,
            database=database,
            startup_timeout=self.STARTUP_TIMEOUT or None,
            shutdown_timeout=self.SHUTDOWN_TIMEOUT or None,
        )


# ============================================================================
# Singleton Pattern - Global Settings Instance
# ============================================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create settings instance (Singleton)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


# ============================================================================
# Export
# ============================================================================

__all__ = [
    "DEFAULT_VERSION",
    "DatabaseConfig",
    "ServiceConfig",
    "Settings",
    "get_settings",
]

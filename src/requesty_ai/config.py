"""Configuration management for the Requesty client."""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CATALOG_URL = "https://router.requesty.ai/v1/models"
DEFAULT_COMPLETION_URL = "https://router.requesty.ai/v1/chat/completions"


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="",
    )

    # Requesty
    requesty_api_key: SecretStr | None = Field(
        default=None, description="Requesty router API key"
    )
    requesty_catalog_url: str = Field(
        default=DEFAULT_CATALOG_URL, description="Model catalog endpoint (GET)"
    )
    requesty_completion_url: str = Field(
        default=DEFAULT_COMPLETION_URL, description="Chat completion endpoint (POST)"
    )
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")

    # Application
    environment: str = Field(default="production", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Logging Configuration
    log_to_file: bool = Field(default=False, description="Enable file-based logging")
    log_directory: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10485760,  # 10MB
        description="Max size per log file before rotation",
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )
    log_file_prefix: str = Field(default="requesty_ai", description="Prefix for log file names")

    @property
    def log_file_path(self) -> str:
        """Get the full log file path."""
        return f"{self.log_directory}/{self.log_file_prefix}.log"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() == "development"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the logging level name."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got: {v}")
        return v.upper()

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        """Validate the HTTP timeout is positive."""
        if v <= 0:
            raise ValueError(f"http_timeout must be positive, got: {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

"""
Refactor API Server Settings

Configuration management using pydantic settings.
Loads from environment variables with REFACTOR_ prefix.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from typing import List, Optional


class Settings(BaseSettings):
    """
    Server configuration settings.

    Environment variables:
    - REFACTOR_ALLOWED_ORIGINS_RAW: Comma-separated list of allowed CORS origins
    - REFACTOR_MAX_SOURCE_BYTES: Largest accepted source text in bytes (default: 2000000)
    - REFACTOR_CONFIG_PATH: Engine YAML config applied to every request (optional)
    - REFACTOR_LOG_LEVEL: Root log level (default: INFO)
    - REFACTOR_DEBUG: Enable debug mode (default: false)
    """

    model_config = SettingsConfigDict(
        env_prefix="REFACTOR_",
        env_file=".env",
        extra="ignore",
    )

    # Raw string field for comma-separated values
    allowed_origins_raw: str = ""

    # Requests with larger sources are rejected with 413
    max_source_bytes: int = 2_000_000

    # Engine configuration file (.refactor.yml format)
    config_path: Optional[str] = None

    log_level: str = "INFO"

    # Debug mode
    debug: bool = False

    @computed_field
    @property
    def allowed_origins(self) -> List[str]:
        """Parse comma-separated allowed origins into list."""
        if not self.allowed_origins_raw:
            return []
        return [v.strip() for v in self.allowed_origins_raw.split(",") if v.strip()]


# Global settings instance
settings = Settings()

import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # API settings
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Event Reactions"

    # Server binding (used when started via __main__)
    HOST: str = "127.0.0.1"
    PORT: int = 3000

    # CORS settings - accepts string or list, normalized to list[str] by validator
    CORS_ORIGINS: str | list[str] = "*"

    # Directory settings
    DATA_DIR: str = "api/data"
    REACTIONS_DB_FILE: str = "reactions.db"

    # Store settings
    DB_BUSY_TIMEOUT_MS: int = 10000  # How long SQLite waits on a locked database

    # Reaction scoping profile:
    #   True  -> reactions belong to an event and a user (eventId/userId required)
    #   False -> reactions are global (eventId/userId optional, counts span all records)
    SCOPING_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment settings
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @property
    def REACTIONS_DB_PATH(self) -> str:
        """Complete path to the SQLite reactions database file"""
        return os.path.join(self.DATA_DIR, self.REACTIONS_DB_FILE)

    @property
    def is_production(self) -> bool:
        return str(self.ENVIRONMENT).strip().lower() in {"production", "prod"}

    @field_validator("API_PREFIX")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Normalize the router prefix to a leading slash and no trailing slash.

        An empty value mounts the routes at the root.
        """
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @field_validator("DB_BUSY_TIMEOUT_MS")
    @classmethod
    def validate_busy_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"DB_BUSY_TIMEOUT_MS must be positive, got {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL is a level name known to the logging module.

        Args:
            v: Level name, case-insensitive

        Returns:
            Upper-cased level name

        Raises:
            ValueError: If the level name is unknown
        """
        level = str(v).strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL must be a valid logging level, got {v!r}")
        return level

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Normalize CORS_ORIGINS to list of hosts.

        Accepts either a comma-separated string or a list of strings.
        Handles wildcards, trims whitespace, and ignores empty entries.

        Args:
            v: CORS origins as string (comma-separated), list of strings, or "*" for all

        Returns:
            List of CORS origin hosts with whitespace trimmed and empty entries removed
        """
        if isinstance(v, list):
            return [
                host.strip() for host in v if isinstance(host, str) and host.strip()
            ]

        if isinstance(v, str):
            if v.strip() == "*":
                return ["*"]
            return [host.strip() for host in v.split(",") if host.strip()]

        # Unexpected types fail closed (deny all origins)
        return []

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Make paths absolute
        self.DATA_DIR = os.path.abspath(self.DATA_DIR)

    def ensure_data_dirs(self) -> None:
        """Create required data directories if they don't exist.

        This method is called during application startup (lifespan) to avoid
        import-time side effects and I/O operations.
        """
        Path(self.DATA_DIR).mkdir(parents=True, exist_ok=True)


# Thread-safe lazy initialization using lru_cache
@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings instance with lazy initialization.

    Settings are only created once on first access, then cached for subsequent calls.
    This prevents module-level side effects and allows testing without environment variables.

    Returns:
        Settings: Application settings object
    """
    return Settings()


def reset_settings() -> None:
    """Reset the cached settings instance.

    Useful for testing when you need to reload settings with different values.
    """
    get_settings.cache_clear()

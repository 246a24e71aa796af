import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class Settings(BaseSettings):
    # API settings
    DEBUG: bool = False
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "FAQ Display"

    # CORS settings - accepts string or list, normalized to list[str] by validator
    CORS_ORIGINS: str | list[str] = "*"

    # Directory settings
    DATA_DIR: str = "data"
    CONTENT_DB_FILENAME: str = "content.db"

    LOG_LEVEL: str = "INFO"

    # FAQ processing
    FAQ_TABLE: str = "tx_faq_item"
    # Default processor configuration for the content element route
    FAQ_PROCESSOR_CONFIGURATION: Dict[str, Any] = {}
    RESOLVE_RECORD_OBJECTS: bool = False

    # Environment settings
    ENVIRONMENT: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow",
    )

    @property
    def CONTENT_DB_PATH(self) -> str:
        """Complete path to the content database file"""
        return os.path.join(self.DATA_DIR, self.CONTENT_DB_FILENAME)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Normalize comma-separated origins into a list."""
        if isinstance(v, str):
            origins = [origin.strip() for origin in v.split(",") if origin.strip()]
            return origins or ["*"]
        return list(v)

    @field_validator("FAQ_TABLE")
    @classmethod
    def validate_faq_table(cls, v: str) -> str:
        """Reject table names that could not be used as SQL identifiers.

        Raises:
            ValueError: If the name contains anything besides [a-zA-Z0-9_]
        """
        v = v.strip()
        if not _IDENTIFIER_PATTERN.match(v):
            raise ValueError(f"FAQ_TABLE must match [a-zA-Z0-9_]+. Got: {v!r}")
        return v

    @field_validator("FAQ_PROCESSOR_CONFIGURATION", mode="before")
    @classmethod
    def parse_processor_configuration(cls, v: Any) -> Dict[str, Any]:
        """Accept the processor configuration as a JSON object string."""
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            parsed = json.loads(v)
            if not isinstance(parsed, dict):
                raise ValueError("FAQ_PROCESSOR_CONFIGURATION must be a JSON object")
            return parsed
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Make paths absolute
        self.DATA_DIR = os.path.abspath(self.DATA_DIR)

    def ensure_data_dirs(self) -> None:
        """Create required data directories if they don't exist.

        Called during application startup (lifespan) to avoid import-time I/O.
        """
        Path(self.DATA_DIR).mkdir(parents=True, exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings instance with lazy initialization.

    Returns:
        Settings: Application settings object
    """
    return Settings()


def reset_settings() -> None:
    """Reset the cached settings instance.

    Useful for testing when you need to reload settings with different values.
    """
    get_settings.cache_clear()

"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        subdl_api_key: API key for the SubDL search API
        language: Preferred subtitle language ("all" for any)
        output_dir: Directory downloaded and converted subtitles are written to
        http_timeout: Timeout in seconds for catalog requests and downloads
        user_agent: User-Agent header sent to catalogs
        max_downloads: Upper bound of episodes downloaded in one run
        log_level: structlog/stdlib level name
        log_json: Render log lines as JSON instead of console text
    """

    subdl_api_key: str = ""
    language: str = "all"
    output_dir: Path = Path(".")

    http_timeout: float = 60.0
    user_agent: str = "Mozilla/5.0 Gecko/20100101"
    max_downloads: int = 50

    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="SUBTITLEDL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def require_subdl_api_key(self) -> str:
        """Get the SubDL API key.

        Returns:
            SubDL API key string

        Raises:
            ValueError: If SUBTITLEDL_SUBDL_API_KEY is not set or empty
        """
        if not self.subdl_api_key:
            raise ValueError(
                "SUBTITLEDL_SUBDL_API_KEY environment variable is not set. "
                "Please set it with your SubDL API key."
            )
        return self.subdl_api_key


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment

    Note:
        Settings are cached for performance. Use get_settings.cache_clear()
        to reload settings in tests.
    """
    return Settings()


# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to crawl pacing, store backend, classifier and logging settings

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="MATHCOMP_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Source wiki
    base_url: str = Field(default="https://artofproblemsolving.com", description="Root URL of the source wiki")
    content_selector: str = Field(
        default=".mw-parser-output", description="CSS selector of the container holding page content"
    )

    # Browser / fetching
    headless: bool = Field(default=True, description="Run the browser without a window")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User agent presented by the browser session",
    )
    page_timeout_seconds: float = Field(default=60.0, description="Navigation timeout for a single page load")
    content_grace_seconds: float = Field(
        default=2.0, description="Upper bound on waiting for the content container before reading the page"
    )
    request_delay_seconds: float = Field(default=0.5, description="Pause inserted between consecutive page loads")
    fetch_attempts: int = Field(default=3, ge=1, description="Attempts per page before it is skipped")
    retry_backoff_seconds: float = Field(default=1.0, ge=0, description="First wait between page load attempts")

    # Output
    output_dir: Path = Field(default=Path("./data"), description="Directory for crawl checkpoint files")

    # Document store
    store_backend: Literal["sqlite", "firestore"] = Field(default="sqlite", description="Document store backend")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/mathcomp_ingest.db",
        description="Database URL for the SQL document store",
    )
    firebase_credentials: Path | None = Field(default=None, description="Service account key for Firestore")
    batch_ceiling: int = Field(default=500, ge=1, description="Hard limit of operations in one store transaction")
    batch_safety_margin: int = Field(
        default=100, ge=0, description="Operations kept in reserve below the transaction ceiling"
    )

    # Topic classification
    gemini_api_key: str = Field(default="", description="Google Gemini API key for topic classification")
    classifier_model: str = Field(default="gemini/gemini-2.0-flash", description="LM identifier used by DSPy")
    classify_batch_size: int = Field(default=10, ge=1, description="Problems sent per classification call")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")

    @property
    def batch_threshold(self) -> int:
        """Operations allowed per transaction once the safety margin is applied."""
        return max(1, self.batch_ceiling - self.batch_safety_margin)


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.

    Returns:
        Config: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Config: A fresh configuration instance
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance

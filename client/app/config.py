"""
Application configuration module.
Loads environment variables and provides client-shell settings.
"""
import os
from pathlib import Path

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Get project root (two levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Global flag to indicate test mode (set via WOLFQUANT_TEST_MODE env var)
_test_mode = os.environ.get("WOLFQUANT_TEST_MODE", "").lower() in ("1", "true", "yes")


def set_test_mode(enabled: bool = True):
    """
    Enable/disable test mode globally.
    When enabled, poll delays are replaced by TEST_POLL_INTERVAL_SECONDS.

    Args:
        enabled: True to enable test mode, False to disable
    """
    global _test_mode
    _test_mode = enabled
    os.environ["WOLFQUANT_TEST_MODE"] = "1" if enabled else "0"


def is_test_mode() -> bool:
    """Check if test mode is enabled."""
    return _test_mode


class Settings(BaseSettings):
    """
    Client shell settings loaded from environment variables or .env file.
    (Note: Environment variables take precedence over .env file)
    """
    # Remote command gateway
    GATEWAY_BASE_URL: str = "http://localhost:1420/commands"
    GATEWAY_TIMEOUT: float = 30.0

    # Import task polling
    POLL_INTERVAL_SECONDS: float = 2.0
    TEST_POLL_INTERVAL_SECONDS: float = 0.01
    POLL_MAX_RETRIES: int = 3  # Consecutive failed fetches tolerated before halting
    POLL_BACKOFF_FACTOR: float = 2.0
    POLL_MAX_BACKOFF_SECONDS: float = 30.0

    # Reference data
    ASSET_TYPES_CACHE_TTL: int = 3600  # seconds

    # Views
    DEFAULT_VIEW_ID: str = "market-watchlist"
    DEFAULT_VIEW_TITLE: str = "MarketWatchlist"

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore'
        )


def get_settings() -> Settings:
    """
    Get settings instance.

    In test mode, POLL_INTERVAL_SECONDS is automatically overridden with
    TEST_POLL_INTERVAL_SECONDS so polling tests do not sleep for real.

    Returns:
        Settings: Application settings
    """
    settings = Settings()

    if is_test_mode():
        settings.POLL_INTERVAL_SECONDS = settings.TEST_POLL_INTERVAL_SECONDS

    return settings

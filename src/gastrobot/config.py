"""Configuration management for gastrobot."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

GASTRONOGEEK_CHANNEL_ID = "UCfI1q93ZYNR_mJYKFEqxfrA"


class Settings(BaseSettings):
    """Application settings with environment variable overrides.

    All settings can be overridden via environment variables
    prefixed with GASTROBOT_ (e.g. GASTROBOT_DATA_DIR, GASTROBOT_PORT).
    Provider API keys keep their own names (MISTRAL_API_KEY, ...).
    """

    model_config = {"env_prefix": "GASTROBOT_"}

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".gastrobot",
        description="Root directory for all gastrobot data",
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 9093

    # LLM
    llm_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Seconds allowed for one completion call",
    )
    max_tokens: int = Field(default=1024, gt=0)

    # Sync
    channel_url: str = f"https://www.youtube.com/channel/{GASTRONOGEEK_CHANNEL_ID}/videos"
    sync_max_results: int = Field(default=50, gt=0, le=250)

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def db_path(self) -> Path:
        """SQLite database path."""
        return self.data_dir / "gastrobot.db"

    def ensure_dirs(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this throughout the app
settings = Settings()

"""Session configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_STORAGE_PATH = Path.home() / ".taskora" / "notes_data.json"


class Settings(BaseSettings):
    """Application settings loaded from TASKORA_* variables or a .env file."""

    model_config = {
        "env_prefix": "TASKORA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Persistent store
    storage_backend: str = "json"  # memory | json | redis
    storage_path: Path = DEFAULT_STORAGE_PATH

    # Redis
    redis_url: str = "redis://localhost:6379"
    redis_prefix: str = "taskora:"

    # Day window
    window_half_range: int = 50
    expansion_size: int = 20
    load_more_threshold: int = 10
    recenter_distance_days: int = 3

    # Overdue / backup
    overdue_lookback_days: int = 30
    export_window_days: int = 15

    log_level: str = "INFO"


settings = Settings()

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./wellness.db"
    default_owner_id: str = "local"  # single-tenant fallback; auth lives upstream
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-5"
    emotion_classifier: str = "rules"  # "rules" or "claude"

    circadian_history_days: int = 90
    circadian_min_days: int = 7
    circadian_max_age_days: int = 7
    emotion_history_days: int = 7

    completion_long_window_days: int = 30
    completion_short_window_days: int = 7

    dismissal_window_days: int = 7
    dismissal_rate_threshold: float = 0.6
    dismissal_min_count: int = 3

    api_host: str = "0.0.0.0"
    api_port: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

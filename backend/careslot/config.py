# backend/careslot/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./careslot.db"
    redis_url: str = "redis://localhost:6379/0"

    # Seconds a statement may wait on a locked store before failing
    store_timeout_seconds: float = 5.0
    redis_socket_timeout: float = 2.0

    horizon_days: int = 60
    default_slot_duration_minutes: int = 30

    reminder_enabled: bool = True
    reminder_before_minutes: int = 120
    reminder_check_interval: int = 60

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()

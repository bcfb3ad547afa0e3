"""Backend settings."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Postgres connection (Supabase pooler in production)
    database_url: str = ""
    debug: bool = False
    log_level: str = "INFO"

    # Supabase Auth / Storage
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""  # required for user management
    photo_bucket: str = "visitor-photos"
    http_timeout_seconds: float = 10.0

    # Calendar days and expiry dates are interpreted in this zone
    local_timezone: str = "America/Costa_Rica"

    # Dashboard
    expiring_soon_days: int = 7
    chart_days: int = 7

    allowed_origins: List[str] = [
        *[f"http://localhost:{port}" for port in range(3000, 3007)],
        *[f"http://127.0.0.1:{port}" for port in range(3000, 3007)],
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()

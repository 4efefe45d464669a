# garage/config.py
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load local .env for development
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # ─── Supabase ───────────────────────────────────────────────────────────────
    # Project URL + public anon key; row-level security does the rest.
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: str

    # ─── Database (schema provisioning only) ────────────────────────────────────
    DATABASE_URL: Optional[str] = Field(default=None)

    # ─── App ────────────────────────────────────────────────────────────────────
    # Where password-reset emails send people back to.
    SITE_URL: str = "http://localhost:8501"
    APP_TIMEZONE: str = "America/Chicago"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def reset_password_url(self) -> str:
        return self.SITE_URL.rstrip("/") + "/reset-password"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Single settings instance for the whole app (read lazily so tests can set env first)."""
    return Settings()

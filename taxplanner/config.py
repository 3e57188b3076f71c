"""
config.py — taxplanner application settings.

Usage:
    from taxplanner.config import settings
    print(settings.default_fiscal_year)

The engine never reads settings. Only the API layer does, to fill in defaults
the caller left out.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from taxplanner import __version__


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- Application ---
    debug: bool = False
    app_version: str = __version__
    host: str = "127.0.0.1"
    port: int = 8000

    # --- CORS ---
    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173"

    # --- Statutory tables ---
    # Fiscal year used when a request does not name one. Must exist in engine.tables.
    default_fiscal_year: str = "2025-26"

    @property
    def cors_origins_list(self) -> List[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Module-level singleton — import this throughout the codebase
settings = Settings()

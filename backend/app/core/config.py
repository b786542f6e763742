from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- DB ---
    DATABASE_URL: str = "sqlite:///./loser_pool.sqlite"

    # --- Cron ---
    # Empty token disables the cron endpoints
    CRON_SECRET_TOKEN: str = ""

    # --- Season ---
    # Last-resort "current week" when no matchup data exists (and no SeasonState row)
    CURRENT_WEEK_FALLBACK: Optional[int] = None

    # --- Feed ---
    ESPN_BASE_URL: str = "https://site.api.espn.com/apis/site/v2/sports"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"

    # Tell pydantic to read the .env file
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Global instance imported by the rest of the project
settings = Settings()

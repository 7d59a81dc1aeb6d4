"""
Idea Board – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── App ──
    APP_NAME: str = "Idea Board"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Server ──
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # ── Storage ──
    DB_PATH: str = "./data/ideas.db"
    UPLOAD_DIR: str = "./uploads"
    STATIC_DIR: str = "./public"

    # ── Limits ──
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MiB

settings = Settings()

"""
Application Configuration

Centralized settings management using Pydantic BaseSettings.
All values are loaded from environment variables or .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable binding.

    Optional env vars:
        DATABASE_URL (sqlite:///./quicknotes.db), STORAGE_KEY,
        DEFAULT_FOLDER (Personal), GEMINI_API_KEY (empty),
        GEMINI_TIMEOUT (30.0), AI_MAX_ATTEMPTS (5), AI_BACKOFF_BASE (2.0),
        LOG_LEVEL (INFO), LOG_SQL (false)
    """

    PROJECT_NAME: str = "Quicknotes"

    # Persistence: one blob under a fixed key
    DATABASE_URL: str = "sqlite:///./quicknotes.db"
    STORAGE_KEY: str = "quicknotes_state_v1"

    # Notes
    DEFAULT_FOLDER: str = "Personal"

    # Generative text service
    GEMINI_API_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.5-flash-preview-09-2025:generateContent"
    )
    GEMINI_API_KEY: str = ""
    GEMINI_TIMEOUT: float = 30.0
    AI_MAX_ATTEMPTS: int = 5
    AI_BACKOFF_BASE: float = 2.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_SQL: bool = False  # Emit statements from the storage engine

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",  # Silently ignore unknown env vars
    )


settings = Settings()

"""
Stand-up Room – Application configuration.
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
    APP_NAME: str = "Stand-up Room"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./standup.db"
    DB_MAX_ATTEMPTS: int = 3  # 1 initial attempt + 2 retries

    # ── Room session (JWT cookie) ──
    SECRET_KEY: str = "change-me-to-a-random-secret"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "room_session"
    PASSCODE_HASH_ROUNDS: int = 10

    # ── Planning poker ──
    CLAIM_TTL_HOURS: int = 2
    POKER_ROUND_RETENTION: int = 30

    # ── Roulette ──
    HISTORY_DEFAULT_LIMIT: int = 50
    HISTORY_MAX_LIMIT: int = 100

    # ── Impediments ──
    TIMEZONE: str = "America/Sao_Paulo"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()

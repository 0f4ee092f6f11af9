from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Used only when SECRET_KEY is not set. Anyone reading this file can forge tokens.
FALLBACK_SECRET_KEY = "cryptoapp_dev_secret_change_me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # PROJECT
    PROJECT_NAME: str = "CryptoApp Backend API"
    VERSION: str = "1.0.0"

    # DATABASE
    # Render hands out postgres:// URLs, SQLAlchemy only knows postgresql://
    DATABASE_URL: str = "sqlite:///./cryptoapp.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0

    # Liveness probe against the store (10 minutes, like the old keep-alive ping)
    KEEPALIVE_ENABLED: bool = True
    KEEPALIVE_INTERVAL_SECONDS: float = 600.0
    RETRY_AFTER_SECONDS: int = 30

    # SECURITY
    SECRET_KEY: Optional[str] = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    MIN_PASSWORD_LENGTH: int = 6

    # The React client sends its token in this header, not in Authorization
    AUTH_HEADER_NAME: str = "x-auth-token"

    # API
    # Set to "/api" when serving the original front end
    API_PREFIX: str = ""
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # SERVER
    PORT: int = 10000
    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self) -> str:
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    @property
    def jwt_secret(self) -> str:
        return self.SECRET_KEY or FALLBACK_SECRET_KEY

    @property
    def uses_fallback_secret(self) -> bool:
        return not self.SECRET_KEY


@lru_cache
def get_settings() -> Settings:
    return Settings()

import re
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from library_api.constants import ROLE_ADMIN


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Database settings
    DATABASE_URL: str | None = None
    DB_USER: str = "library"
    DB_PASSWORD: str = ""
    DB_HOST: str = "library-db"
    DB_PORT: int = 5432
    DB_NAME: str = "library"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_INIT_RETRY_INTERVAL: int = 2
    DB_INIT_MAX_RETRIES: int = 5

    # Create tables / seed fixtures on startup (development only)
    DB_CREATE_TABLES: bool = False
    LOAD_FIXTURES: bool = False

    # Redis settings
    REDIS_IP: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: int = 5
    REDIS_CONNECT_TIMEOUT: int = 5
    REDIS_HEALTH_CHECK_INTERVAL: int = 30
    REDIS_RETRY_ON_TIMEOUT: bool = True
    CACHE_REDIS_DB: int = 1

    # Response cache settings
    CACHE_BACKEND: Literal["memory", "redis"] = "memory"
    CACHE_TTL: int | None = 3600
    CACHE_MAX_ENTRIES: int = 1000

    # Keycloak settings
    KEYCLOAK_REALM: str
    KEYCLOAK_CLIENT_ID: str
    KEYCLOAK_BASE_URL: str = "http://library-keycloak:8080/"

    # Authentication / authorization
    LOCAL_AUTH_ENABLED: bool = False
    ADMIN_ROLE: str = ROLE_ADMIN
    PASSWORD_HASH_ROUNDS: int = 12
    EXCLUDED_PATHS: re.Pattern = re.compile(
        r"^(/docs|/openapi.json|/health|/metrics)$"
    )

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10

    # API versioning
    API_DEFAULT_VERSION: str = "1.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "logs/logging_errors.log"

    @property
    def database_url(self) -> str:
        """Explicit DATABASE_URL, or a PostgreSQL URL built from DB_* parts."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


app_settings = Settings()

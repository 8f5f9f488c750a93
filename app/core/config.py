"""Configuration management for the Cash Card service.

Configuration is loaded from environment variables, one prefix per section.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Constants for database URL construction
POSTGRESQL_PREFIX = "postgresql://"
ASYNCPG_DRIVER = "+asyncpg"
PSYCOPG_DRIVER = "+psycopg"

DEV_SECRET_KEY = "cashcard-dev-secret-change-me"


class AppEnvironment(str, Enum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StorageBackend(str, Enum):
    MEMORY = "memory"
    POSTGRES = "postgres"


class AppConfig(BaseSettings):
    name: str = Field(default="cashcard-service")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)
    api_prefix: str = Field(default="")

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.upper())

    @field_validator("api_prefix", mode="after")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        """Strip trailing slashes so prefix + '/cashcards' never doubles up."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=4)

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class DatabaseConfig(BaseSettings):
    backend: StorageBackend = Field(default=StorageBackend.MEMORY)

    # Primary: Full connection URL
    url_app: str = Field(default="", alias="database_url_app")

    # Admin URL for schema setup (optional)
    url_admin: str = Field(default="", alias="database_url_admin")

    # Fallback: Individual components
    host: str = Field(default="localhost")
    port: int = Field(default=5432)
    name: str = Field(default="cashcards")
    user: str = Field(default="postgres")
    password: SecretStr = Field(default=SecretStr(""))
    pool_size: int = Field(default=10)
    max_overflow: int = Field(default=20)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)
    echo: bool = Field(default=False)
    auto_create_schema: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        populate_by_name=True,
    )

    @field_validator("backend", mode="before")
    @classmethod
    def validate_backend(cls, v: str | StorageBackend) -> StorageBackend:
        if isinstance(v, StorageBackend):
            return v
        return StorageBackend(v.lower())

    @property
    def async_url(self) -> str:
        """Build async database URL."""
        if self.url_app:
            url = self.url_app
            if url.startswith(POSTGRESQL_PREFIX) and ASYNCPG_DRIVER not in url:
                new_prefix = POSTGRESQL_PREFIX.removesuffix("://") + ASYNCPG_DRIVER + "://"
                url = url.replace(POSTGRESQL_PREFIX, new_prefix, 1)
            return url
        password = self.password.get_secret_value()
        return f"postgresql{ASYNCPG_DRIVER}://{self.user}:{password}@{self.host}:{self.port}/{self.name}"

    @property
    def libpq_url(self) -> str:
        """Plain postgresql:// URL for psycopg.connect (admin URL preferred)."""
        url = self.url_admin or self.url_app
        if url:
            for driver in (ASYNCPG_DRIVER, PSYCOPG_DRIVER):
                url = url.replace("postgresql" + driver + "://", POSTGRESQL_PREFIX, 1)
            return url
        password = self.password.get_secret_value()
        return f"{POSTGRESQL_PREFIX}{self.user}:{password}@{self.host}:{self.port}/{self.name}"


class AuthConfig(BaseSettings):
    secret_key: SecretStr = Field(default=SecretStr(DEV_SECRET_KEY))
    algorithms: str = Field(default="HS256")  # Comma-separated; the first one signs tokens
    audience: str | None = Field(default=None)
    issuer: str | None = Field(default=None)
    roles_claim: str = Field(default="roles")
    access_token_expire_minutes: int = Field(default=60)

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    @property
    def algorithms_list(self) -> list[str]:
        """Parse algorithms string into a list."""
        return [algo.strip() for algo in self.algorithms.split(",") if algo.strip()]

    @property
    def signing_algorithm(self) -> str:
        return self.algorithms_list[0]


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="cashcard-service")
    otlp_endpoint: str | None = Field(default=None)
    otlp_insecure: bool = Field(default=True)
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="OTEL_")


class SecurityConfig(BaseSettings):
    cors_allowed_origins: str = Field(default="http://localhost:3000,http://localhost:8080")
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "DELETE"])
    cors_allow_headers: list[str] = Field(default=["Authorization", "Content-Type", "X-Request-ID"])
    cors_expose_headers: list[str] = Field(default=["Location"])
    sanitize_errors: bool = Field(default=True)  # Hide role details in 403 bodies

    # SECURITY: ONLY allowed in local environment. Will raise error in test/prod.
    skip_jwt_validation: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("cors_allowed_origins", mode="after")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        """Parse comma-separated string into list of origins."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("skip_jwt_validation", mode="before")
    @classmethod
    def parse_skip_jwt_validation(cls, v: bool | str) -> bool:
        """Parse boolean from environment variable (string "true"/"false")."""
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @model_validator(mode="after")
    def validate_security_settings(self) -> Settings:
        """Validate security settings after all configs are loaded."""
        if self.security.skip_jwt_validation and self.app.env != AppEnvironment.LOCAL:
            raise ValueError(
                "SECURITY_SKIP_JWT_VALIDATION can only be set in local environment. "
                f"Current environment: {self.app.env.value}"
            )
        if (
            self.app.env == AppEnvironment.PROD
            and self.auth.secret_key.get_secret_value() in ("", DEV_SECRET_KEY)
        ):
            raise ValueError("AUTH_SECRET_KEY must be set to a non-default value in prod")
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    get_settings.cache_clear()
    return get_settings()

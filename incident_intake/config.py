"""Incident intake configuration loaded from environment variables."""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # Database
    db_server: str = Field(default="", alias="DB_SERVER")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_name: str = Field(default="", alias="DB_NAME")
    db_user: str = Field(default="", alias="DB_USER")
    db_password: str = Field(default="", alias="DB_PASSWORD")
    db_driver: str = Field(default="postgresql+asyncpg", alias="DB_DRIVER")
    # Only used when DB_DRIVER selects SQL Server (mssql+aioodbc).
    db_odbc_driver: str = Field(default="ODBC Driver 18 for SQL Server", alias="DB_ODBC_DRIVER")
    db_encrypt: bool = Field(default=True, alias="DB_ENCRYPT")
    db_trust_server_certificate: bool = Field(default=False, alias="DB_TRUST_SERVER_CERTIFICATE")
    db_schema: str = Field(default="public", alias="DB_SCHEMA")

    # Connection pool
    db_pool_max: int = Field(
        default=5,
        ge=1,
        validation_alias=AliasChoices("DB_POOL_MAX", "DB_MAX_CONNECTIONS"),
    )
    db_pool_min: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("DB_POOL_MIN", "DB_MIN_CONNECTIONS"),
    )
    db_pool_idle_timeout_ms: int = Field(
        default=30000,
        ge=0,
        validation_alias=AliasChoices("DB_POOL_IDLE_TIMEOUT_MS", "DB_IDLE_TIMEOUT"),
    )
    db_pool_timeout: float = Field(default=30.0, gt=0, alias="DB_POOL_TIMEOUT")

    # Server
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Env var names that must be non-empty before a pool can be built.
    REQUIRED_DATABASE_SETTINGS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("DB_SERVER", "db_server"),
        ("DB_NAME", "db_name"),
        ("DB_USER", "db_user"),
        ("DB_PASSWORD", "db_password"),
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in {"production", "prod"}

    def missing_database_settings(self) -> list[str]:
        """Return the env var names of required database settings that are unset."""
        return [
            env_name
            for env_name, attr in self.REQUIRED_DATABASE_SETTINGS
            if not str(getattr(self, attr) or "").strip()
        ]

    @property
    def is_mssql(self) -> bool:
        return self.db_driver.startswith("mssql")

    def _connection_query(self) -> dict[str, str]:
        if self.is_mssql:
            return {
                "driver": self.db_odbc_driver,
                "Encrypt": "yes" if self.db_encrypt else "no",
                "TrustServerCertificate": "yes" if self.db_trust_server_certificate else "no",
            }
        # asyncpg sslmode names
        if not self.db_encrypt:
            return {"ssl": "disable"}
        return {"ssl": "require" if self.db_trust_server_certificate else "verify-full"}

    def database_url(self) -> URL:
        query = self._connection_query()
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password,
            host=self.db_server,
            port=self.db_port,
            database=self.db_name,
            query=query,
        )

    @property
    def pool_min_connections(self) -> int:
        # Warm-up never opens more connections than the pool may hold.
        return min(self.db_pool_min, self.db_pool_max)

    @property
    def pool_recycle_seconds(self) -> int:
        return max(1, self.db_pool_idle_timeout_ms // 1000)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()

"""Глобальные настройки RugFork.

Настройки разделены по доменам (API, Solana, ставки, rug score, кеш и т.д.),
поэтому новые сервисы подключаются без переписывания базового кода.
Вся конфигурация загружается из переменных окружения через Pydantic Settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
ACCESSIBLE_ENV_FILE = BASE_DIR / "config" / "runtime.env"
DEFAULT_ENV_FILE = BASE_DIR / ".env"
ENV_FILE = ACCESSIBLE_ENV_FILE if ACCESSIBLE_ENV_FILE.exists() else DEFAULT_ENV_FILE


class ApiSettings(BaseModel):
    """HTTP-слой: CORS, лимиты запросов, адрес сервера."""

    title: str = "RugFork API"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3001"])
    rate_limit_window_sec: PositiveInt = 900
    rate_limit_max_requests: PositiveInt = 100

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


class SolanaSettings(BaseModel):
    """Публичный JSON-RPC Solana (по умолчанию devnet)."""

    rpc_endpoint: AnyHttpUrl = Field(
        "https://api.devnet.solana.com",
        description="HTTP JSON-RPC нода Solana",
    )
    request_timeout: PositiveFloat = 10.0
    signature_limit: PositiveInt = Field(
        1000, description="Сколько подписей запрашивать для подсчёта транзакций"
    )
    top_holders: PositiveInt = 10


class RugScoreSettings(BaseModel):
    """Параметры расчёта rug score."""

    timeout_sec: PositiveFloat = 8.0
    cache_ttl_seconds: int = 60


class BettingSettings(BaseModel):
    """Границы сайдбетов и права на сеттлмент."""

    min_multiplier: PositiveInt = 2
    max_multiplier: PositiveInt = 100
    payout_denominator: PositiveInt = 100
    settler_wallets: list[str] = Field(
        default_factory=list,
        description="Кошельки, которым разрешён settle (пусто — любой авторизованный)",
    )


class CacheSettings(BaseModel):
    """Настройки кешей (aiocache поддерживает memory / redis)."""

    backend: Literal["memory", "redis"] = "memory"
    redis_dsn: str | None = None


class DatabaseSettings(BaseModel):
    """SQLModel + aiosqlite (по умолчанию) и готовность к Postgres."""

    dsn: str = Field(
        "sqlite+aiosqlite:///./database/rugfork.db",
        description="Строка подключения SQLAlchemy/SQLModel",
    )
    echo: bool = False


class SecuritySettings(BaseModel):
    """JWT для bearer-авторизации кошельков."""

    jwt_secret: SecretStr = Field(..., description="Секрет для подписания JWT")
    jwt_algorithm: str = "HS256"
    jwt_ttl_minutes: int = 60


class AppSettings(BaseSettings):
    """Главный контейнер настроек RugFork."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["dev", "prod"] = "dev"
    api: ApiSettings = ApiSettings()
    solana: SolanaSettings = SolanaSettings()
    rug_score: RugScoreSettings = RugScoreSettings()
    betting: BettingSettings = BettingSettings()
    cache: CacheSettings = CacheSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings

    @property
    def is_production(self) -> bool:
        """True, если сервис запущен в продовой среде."""

        return self.environment == "prod"


# Ленивый синглтон (избегаем глобальных переменных в модулях).
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Возвращает единый экземпляр настроек.

    Значения кэшируются, поэтому .env читается ровно один раз за процесс.
    """

    global _settings
    if _settings is None:
        _settings = AppSettings()  # type: ignore[call-arg]
    return _settings


__all__ = [
    "ApiSettings",
    "AppSettings",
    "BettingSettings",
    "CacheSettings",
    "DatabaseSettings",
    "RugScoreSettings",
    "SecuritySettings",
    "SolanaSettings",
    "get_settings",
]

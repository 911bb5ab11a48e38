"""Кеши RugFork поверх aiocache.

Сейчас кешируется только rug score: алиас ``rugscore``, отдельный namespace
и TTL из ``rug_score.cache_ttl_seconds``. Значения кладутся JSON-ом
(``RugScoreResult.as_dict``), поэтому memory и redis ведут себя одинаково.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from aiocache import SimpleMemoryCache, caches
from aiocache.base import BaseCache

try:
    from aiocache import RedisCache
except (ImportError, AttributeError):  # pragma: no cover - optional dependency
    RedisCache = None  # type: ignore[assignment]

from config.settings import get_settings

RUG_SCORE_CACHE = "rugscore"

_configured = False


def configure_cache() -> None:
    """Регистрирует алиасы кешей для выбранного backend (memory/redis)."""

    global _configured
    if _configured:
        return

    settings = get_settings()
    if settings.cache.backend == "redis":
        if RedisCache is None:
            raise RuntimeError(
                "Для использования RedisCache установите пакет 'redis' и aiocache[redis]"
            )
        backend: dict[str, Any] = {"cache": RedisCache, **_build_redis_config(settings.cache.redis_dsn)}
    else:
        backend = {"cache": SimpleMemoryCache}

    caches.set_config(
        {
            # aiocache требует алиас default, сервисы его не используют.
            "default": {"cache": SimpleMemoryCache},
            RUG_SCORE_CACHE: {
                **backend,
                "namespace": RUG_SCORE_CACHE,
                "serializer": {"class": "aiocache.serializers.JsonSerializer"},
                "ttl": settings.rug_score.cache_ttl_seconds or None,
            },
        }
    )
    _configured = True


def get_cache(alias: str = RUG_SCORE_CACHE) -> BaseCache:
    """Возвращает кеш по алиасу (предварительно гарантирует конфиг)."""

    configure_cache()
    return caches.get(alias)


def _build_redis_config(dsn: str | None) -> dict[str, Any]:
    """redis://[:password@]host[:port][/db] -> параметры RedisCache."""

    if not dsn:
        raise RuntimeError("CACHE__BACKEND=redis, но CACHE__REDIS_DSN не указан")
    parsed = urlparse(dsn)
    if parsed.scheme not in {"redis", "rediss"}:
        raise ValueError(f"Неподдерживаемая схема Redis DSN: {parsed.scheme}")
    db = parsed.path.strip("/")
    if db and not db.isdigit():
        raise ValueError(f"Номер БД Redis должен быть числом: {db}")
    return {
        "endpoint": parsed.hostname or "localhost",
        "port": parsed.port or 6379,
        "password": parsed.password,
        "db": int(db or 0),
        "ssl": parsed.scheme == "rediss",
    }


__all__ = ["RUG_SCORE_CACHE", "configure_cache", "get_cache"]

"""Rug score RugFork.

Оценивает токен по семи факторам по шкале 0 (безопасно) – 100 (рискованно)
и сводит их взвешенной суммой в итоговый score. Пороги факторов заданы
явными упорядоченными таблицами, поэтому каждую лестницу можно проверить
отдельно. Если on-chain данные получить не удалось, возвращается
худший результат вместо ошибки.
"""

from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable

from aiocache.base import BaseCache
from loguru import logger

from config.settings import get_settings
from rugfork.models import Pool
from rugfork.models.base import as_utc, utcnow
from rugfork.utils.cache import get_cache
from .rpc_client import ChainFacts, SolanaRpcClient, get_solana_client, holders_from_accounts

LAMPORTS_PER_SOL = 1_000_000_000

# Факторы без реального анализа: фиксированная нейтральная оценка.
NEUTRAL_FACTOR_SCORE = 50

# Веса в процентах, сумма = 100.
WEIGHTS: dict[str, int] = {
    "liquidity": 25,
    "holder_distribution": 20,
    "volume": 15,
    "age": 15,
    "transaction_count": 10,
    "dev_wallet_activity": 10,
    "social_signals": 5,
}

FALLBACK_RECOMMENDATION = "Unable to analyze token - proceed with extreme caution"


@dataclass(frozen=True, slots=True)
class ThresholdLadder:
    """Упорядоченная таблица (граница, оценка).

    Для ladder «не меньше» первая ступень с value >= bound даёт оценку,
    для «не больше» — первая с value <= bound. Иначе — fallback.
    """

    steps: tuple[tuple[float, int], ...]
    fallback: int
    at_most: bool = False

    def score(self, value: float) -> int:
        for bound, score in self.steps:
            if (value <= bound) if self.at_most else (value >= bound):
                return score
        return self.fallback


LIQUIDITY_LADDER = ThresholdLadder(((100, 10), (50, 20), (20, 40), (10, 60), (5, 80)), fallback=100)
HOLDER_LADDER = ThresholdLadder(
    ((0.1, 10), (0.2, 20), (0.3, 40), (0.5, 60), (0.7, 80)), fallback=100, at_most=True
)
VOLUME_RATIO_LADDER = ThresholdLadder(((10, 10), (5, 20), (2, 40), (1, 60)), fallback=80)
AGE_HOURS_LADDER = ThresholdLadder(((168, 10), (72, 20), (24, 40), (6, 60), (1, 80)), fallback=100)
TX_COUNT_LADDER = ThresholdLadder(((1000, 10), (500, 20), (100, 40), (50, 60), (10, 80)), fallback=100)


@dataclass(slots=True)
class PoolFacts:
    """Данные пула из БД, нужные для оценки."""

    liquidity: int = 0
    total_volume: int = 0
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_pool(cls, pool: Pool) -> "PoolFacts":
        return cls(liquidity=pool.liquidity, total_volume=pool.total_volume, created_at=pool.created_at)


@dataclass(slots=True)
class RugScoreFactors:
    liquidity: int = 0
    holder_distribution: int = 0
    volume: int = 0
    age: int = 0
    transaction_count: int = 0
    dev_wallet_activity: int = 0
    social_signals: int = 0


@dataclass(slots=True)
class RugScoreResult:
    score: int
    factors: RugScoreFactors
    risk_level: str
    recommendations: list[str]
    degraded: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "factors": asdict(self.factors),
            "risk_level": self.risk_level,
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RugScoreResult":
        """Обратное к as_dict: так результат хранится в кеше."""

        return cls(
            score=int(data["score"]),
            factors=RugScoreFactors(**data["factors"]),
            risk_level=data["risk_level"],
            recommendations=list(data["recommendations"]),
        )


def liquidity_factor(liquidity: int) -> int:
    return LIQUIDITY_LADDER.score(liquidity / LAMPORTS_PER_SOL)


def holder_distribution_factor(facts: ChainFacts) -> int:
    if not facts.top_holders:
        return 100
    return HOLDER_LADDER.score(facts.top_holder_share)


def volume_factor(total_volume: int, liquidity: int) -> int:
    if liquidity == 0:
        return 100
    return VOLUME_RATIO_LADDER.score(total_volume / liquidity)


def age_factor(created_at: datetime, now: datetime | None = None) -> int:
    hours = ((now or utcnow()) - as_utc(created_at)).total_seconds() / 3600
    return AGE_HOURS_LADDER.score(hours)


def transaction_count_factor(count: int) -> int:
    return TX_COUNT_LADDER.score(count)


def weighted_score(factors: RugScoreFactors) -> int:
    """Взвешенная сумма, округление половины вверх в целых числах."""

    values = asdict(factors)
    total = sum(values[name] * weight for name, weight in WEIGHTS.items())
    return (total + 50) // 100


def risk_level(score: int) -> str:
    if score <= 25:
        return "LOW"
    if score <= 50:
        return "MEDIUM"
    if score <= 75:
        return "HIGH"
    return "EXTREME"


def recommendations(factors: RugScoreFactors, score: int) -> list[str]:
    items: list[str] = []
    if factors.liquidity > 60:
        items.append("⚠️ Low liquidity detected - high slippage risk")
    if factors.holder_distribution > 60:
        items.append("⚠️ Concentrated token ownership - potential rug pull risk")
    if factors.age > 60:
        items.append("⚠️ Very new token - higher risk of abandonment")
    if factors.volume > 60:
        items.append("⚠️ Low trading volume - potential liquidity issues")

    if score > 75:
        items.append("🚨 EXTREME RISK - Consider avoiding this token")
    elif score > 50:
        items.append("⚠️ HIGH RISK - Only invest what you can afford to lose")
    elif score > 25:
        items.append("⚡ MEDIUM RISK - Monitor closely")
    else:
        items.append("✅ LOW RISK - Relatively safe for trading")
    return items


def score_token(pool: PoolFacts, chain: ChainFacts, now: datetime | None = None) -> RugScoreResult:
    """Чистый расчёт по уже полученным фактам."""

    factors = RugScoreFactors(
        liquidity=liquidity_factor(pool.liquidity),
        holder_distribution=holder_distribution_factor(chain),
        volume=volume_factor(pool.total_volume, pool.liquidity),
        age=age_factor(pool.created_at, now),
        transaction_count=transaction_count_factor(chain.recent_tx_count),
        dev_wallet_activity=NEUTRAL_FACTOR_SCORE,
        social_signals=NEUTRAL_FACTOR_SCORE,
    )
    score = max(0, min(100, weighted_score(factors)))
    return RugScoreResult(
        score=score,
        factors=factors,
        risk_level=risk_level(score),
        recommendations=recommendations(factors, score),
    )


def worst_case() -> RugScoreResult:
    return RugScoreResult(
        score=100,
        factors=RugScoreFactors(),
        risk_level="EXTREME",
        recommendations=[FALLBACK_RECOMMENDATION],
        degraded=True,
    )


class RugScoreService:
    """Получает факты о цепи и считает rug score, никогда не падая."""

    def __init__(
        self,
        client_factory: Callable[[], Awaitable[SolanaRpcClient]] = get_solana_client,
        cache: BaseCache | None = None,
    ) -> None:
        cfg = get_settings().rug_score
        self._client_factory = client_factory
        self._timeout = cfg.timeout_sec
        self._cache_ttl = cfg.cache_ttl_seconds
        self._cache = cache if cache is not None else get_cache()

    async def calculate(self, token_mint: str, pool: PoolFacts) -> RugScoreResult:
        """Возвращает RugScoreResult из кеша либо выполняет расчёт."""

        cached = await self._cached(token_mint)
        if cached is not None:
            return cached
        try:
            client = await self._client_factory()
            chain = await asyncio.wait_for(client.get_chain_facts(token_mint), timeout=self._timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Rug score {mint} деградировал до худшего случая: {error}",
                mint=token_mint,
                error=str(exc) or type(exc).__name__,
            )
            return worst_case()
        result = score_token(pool, chain)
        await self._remember(token_mint, result)
        return result

    async def _cached(self, token_mint: str) -> RugScoreResult | None:
        if self._cache_ttl <= 0:
            return None
        try:
            data = await self._cache.get(token_mint)
            return RugScoreResult.from_dict(data) if data else None
        except Exception as exc:  # noqa: BLE001
            logger.warning("Кеш rug score недоступен для {mint}: {error}", mint=token_mint, error=exc)
            return None

    async def _remember(self, token_mint: str, result: RugScoreResult) -> None:
        if self._cache_ttl <= 0:
            return
        try:
            await self._cache.set(token_mint, result.as_dict(), ttl=self._cache_ttl)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Не удалось сохранить rug score {mint} в кеш: {error}", mint=token_mint, error=exc)

    async def holder_metrics(self, token_mint: str) -> dict[str, Any]:
        """Лёгкий снимок держателей для списков пулов; при ошибке RPC нули."""

        try:
            client = await self._client_factory()
            accounts = await asyncio.wait_for(
                client.get_token_largest_accounts(token_mint), timeout=self._timeout
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Нет данных о держателях {mint}: {error}", mint=token_mint, error=exc)
            return {"total_supply": 0.0, "top_holder_percentage": 0.0, "holder_count": 0}
        total, holders = holders_from_accounts(accounts, limit=1)
        return {
            "total_supply": total,
            "top_holder_percentage": holders[0].percentage if holders else 0.0,
            "holder_count": len(accounts),
        }

    async def compare(self, tokens: list[tuple[str, PoolFacts]]) -> list[dict[str, Any]]:
        """Оценки нескольких токенов, от самого безопасного."""

        results = await asyncio.gather(*(self.calculate(mint, facts) for mint, facts in tokens))
        rows = [
            {"mint": mint, "score": result.score, "risk_level": result.risk_level}
            for (mint, _), result in zip(tokens, results)
        ]
        return sorted(rows, key=lambda row: row["score"])


__all__ = [
    "AGE_HOURS_LADDER",
    "HOLDER_LADDER",
    "LIQUIDITY_LADDER",
    "NEUTRAL_FACTOR_SCORE",
    "PoolFacts",
    "RugScoreFactors",
    "RugScoreResult",
    "RugScoreService",
    "TX_COUNT_LADDER",
    "ThresholdLadder",
    "VOLUME_RATIO_LADDER",
    "WEIGHTS",
    "age_factor",
    "holder_distribution_factor",
    "liquidity_factor",
    "recommendations",
    "risk_level",
    "score_token",
    "transaction_count_factor",
    "volume_factor",
    "weighted_score",
    "worst_case",
]

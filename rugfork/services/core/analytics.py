"""Аналитика платформы, пулов, пользователей и рынка."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.errors import NotFound
from rugfork.models import Bet, Pool
from rugfork.models.base import as_utc
from rugfork.repositories import (
    aggregate_bets,
    bet_counts_by_user,
    count_users,
    get_pool,
    get_user,
    list_bets,
    list_pools,
    list_pools_by_ids,
    multiplier_distribution,
    pool_popularity,
    pool_totals,
    pools_created_since,
    top_pools_by_volume,
)
from rugfork.services.solana.rug_score import risk_level
from .ranking import period_start, user_card, win_rate


@dataclass(slots=True)
class BetSummary:
    total_bets: int = 0
    total_volume: int = 0
    total_winnings: int = 0
    total_losses: int = 0
    average_multiplier: float = 0.0
    favorite_multiplier: int | None = None
    risk_tolerance: str | None = None

    @property
    def net_profit(self) -> int:
        return self.total_winnings - self.total_losses

    @property
    def win_rate(self) -> int:
        return win_rate(self.total_winnings, self.total_losses)

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_bets": self.total_bets,
            "total_volume": self.total_volume,
            "total_winnings": self.total_winnings,
            "total_losses": self.total_losses,
            "net_profit": self.net_profit,
            "win_rate": self.win_rate,
            "average_multiplier": self.average_multiplier,
            "favorite_multiplier": self.favorite_multiplier,
            "risk_tolerance": self.risk_tolerance,
        }


def risk_tolerance(average_multiplier: float) -> str:
    if average_multiplier <= 3:
        return "LOW"
    if average_multiplier <= 10:
        return "MEDIUM"
    return "HIGH"


def favorite_multiplier(bets: Sequence[Bet]) -> int | None:
    """Самый частый мультипликатор; при равенстве — больший."""

    if not bets:
        return None
    counts = Counter(bet.multiplier for bet in bets)
    return max(counts, key=lambda mult: (counts[mult], mult))


def summarize_bets(bets: Sequence[Bet]) -> BetSummary:
    """Проигрыш: ставка урегулированной ставки без выплаты, как в счётчиках."""

    if not bets:
        return BetSummary()
    average = sum(bet.multiplier for bet in bets) / len(bets)
    return BetSummary(
        total_bets=len(bets),
        total_volume=sum(bet.amount for bet in bets),
        total_winnings=sum(bet.winnings for bet in bets),
        total_losses=sum(bet.amount for bet in bets if bet.is_settled and bet.winnings == 0),
        average_multiplier=average,
        favorite_multiplier=favorite_multiplier(bets),
        risk_tolerance=risk_tolerance(average),
    )


def hourly_volume(bets: Iterable[Bet]) -> list[dict[str, Any]]:
    """Объём по часовым корзинам (UTC), по возрастанию времени."""

    buckets: dict[Any, int] = {}
    for bet in bets:
        hour = as_utc(bet.created_at).replace(minute=0, second=0, microsecond=0)
        buckets[hour] = buckets.get(hour, 0) + bet.amount
    return [{"date": hour, "volume": volume} for hour, volume in sorted(buckets.items())]


def pool_card(pool: Pool) -> dict[str, Any]:
    return {
        "id": pool.id,
        "token_mint": pool.token_mint,
        "token_name": pool.token_name,
        "token_symbol": pool.token_symbol,
        "total_volume": pool.total_volume,
        "total_bets": pool.total_bets,
        "rug_score": pool.rug_score,
        "is_active": pool.is_active,
    }


class AnalyticsService:
    async def platform_stats(self, session: AsyncSession) -> dict[str, Any]:
        total_pools, active_pools, avg_score = await pool_totals(session)
        bets = await aggregate_bets(session)
        return {
            "total_pools": total_pools,
            "total_bets": bets.count,
            "total_volume": bets.volume,
            "total_users": await count_users(session),
            "active_pools": active_pools,
            "average_rug_score": round(avg_score),
        }

    async def pool_analytics(self, session: AsyncSession, pool_id: int, period: str) -> dict[str, Any]:
        since = period_start(period)
        pool = await get_pool(session, pool_id)
        if pool is None:
            raise NotFound("Пул не найден")
        bets, _ = await list_bets(session, pool_id=pool.id, since=since, limit=None)
        summary = summarize_bets(bets)
        per_user = await bet_counts_by_user(session, pool_id=pool.id, since=since)
        return {
            "period": period,
            "pool": pool.model_dump(),
            "analytics": {
                "bet_stats": {
                    "total_bets": summary.total_bets,
                    "total_volume": summary.total_volume,
                    "total_winnings": summary.total_winnings,
                    "average_multiplier": summary.average_multiplier,
                    "win_rate": summary.win_rate,
                },
                "volume_over_time": hourly_volume(bets),
                "unique_users": len(per_user),
                "top_users": [
                    {"user_id": user_id, "bet_count": count} for user_id, count in per_user[:10]
                ],
            },
            "recent_bets": [bet.model_dump() for bet in bets[:20]],
        }

    async def user_analytics(self, session: AsyncSession, user_id: int, period: str) -> dict[str, Any]:
        since = period_start(period)
        user = await get_user(session, user_id)
        if user is None:
            raise NotFound("Пользователь не найден")
        bets, _ = await list_bets(session, user_id=user.id, since=since, limit=None)
        pools, pools_total = await list_pools(session, active_only=False, creator_id=user.id, limit=10)
        summary = summarize_bets(bets)
        return {
            "period": period,
            "user": {
                **user_card(user),
                "total_xp": user.total_xp,
                "total_bets": user.total_bets,
                "total_winnings": user.total_winnings,
                "total_losses": user.total_losses,
                "last_active_at": user.last_active_at,
            },
            "analytics": {**summary.as_dict(), "pools_created": pools_total},
            "recent_bets": [bet.model_dump() for bet in bets[:20]],
            "created_pools": [pool.model_dump() for pool in pools],
        }

    async def market_analytics(self, session: AsyncSession, period: str) -> dict[str, Any]:
        since = period_start(period)
        pools = await pools_created_since(session, since)
        volume = await aggregate_bets(session, since=since)
        top = await top_pools_by_volume(session, since=since)
        distribution = Counter(risk_level(pool.rug_score) for pool in pools)
        average = round(sum(pool.rug_score for pool in pools) / len(pools)) if pools else 0
        return {
            "period": period,
            "pools_created": len(pools),
            "total_volume": volume.volume,
            "average_rug_score": average,
            "top_performing_pools": [pool_card(pool) for pool in top],
            "risk_distribution": [
                {"risk_level": level, "count": distribution.get(level, 0)}
                for level in ("LOW", "MEDIUM", "HIGH", "EXTREME")
            ],
        }

    async def trading_patterns(self, session: AsyncSession, period: str) -> dict[str, Any]:
        since = period_start(period)
        bets, _ = await list_bets(session, since=since, limit=None)
        hourly: dict[int, list[int]] = {hour: [0, 0] for hour in range(24)}
        daily: dict[int, list[int]] = {day: [0, 0] for day in range(7)}
        for bet in bets:
            created = as_utc(bet.created_at)
            hourly[created.hour][0] += 1
            hourly[created.hour][1] += bet.amount
            daily[created.weekday()][0] += 1
            daily[created.weekday()][1] += bet.amount
        popularity = await pool_popularity(session, since=since)
        pools = await list_pools_by_ids(session, (pool_id for pool_id, _, _ in popularity))
        return {
            "period": period,
            "hourly_patterns": [
                {"hour": hour, "bet_count": count, "volume": volume}
                for hour, (count, volume) in hourly.items()
            ],
            # 0 = понедельник
            "daily_patterns": [
                {"day": day, "bet_count": count, "volume": volume}
                for day, (count, volume) in daily.items()
            ],
            "multiplier_distribution": [
                {"multiplier": multiplier, "count": count}
                for multiplier, count in await multiplier_distribution(session, since=since)
            ],
            "pool_popularity": [
                {
                    "pool_id": pool_id,
                    "token_symbol": pools[pool_id].token_symbol if pool_id in pools else None,
                    "bet_count": count,
                    "volume": volume,
                }
                for pool_id, count, volume in popularity
            ],
        }


__all__ = [
    "AnalyticsService",
    "BetSummary",
    "favorite_multiplier",
    "hourly_volume",
    "pool_card",
    "risk_tolerance",
    "summarize_bets",
]

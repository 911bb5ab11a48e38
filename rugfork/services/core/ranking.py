"""Рейтинги и лидерборды.

Ранг = количество участников со значением метрики строго больше + 1.
Равные значения получают одинаковый ранг, и порядок внутри группы равных
в списке лидерборда определяется порядком выдачи БД: это принятая
неточность, дополнительного ключа сортировки нет.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.errors import InvalidInput, NotFound
from rugfork.models import User
from rugfork.models.base import utcnow
from rugfork.repositories import (
    aggregate_bets,
    count_users,
    count_users_above,
    count_users_with_volume_above,
    get_user,
    list_users,
    top_users_by,
    user_volume,
    volume_by_user,
)

PERIODS: dict[str, timedelta | None] = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "daily": timedelta(hours=24),
    "7d": timedelta(days=7),
    "weekly": timedelta(days=7),
    "30d": timedelta(days=30),
    "monthly": timedelta(days=30),
    "all_time": None,
}

LEADERBOARD_TYPES = {
    "top_traders": "total_bets",
    "top_winners": "total_winnings",
    "top_volume": "total_volume",
    "top_xp": "total_xp",
}


def period_start(period: str, now: datetime | None = None) -> datetime | None:
    """Нижняя граница окна; None для all_time."""

    if period not in PERIODS:
        raise InvalidInput(f"Неизвестный период: {period}")
    window = PERIODS[period]
    if window is None:
        return None
    return (now or utcnow()) - window


def rank(value: int | float, population: Iterable[int | float]) -> int:
    """1-based ранг: сколько значений строго больше value, плюс один."""

    return sum(1 for other in population if other > value) + 1


def win_rate(winnings: int, losses: int) -> int:
    total = winnings + losses
    if total <= 0:
        return 0
    return round(100 * winnings / total)


def metric_for(board_type: str) -> str:
    try:
        return LEADERBOARD_TYPES[board_type]
    except KeyError:
        raise InvalidInput(f"Неизвестный тип лидерборда: {board_type}") from None


def user_card(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "avatar": user.avatar,
        "level": user.level,
    }


def _trader_stats(user: User) -> dict[str, Any]:
    return {
        "total_bets": user.total_bets,
        "win_rate": win_rate(user.total_winnings, user.total_losses),
        "net_profit": user.total_winnings - user.total_losses,
    }


def _winner_stats(user: User) -> dict[str, Any]:
    return {
        "total_winnings": user.total_winnings,
        "net_profit": user.total_winnings - user.total_losses,
        "win_rate": win_rate(user.total_winnings, user.total_losses),
    }


def _xp_stats(user: User) -> dict[str, Any]:
    return {"total_xp": user.total_xp, "level": user.level}


_STATS: dict[str, Callable[[User], dict[str, Any]]] = {
    "total_bets": _trader_stats,
    "total_winnings": _winner_stats,
    "total_xp": _xp_stats,
}


@dataclass(slots=True)
class UserRank:
    user: User
    rank: int
    stats: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {"user": user_card(self.user), "rank": self.rank, **self.stats}


class RankingService:
    """Лидерборды по счётчикам пользователей и объёму ставок."""

    async def leaderboard(
        self,
        session: AsyncSession,
        board_type: str,
        period: str,
        *,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        metric = metric_for(board_type)
        since = period_start(period)
        if metric == "total_volume":
            return await self._volume_leaderboard(session, since, limit)
        users = await top_users_by(session, metric, active_since=since, limit=limit)
        stats = _STATS[metric]
        values = [getattr(user, metric) for user in users]
        return [
            {"rank": rank(value, values), "user": user_card(user), **stats(user)}
            for user, value in zip(users, values)
        ]

    async def _volume_leaderboard(
        self,
        session: AsyncSession,
        since: datetime | None,
        limit: int,
    ) -> list[dict[str, Any]]:
        rows = await volume_by_user(session, since=since, limit=limit)
        users = await list_users(session, (user_id for user_id, _ in rows))
        volumes = [volume for _, volume in rows]
        board = []
        for user_id, volume in rows:
            user = users.get(user_id)
            card = user_card(user) if user else {"id": user_id, "username": "Unknown", "avatar": None, "level": 1}
            board.append({"rank": rank(volume, volumes), "user": card, "total_volume": volume})
        return board

    async def user_rank(
        self,
        session: AsyncSession,
        user_id: int,
        board_type: str,
        period: str,
    ) -> UserRank:
        metric = metric_for(board_type)
        since = period_start(period)
        user = await get_user(session, user_id)
        if user is None:
            raise NotFound("Пользователь не найден")
        if metric == "total_volume":
            volume = await user_volume(session, user.id, since=since)
            above = await count_users_with_volume_above(session, volume, since=since)
            return UserRank(user=user, rank=above + 1, stats={"total_volume": volume})
        above = await count_users_above(session, metric, getattr(user, metric), active_since=since)
        return UserRank(user=user, rank=above + 1, stats=_STATS[metric](user))

    async def stats(self, session: AsyncSession) -> dict[str, Any]:
        totals = await aggregate_bets(session)
        top_trader = await top_users_by(session, "total_bets", limit=1)
        top_winner = await top_users_by(session, "total_winnings", limit=1)
        trader = top_trader[0] if top_trader else None
        winner = top_winner[0] if top_winner else None
        return {
            "total_users": await count_users(session),
            "total_bets": totals.count,
            "total_volume": totals.volume,
            "top_trader": {
                "username": trader.username if trader and trader.username else "Unknown",
                "total_bets": trader.total_bets if trader else 0,
            },
            "top_winner": {
                "username": winner.username if winner and winner.username else "Unknown",
                "total_winnings": winner.total_winnings if winner else 0,
            },
        }


__all__ = [
    "LEADERBOARD_TYPES",
    "PERIODS",
    "RankingService",
    "UserRank",
    "metric_for",
    "period_start",
    "rank",
    "user_card",
    "win_rate",
]

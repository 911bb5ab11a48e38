"""Работа со ставками: вставка, условный сеттлмент, агрегаты."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from rugfork.models import Bet
from rugfork.models.base import utcnow


@dataclass(slots=True)
class BetAggregate:
    """Агрегаты по выборке ставок."""

    count: int = 0
    volume: int = 0
    winnings: int = 0
    average_multiplier: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_bets": self.count,
            "total_volume": self.volume,
            "total_winnings": self.winnings,
            "average_multiplier": self.average_multiplier,
        }


def _filters(
    *,
    user_id: int | None = None,
    pool_id: int | None = None,
    settled: bool | None = None,
    since: datetime | None = None,
) -> list:
    clauses = []
    if user_id is not None:
        clauses.append(Bet.user_id == user_id)
    if pool_id is not None:
        clauses.append(Bet.pool_id == pool_id)
    if settled is not None:
        clauses.append(Bet.is_settled.is_(settled))
    if since is not None:
        clauses.append(Bet.created_at >= since)
    return clauses


async def get_bet(session: AsyncSession, bet_id: int) -> Optional[Bet]:
    return await session.get(Bet, bet_id)


async def insert_bet(
    session: AsyncSession,
    *,
    user_id: int,
    pool_id: int,
    amount: int,
    multiplier: int,
) -> Bet:
    """Добавляет ставку и делает flush, без commit.

    Частичный уникальный индекс на (user_id, pool_id) для открытых ставок
    бросит IntegrityError прямо на flush.
    """

    bet = Bet(user_id=user_id, pool_id=pool_id, amount=amount, multiplier=multiplier)
    session.add(bet)
    await session.flush()
    return bet


async def mark_settled(
    session: AsyncSession,
    bet_id: int,
    *,
    crash_point: int,
    winnings: int,
) -> bool:
    """Условный UPDATE: срабатывает только для ещё не урегулированной ставки.

    Возвращает False, если ни одна строка не подошла (ставка уже урегулирована).
    """

    now = utcnow()
    stmt = (
        update(Bet)
        .where(Bet.id == bet_id, Bet.is_settled.is_(False))
        .values(
            is_settled=True,
            crash_point=crash_point,
            winnings=winnings,
            settled_at=now,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


async def list_bets(
    session: AsyncSession,
    *,
    user_id: int | None = None,
    pool_id: int | None = None,
    settled: bool | None = None,
    since: datetime | None = None,
    offset: int = 0,
    limit: int | None = 20,
) -> tuple[Sequence[Bet], int]:
    clauses = _filters(user_id=user_id, pool_id=pool_id, settled=settled, since=since)
    stmt = select(Bet).where(*clauses).order_by(Bet.created_at.desc(), Bet.id.desc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    bets = (await session.exec(stmt)).all()
    total = (await session.exec(select(func.count(Bet.id)).where(*clauses))).one()
    return bets, int(total or 0)


async def aggregate_bets(
    session: AsyncSession,
    *,
    user_id: int | None = None,
    pool_id: int | None = None,
    settled: bool | None = None,
    since: datetime | None = None,
) -> BetAggregate:
    clauses = _filters(user_id=user_id, pool_id=pool_id, settled=settled, since=since)
    stmt = select(
        func.count(Bet.id),
        func.coalesce(func.sum(Bet.amount), 0),
        func.coalesce(func.sum(Bet.winnings), 0),
        func.coalesce(func.avg(Bet.multiplier), 0.0),
    ).where(*clauses)
    count, volume, winnings, avg_multiplier = (await session.exec(stmt)).one()
    return BetAggregate(
        count=int(count or 0),
        volume=int(volume or 0),
        winnings=int(winnings or 0),
        average_multiplier=float(avg_multiplier or 0.0),
    )


async def count_won_bets(session: AsyncSession, *, user_id: int) -> int:
    stmt = select(func.count(Bet.id)).where(
        Bet.user_id == user_id,
        Bet.is_settled.is_(True),
        Bet.winnings > 0,
    )
    return int((await session.exec(stmt)).one() or 0)


async def volume_by_user(
    session: AsyncSession,
    *,
    since: datetime | None = None,
    limit: int | None = None,
) -> list[tuple[int, int]]:
    """Сумма ставок по пользователям в окне, по убыванию."""

    total = func.sum(Bet.amount).label("volume")
    stmt = select(Bet.user_id, total).where(*_filters(since=since)).group_by(Bet.user_id).order_by(total.desc())
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = (await session.exec(stmt)).all()
    return [(int(user_id), int(volume or 0)) for user_id, volume in rows]


async def user_volume(session: AsyncSession, user_id: int, *, since: datetime | None = None) -> int:
    stmt = select(func.coalesce(func.sum(Bet.amount), 0)).where(*_filters(user_id=user_id, since=since))
    return int((await session.exec(stmt)).one() or 0)


async def count_users_with_volume_above(
    session: AsyncSession,
    value: int,
    *,
    since: datetime | None = None,
) -> int:
    """Сколько пользователей набрали суммарный объём строго больше value."""

    per_user = (
        select(Bet.user_id)
        .where(*_filters(since=since))
        .group_by(Bet.user_id)
        .having(func.sum(Bet.amount) > value)
        .subquery()
    )
    stmt = select(func.count()).select_from(per_user)
    return int((await session.exec(stmt)).one() or 0)


async def bet_counts_by_user(
    session: AsyncSession,
    *,
    pool_id: int,
    since: datetime | None = None,
) -> list[tuple[int, int]]:
    count = func.count(Bet.id).label("bet_count")
    stmt = (
        select(Bet.user_id, count)
        .where(*_filters(pool_id=pool_id, since=since))
        .group_by(Bet.user_id)
        .order_by(count.desc())
    )
    rows = (await session.exec(stmt)).all()
    return [(int(user_id), int(value)) for user_id, value in rows]


async def multiplier_distribution(session: AsyncSession, *, since: datetime | None = None) -> list[tuple[int, int]]:
    stmt = (
        select(Bet.multiplier, func.count(Bet.id))
        .where(*_filters(since=since))
        .group_by(Bet.multiplier)
        .order_by(Bet.multiplier)
    )
    rows = (await session.exec(stmt)).all()
    return [(int(multiplier), int(count)) for multiplier, count in rows]


async def pool_popularity(session: AsyncSession, *, since: datetime | None = None) -> list[tuple[int, int, int]]:
    count = func.count(Bet.id).label("bet_count")
    stmt = (
        select(Bet.pool_id, count, func.coalesce(func.sum(Bet.amount), 0))
        .where(*_filters(since=since))
        .group_by(Bet.pool_id)
        .order_by(count.desc())
    )
    rows = (await session.exec(stmt)).all()
    return [(int(pool_id), int(bets), int(volume or 0)) for pool_id, bets, volume in rows]


__all__ = [
    "BetAggregate",
    "aggregate_bets",
    "bet_counts_by_user",
    "count_users_with_volume_above",
    "count_won_bets",
    "get_bet",
    "insert_bet",
    "list_bets",
    "mark_settled",
    "multiplier_distribution",
    "pool_popularity",
    "user_volume",
    "volume_by_user",
]

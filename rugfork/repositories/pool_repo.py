"""Работа с пулами токенов."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from rugfork.models import Pool
from rugfork.models.base import utcnow
from rugfork.services.core.counters import CounterDelta

POOL_SORT_FIELDS = ("created_at", "total_volume", "total_bets", "liquidity", "rug_score")


async def get_pool(session: AsyncSession, pool_id: int) -> Optional[Pool]:
    return await session.get(Pool, pool_id)


async def get_pool_by_mint(session: AsyncSession, token_mint: str) -> Optional[Pool]:
    stmt = select(Pool).where(Pool.token_mint == token_mint)
    result = await session.exec(stmt)
    return result.one_or_none()


async def create_pool(
    session: AsyncSession,
    *,
    token_mint: str,
    creator_id: int,
    token_name: str | None = None,
    token_symbol: str | None = None,
    token_uri: str | None = None,
    liquidity: int = 0,
) -> Pool:
    pool = Pool(
        token_mint=token_mint,
        token_name=token_name,
        token_symbol=token_symbol,
        token_uri=token_uri,
        liquidity=liquidity,
        creator_id=creator_id,
    )
    session.add(pool)
    await session.commit()
    await session.refresh(pool)
    return pool


async def set_pool_active(session: AsyncSession, pool: Pool, is_active: bool) -> Pool:
    pool.is_active = is_active
    pool.touch()
    session.add(pool)
    await session.commit()
    await session.refresh(pool)
    return pool


async def set_rug_score(session: AsyncSession, pool: Pool, score: int) -> Pool:
    pool.rug_score = score
    pool.touch()
    session.add(pool)
    await session.commit()
    await session.refresh(pool)
    return pool


async def increment_pool_counters(
    session: AsyncSession,
    pool_id: int,
    deltas: Iterable[CounterDelta],
) -> None:
    """Атомарные приращения счётчиков пула, без commit."""

    values = {item.field: getattr(Pool, item.field) + item.delta for item in deltas}
    if not values:
        return
    values["updated_at"] = utcnow()
    await session.execute(update(Pool).where(Pool.id == pool_id).values(**values))


async def list_pools(
    session: AsyncSession,
    *,
    active_only: bool = True,
    creator_id: int | None = None,
    sort_by: str = "created_at",
    descending: bool = True,
    offset: int = 0,
    limit: int = 20,
) -> tuple[Sequence[Pool], int]:
    """Страница пулов и общее количество под фильтром."""

    filters = []
    if active_only:
        filters.append(Pool.is_active.is_(True))
    if creator_id is not None:
        filters.append(Pool.creator_id == creator_id)
    column = getattr(Pool, sort_by)
    stmt = (
        select(Pool)
        .where(*filters)
        .order_by(column.desc() if descending else column.asc(), Pool.id.desc())
        .offset(offset)
        .limit(limit)
    )
    pools = (await session.exec(stmt)).all()
    total = (await session.exec(select(func.count(Pool.id)).where(*filters))).one()
    return pools, int(total or 0)


async def pool_totals(session: AsyncSession) -> tuple[int, int, float]:
    """(всего пулов, активных, средний rug score)."""

    stmt = select(func.count(Pool.id), func.coalesce(func.avg(Pool.rug_score), 0.0))
    total, avg_score = (await session.exec(stmt)).one()
    active = (await session.exec(select(func.count(Pool.id)).where(Pool.is_active.is_(True)))).one()
    return int(total or 0), int(active or 0), float(avg_score or 0.0)


async def pools_created_since(session: AsyncSession, since: datetime | None) -> Sequence[Pool]:
    stmt = select(Pool)
    if since is not None:
        stmt = stmt.where(Pool.created_at >= since)
    result = await session.exec(stmt)
    return result.all()


async def top_pools_by_volume(
    session: AsyncSession,
    *,
    since: datetime | None,
    limit: int = 10,
) -> Sequence[Pool]:
    stmt = (
        select(Pool)
        .where(Pool.is_active.is_(True))
        .order_by(Pool.total_volume.desc())
        .limit(limit)
    )
    if since is not None:
        stmt = stmt.where(Pool.created_at >= since)
    result = await session.exec(stmt)
    return result.all()


async def list_pools_by_ids(session: AsyncSession, pool_ids: Iterable[int]) -> dict[int, Pool]:
    ids = list(pool_ids)
    if not ids:
        return {}
    result = await session.exec(select(Pool).where(Pool.id.in_(ids)))
    return {pool.id: pool for pool in result.all()}


__all__ = [
    "POOL_SORT_FIELDS",
    "create_pool",
    "get_pool",
    "get_pool_by_mint",
    "increment_pool_counters",
    "list_pools",
    "list_pools_by_ids",
    "pool_totals",
    "pools_created_since",
    "set_pool_active",
    "set_rug_score",
    "top_pools_by_volume",
]

"""Функции для работы с таблицей пользователей."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from rugfork.models import User
from rugfork.models.base import utcnow
from rugfork.services.core.counters import XP_PER_LEVEL, CounterDelta


async def get_user(session: AsyncSession, user_id: int) -> Optional[User]:
    return await session.get(User, user_id)


async def get_user_by_wallet(session: AsyncSession, wallet: str) -> Optional[User]:
    stmt = select(User).where(User.wallet_address == wallet)
    result = await session.exec(stmt)
    return result.one_or_none()


async def ensure_user_by_wallet(session: AsyncSession, wallet: str) -> User:
    """Пользователь создаётся неявно при первой авторизации кошелька."""

    user = await get_user_by_wallet(session, wallet)
    if user:
        return user
    user = User(wallet_address=wallet)
    session.add(user)
    try:
        await session.commit()
    except IntegrityError:
        # параллельный запрос успел создать запись
        await session.rollback()
        existing = await get_user_by_wallet(session, wallet)
        if existing is None:
            raise
        return existing
    await session.refresh(user)
    return user


async def find_profile_clash(
    session: AsyncSession,
    user: User,
    *,
    username: str | None,
    email: str | None,
) -> Optional[str]:
    """Возвращает имя поля, которое уже занято другим пользователем."""

    if username:
        stmt = select(User.id).where(User.username == username, User.id != user.id)
        if (await session.exec(stmt)).first() is not None:
            return "username"
    if email:
        stmt = select(User.id).where(User.email == email, User.id != user.id)
        if (await session.exec(stmt)).first() is not None:
            return "email"
    return None


async def update_profile(
    session: AsyncSession,
    user: User,
    *,
    username: str | None,
    email: str | None,
    avatar: str | None,
) -> User:
    user.username = username
    user.email = email
    user.avatar = avatar
    user.touch()
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def touch_activity(session: AsyncSession, user: User) -> User:
    user.last_active_at = utcnow()
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def increment_user_counters(
    session: AsyncSession,
    user_id: int,
    deltas: Iterable[CounterDelta],
) -> None:
    """Атомарный `UPDATE users SET col = col + delta`, без commit.

    Если меняется total_xp, уровень пересчитывается в том же запросе.
    """

    values: dict = {}
    xp_delta = 0
    for item in deltas:
        column = getattr(User, item.field)
        values[item.field] = column + item.delta
        if item.field == "total_xp":
            xp_delta = item.delta
    if not values:
        return
    if xp_delta:
        values["level"] = (User.total_xp + xp_delta) // XP_PER_LEVEL + 1
    values["last_active_at"] = utcnow()
    values["updated_at"] = utcnow()
    await session.execute(update(User).where(User.id == user_id).values(**values))


async def count_users(session: AsyncSession) -> int:
    stmt = select(func.count(User.id))
    return int((await session.exec(stmt)).one() or 0)


async def count_users_above(
    session: AsyncSession,
    metric: str,
    value: int,
    *,
    active_since: datetime | None = None,
) -> int:
    """Сколько пользователей имеют метрику строго больше value."""

    column = getattr(User, metric)
    stmt = select(func.count(User.id)).where(column > value)
    if active_since is not None:
        stmt = stmt.where(User.last_active_at >= active_since)
    return int((await session.exec(stmt)).one() or 0)


async def top_users_by(
    session: AsyncSession,
    metric: str,
    *,
    active_since: datetime | None = None,
    limit: int = 100,
) -> Sequence[User]:
    column = getattr(User, metric)
    stmt = select(User).order_by(column.desc()).limit(limit)
    if active_since is not None:
        stmt = stmt.where(User.last_active_at >= active_since)
    result = await session.exec(stmt)
    return result.all()


async def list_users(session: AsyncSession, user_ids: Iterable[int]) -> dict[int, User]:
    ids = list(user_ids)
    if not ids:
        return {}
    stmt = select(User).where(User.id.in_(ids))
    result = await session.exec(stmt)
    return {user.id: user for user in result.all()}


__all__ = [
    "count_users",
    "count_users_above",
    "ensure_user_by_wallet",
    "find_profile_clash",
    "get_user",
    "get_user_by_wallet",
    "increment_user_counters",
    "list_users",
    "top_users_by",
    "touch_activity",
    "update_profile",
]

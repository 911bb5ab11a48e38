"""Профиль пользователя, XP и персональная статистика."""

from __future__ import annotations

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.errors import Conflict, InvalidInput
from rugfork.models import User
from rugfork.repositories import (
    aggregate_bets,
    count_won_bets,
    find_profile_clash,
    increment_user_counters,
    list_bets,
    list_pools,
    update_profile,
)
from .counters import CounterDelta


def profile_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "wallet_address": user.wallet_address,
        "username": user.username,
        "email": user.email,
        "avatar": user.avatar,
        "total_xp": user.total_xp,
        "level": user.level,
        "total_bets": user.total_bets,
        "total_winnings": user.total_winnings,
        "total_losses": user.total_losses,
        "created_at": user.created_at,
        "last_active_at": user.last_active_at,
    }


class ProfileService:
    async def update(
        self,
        session: AsyncSession,
        user: User,
        *,
        username: str | None,
        email: str | None,
        avatar: str | None,
    ) -> User:
        clash = await find_profile_clash(session, user, username=username, email=email)
        if clash == "username":
            raise Conflict("Username already taken")
        if clash == "email":
            raise Conflict("Email already taken")
        return await update_profile(session, user, username=username, email=email, avatar=avatar)

    async def award_xp(self, session: AsyncSession, user: User, xp: int) -> User:
        """Начисляет XP; уровень = total_xp // 1000 + 1."""

        if xp is None or xp <= 0:
            raise InvalidInput("XP должен быть больше 0")
        await increment_user_counters(session, user.id, [CounterDelta("total_xp", xp)])
        await session.commit()
        await session.refresh(user)
        logger.info(
            "XP +{xp} пользователю {user}: всего {total}, уровень {level}",
            xp=xp,
            user=user.id,
            total=user.total_xp,
            level=user.level,
        )
        return user

    async def bet_stats(self, session: AsyncSession, user: User) -> dict[str, Any]:
        """Статистика ставок пользователя; win rate — доля выигранных среди урегулированных."""

        totals = await aggregate_bets(session, user_id=user.id)
        settled = (await aggregate_bets(session, user_id=user.id, settled=True)).count
        won = await count_won_bets(session, user_id=user.id)
        rate = won / settled * 100 if settled else 0.0
        return {
            **totals.as_dict(),
            "win_rate": round(rate, 2),
            "settled_bets": settled,
        }

    async def overview(self, session: AsyncSession, user: User) -> dict[str, Any]:
        stats = await self.bet_stats(session, user)
        pools, pools_total = await list_pools(session, active_only=False, creator_id=user.id, limit=10)
        recent, _ = await list_bets(session, user_id=user.id, limit=20)
        return {
            "bet_stats": stats,
            "pool_stats": {
                "total_pools": pools_total,
                "total_volume": sum(pool.total_volume for pool in pools),
                "average_rug_score": round(sum(pool.rug_score for pool in pools) / len(pools)) if pools else 0,
                "recent_pools": [pool.model_dump() for pool in pools],
            },
            "recent_activity": [
                {
                    "type": "bet",
                    "pool_id": bet.pool_id,
                    "amount": bet.amount,
                    "multiplier": bet.multiplier,
                    "winnings": bet.winnings,
                    "created_at": bet.created_at,
                }
                for bet in recent
            ],
        }


__all__ = ["ProfileService", "profile_dict"]

"""Профиль текущего пользователя, XP и его пулы/ставки."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.context import profile_service, ranking_service
from rugfork.middlewares import get_db_session
from rugfork.models import User
from rugfork.repositories import list_bets, list_pools, touch_activity
from rugfork.services.core.profiles import profile_dict
from rugfork.web.deps import get_current_user, page_meta, pagination
from rugfork.web.schemas import AwardXpRequest, UpdateProfileRequest

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)) -> dict:
    return profile_dict(user)


@router.put("/profile")
async def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    user = await profile_service.update(
        session,
        user,
        username=payload.username,
        email=payload.email,
        avatar=payload.avatar,
    )
    return profile_dict(user)


@router.get("/stats")
async def user_stats(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await profile_service.overview(session, user)


@router.get("/leaderboard")
async def user_leaderboard(
    type: str = "top_traders",
    period: str = "all_time",
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    board = await ranking_service.leaderboard(session, type, period)
    mine = await ranking_service.user_rank(session, user.id, type, period)
    return {"type": type, "period": period, "leaderboard": board, "user_rank": mine.as_dict()}


@router.post("/activity")
async def record_activity(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    user = await touch_activity(session, user)
    return {"last_active_at": user.last_active_at}


@router.post("/xp")
async def award_xp(
    payload: AwardXpRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    user = await profile_service.award_xp(session, user, payload.xp)
    return {"total_xp": user.total_xp, "level": user.level}


@router.get("/pools")
async def my_pools(
    paging: tuple[int, int] = Depends(pagination),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    page, limit = paging
    pools, total = await list_pools(
        session,
        active_only=False,
        creator_id=user.id,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return {"pools": [pool.model_dump() for pool in pools], "pagination": page_meta(page, limit, total)}


@router.get("/bets")
async def my_bets(
    paging: tuple[int, int] = Depends(pagination),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    page, limit = paging
    bets, total = await list_bets(session, user_id=user.id, offset=(page - 1) * limit, limit=limit)
    return {"bets": [bet.model_dump() for bet in bets], "pagination": page_meta(page, limit, total)}


__all__ = ["router"]

"""Публичные лидерборды."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.context import ranking_service
from rugfork.middlewares import get_db_session

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("")
async def leaderboard(
    type: str = "top_traders",
    period: str = "all_time",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    board = await ranking_service.leaderboard(session, type, period)
    return {"type": type, "period": period, "leaderboard": board}


@router.get("/stats")
async def leaderboard_stats(session: AsyncSession = Depends(get_db_session)) -> dict:
    return await ranking_service.stats(session)


@router.get("/user/{user_id}")
async def user_rank(
    user_id: int,
    type: str = "top_traders",
    period: str = "all_time",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    result = await ranking_service.user_rank(session, user_id, type, period)
    return {"type": type, "period": period, **result.as_dict()}


__all__ = ["router"]

"""Ставки: размещение, сеттлмент и статистика игрока."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.context import bet_service, profile_service
from rugfork.errors import NotFound
from rugfork.middlewares import get_db_session
from rugfork.models import User
from rugfork.repositories import get_bet, list_bets
from rugfork.web.deps import get_current_user, page_meta, pagination
from rugfork.web.schemas import BetStatus, PlaceBetRequest, SettleBetRequest

router = APIRouter(prefix="/bets", tags=["bets"])


@router.get("")
async def list_my_bets(
    pool_id: int | None = None,
    status: BetStatus | None = None,
    paging: tuple[int, int] = Depends(pagination),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    page, limit = paging
    settled = None if status is None else status == "settled"
    bets, total = await list_bets(
        session,
        user_id=user.id,
        pool_id=pool_id,
        settled=settled,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return {"bets": [bet.model_dump() for bet in bets], "pagination": page_meta(page, limit, total)}


# Маршрут объявлен до /{bet_id}, чтобы "stats" не разбиралось как id.
@router.get("/stats/user")
async def my_bet_stats(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await profile_service.bet_stats(session, user)


@router.post("", status_code=201)
async def place_bet(
    payload: PlaceBetRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    bet = await bet_service.place_bet(
        session,
        user=user,
        pool_id=payload.pool_id,
        amount=payload.amount,
        multiplier=payload.multiplier,
    )
    return bet.model_dump()


@router.get("/{bet_id}")
async def get_bet_by_id(bet_id: int, session: AsyncSession = Depends(get_db_session)) -> dict:
    bet = await get_bet(session, bet_id)
    if bet is None:
        raise NotFound("Bet not found")
    return bet.model_dump()


@router.patch("/{bet_id}/settle")
async def settle_bet(
    bet_id: int,
    payload: SettleBetRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    result = await bet_service.settle_bet(
        session,
        bet_id=bet_id,
        crash_point=payload.crash_point,
        settler=user,
    )
    return {**result.bet.model_dump(), "winnings": result.winnings}


__all__ = ["router"]

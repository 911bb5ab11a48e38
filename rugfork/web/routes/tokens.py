"""Пулы токенов: список, карточка, создание и статус."""

from __future__ import annotations

import asyncio
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, status
from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.context import analytics_service, rug_score_service
from rugfork.errors import Conflict, Forbidden, InvalidInput, NotFound
from rugfork.middlewares import get_db_session
from rugfork.models import Pool, User
from rugfork.repositories import (
    POOL_SORT_FIELDS,
    create_pool,
    get_pool,
    get_pool_by_mint,
    list_bets,
    list_pools,
    set_pool_active,
)
from rugfork.utils.addresses import is_solana_address
from rugfork.web.deps import get_current_user, page_meta, pagination
from rugfork.web.schemas import CreatePoolRequest, PoolStatusRequest

router = APIRouter(prefix="/tokens", tags=["tokens"])


async def _with_holder_metrics(pool: Pool) -> dict[str, Any]:
    metrics = await rug_score_service.holder_metrics(pool.token_mint)
    return {**pool.model_dump(), "metrics": metrics}


@router.get("")
async def list_tokens(
    paging: tuple[int, int] = Depends(pagination),
    sort_by: str = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    if sort_by not in POOL_SORT_FIELDS:
        raise InvalidInput(f"Недопустимое поле сортировки: {sort_by}")
    page, limit = paging
    pools, total = await list_pools(
        session,
        sort_by=sort_by,
        descending=sort_order == "desc",
        offset=(page - 1) * limit,
        limit=limit,
    )
    tokens = await asyncio.gather(*(_with_holder_metrics(pool) for pool in pools))
    return {"tokens": list(tokens), "pagination": page_meta(page, limit, total)}


@router.get("/{pool_id}")
async def get_token(pool_id: int, session: AsyncSession = Depends(get_db_session)) -> dict:
    pool = await get_pool(session, pool_id)
    if pool is None:
        raise NotFound("Token not found")
    bets, _ = await list_bets(session, pool_id=pool.id, limit=50)
    return {**pool.model_dump(), "bets": [bet.model_dump() for bet in bets]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_token(
    payload: CreatePoolRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    if not is_solana_address(payload.token_mint):
        raise InvalidInput("Invalid token mint address")
    if await get_pool_by_mint(session, payload.token_mint) is not None:
        raise Conflict("Token pool already exists")
    try:
        pool = await create_pool(
            session,
            token_mint=payload.token_mint,
            creator_id=user.id,
            token_name=payload.token_name,
            token_symbol=payload.token_symbol,
            token_uri=payload.token_uri,
            liquidity=payload.initial_liquidity,
        )
    except IntegrityError as exc:
        await session.rollback()
        raise Conflict("Token pool already exists") from exc
    logger.info("Пул {pool} создан для {mint} пользователем {user}", pool=pool.id, mint=pool.token_mint, user=user.id)
    return pool.model_dump()


@router.patch("/{pool_id}/status")
async def update_token_status(
    pool_id: int,
    payload: PoolStatusRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    pool = await get_pool(session, pool_id)
    if pool is None:
        raise NotFound("Token not found")
    if pool.creator_id != user.id:
        raise Forbidden("Only the pool creator can change its status")
    pool = await set_pool_active(session, pool, payload.is_active)
    return pool.model_dump()


@router.get("/{pool_id}/analytics")
async def token_analytics(
    pool_id: int,
    period: str = "24h",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await analytics_service.pool_analytics(session, pool_id, period)


__all__ = ["router"]

"""Аналитика платформы и rug score."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.context import analytics_service, rug_score_service
from rugfork.errors import InvalidInput
from rugfork.middlewares import get_db_session
from rugfork.repositories import get_pool_by_mint, set_rug_score
from rugfork.services.solana.rug_score import PoolFacts
from rugfork.utils.addresses import is_solana_address
from rugfork.web.schemas import CompareRugScoresRequest

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/stats")
async def platform_stats(session: AsyncSession = Depends(get_db_session)) -> dict:
    return await analytics_service.platform_stats(session)


@router.get("/pool/{pool_id}")
async def pool_analytics(
    pool_id: int,
    period: str = "24h",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await analytics_service.pool_analytics(session, pool_id, period)


@router.get("/user/{user_id}")
async def user_analytics(
    user_id: int,
    period: str = "30d",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await analytics_service.user_analytics(session, user_id, period)


@router.get("/market")
async def market_analytics(
    period: str = "24h",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await analytics_service.market_analytics(session, period)


@router.get("/patterns")
async def trading_patterns(
    period: str = "7d",
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    return await analytics_service.trading_patterns(session, period)


@router.get("/rugscore/{mint}")
async def rug_score(mint: str, session: AsyncSession = Depends(get_db_session)) -> dict:
    if not is_solana_address(mint):
        raise InvalidInput("Invalid token mint address")
    pool = await get_pool_by_mint(session, mint)
    facts = PoolFacts.from_pool(pool) if pool is not None else PoolFacts()
    result = await rug_score_service.calculate(mint, facts)
    # Худший случай при сбое RPC не должен затирать сохранённую оценку.
    if pool is not None and not result.degraded:
        await set_rug_score(session, pool, result.score)
    return {"token_mint": mint, **result.as_dict()}


@router.post("/rugscore/compare")
async def compare_rug_scores(
    payload: CompareRugScoresRequest,
    session: AsyncSession = Depends(get_db_session),
) -> dict:
    invalid = [mint for mint in payload.mints if not is_solana_address(mint)]
    if invalid:
        raise InvalidInput(f"Invalid token mint address: {', '.join(invalid)}")
    tokens = []
    for mint in payload.mints:
        pool = await get_pool_by_mint(session, mint)
        tokens.append((mint, PoolFacts.from_pool(pool) if pool is not None else PoolFacts()))
    return {"comparison": await rug_score_service.compare(tokens)}


__all__ = ["router"]

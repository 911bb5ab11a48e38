"""Pydantic-модели запросов API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class CreatePoolRequest(BaseModel):
    token_mint: str
    token_name: str | None = Field(None, max_length=64)
    token_symbol: str | None = Field(None, max_length=16)
    token_uri: str | None = Field(None, max_length=512)
    initial_liquidity: int = Field(0, ge=0, description="Ликвидность в лампортах")


class PoolStatusRequest(BaseModel):
    is_active: bool


class PlaceBetRequest(BaseModel):
    pool_id: int
    amount: int = Field(..., description="Ставка в лампортах")
    multiplier: int


class SettleBetRequest(BaseModel):
    crash_point: int


class UpdateProfileRequest(BaseModel):
    username: str | None = Field(None, max_length=64)
    email: str | None = Field(None, max_length=254)
    avatar: str | None = Field(None, max_length=512)


class AwardXpRequest(BaseModel):
    xp: int


class CompareRugScoresRequest(BaseModel):
    mints: list[str] = Field(..., min_length=1, max_length=20)


BetStatus = Literal["active", "settled"]


__all__ = [
    "AwardXpRequest",
    "BetStatus",
    "CompareRugScoresRequest",
    "CreatePoolRequest",
    "PlaceBetRequest",
    "PoolStatusRequest",
    "SettleBetRequest",
    "UpdateProfileRequest",
]

"""Пул токена, на который принимаются сайдбеты."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Column
from sqlmodel import Field

from .base import TimeStampedModel


class Pool(TimeStampedModel, table=True):
    __tablename__ = "pools"

    id: Optional[int] = Field(default=None, primary_key=True)
    token_mint: str = Field(max_length=64, unique=True, index=True)
    token_name: Optional[str] = Field(default=None, max_length=64)
    token_symbol: Optional[str] = Field(default=None, max_length=16)
    token_uri: Optional[str] = Field(default=None, max_length=512)
    # лампорты
    liquidity: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    total_volume: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    total_bets: int = Field(default=0)
    rug_score: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)
    creator_id: int = Field(foreign_key="users.id", index=True)


__all__ = ["Pool"]

"""Сайдбет пользователя против мультипликатора пула."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Column, Index, text
from sqlmodel import Field

from .base import TimeStampedModel


class Bet(TimeStampedModel, table=True):
    __tablename__ = "bets"
    # Не более одной неурегулированной ставки на пару (user, pool).
    __table_args__ = (
        Index(
            "uq_bets_open_user_pool",
            "user_id",
            "pool_id",
            unique=True,
            sqlite_where=text("NOT is_settled"),
            postgresql_where=text("NOT is_settled"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    amount: int = Field(sa_column=Column(BigInteger, nullable=False))
    multiplier: int = Field(index=True)
    is_settled: bool = Field(default=False, index=True)
    winnings: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    crash_point: Optional[int] = Field(default=None)
    settled_at: Optional[datetime] = Field(default=None)


__all__ = ["Bet"]

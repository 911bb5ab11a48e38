"""SQLModel модель пользователя (кошелька)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Column
from sqlmodel import Field

from .base import TimeStampedModel, utcnow


class User(TimeStampedModel, table=True):
    """Пользователь RugFork, идентифицируется адресом кошелька.

    Счётчики (total_*) только накапливаются событиями ставок и сеттлмента
    и никогда не пересчитываются с нуля.
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    wallet_address: str = Field(max_length=64, unique=True, index=True)
    username: Optional[str] = Field(default=None, max_length=64, unique=True)
    email: Optional[str] = Field(default=None, max_length=254, unique=True)
    avatar: Optional[str] = Field(default=None, max_length=512)
    total_xp: int = Field(default=0)
    level: int = Field(default=1)
    total_bets: int = Field(default=0)
    total_winnings: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    total_losses: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    last_active_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)


__all__ = ["User"]

"""Сайдбеты: размещение и сеттлмент.

Инварианты хранилища закрывают гонки без блокировок:
- одна открытая ставка на (user, pool): частичный уникальный индекс;
- сеттлмент ровно один раз: условный UPDATE по флагу is_settled.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import get_settings
from rugfork.errors import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from rugfork.models import Bet, User
from rugfork.repositories import (
    get_bet,
    get_pool,
    increment_pool_counters,
    increment_user_counters,
    insert_bet,
    mark_settled,
)
from .counters import placement_deltas, settlement_deltas


def compute_winnings(stake: int, multiplier: int, outcome: int, denominator: int = 100) -> int:
    """Выплата по ставке: floor(stake * multiplier / denominator) при outcome >= multiplier.

    Равенство outcome == multiplier считается выигрышем.
    """

    if outcome >= multiplier:
        return stake * multiplier // denominator
    return 0


@dataclass(slots=True)
class SettlementResult:
    bet: Bet
    winnings: int
    user: User | None


class BetService:
    """Размещение и сеттлмент ставок поверх AsyncSession."""

    def __init__(self) -> None:
        cfg = get_settings().betting
        self._min_multiplier = cfg.min_multiplier
        self._max_multiplier = cfg.max_multiplier
        self._denominator = cfg.payout_denominator
        self._settlers = set(cfg.settler_wallets)

    def validate_placement(self, amount: int, multiplier: int) -> None:
        if amount is None or amount <= 0:
            raise InvalidInput("Сумма ставки должна быть больше 0")
        if multiplier is None or not self._min_multiplier <= multiplier <= self._max_multiplier:
            raise InvalidInput(
                f"Мультипликатор должен быть в диапазоне "
                f"{self._min_multiplier}..{self._max_multiplier}"
            )

    async def place_bet(
        self,
        session: AsyncSession,
        *,
        user: User,
        pool_id: int,
        amount: int,
        multiplier: int,
    ) -> Bet:
        """Создаёт ставку и обновляет счётчики пула и пользователя одной транзакцией."""

        self.validate_placement(amount, multiplier)
        pool = await get_pool(session, pool_id)
        if pool is None:
            raise NotFound("Пул не найден")
        if not pool.is_active:
            raise InvalidState("Пул не активен")

        pool_deltas, user_deltas = placement_deltas(amount)
        try:
            bet = await insert_bet(
                session,
                user_id=user.id,
                pool_id=pool.id,
                amount=amount,
                multiplier=multiplier,
            )
            await increment_pool_counters(session, pool.id, pool_deltas)
            await increment_user_counters(session, user.id, user_deltas)
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            raise Conflict("У вас уже есть активная ставка на этот пул") from exc
        except Exception:
            await session.rollback()
            raise
        await session.refresh(bet)
        logger.info(
            "Ставка {bet} размещена: user={user} pool={pool} amount={amount} x{mult}",
            bet=bet.id,
            user=user.id,
            pool=pool.id,
            amount=amount,
            mult=multiplier,
        )
        return bet

    def ensure_can_settle(self, settler: User) -> None:
        if self._settlers and settler.wallet_address not in self._settlers:
            raise Forbidden("Кошелёк не имеет права на сеттлмент ставок")

    async def settle_bet(
        self,
        session: AsyncSession,
        *,
        bet_id: int,
        crash_point: int,
        settler: User,
    ) -> SettlementResult:
        """Закрывает ставку по наблюдённой точке краша.

        Повторный сеттлмент даёт InvalidState (409), счётчики пользователя
        меняются ровно один раз.
        """

        self.ensure_can_settle(settler)
        if crash_point is None or crash_point <= 0:
            raise InvalidInput("Некорректная точка краша")
        bet = await get_bet(session, bet_id)
        if bet is None:
            raise NotFound("Ставка не найдена")
        if bet.is_settled:
            raise InvalidState("Ставка уже урегулирована")

        winnings = compute_winnings(bet.amount, bet.multiplier, crash_point, self._denominator)
        try:
            if not await mark_settled(session, bet.id, crash_point=crash_point, winnings=winnings):
                raise InvalidState("Ставка уже урегулирована")
            await increment_user_counters(session, bet.user_id, settlement_deltas(bet.amount, winnings))
            await session.commit()
        except Exception:
            await session.rollback()
            raise

        await session.refresh(bet)
        user = await session.get(User, bet.user_id)
        if user is not None:
            await session.refresh(user)
        logger.info(
            "Ставка {bet} урегулирована: crash={crash} winnings={winnings}",
            bet=bet.id,
            crash=crash_point,
            winnings=winnings,
        )
        return SettlementResult(bet=bet, winnings=winnings, user=user)


__all__ = ["BetService", "SettlementResult", "compute_winnings"]

"""Команды над накопительными счётчиками пользователя и пула.

Счётчики никогда не пересчитываются с нуля: каждое событие порождает
набор приращений, которые репозитории применяют как `col = col + delta`.
Здесь только чистая арифметика, без обращения к БД.
"""

from __future__ import annotations

from dataclasses import dataclass

XP_PER_LEVEL = 1_000
XP_FOR_BET = 10
XP_FOR_WIN = 25


@dataclass(frozen=True, slots=True)
class CounterDelta:
    """Приращение одного счётчика."""

    field: str
    delta: int

    def __post_init__(self) -> None:
        if self.delta < 0:
            raise ValueError(f"Счётчик {self.field} не может уменьшаться: {self.delta}")

    def apply(self, previous: int) -> int:
        return previous + self.delta


def apply_deltas(values: dict[str, int], deltas: list[CounterDelta]) -> dict[str, int]:
    """Возвращает новые значения счётчиков, не трогая исходный словарь."""

    result = dict(values)
    for item in deltas:
        result[item.field] = item.apply(result.get(item.field, 0))
    return result


def placement_deltas(stake: int) -> tuple[list[CounterDelta], list[CounterDelta]]:
    """Приращения (пул, пользователь) при размещении ставки."""

    pool = [CounterDelta("total_bets", 1), CounterDelta("total_volume", stake)]
    user = [CounterDelta("total_bets", 1), CounterDelta("total_xp", XP_FOR_BET)]
    return pool, user


def settlement_deltas(stake: int, winnings: int) -> list[CounterDelta]:
    """Ровно один из total_winnings / total_losses меняется за сеттлмент."""

    if winnings > 0:
        return [CounterDelta("total_winnings", winnings), CounterDelta("total_xp", XP_FOR_WIN)]
    return [CounterDelta("total_losses", stake)]


def level_for_xp(total_xp: int) -> int:
    return total_xp // XP_PER_LEVEL + 1


__all__ = [
    "CounterDelta",
    "XP_FOR_BET",
    "XP_FOR_WIN",
    "XP_PER_LEVEL",
    "apply_deltas",
    "level_for_xp",
    "placement_deltas",
    "settlement_deltas",
]

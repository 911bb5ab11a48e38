from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import MINTS, WALLETS
from rugfork.errors import InvalidInput
from rugfork.models import User
from rugfork.models.base import utcnow
from rugfork.repositories import create_pool
from rugfork.services.core.betting import BetService
from rugfork.services.core.ranking import RankingService, period_start, rank, win_rate


def test_rank_counts_strictly_greater():
    population = [5, 5, 3, 1]
    assert [rank(value, population) for value in population] == [1, 1, 3, 4]


def test_win_rate():
    assert win_rate(0, 0) == 0
    assert win_rate(300, 100) == 75
    assert win_rate(1, 2) == 33


def test_period_aliases():
    now = utcnow()
    assert period_start("daily", now) == period_start("24h", now) == now - timedelta(hours=24)
    assert period_start("weekly", now) == now - timedelta(days=7)
    assert period_start("monthly", now) == now - timedelta(days=30)
    assert period_start("all_time", now) is None


def test_unknown_period_is_invalid_input():
    with pytest.raises(InvalidInput):
        period_start("fortnight")


async def _users(session, values: list[int]) -> list[User]:
    users = [User(wallet_address=wallet, total_bets=value) for wallet, value in zip(WALLETS, values)]
    session.add_all(users)
    await session.commit()
    for user in users:
        await session.refresh(user)
    return users


async def test_ties_share_a_rank(session):
    users = await _users(session, [5, 5, 3, 1])
    service = RankingService()

    ranks = [
        (await service.user_rank(session, user.id, "top_traders", "all_time")).rank for user in users
    ]

    assert ranks == [1, 1, 3, 4]


async def test_counter_leaderboard_orders_by_metric(session):
    await _users(session, [1, 7, 3])

    board = await RankingService().leaderboard(session, "top_traders", "all_time")

    assert [row["total_bets"] for row in board] == [7, 3, 1]
    assert [row["rank"] for row in board] == [1, 2, 3]


async def test_inactive_users_drop_out_of_windowed_boards(session):
    users = await _users(session, [4, 2])
    users[0].last_active_at = utcnow() - timedelta(days=3)
    session.add(users[0])
    await session.commit()

    board = await RankingService().leaderboard(session, "top_traders", "24h")

    assert [row["user"]["id"] for row in board] == [users[1].id]


async def test_volume_leaderboard_sums_stakes(session):
    users = await _users(session, [0, 0])
    first = await create_pool(session, token_mint=MINTS[0], creator_id=users[0].id)
    second = await create_pool(session, token_mint=MINTS[1], creator_id=users[0].id)
    service = BetService()
    await service.place_bet(session, user=users[0], pool_id=first.id, amount=100, multiplier=2)
    await service.place_bet(session, user=users[1], pool_id=first.id, amount=150, multiplier=2)
    await service.place_bet(session, user=users[1], pool_id=second.id, amount=50, multiplier=2)

    board = await RankingService().leaderboard(session, "top_volume", "all_time")
    mine = await RankingService().user_rank(session, users[0].id, "top_volume", "all_time")

    assert [(row["user"]["id"], row["total_volume"]) for row in board] == [
        (users[1].id, 200),
        (users[0].id, 100),
    ]
    assert mine.rank == 2
    assert mine.stats == {"total_volume": 100}


async def test_unknown_board_type(session):
    with pytest.raises(InvalidInput):
        await RankingService().leaderboard(session, "top_losers", "all_time")

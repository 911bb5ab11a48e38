from __future__ import annotations

import pytest

from conftest import MINTS, WALLETS
from rugfork.errors import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from rugfork.models import Pool, User
from rugfork.repositories import create_pool, ensure_user_by_wallet, set_pool_active
from rugfork.services.core.betting import BetService

SOL = 1_000_000_000


@pytest.fixture
async def user(session) -> User:
    return await ensure_user_by_wallet(session, WALLETS[0])


@pytest.fixture
async def pool(session, user) -> Pool:
    return await create_pool(session, token_mint=MINTS[0], creator_id=user.id, token_symbol="WSOL")


async def test_place_bet_updates_counters(session, user, pool):
    service = BetService()

    bet = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=10)

    await session.refresh(pool)
    await session.refresh(user)
    assert bet.id is not None
    assert not bet.is_settled
    assert pool.total_bets == 1
    assert pool.total_volume == SOL
    assert user.total_bets == 1
    assert user.total_xp == 10


@pytest.mark.parametrize("amount, multiplier", [(0, 10), (-5, 10), (SOL, 1), (SOL, 101)])
async def test_place_bet_rejects_bad_input(session, user, pool, amount, multiplier):
    with pytest.raises(InvalidInput):
        await BetService().place_bet(session, user=user, pool_id=pool.id, amount=amount, multiplier=multiplier)


async def test_place_bet_on_unknown_pool(session, user):
    with pytest.raises(NotFound):
        await BetService().place_bet(session, user=user, pool_id=404, amount=SOL, multiplier=2)


async def test_place_bet_on_inactive_pool(session, user, pool):
    await set_pool_active(session, pool, False)
    with pytest.raises(InvalidState):
        await BetService().place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)


async def test_second_open_bet_on_same_pool_conflicts(session, user, pool):
    service = BetService()
    await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)

    with pytest.raises(Conflict):
        await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=3)

    await session.refresh(pool)
    await session.refresh(user)
    assert pool.total_bets == 1
    assert user.total_bets == 1


async def test_new_bet_allowed_after_settlement(session, user, pool):
    service = BetService()
    first = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)
    await service.settle_bet(session, bet_id=first.id, crash_point=5, settler=user)

    second = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)

    assert second.id != first.id


async def test_winning_settlement(session, user, pool):
    service = BetService()
    bet = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=10)

    result = await service.settle_bet(session, bet_id=bet.id, crash_point=10, settler=user)

    assert result.winnings == SOL // 10
    assert result.bet.is_settled
    assert result.bet.crash_point == 10
    assert result.bet.settled_at is not None
    assert result.user.total_winnings == SOL // 10
    assert result.user.total_losses == 0
    assert result.user.total_xp == 35


async def test_losing_settlement_counts_stake_as_loss(session, user, pool):
    service = BetService()
    bet = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=10)

    result = await service.settle_bet(session, bet_id=bet.id, crash_point=9, settler=user)

    assert result.winnings == 0
    assert result.user.total_winnings == 0
    assert result.user.total_losses == SOL
    assert result.user.total_xp == 10


async def test_settle_twice_is_rejected_and_counts_once(session, user, pool):
    service = BetService()
    bet = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)
    await service.settle_bet(session, bet_id=bet.id, crash_point=3, settler=user)

    with pytest.raises(InvalidState) as exc_info:
        await service.settle_bet(session, bet_id=bet.id, crash_point=3, settler=user)

    assert exc_info.value.status_code == 409
    await session.refresh(user)
    assert user.total_winnings == SOL * 2 // 100


async def test_settle_rejects_non_positive_crash_point(session, user, pool):
    bet = await BetService().place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)
    with pytest.raises(InvalidInput):
        await BetService().settle_bet(session, bet_id=bet.id, crash_point=0, settler=user)


async def test_settle_unknown_bet(session, user):
    with pytest.raises(NotFound):
        await BetService().settle_bet(session, bet_id=999, crash_point=5, settler=user)


async def test_settlers_whitelist(session, user, pool):
    service = BetService()
    bet = await service.place_bet(session, user=user, pool_id=pool.id, amount=SOL, multiplier=2)
    service._settlers = {WALLETS[1]}

    with pytest.raises(Forbidden):
        await service.settle_bet(session, bet_id=bet.id, crash_point=5, settler=user)

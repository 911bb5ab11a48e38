from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import FakeChainClient
from rugfork.models.base import utcnow
from rugfork.services.solana.rpc_client import ChainFacts, TokenHolder, holders_from_accounts
from rugfork.services.solana.rug_score import (
    FALLBACK_RECOMMENDATION,
    LAMPORTS_PER_SOL,
    WEIGHTS,
    PoolFacts,
    RugScoreFactors,
    RugScoreResult,
    RugScoreService,
    age_factor,
    holder_distribution_factor,
    liquidity_factor,
    recommendations,
    risk_level,
    score_token,
    transaction_count_factor,
    volume_factor,
    weighted_score,
)


def _facts(share: float | None) -> ChainFacts:
    if share is None:
        return ChainFacts()
    return ChainFacts(top_holders=[TokenHolder(address="x", amount=1.0, percentage=share)])


def test_weights_sum_to_hundred():
    assert sum(WEIGHTS.values()) == 100


@pytest.mark.parametrize(
    "sol, expected",
    [(100, 10), (99.9, 20), (50, 20), (20, 40), (10, 60), (5, 80), (4.99, 100), (0, 100)],
)
def test_liquidity_ladder(sol, expected):
    assert liquidity_factor(int(sol * LAMPORTS_PER_SOL)) == expected


@pytest.mark.parametrize(
    "share, expected",
    [(0.05, 10), (0.1, 10), (0.2, 20), (0.3, 40), (0.5, 60), (0.7, 80), (0.71, 100)],
)
def test_holder_ladder_is_upper_bounded(share, expected):
    assert holder_distribution_factor(_facts(share)) == expected


def test_no_holders_is_worst():
    assert holder_distribution_factor(_facts(None)) == 100


def test_volume_without_liquidity_is_worst():
    assert volume_factor(10 * LAMPORTS_PER_SOL, 0) == 100


@pytest.mark.parametrize("ratio, expected", [(10, 10), (5, 20), (2, 40), (1, 60), (0.5, 80), (0, 80)])
def test_volume_ratio_ladder(ratio, expected):
    liquidity = 100 * LAMPORTS_PER_SOL
    assert volume_factor(int(liquidity * ratio), liquidity) == expected


@pytest.mark.parametrize(
    "hours, expected",
    [(200, 10), (168, 10), (100, 20), (30, 40), (6, 60), (2, 80), (0.5, 100)],
)
def test_age_ladder(hours, expected):
    now = utcnow()
    assert age_factor(now - timedelta(hours=hours), now) == expected


def test_naive_created_at_is_treated_as_utc():
    now = utcnow()
    naive = (now - timedelta(hours=200)).replace(tzinfo=None)
    assert age_factor(naive, now) == 10


@pytest.mark.parametrize("count, expected", [(1000, 10), (999, 20), (100, 40), (50, 60), (10, 80), (9, 100)])
def test_transaction_count_ladder(count, expected):
    assert transaction_count_factor(count) == expected


def test_weighted_score_rounds_half_up():
    factors = RugScoreFactors(10, 10, 10, 10, 10, 10, 20)
    # 10 * 95 + 20 * 5 = 1050 -> 10.5 -> 11
    assert weighted_score(factors) == 11


@pytest.mark.parametrize(
    "score, level",
    [(0, "LOW"), (25, "LOW"), (26, "MEDIUM"), (50, "MEDIUM"), (51, "HIGH"), (75, "HIGH"), (76, "EXTREME"), (100, "EXTREME")],
)
def test_risk_bands(score, level):
    assert risk_level(score) == level


def test_score_token_end_to_end():
    now = utcnow()
    pool = PoolFacts(
        liquidity=150 * LAMPORTS_PER_SOL,
        total_volume=1500 * LAMPORTS_PER_SOL,
        created_at=now - timedelta(hours=200),
    )
    _, holders = holders_from_accounts(
        [{"address": "a", "uiAmount": 50}, {"address": "b", "uiAmount": 30}, {"address": "c", "uiAmount": 20}],
        limit=10,
    )
    chain = ChainFacts(total_supply=100, top_holders=holders, holder_count=3, recent_tx_count=1000)

    result = score_token(pool, chain, now=now)

    assert result.factors == RugScoreFactors(
        liquidity=10,
        holder_distribution=60,
        volume=10,
        age=10,
        transaction_count=10,
        dev_wallet_activity=50,
        social_signals=50,
    )
    # 250 + 1200 + 150 + 150 + 100 + 500 + 250 = 2600
    assert result.score == 26
    assert result.risk_level == "MEDIUM"
    assert result.recommendations == ["⚡ MEDIUM RISK - Monitor closely"]
    assert not result.degraded


def test_recommendations_flag_weak_factors():
    factors = RugScoreFactors(liquidity=100, holder_distribution=100, volume=80, age=100)
    items = recommendations(factors, 90)
    assert items[:4] == [
        "⚠️ Low liquidity detected - high slippage risk",
        "⚠️ Concentrated token ownership - potential rug pull risk",
        "⚠️ Very new token - higher risk of abandonment",
        "⚠️ Low trading volume - potential liquidity issues",
    ]
    assert items[-1] == "🚨 EXTREME RISK - Consider avoiding this token"


def test_holder_percentages_are_relative_to_largest_accounts():
    total, holders = holders_from_accounts(
        [{"address": "a", "uiAmount": 75}, {"address": "b", "uiAmount": 25}], limit=1
    )
    assert total == 100
    assert [h.percentage for h in holders] == [0.75]


def _service(fake: FakeChainClient) -> RugScoreService:
    async def factory():
        return fake

    return RugScoreService(client_factory=factory)


async def test_chain_failure_degrades_to_worst_case():
    service = _service(FakeChainClient(fail=True))

    result = await service.calculate("mint-down", PoolFacts(liquidity=500 * LAMPORTS_PER_SOL))

    assert result.degraded
    assert result.score == 100
    assert result.risk_level == "EXTREME"
    assert result.factors == RugScoreFactors()
    assert result.recommendations == [FALLBACK_RECOMMENDATION]


async def test_slow_chain_times_out_to_worst_case():
    service = _service(FakeChainClient(delay=0.5))
    service._timeout = 0.05

    result = await service.calculate("mint-slow", PoolFacts())

    assert result.degraded
    assert result.score == 100


async def test_successful_result_is_cached():
    fake = FakeChainClient(accounts=[{"address": "a", "uiAmount": 1}], signatures=5)
    service = _service(fake)
    service._cache_ttl = 60

    first = await service.calculate("mint-cached-once", PoolFacts())
    second = await service.calculate("mint-cached-once", PoolFacts())

    assert first.score == second.score
    assert fake.calls == 1


async def test_degraded_result_is_not_cached():
    fake = FakeChainClient(fail=True)
    service = _service(fake)
    service._cache_ttl = 60

    await service.calculate("mint-never-cached", PoolFacts())
    await service.calculate("mint-never-cached", PoolFacts())

    assert fake.calls == 2


async def test_compare_sorts_safest_first():
    service = _service(FakeChainClient(accounts=[{"address": "a", "uiAmount": 1}], signatures=2000))
    old = utcnow() - timedelta(days=30)
    rows = await service.compare(
        [
            ("risky", PoolFacts()),
            ("safe", PoolFacts(liquidity=200 * LAMPORTS_PER_SOL, total_volume=2000 * LAMPORTS_PER_SOL, created_at=old)),
        ]
    )
    assert [row["mint"] for row in rows] == ["safe", "risky"]
    assert rows[0]["score"] <= rows[1]["score"]


async def test_holder_metrics_fall_back_to_zeros():
    service = _service(FakeChainClient(fail=True))
    assert await service.holder_metrics("mint") == {
        "total_supply": 0.0,
        "top_holder_percentage": 0.0,
        "holder_count": 0,
    }


class _BrokenCache:
    """Кеш, у которого падает любой вызов (например, redis недоступен)."""

    async def get(self, key, *args, **kwargs):
        raise ConnectionError("redis down")

    async def set(self, key, value, *args, **kwargs):
        raise ConnectionError("redis down")


async def test_json_serializing_cache_round_trips_result():
    from aiocache import SimpleMemoryCache
    from aiocache.serializers import JsonSerializer

    fake = FakeChainClient(accounts=[{"address": "a", "uiAmount": 1}], signatures=5)

    async def factory():
        return fake

    service = RugScoreService(client_factory=factory, cache=SimpleMemoryCache(serializer=JsonSerializer()))
    service._cache_ttl = 60

    first = await service.calculate("mint-json", PoolFacts())
    second = await service.calculate("mint-json", PoolFacts())

    assert not first.degraded
    assert isinstance(second, RugScoreResult)
    assert second.as_dict() == first.as_dict()
    assert fake.calls == 1


async def test_cache_outage_still_returns_score():
    fake = FakeChainClient(accounts=[{"address": "a", "uiAmount": 1}], signatures=5)

    async def factory():
        return fake

    service = RugScoreService(client_factory=factory, cache=_BrokenCache())
    service._cache_ttl = 60

    result = await service.calculate("mint-cache-down", PoolFacts())

    assert not result.degraded
    assert result.score == score_token(PoolFacts(), await fake.get_chain_facts("x")).score


def test_rug_score_cache_is_namespaced_json():
    from aiocache.serializers import JsonSerializer

    from rugfork.utils.cache import RUG_SCORE_CACHE, get_cache

    cache = get_cache(RUG_SCORE_CACHE)
    assert cache.namespace == "rugscore"
    assert isinstance(cache.serializer, JsonSerializer)


def test_redis_dsn_is_parsed_for_rug_score_cache():
    from rugfork.utils.cache import _build_redis_config

    assert _build_redis_config("rediss://:secret@cache.local:6380/2") == {
        "endpoint": "cache.local",
        "port": 6380,
        "password": "secret",
        "db": 2,
        "ssl": True,
    }
    with pytest.raises(ValueError):
        _build_redis_config("redis://cache.local/main")

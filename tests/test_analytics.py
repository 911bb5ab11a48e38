from __future__ import annotations

from datetime import datetime, timezone

from rugfork.models import Bet
from rugfork.services.core.analytics import (
    favorite_multiplier,
    hourly_volume,
    risk_tolerance,
    summarize_bets,
)


def _bet(amount: int, multiplier: int, *, winnings: int = 0, settled: bool = False, hour: int = 0) -> Bet:
    return Bet(
        user_id=1,
        pool_id=1,
        amount=amount,
        multiplier=multiplier,
        winnings=winnings,
        is_settled=settled,
        created_at=datetime(2024, 1, 1, hour, 15, tzinfo=timezone.utc),
    )


def test_empty_summary():
    summary = summarize_bets([])
    assert summary.total_bets == 0
    assert summary.risk_tolerance is None
    assert summary.favorite_multiplier is None
    assert summary.win_rate == 0


def test_summary_counts_only_settled_zero_payouts_as_losses():
    bets = [
        _bet(100, 2, winnings=2, settled=True),
        _bet(300, 4, settled=True),
        _bet(50, 4),
    ]

    summary = summarize_bets(bets)

    assert summary.total_volume == 450
    assert summary.total_winnings == 2
    assert summary.total_losses == 300
    assert summary.net_profit == -298
    assert summary.favorite_multiplier == 4
    assert summary.risk_tolerance == "MEDIUM"


def test_favorite_multiplier_prefers_larger_on_tie():
    assert favorite_multiplier([_bet(1, 2), _bet(1, 50)]) == 50


def test_risk_tolerance_bands():
    assert [risk_tolerance(value) for value in (2, 3, 3.5, 10, 10.5)] == [
        "LOW",
        "LOW",
        "MEDIUM",
        "MEDIUM",
        "HIGH",
    ]


def test_hourly_volume_buckets():
    rows = hourly_volume([_bet(10, 2, hour=3), _bet(5, 2, hour=1), _bet(7, 2, hour=3)])
    assert [(row["date"].hour, row["volume"]) for row in rows] == [(1, 5), (3, 17)]

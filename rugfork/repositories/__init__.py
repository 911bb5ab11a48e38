"""Репозитории для работы с БД."""

from .bet_repo import (
    BetAggregate,
    aggregate_bets,
    bet_counts_by_user,
    count_users_with_volume_above,
    count_won_bets,
    get_bet,
    insert_bet,
    list_bets,
    mark_settled,
    multiplier_distribution,
    pool_popularity,
    user_volume,
    volume_by_user,
)
from .pool_repo import (
    POOL_SORT_FIELDS,
    create_pool,
    get_pool,
    get_pool_by_mint,
    increment_pool_counters,
    list_pools,
    list_pools_by_ids,
    pool_totals,
    pools_created_since,
    set_pool_active,
    set_rug_score,
    top_pools_by_volume,
)
from .user_repo import (
    count_users,
    count_users_above,
    ensure_user_by_wallet,
    find_profile_clash,
    get_user,
    get_user_by_wallet,
    increment_user_counters,
    list_users,
    top_users_by,
    touch_activity,
    update_profile,
)

__all__ = [
    "BetAggregate",
    "POOL_SORT_FIELDS",
    "aggregate_bets",
    "bet_counts_by_user",
    "count_users",
    "count_users_above",
    "count_users_with_volume_above",
    "count_won_bets",
    "create_pool",
    "ensure_user_by_wallet",
    "find_profile_clash",
    "get_bet",
    "get_pool",
    "get_pool_by_mint",
    "get_user",
    "get_user_by_wallet",
    "increment_pool_counters",
    "increment_user_counters",
    "insert_bet",
    "list_bets",
    "list_pools",
    "list_pools_by_ids",
    "list_users",
    "mark_settled",
    "multiplier_distribution",
    "pool_popularity",
    "pool_totals",
    "pools_created_since",
    "set_pool_active",
    "set_rug_score",
    "top_pools_by_volume",
    "top_users_by",
    "touch_activity",
    "update_profile",
    "user_volume",
    "volume_by_user",
]

"""Глобальные сервисы и зависимости RugFork."""

from __future__ import annotations

from config.settings import get_settings
from .services.core.analytics import AnalyticsService
from .services.core.betting import BetService
from .services.core.profiles import ProfileService
from .services.core.ranking import RankingService
from .services.solana.rug_score import RugScoreService
from .utils.cache import configure_cache

settings = get_settings()

configure_cache()

bet_service = BetService()
profile_service = ProfileService()
ranking_service = RankingService()
analytics_service = AnalyticsService()
rug_score_service = RugScoreService()

__all__ = [
    "analytics_service",
    "bet_service",
    "profile_service",
    "ranking_service",
    "rug_score_service",
    "settings",
]

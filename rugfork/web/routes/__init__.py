"""Регистрация всех HTTP-роутеров RugFork."""

from __future__ import annotations

from fastapi import APIRouter, FastAPI


def register_routers(app: FastAPI) -> None:
    """Подключает роутеры под общим префиксом /api."""

    from . import analytics, bets, leaderboard, tokens, users

    api = APIRouter(prefix="/api")
    routers = (
        tokens.router,
        bets.router,
        users.router,
        leaderboard.router,
        analytics.router,
    )

    for router in routers:
        api.include_router(router)
    app.include_router(api)


__all__ = ["register_routers"]

"""FastAPI backend RugFork: пулы, ставки, лидерборды и rug score."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from rugfork.context import settings
from rugfork.middlewares import ThrottlingMiddleware, init_db, register_error_handlers
from rugfork.services.solana.rpc_client import close_solana_client
from rugfork.web.routes import register_routers


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("RugFork API стартует в окружении {env}", env=settings.environment)
    if not settings.is_production:
        # В проде схема ведётся миграциями Alembic.
        await init_db()
    yield
    await close_solana_client()
    logger.info("RugFork API корректно остановлен")


def create_app() -> FastAPI:
    application = FastAPI(title=settings.api.title, lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(
        ThrottlingMiddleware,
        max_requests=settings.api.rate_limit_max_requests,
        window_sec=settings.api.rate_limit_window_sec,
    )
    register_error_handlers(application)
    register_routers(application)

    @application.get("/health")
    async def health() -> dict:
        return {"status": "ok", "service": "rugfork-api", "environment": settings.environment}

    return application


app = create_app()


__all__ = ["app", "create_app"]

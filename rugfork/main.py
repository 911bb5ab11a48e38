"""Entry point для RugFork API."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import get_settings

from .logging_config import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(json=settings.is_production, level="INFO" if settings.is_production else "DEBUG")
    logger.info("Запуск uvicorn на {host}:{port}", host=settings.api.host, port=settings.api.port)
    uvicorn.run(
        "rugfork.web.app:app",
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )
    logger.info("uvicorn завершил работу")


if __name__ == "__main__":
    main()

"""Глобальный перехват и логирование ошибок."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from rugfork.errors import InvalidInput, RugForkError


async def _handle_domain_error(request: Request, exc: RugForkError) -> JSONResponse:
    logger.debug(
        "{method} {path} -> {status} {code}: {detail}",
        method=request.method,
        path=request.url.path,
        status=exc.status_code,
        code=exc.code,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return await _handle_domain_error(request, InvalidInput(details or "Некорректный запрос"))


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Ошибка при обработке {path}: {error}", path=request.url.path, error=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "detail": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RugForkError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected)


__all__ = ["register_error_handlers"]

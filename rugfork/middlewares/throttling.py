"""Простое антиспам middleware: фиксированное окно на IP клиента."""

from __future__ import annotations

import asyncio
import time

from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from rugfork.errors import RateLimited


class ThrottlingMiddleware(BaseHTTPMiddleware):
    """Ограничивает число запросов от одного IP за окно."""

    def __init__(self, app: ASGIApp, *, max_requests: int = 100, window_sec: float = 900.0) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_sec = window_sec
        self._windows: dict[str, tuple[float, int]] = {}
        self._lock = asyncio.Lock()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        async with self._lock:
            now = time.monotonic()
            self._prune(now)
            started, count = self._windows.get(client_ip, (now, 0))
            if now - started >= self.window_sec:
                started, count = now, 0
            count += 1
            self._windows[client_ip] = (started, count)
        if count > self.max_requests:
            logger.debug("Троттлинг {ip}: {count} запросов", ip=client_ip, count=count)
            error = RateLimited("Too many requests from this IP, please try again later.")
            return JSONResponse(status_code=error.status_code, content=error.as_dict())
        return await call_next(request)

    def _prune(self, now: float) -> None:
        """Удаляет истёкшие окна, чтобы словарь не рос с каждым новым IP."""

        expired = [ip for ip, (started, _) in self._windows.items() if now - started >= self.window_sec]
        for ip in expired:
            del self._windows[ip]


__all__ = ["ThrottlingMiddleware"]

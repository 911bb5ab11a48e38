"""Таксономия ошибок RugFork.

Сервисы бросают эти исключения, HTTP-слой превращает их в JSON
`{"error": code, "detail": message}` с соответствующим статусом.
"""

from __future__ import annotations


class RugForkError(Exception):
    """Базовая ошибка доменного слоя."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def as_dict(self) -> dict[str, str]:
        return {"error": self.code, "detail": self.message}


class InvalidInput(RugForkError):
    status_code = 400
    code = "invalid_input"


class Unauthorized(RugForkError):
    status_code = 401
    code = "unauthorized"


class Forbidden(RugForkError):
    status_code = 403
    code = "forbidden"


class NotFound(RugForkError):
    status_code = 404
    code = "not_found"


class Conflict(RugForkError):
    status_code = 409
    code = "conflict"


class InvalidState(Conflict):
    """Операция недопустима в текущем состоянии сущности (пул выключен, ставка закрыта)."""

    code = "invalid_state"


class Unavailable(RugForkError):
    """Внешний коллаборатор (RPC, БД) недоступен."""

    status_code = 503
    code = "unavailable"


class RateLimited(RugForkError):
    status_code = 429
    code = "rate_limited"


__all__ = [
    "Conflict",
    "Forbidden",
    "InvalidInput",
    "InvalidState",
    "NotFound",
    "RateLimited",
    "RugForkError",
    "Unauthorized",
    "Unavailable",
]

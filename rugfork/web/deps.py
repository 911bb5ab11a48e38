"""FastAPI-зависимости: сессия БД и авторизация по bearer-токену."""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from rugfork.errors import InvalidInput, Unauthorized
from rugfork.middlewares import get_db_session
from rugfork.models import User
from rugfork.repositories import ensure_user_by_wallet
from rugfork.utils.security import AuthIdentity, decode_session_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthIdentity:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access denied. No token provided.")
    try:
        return decode_session_token(credentials.credentials)
    except ValueError as exc:
        raise Unauthorized("Invalid token.") from exc


async def get_current_user(
    identity: AuthIdentity = Depends(get_identity),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    """Пользователь создаётся при первом предъявлении токена кошелька."""

    return await ensure_user_by_wallet(session, identity.wallet_address)


def pagination(page: int = 1, limit: int = 20) -> tuple[int, int]:
    if page < 1:
        raise InvalidInput("page должен быть >= 1")
    if not 1 <= limit <= 100:
        raise InvalidInput("limit должен быть в диапазоне 1..100")
    return page, limit


def page_meta(page: int, limit: int, total: int) -> dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": -(-total // limit)}


__all__ = ["bearer_scheme", "get_current_user", "get_identity", "page_meta", "pagination"]

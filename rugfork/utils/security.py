"""JWT-утилиты для bearer-авторизации кошельков."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict

import jwt
from jwt import InvalidTokenError

from config.settings import get_settings
from rugfork.utils.addresses import is_solana_address


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """Содержимое валидного токена: {id, walletAddress}."""

    id: int | None
    wallet_address: str


def issue_session_token(
    wallet_address: str,
    user_id: int | None = None,
    ttl_minutes: int | None = None,
) -> str:
    """Выдаёт короткоживущий JWT для кошелька."""

    settings = get_settings()
    ttl = ttl_minutes or settings.security.jwt_ttl_minutes
    now = int(time.time())
    payload: Dict[str, Any] = {
        "walletAddress": wallet_address,
        "iat": now,
        "exp": now + ttl * 60,
    }
    if user_id is not None:
        payload["id"] = user_id
    return jwt.encode(
        payload,
        settings.security.jwt_secret.get_secret_value(),
        algorithm=settings.security.jwt_algorithm,
    )


def decode_session_token(token: str) -> AuthIdentity:
    """Валидирует JWT и возвращает личность владельца."""

    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.security.jwt_secret.get_secret_value(),
            algorithms=[settings.security.jwt_algorithm],
        )
    except InvalidTokenError as exc:
        raise ValueError("Недействительный токен") from exc
    wallet = payload.get("walletAddress")
    if not isinstance(wallet, str) or not is_solana_address(wallet):
        raise ValueError("В токене нет корректного walletAddress")
    raw_id = payload.get("id")
    return AuthIdentity(id=int(raw_id) if raw_id is not None else None, wallet_address=wallet)


__all__ = ["AuthIdentity", "decode_session_token", "issue_session_token"]

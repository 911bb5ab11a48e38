"""Проверка Solana-адресов (base58, 32 байта)."""

from __future__ import annotations

import base58

PUBKEY_LENGTH = 32


def is_solana_address(value: str) -> bool:
    if not value or len(value) > 44:
        return False
    try:
        raw = base58.b58decode(value)
    except ValueError:
        return False
    return len(raw) == PUBKEY_LENGTH


__all__ = ["is_solana_address"]

from __future__ import annotations

import jwt
import pytest

from config.settings import get_settings
from conftest import WALLETS
from rugfork.utils.addresses import is_solana_address
from rugfork.utils.security import decode_session_token, issue_session_token


@pytest.mark.parametrize("wallet", WALLETS)
def test_known_keys_are_valid_addresses(wallet):
    assert is_solana_address(wallet)


@pytest.mark.parametrize("value", ["", "0OIl", "abc", "1" * 45])
def test_rejects_malformed_addresses(value):
    assert not is_solana_address(value)


def test_token_round_trip_keeps_identity():
    identity = decode_session_token(issue_session_token(WALLETS[1], user_id=7))
    assert identity.wallet_address == WALLETS[1]
    assert identity.id == 7


def test_expired_token_is_rejected():
    token = issue_session_token(WALLETS[0], ttl_minutes=-1)
    with pytest.raises(ValueError):
        decode_session_token(token)


def test_token_without_wallet_is_rejected():
    settings = get_settings().security
    token = jwt.encode({"id": 1}, settings.jwt_secret.get_secret_value(), algorithm=settings.jwt_algorithm)
    with pytest.raises(ValueError):
        decode_session_token(token)

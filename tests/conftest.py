"""Общие фикстуры: временная SQLite, фейковый Solana RPC, JWT."""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

# Окружение должно быть готово до первого импорта config.settings.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="rugfork-tests-"))
os.environ["ENVIRONMENT"] = "dev"
os.environ["SECURITY__JWT_SECRET"] = "rugfork-test-secret"
os.environ["DATABASE__DSN"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'rugfork.db'}"
os.environ["API__RATE_LIMIT_MAX_REQUESTS"] = "100000"
os.environ["RUG_SCORE__CACHE_TTL_SECONDS"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from rugfork.context import rug_score_service  # noqa: E402
from rugfork.middlewares.db import session_maker  # noqa: E402
from rugfork.services.solana.rpc_client import (  # noqa: E402
    ChainFacts,
    SolanaRpcError,
    holders_from_accounts,
)
from rugfork.utils.security import issue_session_token  # noqa: E402

# Реальные 32-байтовые base58 ключи.
WALLETS = [
    "11111111111111111111111111111111",
    "Vote111111111111111111111111111111111111111",
    "Stake11111111111111111111111111111111111111",
    "SysvarRent111111111111111111111111111111111",
    "SysvarC1ock11111111111111111111111111111111",
]
MINTS = [
    "So11111111111111111111111111111111111111112",
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
]


class FakeChainClient:
    """Подмена SolanaRpcClient без сети."""

    def __init__(
        self,
        accounts: list[dict] | None = None,
        signatures: int = 0,
        fail: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.accounts = accounts or []
        self.signatures = signatures
        self.fail = fail
        self.delay = delay
        self.calls = 0

    async def _maybe_fail(self) -> None:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise SolanaRpcError("RPC недоступен")

    async def get_token_largest_accounts(self, mint: str) -> list[dict]:
        await self._maybe_fail()
        return list(self.accounts)

    async def get_signatures_for_address(self, address: str, limit: int | None = None) -> list[dict]:
        await self._maybe_fail()
        return [{"signature": str(i)} for i in range(self.signatures)]

    async def get_chain_facts(self, mint: str) -> ChainFacts:
        await self._maybe_fail()
        total, holders = holders_from_accounts(self.accounts, 10)
        return ChainFacts(
            total_supply=total,
            top_holders=holders,
            holder_count=len(self.accounts),
            recent_tx_count=self.signatures,
        )


# Схема пересоздаётся синхронным движком, чтобы не зависеть от event loop тестов.
_sync_engine = create_engine(f"sqlite:///{_TMP_DIR / 'rugfork.db'}")


@pytest.fixture(autouse=True)
def clean_db() -> None:
    SQLModel.metadata.drop_all(_sync_engine)
    SQLModel.metadata.create_all(_sync_engine)


@pytest.fixture
async def session():
    async with session_maker() as db_session:
        yield db_session


@pytest.fixture
def chain(monkeypatch: pytest.MonkeyPatch) -> FakeChainClient:
    fake = FakeChainClient(
        accounts=[{"address": "holder-a", "uiAmount": 50}, {"address": "holder-b", "uiAmount": 50}],
        signatures=120,
    )

    async def factory() -> FakeChainClient:
        return fake

    monkeypatch.setattr(rug_score_service, "_client_factory", factory)
    return fake


@pytest.fixture
def client(chain: FakeChainClient) -> TestClient:
    from rugfork.web.app import app

    return TestClient(app)


def auth_headers(wallet: str, user_id: int | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_session_token(wallet, user_id=user_id)}"}

"""Прямой доступ к Solana JSON-RPC без SDK.

SolanaRpcClient отдаёт «факты о цепи» для rug score: крупнейших держателей
токена, общий supply и число недавних транзакций по mint-адресу.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from loguru import logger

from config.settings import get_settings
from rugfork.errors import Unavailable


class SolanaRpcError(Unavailable):
    """Базовое исключение слоя прямого подключения к Solana."""


@dataclass(slots=True)
class TokenHolder:
    address: str
    amount: float
    percentage: float

    def as_dict(self) -> dict[str, Any]:
        return {"address": self.address, "amount": self.amount, "percentage": self.percentage}


@dataclass(slots=True)
class ChainFacts:
    """Снимок on-chain данных по токену."""

    total_supply: float = 0.0
    top_holders: list[TokenHolder] = field(default_factory=list)
    holder_count: int = 0
    recent_tx_count: int = 0

    @property
    def top_holder_share(self) -> float:
        return self.top_holders[0].percentage if self.top_holders else 0.0


def holders_from_accounts(accounts: list[dict[str, Any]], limit: int) -> tuple[float, list[TokenHolder]]:
    """Доли считаются от суммы крупнейших аккаунтов, а не от полного supply."""

    amounts = [float(acc.get("uiAmount") or 0.0) for acc in accounts]
    total = sum(amounts)
    holders = [
        TokenHolder(
            address=str(acc.get("address", "")),
            amount=amount,
            percentage=amount / total if total else 0.0,
        )
        for acc, amount in zip(accounts[:limit], amounts[:limit])
    ]
    return total, holders


class SolanaRpcClient:
    """Лёгкий JSON-RPC клиент поверх aiohttp."""

    def __init__(self, endpoint: str | None = None) -> None:
        settings = get_settings().solana
        self._rpc_endpoint = endpoint or str(settings.rpc_endpoint)
        self._timeout = settings.request_timeout
        self._signature_limit = settings.signature_limit
        self._top_holders = settings.top_holders
        self._session: aiohttp.ClientSession | None = None
        self._request_id = 0

    async def start(self) -> None:
        """Инициализирует HTTP session."""

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
            logger.info("SolanaRpcClient готов: RPC {rpc}", rpc=self._rpc_endpoint)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def rpc_call(self, method: str, params: list[Any] | None = None) -> Any:
        """Выполняет JSON-RPC вызов к ноде."""

        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params or []}
        try:
            async with self._session.post(self._rpc_endpoint, json=payload) as resp:
                if resp.status >= 400:
                    text = await resp.text()
                    raise SolanaRpcError(f"RPC {method} завершился с HTTP {resp.status}: {text}")
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SolanaRpcError(f"RPC {method} недоступен: {exc}") from exc
        if "error" in data:
            raise SolanaRpcError(f"RPC ошибка {method}: {data['error']}")
        return data.get("result")

    async def get_token_largest_accounts(self, mint: str) -> list[dict[str, Any]]:
        result = await self.rpc_call("getTokenLargestAccounts", [mint])
        return list((result or {}).get("value") or [])

    async def get_signatures_for_address(self, address: str, limit: int | None = None) -> list[dict[str, Any]]:
        result = await self.rpc_call(
            "getSignaturesForAddress",
            [address, {"limit": limit or self._signature_limit}],
        )
        return list(result or [])

    async def get_chain_facts(self, mint: str) -> ChainFacts:
        """Держатели и число транзакций запрашиваются параллельно."""

        accounts, signatures = await asyncio.gather(
            self.get_token_largest_accounts(mint),
            self.get_signatures_for_address(mint),
        )
        total, holders = holders_from_accounts(accounts, self._top_holders)
        logger.debug(
            "Chain facts {mint}: holders={holders} txs={txs}",
            mint=mint,
            holders=len(accounts),
            txs=len(signatures),
        )
        return ChainFacts(
            total_supply=total,
            top_holders=holders,
            holder_count=len(accounts),
            recent_tx_count=len(signatures),
        )


_client: SolanaRpcClient | None = None


async def get_solana_client() -> SolanaRpcClient:
    """Возвращает синглтон SolanaRpcClient."""

    global _client
    if _client is None:
        _client = SolanaRpcClient()
        await _client.start()
    return _client


async def close_solana_client() -> None:
    """Закрывает синглтон, если он был создан."""

    global _client
    if _client is not None:
        await _client.close()
        _client = None


__all__ = [
    "ChainFacts",
    "SolanaRpcClient",
    "SolanaRpcError",
    "TokenHolder",
    "close_solana_client",
    "get_solana_client",
    "holders_from_accounts",
]

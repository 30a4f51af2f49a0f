"""
Wallet JSON-RPC Provider.

Speaks EIP-1193 style JSON-RPC to a wallet bridge: chain switching,
EIP-5792 batched calls, single transactions and receipt polling.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import httpx

from .base import WalletProvider
from ..config import settings
from ..core.errors import (
    METHOD_NOT_SUPPORTED_ERROR_SUBSTRING,
    MethodNotSupportedError,
    ReceiptTimeoutError,
    UNSUPPORTED_METHOD_RPC_CODE,
    USER_REJECTED_RPC_CODE,
    UserRejectedRequestError,
    WalletRpcError,
)
from ..core.transaction.models import BatchHandle, Call, CallsStatus, TransactionReceipt

logger = logging.getLogger(__name__)

METHOD_NOT_FOUND_RPC_CODE = -32601


@dataclass
class WalletConfig:
    rpc_url: str
    sendcalls_version: str = "1.0"
    receipt_poll_interval_seconds: float = 2.0
    receipt_timeout_seconds: float = 300


def raise_for_rpc_error(error: Dict[str, Any]) -> None:
    """Translate a JSON-RPC error object into the matching exception."""
    code = error.get("code")
    message = str(error.get("message") or "Wallet RPC error")
    if code == USER_REJECTED_RPC_CODE:
        raise UserRejectedRequestError(message)
    if code in (UNSUPPORTED_METHOD_RPC_CODE, METHOD_NOT_FOUND_RPC_CODE) or (
        METHOD_NOT_SUPPORTED_ERROR_SUBSTRING in message.lower()
    ):
        raise MethodNotSupportedError(message, code=code)
    raise WalletRpcError(code, message, error.get("data"))


class WalletRpcProvider(WalletProvider):
    name = "wallet"
    timeout_s = 30

    def __init__(
        self,
        config: Optional[WalletConfig] = None,
        *,
        address: Optional[str] = None,
        chain_id: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or WalletConfig(
            rpc_url=settings.wallet_rpc_url,
            sendcalls_version=settings.wallet_sendcalls_version,
            receipt_poll_interval_seconds=settings.receipt_poll_interval_seconds,
            receipt_timeout_seconds=settings.receipt_timeout_seconds,
        )
        self.address = address
        self.chain_id = chain_id
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._request_id = 0

    async def ready(self) -> bool:
        return bool(self._config.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "disabled", "reason": "Wallet RPC not configured"}

        try:
            result = await self._rpc_call("eth_chainId", [])
            return {"status": "healthy", "chainId": result}
        except Exception as exc:
            return {"status": "error", "reason": str(exc)}

    async def connect(self) -> None:
        """Load the connected account and active chain from the wallet."""
        accounts = await self._rpc_call("eth_accounts", [])
        if accounts:
            self.address = accounts[0]
        self.chain_id = int(await self._rpc_call("eth_chainId", []), 16)

    async def switch_chain(self, chain_id: int) -> None:
        await self._rpc_call("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])
        self.chain_id = chain_id

    async def submit_batch(
        self,
        calls: Sequence[Call],
        capabilities: Optional[Dict[str, Any]] = None,
    ) -> BatchHandle:
        chain_id = next((c.chain_id for c in calls if c.chain_id is not None), self.chain_id)
        params: Dict[str, Any] = {
            "version": self._config.sendcalls_version,
            "from": self.address,
            "calls": [
                {"to": c.to, "data": c.data, "value": hex(c.value)}
                for c in calls
            ],
            "capabilities": capabilities or {},
        }
        if chain_id is not None:
            params["chainId"] = hex(chain_id)

        result = await self._rpc_call("wallet_sendCalls", [params])
        if isinstance(result, dict) and result.get("id"):
            return BatchHandle(id=str(result["id"]))
        if isinstance(result, str):
            return BatchHandle(id=result)
        raise WalletRpcError(None, "Invalid wallet response for wallet_sendCalls")

    async def get_calls_status(self, batch_id: str) -> CallsStatus:
        result = await self._rpc_call("wallet_getCallsStatus", [batch_id])
        if not isinstance(result, dict):
            raise WalletRpcError(None, "Invalid wallet response for wallet_getCallsStatus")
        return CallsStatus.from_rpc(result)

    async def submit_single(self, call: Call) -> str:
        tx = {"from": self.address, **call.to_rpc_dict()}
        result = await self._rpc_call("eth_sendTransaction", [tx])
        if not isinstance(result, str):
            raise WalletRpcError(None, "Invalid wallet response for eth_sendTransaction")
        return result

    async def wait_for_receipt(self, tx_hash: str, chain_id: Optional[int] = None) -> TransactionReceipt:
        """Poll eth_getTransactionReceipt until mined.

        Receipts are always read from the wallet's active chain; a differing
        ``chain_id`` is only reported.
        """
        if chain_id is not None and self.chain_id is not None and chain_id != self.chain_id:
            logger.warning(
                f"Receipt for {tx_hash} requested on chain {chain_id}, wallet is on {self.chain_id}"
            )
        timeout = self._config.receipt_timeout_seconds
        deadline = time.monotonic() + timeout

        while True:
            receipt = await self._rpc_call("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                return TransactionReceipt.from_rpc(receipt)
            if time.monotonic() >= deadline:
                raise ReceiptTimeoutError(tx_hash, timeout)
            await asyncio.sleep(self._config.receipt_poll_interval_seconds)

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _rpc_call(self, method: str, params: list[Any]) -> Any:
        if not self._client or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)

        self._request_id += 1
        response = await self._client.post(
            self._config.rpc_url,
            json={"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params},
        )
        response.raise_for_status()
        payload = response.json()
        if payload.get("error"):
            raise_for_rpc_error(payload["error"])
        return payload.get("result")

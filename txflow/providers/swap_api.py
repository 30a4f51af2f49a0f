"""Async client for the swap quote/trade JSON-RPC API."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .base import SwapQuoteProvider
from ..config import settings
from ..core.errors import ProviderQuoteError
from ..core.swap.constants import NATIVE_ASSET_SYMBOL
from ..core.swap.models import Quote, QuoteResult, SwapError, SwapTransaction, SwapTransactionResult, Token
from ..services.amounts import to_base_units

logger = logging.getLogger(__name__)

QUOTE_METHOD = "cdp_getSwapQuote"
TRADE_METHOD = "cdp_getSwapTrade"


def swap_error_code(context: str, rpc_code: Any) -> str:
    if rpc_code is None:
        return f"UNCAUGHT_SWAP_{context.upper()}_ERROR"
    return f"SWAP_{context.upper()}_ERROR"


def _parse_result(model, body: Dict[str, Any], context: str):
    try:
        return model.model_validate(body.get("result") or {})
    except ValidationError as e:
        raise ProviderQuoteError(
            code=swap_error_code(context, None),
            error=f"Malformed swap {context} response: {e.error_count()} invalid fields",
        ) from e


class SwapApiProvider(SwapQuoteProvider):
    """Thin wrapper around the ``cdp_getSwapQuote`` / ``cdp_getSwapTrade`` methods."""

    name = "swap_api"

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.swap_api_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.swap_api_key
        self.timeout_s = timeout_s or settings.request_timeout_seconds
        self._transport = transport

    @property
    def rpc_url(self) -> str:
        return f"{self.base_url}/{self.api_key}" if self.api_key else self.base_url

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": "txflow/0.1",
        }

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "Swap API key not configured"}
        return {"status": "healthy", "base_url": self.base_url}

    def _quote_params(
        self,
        amount_reference: str,
        amount: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool,
    ) -> Dict[str, Any]:
        decimals = from_token.decimals if amount_reference == "from" else to_token.decimals
        return {
            "from": NATIVE_ASSET_SYMBOL if from_token.is_native else from_token.address,
            "to": NATIVE_ASSET_SYMBOL if to_token.is_native else to_token.address,
            "amount": to_base_units(amount, decimals),
            "amountReference": amount_reference,
            "v2Enabled": not use_aggregator,
            "slippagePercentage": max_slippage,
        }

    async def _rpc_call(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": [params]}
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(self.rpc_url, json=payload, headers=self._headers())
            response.raise_for_status()
            return response.json()

    async def get_quote(
        self,
        amount_reference: str,
        amount: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ) -> QuoteResult:
        params = self._quote_params(
            amount_reference, amount, from_token, to_token, max_slippage, use_aggregator
        )
        body = await self._rpc_call(QUOTE_METHOD, params)
        error = body.get("error")
        if error:
            logger.info(f"Swap quote rejected: {error}")
            return SwapError(
                code=swap_error_code("quote", error.get("code")),
                error=str(error.get("message") or ""),
                message="",
            )
        return _parse_result(Quote, body, "quote")

    async def build_swap_transaction(
        self,
        amount: str,
        from_address: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ) -> SwapTransactionResult:
        params = self._quote_params("from", amount, from_token, to_token, max_slippage, use_aggregator)
        params["fromAddress"] = from_address
        body = await self._rpc_call(TRADE_METHOD, params)
        error = body.get("error")
        if error:
            logger.info(f"Swap trade rejected: {error}")
            return SwapError(
                code=swap_error_code("trade", error.get("code")),
                error=str(error.get("message") or ""),
                message="",
            )
        return _parse_result(SwapTransaction, body, "trade")

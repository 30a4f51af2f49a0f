"""
Shared fakes for the wallet and swap quote capabilities.
"""

import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import pytest

from txflow.core.swap.models import Quote, SwapError, SwapTransaction, Token
from txflow.core.transaction.models import (
    BatchHandle,
    Call,
    CallsStatus,
    CallsStatusState,
    TransactionReceipt,
)
from txflow.providers.base import SwapQuoteProvider, WalletProvider
from txflow.services.amounts import to_base_units


WALLET_ADDRESS = "0x1111111111111111111111111111111111111111"


class FakeWallet(WalletProvider):
    """Scriptable wallet: every capability records its calls and can fail or stall."""

    name = "fake_wallet"

    def __init__(self, address: Optional[str] = WALLET_ADDRESS, chain_id: int = 8453):
        self.address = address
        self.chain_id = chain_id

        self.switch_error: Optional[Exception] = None
        self.batch_error: Optional[Exception] = None
        self.batch_id = "batch-1"
        self.calls_statuses: List[CallsStatus] = []
        self.single_errors: Dict[int, Exception] = {}
        self.single_delays: Dict[int, float] = {}
        self.receipt_errors: Dict[str, Exception] = {}
        self.receipt_gates: Dict[str, asyncio.Event] = {}

        self.switched: List[int] = []
        self.batches: List[List[Call]] = []
        self.batch_capabilities: List[Optional[Dict[str, Any]]] = []
        self.submitted: List[Call] = []
        self.receipt_waits: List[str] = []
        self.status_polls = 0

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def switch_chain(self, chain_id: int) -> None:
        self.switched.append(chain_id)
        if self.switch_error:
            raise self.switch_error
        self.chain_id = chain_id

    async def submit_batch(self, calls: Sequence[Call], capabilities=None) -> BatchHandle:
        self.batches.append(list(calls))
        self.batch_capabilities.append(capabilities)
        if self.batch_error:
            raise self.batch_error
        return BatchHandle(id=self.batch_id)

    async def get_calls_status(self, batch_id: str) -> CallsStatus:
        self.status_polls += 1
        if len(self.calls_statuses) > 1:
            return self.calls_statuses.pop(0)
        if self.calls_statuses:
            return self.calls_statuses[0]
        return CallsStatus(
            state=CallsStatusState.CONFIRMED,
            receipts=[TransactionReceipt(transaction_hash=f"hash:{batch_id}")],
        )

    async def submit_single(self, call: Call) -> str:
        index = len(self.submitted)
        self.submitted.append(call)
        delay = self.single_delays.get(index)
        if delay:
            await asyncio.sleep(delay)
        if index in self.single_errors:
            raise self.single_errors[index]
        return f"hash:{call.to}"

    async def wait_for_receipt(self, tx_hash: str, chain_id: Optional[int] = None) -> TransactionReceipt:
        self.receipt_waits.append(tx_hash)
        gate = self.receipt_gates.get(tx_hash)
        if gate is not None:
            await gate.wait()
        if tx_hash in self.receipt_errors:
            raise self.receipt_errors[tx_hash]
        return TransactionReceipt(transaction_hash=tx_hash, block_number=100)


class FakeQuoteProvider(SwapQuoteProvider):
    """Quotes at a fixed rate per token pair; individual amounts can be gated."""

    name = "fake_quotes"

    def __init__(self):
        self.rates: Dict[tuple, Decimal] = {}
        self.default_rate = Decimal("2")
        self.quote_error: Optional[SwapError] = None
        self.quote_exception: Optional[Exception] = None
        self.usd_exception: Optional[Exception] = None
        self.gates: Dict[str, asyncio.Event] = {}
        self.trade: Any = None
        self.trade_exception: Optional[Exception] = None

        self.quote_calls: List[Dict[str, Any]] = []
        self.trade_calls: List[Dict[str, Any]] = []

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    @property
    def primary_quote_calls(self) -> List[Dict[str, Any]]:
        return [c for c in self.quote_calls if c["to_token"].symbol != "USDC"]

    async def get_quote(
        self,
        amount_reference: str,
        amount: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ):
        self.quote_calls.append(
            {
                "amount_reference": amount_reference,
                "amount": amount,
                "from_token": from_token,
                "to_token": to_token,
                "max_slippage": max_slippage,
                "use_aggregator": use_aggregator,
            }
        )
        is_valuation = to_token.symbol == "USDC"
        if is_valuation and self.usd_exception:
            raise self.usd_exception

        gate = self.gates.get(amount)
        if gate is not None and not is_valuation:
            await gate.wait()

        if not is_valuation:
            if self.quote_exception:
                raise self.quote_exception
            if self.quote_error:
                return self.quote_error

        rate = self.rates.get((from_token.symbol, to_token.symbol), self.default_rate)
        return Quote(
            from_token=from_token,
            to_token=to_token,
            from_amount=to_base_units(amount, from_token.decimals),
            to_amount=to_base_units(str(Decimal(amount) * rate), to_token.decimals),
        )

    async def build_swap_transaction(
        self,
        amount: str,
        from_address: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ):
        self.trade_calls.append(
            {
                "amount": amount,
                "from_address": from_address,
                "from_token": from_token,
                "to_token": to_token,
                "max_slippage": max_slippage,
            }
        )
        if self.trade_exception:
            raise self.trade_exception
        return self.trade


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def quotes() -> FakeQuoteProvider:
    return FakeQuoteProvider()


@pytest.fixture
def eth_token() -> Token:
    return Token(address="", chain_id=8453, decimals=18, name="ETH", symbol="ETH")


@pytest.fixture
def degen_token() -> Token:
    return Token(
        address="0x4ed4e862860bed51a9570b96d89af5e1b0efefed",
        chain_id=8453,
        decimals=18,
        name="DEGEN",
        symbol="DEGEN",
    )


@pytest.fixture
def swap_transaction() -> SwapTransaction:
    return SwapTransaction.model_validate(
        {
            "approveTx": {
                "to": "0x4ed4e862860bed51a9570b96d89af5e1b0efefed",
                "data": "0x095ea7b3",
                "value": "0",
                "chainId": 8453,
            },
            "tx": {
                "to": "0xdef1c0ded9bec7f1a1670819833240f027b25eff",
                "data": "0x415565b0",
                "value": "0",
                "chainId": 8453,
            },
        }
    )

"""Typed models used by the swap subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..transaction.models import Call


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Token(_ApiModel):
    """Token metadata as returned by the swap API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    address: str = Field(default="", description="Contract address; empty for the native asset")
    chain_id: int
    decimals: int
    image: Optional[str] = None
    name: str = ""
    symbol: str

    @property
    def is_native(self) -> bool:
        return not self.address


class Quote(_ApiModel):
    """Exchange-rate result for a prospective swap. Amounts are in base units."""

    from_token: Token = Field(alias="from")
    to_token: Token = Field(alias="to")
    from_amount: str
    to_amount: str
    amount_reference: str = "from"
    price_impact: Optional[str] = None
    chain_id: Optional[int] = None
    has_high_price_impact: bool = Field(default=False, alias="highPriceImpact")
    slippage: Optional[str] = None
    warning: Optional[Dict[str, Any]] = None


class SwapError(_ApiModel):
    """Structured error returned by the quote and build endpoints."""

    code: str
    error: str
    message: str = ""


class SwapTxRequest(_ApiModel):
    """Raw transaction the wallet must send for a swap step."""

    to: str
    data: str = "0x"
    value: str = "0"
    gas: Optional[str] = None
    chain_id: Optional[int] = None

    def to_call(self, description: str = "") -> Call:
        raw_value = (self.value or "0").strip()
        value = int(raw_value, 16) if raw_value.lower().startswith("0x") else int(raw_value)
        return Call(
            to=self.to,
            data=self.data,
            value=value,
            chain_id=self.chain_id,
            description=description,
        )


class SwapFee(_ApiModel):
    base_asset: Optional[Token] = None
    percentage: Optional[str] = None
    amount: Optional[str] = None


class SwapTransaction(_ApiModel):
    """Built swap: an optional ERC-20 approval followed by the swap itself."""

    approve_transaction: Optional[SwapTxRequest] = Field(default=None, alias="approveTx")
    transaction: SwapTxRequest = Field(alias="tx")
    quote: Optional[Quote] = None
    fee: Optional[SwapFee] = None

    def to_calls(self) -> list[Call]:
        calls = []
        if self.approve_transaction is not None:
            calls.append(self.approve_transaction.to_call("approve"))
        calls.append(self.transaction.to_call("swap"))
        return calls


QuoteResult = Union[Quote, SwapError]
SwapTransactionResult = Union[SwapTransaction, SwapError]

SwapSideName = Literal["from", "to"]


def is_swap_error(response: Any) -> bool:
    return isinstance(response, SwapError)


@dataclass
class SwapSide:
    """Amount-entry state for one side of the exchange."""

    token: Optional[Token] = None
    amount: str = ""
    amount_usd: str = ""
    loading: bool = False

    def reset(self) -> None:
        self.amount = ""
        self.amount_usd = ""
        self.loading = False

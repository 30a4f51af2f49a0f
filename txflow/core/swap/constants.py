"""Constants for swap orchestration."""

from __future__ import annotations

from .models import Token

# Quote orchestration diagnostic codes: Tm (transaction module), SP (swap provider)
QUOTE_FETCH_ERROR_CODE = "TmSPc01"
SWAP_SUBMIT_ERROR_CODE = "TmSPc02"

# Reference asset for USD valuation of either side
USDC_TOKEN = Token(
    address="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
    chain_id=8453,
    decimals=6,
    image="",
    name="USDC",
    symbol="USDC",
)

# Native-asset placeholder understood by the swap API
NATIVE_ASSET_SYMBOL = "ETH"

__all__ = [
    'QUOTE_FETCH_ERROR_CODE',
    'SWAP_SUBMIT_ERROR_CODE',
    'USDC_TOKEN',
    'NATIVE_ASSET_SYMBOL',
]

"""
Swap Module

Two-sided amount entry with quote fetching, USD valuation and swap
submission on top of the transaction submission layer.
"""

from .constants import USDC_TOKEN
from .models import (
    Quote,
    SwapError,
    SwapFee,
    SwapSide,
    SwapTransaction,
    SwapTxRequest,
    Token,
    is_swap_error,
)
from .orchestrator import SwapOrchestrator

__all__ = [
    # Orchestrator
    "SwapOrchestrator",
    # Models
    "Quote",
    "SwapError",
    "SwapFee",
    "SwapSide",
    "SwapTransaction",
    "SwapTxRequest",
    "Token",
    "is_swap_error",
    # Constants
    "USDC_TOKEN",
]

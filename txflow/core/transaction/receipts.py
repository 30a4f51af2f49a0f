"""
Receipt aggregation for individually submitted calls.

Waits for one receipt per transaction hash and promotes the lifecycle to
``success`` once every wait has settled. Success here reports that all
submission attempts completed; callers inspect each receipt's status for
on-chain success.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from ..errors import GENERIC_ERROR_MESSAGE
from ..lifecycle import ErrorUpdate, LifecycleStatusStore, SuccessUpdate
from .constants import RECEIPT_ERROR_CODE
from .models import TransactionReceipt

if TYPE_CHECKING:
    from ...providers.base import WalletProvider


logger = logging.getLogger(__name__)


class ReceiptAggregator:
    """
    Collects receipts for a set of transaction hashes.

    - One hash: the receipt is awaited directly; a failed wait is an error.
    - Several hashes: all waits run concurrently, a failed wait is recorded
      in ``errors`` and the rest keep going; success carries the receipts
      that resolved, in submission order.
    """

    def __init__(
        self,
        wallet: "WalletProvider",
        store: LifecycleStatusStore,
        chain_id: Optional[int] = None,
    ):
        self.wallet = wallet
        self.store = store
        self.chain_id = chain_id
        self.receipts: List[TransactionReceipt] = []
        self.errors: Dict[str, str] = {}

    async def collect(self, hashes: Sequence[str], expected_count: int) -> None:
        """Wait for every hash and publish the outcome to the store."""
        hashes = list(hashes)
        self.receipts = []
        self.errors = {}

        if not hashes or len(hashes) < expected_count:
            logger.warning(
                f"Skipping receipt aggregation: {len(hashes)} hashes for {expected_count} calls"
            )
            return

        if len(hashes) == 1:
            await self._collect_single(hashes[0])
            return

        results = await asyncio.gather(*(self._wait(tx_hash) for tx_hash in hashes))
        self.receipts = [receipt for receipt in results if receipt is not None]
        logger.info(
            f"Receipts settled: {len(self.receipts)} resolved, {len(self.errors)} failed"
        )
        self.store.update(SuccessUpdate(transaction_receipts=list(self.receipts)))

    async def _collect_single(self, tx_hash: str) -> None:
        try:
            receipt = await self.wallet.wait_for_receipt(tx_hash, chain_id=self.chain_id)
        except Exception as e:
            logger.error(f"Receipt wait failed for {tx_hash}: {e}")
            self.errors[tx_hash] = GENERIC_ERROR_MESSAGE
            self.store.update(
                ErrorUpdate(
                    code=RECEIPT_ERROR_CODE,
                    error=str(e),
                    message=GENERIC_ERROR_MESSAGE,
                )
            )
            return

        self.receipts = [receipt]
        self.store.update(SuccessUpdate(transaction_receipts=[receipt]))

    async def _wait(self, tx_hash: str) -> Optional[TransactionReceipt]:
        try:
            return await self.wallet.wait_for_receipt(tx_hash, chain_id=self.chain_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Receipt wait failed for {tx_hash}: {e}")
            self.errors[tx_hash] = GENERIC_ERROR_MESSAGE
            return None

"""
Submission orchestrator for contract calls.

Handles the full submission lifecycle of a set of calls:
- Chain switch when the wallet is on the wrong chain
- Batched submission (wallet_sendCalls, optional paymaster sponsorship)
- Sequential per-call fallback for wallets that cannot batch
- Batch status polling and receipt aggregation
- Error classification into lifecycle ``error`` statuses
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from ...config import settings
from ...logging_config import submission_context
from ..errors import (
    ErrorCategory,
    USER_REJECTED_MESSAGE,
    classify_error,
    user_facing_message,
)
from ..lifecycle import (
    ErrorUpdate,
    LifecycleStatusStore,
    SuccessUpdate,
    TransactionLegacyExecutedUpdate,
    TransactionPendingUpdate,
)
from .constants import (
    CALLS_STATUS_ERROR_CODE,
    SWITCH_CHAIN_ERROR_CODE,
    WRITE_CONTRACT_ERROR_CODE,
    WRITE_CONTRACTS_ERROR_CODE,
)
from .models import Call, CallsStatusState, SubmissionResult
from .receipts import ReceiptAggregator

if TYPE_CHECKING:
    from ...providers.base import WalletProvider


logger = logging.getLogger(__name__)


class TransactionOrchestrator:
    """
    Submits a set of calls as one logical transaction.

    ``submit`` never raises: every outcome, including failures, is published
    to the lifecycle store. Retrying is a new call to ``submit``.
    """

    def __init__(
        self,
        wallet: "WalletProvider",
        store: Optional[LifecycleStatusStore] = None,
        *,
        calls: Sequence[Call] = (),
        capabilities: Optional[Dict[str, Any]] = None,
        chain_id: Optional[int] = None,
        poll_interval_seconds: Optional[float] = None,
    ):
        self.wallet = wallet
        self.store = store or LifecycleStatusStore()
        self.calls: Tuple[Call, ...] = tuple(calls)
        self.capabilities = capabilities
        self.chain_id = chain_id
        self.poll_interval_seconds = (
            poll_interval_seconds
            if poll_interval_seconds is not None
            else settings.calls_status_poll_interval_seconds
        )
        self.receipt_aggregator = ReceiptAggregator(wallet, self.store, chain_id=chain_id)

        # Externally observable submission state
        self.error_message = ""
        self.is_toast_visible = False
        self.transaction_id = ""
        self.transaction_hash_list: List[str] = []
        self.result: Optional[SubmissionResult] = None
        self.calls_status: Optional[CallsStatusState] = None

    @property
    def has_paymaster(self) -> bool:
        paymaster = (self.capabilities or {}).get("paymasterService") or {}
        return bool(paymaster.get("url"))

    @property
    def is_loading(self) -> bool:
        return self.calls_status == CallsStatusState.PENDING

    async def submit(
        self,
        calls: Optional[Sequence[Call]] = None,
        capabilities: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Submit ``calls`` (default: the configured calls) and track them to completion."""
        batch = tuple(calls) if calls is not None else self.calls
        if capabilities is not None:
            self.capabilities = capabilities
        if not batch:
            logger.warning("Submit called without any calls")
            return

        with submission_context(submission_id=uuid.uuid4().hex[:12], call_count=len(batch)):
            self.error_message = ""
            self.is_toast_visible = True
            self.transaction_id = ""
            self.transaction_hash_list = []
            self.result = None
            self.calls_status = None
            self.store.update(TransactionPendingUpdate())

            try:
                await self._switch_chain(self.chain_id)
            except Exception as e:
                self._fail(SWITCH_CHAIN_ERROR_CODE, e)
                return

            try:
                handle = await self.wallet.submit_batch(batch, self.capabilities)
            except Exception as e:
                if classify_error(e) == ErrorCategory.METHOD_NOT_SUPPORTED:
                    logger.info(f"Batched calls not supported by wallet, submitting {len(batch)} calls individually")
                    await self._fallback_to_sequential(batch)
                else:
                    self._fail(WRITE_CONTRACTS_ERROR_CODE, e)
                return

            self.transaction_id = handle.id
            self.result = SubmissionResult(batch_id=handle.id)
            logger.info(f"Batch submitted: {handle.id} (paymaster={self.has_paymaster})")
            await self._await_batch(handle.id)

    async def _switch_chain(self, target_chain_id: Optional[int]) -> None:
        if target_chain_id and self.wallet.chain_id != target_chain_id:
            logger.info(f"Switching wallet chain {self.wallet.chain_id} -> {target_chain_id}")
            await self.wallet.switch_chain(target_chain_id)

    async def _fallback_to_sequential(self, calls: Sequence[Call]) -> None:
        """Submit each call on its own, in order; one failure does not stop the rest."""
        hashes: List[str] = []
        failures: List[Tuple[int, Exception]] = []

        for index, call in enumerate(calls):
            try:
                tx_hash = await self.wallet.submit_single(call)
            except Exception as e:
                logger.warning(f"Call {index + 1}/{len(calls)} failed: {e}")
                failures.append((index, e))
                continue
            hashes.append(tx_hash)
            self.transaction_hash_list = list(hashes)

        self.result = SubmissionResult(transaction_hashes=list(hashes))
        if hashes:
            self.store.update(TransactionLegacyExecutedUpdate(transaction_hash_list=list(hashes)))

        if failures:
            rejected = [e for _, e in failures if classify_error(e) == ErrorCategory.USER_REJECTED]
            first = rejected[0] if rejected else failures[0][1]
            message = USER_REJECTED_MESSAGE if rejected else user_facing_message(first)
            self.error_message = message
            logger.error(f"{len(failures)} of {len(calls)} calls failed to submit")
            self.store.update(
                ErrorUpdate(code=WRITE_CONTRACT_ERROR_CODE, error=str(first), message=message)
            )
            return

        await self.receipt_aggregator.collect(hashes, expected_count=len(calls))

    async def _await_batch(self, batch_id: str) -> None:
        """Poll the batch until the wallet reports it settled."""
        while True:
            try:
                status = await self.wallet.get_calls_status(batch_id)
            except Exception as e:
                self._fail(CALLS_STATUS_ERROR_CODE, e)
                return

            self.calls_status = status.state
            if status.is_pending:
                await asyncio.sleep(self.poll_interval_seconds)
                continue

            if status.state == CallsStatusState.FAILED:
                self._fail(CALLS_STATUS_ERROR_CODE, RuntimeError(f"Batch {batch_id} failed"))
                return

            tx_hash = status.transaction_hash
            if tx_hash is None:
                self.store.update(SuccessUpdate(transaction_receipts=list(status.receipts)))
                return
            self.result.transaction_hash = tx_hash
            await self.receipt_aggregator.collect([tx_hash], expected_count=1)
            return

    def _fail(self, code: str, error: Exception) -> None:
        message = user_facing_message(error)
        self.error_message = message
        logger.error(f"Submission failed [{code}]: {error}")
        self.store.update(ErrorUpdate(code=code, error=str(error), message=message))

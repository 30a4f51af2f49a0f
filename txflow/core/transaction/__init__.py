"""
Transaction Submission Layer

Provides the orchestration for submitting contract calls:
- TransactionOrchestrator: batched submission with sequential fallback
- ReceiptAggregator: waits for one receipt per submitted call

Usage:
    from txflow.core.transaction import Call, TransactionOrchestrator

    orchestrator = TransactionOrchestrator(
        wallet,
        calls=[Call(to="0x...", data="0x...")],
        chain_id=8453,
    )
    await orchestrator.submit()
    print(orchestrator.store.status)
"""

from .models import (
    BatchHandle,
    Call,
    CallsStatus,
    CallsStatusState,
    ReceiptStatus,
    SubmissionKind,
    SubmissionResult,
    TransactionReceipt,
)

from .receipts import ReceiptAggregator

from .orchestrator import TransactionOrchestrator

__all__ = [
    # Models
    "BatchHandle",
    "Call",
    "CallsStatus",
    "CallsStatusState",
    "ReceiptStatus",
    "SubmissionKind",
    "SubmissionResult",
    "TransactionReceipt",
    # Orchestration
    "ReceiptAggregator",
    "TransactionOrchestrator",
]

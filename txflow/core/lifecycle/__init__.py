"""
Lifecycle Status Module

Tagged lifecycle status, typed per-variant updates and the merging store
read by every consumer of a submission or exchange.
"""

from .models import (
    ERROR_STATUS_KEYS,
    AmountChangeUpdate,
    ErrorUpdate,
    InitUpdate,
    LifecycleStatus,
    LifecycleStatusName,
    LifecycleStatusUpdate,
    SuccessUpdate,
    TransactionLegacyExecutedUpdate,
    TransactionPendingUpdate,
    parse_status_update,
)
from .store import LifecycleStatusStore

__all__ = [
    # Store
    "LifecycleStatusStore",
    # Models
    "LifecycleStatus",
    "LifecycleStatusName",
    "LifecycleStatusUpdate",
    "ERROR_STATUS_KEYS",
    "parse_status_update",
    # Variants
    "InitUpdate",
    "AmountChangeUpdate",
    "TransactionPendingUpdate",
    "TransactionLegacyExecutedUpdate",
    "SuccessUpdate",
    "ErrorUpdate",
]

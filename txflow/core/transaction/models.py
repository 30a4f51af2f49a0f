"""
Transaction submission models and types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


def _parse_hex(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(str(value), 16)


@dataclass(frozen=True)
class Call:
    """One contract invocation request. Immutable once constructed."""
    to: str                                     # Target contract address
    data: str = "0x"                            # Encoded calldata (hex)
    value: int = 0                              # Wei to send
    chain_id: Optional[int] = None
    description: str = ""

    def to_rpc_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "to": self.to,
            "data": self.data,
            "value": hex(self.value),
        }
        if self.chain_id is not None:
            payload["chainId"] = hex(self.chain_id)
        return payload


@dataclass(frozen=True)
class BatchHandle:
    """Identifier returned by wallet_sendCalls, used to poll batch status."""
    id: str


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass
class TransactionReceipt:
    """Confirmation record for one submitted call."""
    transaction_hash: str
    status: ReceiptStatus = ReceiptStatus.SUCCESS
    block_number: Optional[int] = None
    block_hash: Optional[str] = None
    gas_used: Optional[int] = None
    logs: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.status == ReceiptStatus.SUCCESS

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "TransactionReceipt":
        raw_status = data.get("status", "0x1")
        if raw_status in ("success", "reverted"):
            status = ReceiptStatus(raw_status)
        else:
            status = ReceiptStatus.SUCCESS if _parse_hex(raw_status) == 1 else ReceiptStatus.REVERTED
        return cls(
            transaction_hash=data["transactionHash"],
            status=status,
            block_number=_parse_hex(data.get("blockNumber")),
            block_hash=data.get("blockHash"),
            gas_used=_parse_hex(data.get("gasUsed")),
            logs=list(data.get("logs") or []),
        )


class CallsStatusState(str, Enum):
    """Aggregate batch state reported by wallet_getCallsStatus."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


@dataclass
class CallsStatus:
    """Settlement state of a submitted batch."""
    state: CallsStatusState
    receipts: List[TransactionReceipt] = field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return self.state == CallsStatusState.PENDING

    @property
    def transaction_hash(self) -> Optional[str]:
        if not self.receipts:
            return None
        return self.receipts[0].transaction_hash

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> "CallsStatus":
        raw = data.get("status")
        # EIP-5792 moved from strings to numeric status codes
        if isinstance(raw, int):
            if raw < 200:
                state = CallsStatusState.PENDING
            elif raw < 300:
                state = CallsStatusState.CONFIRMED
            else:
                state = CallsStatusState.FAILED
        else:
            try:
                state = CallsStatusState(str(raw).upper())
            except ValueError:
                state = CallsStatusState.FAILED
        receipts = [TransactionReceipt.from_rpc(item) for item in data.get("receipts") or []]
        return cls(state=state, receipts=receipts)


class SubmissionKind(str, Enum):
    SINGLE = "single"
    SEQUENTIAL = "sequential"
    BATCH = "batch"


@dataclass
class SubmissionResult:
    """What a submission attempt produced: one hash, a hash list, or a batch id."""
    transaction_hash: Optional[str] = None
    transaction_hashes: List[str] = field(default_factory=list)
    batch_id: Optional[str] = None

    @property
    def kind(self) -> SubmissionKind:
        if self.batch_id is not None:
            return SubmissionKind.BATCH
        if self.transaction_hashes:
            return SubmissionKind.SEQUENTIAL
        return SubmissionKind.SINGLE

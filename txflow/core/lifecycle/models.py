"""
Lifecycle status models.

A status is a tagged value: ``status_name`` selects the variant and
``status_data`` carries the accumulated payload. Updates are typed per
variant and discriminated by ``status_name``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class LifecycleStatusName(str, Enum):
    """Variants of the lifecycle status."""
    INIT = "init"
    AMOUNT_CHANGE = "amountChange"
    TRANSACTION_PENDING = "transactionPending"
    TRANSACTION_LEGACY_EXECUTED = "transactionLegacyExecuted"
    SUCCESS = "success"
    ERROR = "error"


# Keys that only live as long as the error variant does
ERROR_STATUS_KEYS = frozenset({"code", "error", "message"})


@dataclass(frozen=True)
class LifecycleStatus:
    """Read-only snapshot of the current lifecycle status."""
    status_name: LifecycleStatusName
    status_data: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "status_name", LifecycleStatusName(self.status_name))
        if not isinstance(self.status_data, MappingProxyType):
            object.__setattr__(self, "status_data", MappingProxyType(dict(self.status_data)))

    def get(self, key: str, default: Any = None) -> Any:
        return self.status_data.get(key, default)

    @property
    def is_error(self) -> bool:
        return self.status_name == LifecycleStatusName.ERROR

    @property
    def is_success(self) -> bool:
        return self.status_name == LifecycleStatusName.SUCCESS


class _StatusUpdate(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    status_name: str

    def status_data(self) -> Dict[str, Any]:
        """Only the fields the caller actually set; nested objects are kept as-is."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "status_name"
        }


class InitUpdate(_StatusUpdate):
    status_name: Literal["init"] = "init"
    is_missing_required_field: Optional[bool] = None
    max_slippage: Optional[float] = None


class AmountChangeUpdate(_StatusUpdate):
    status_name: Literal["amountChange"] = "amountChange"
    amount_from: Optional[str] = None
    amount_to: Optional[str] = None
    token_from: Optional[Any] = None
    token_to: Optional[Any] = None
    is_missing_required_field: Optional[bool] = None


class TransactionPendingUpdate(_StatusUpdate):
    status_name: Literal["transactionPending"] = "transactionPending"


class TransactionLegacyExecutedUpdate(_StatusUpdate):
    status_name: Literal["transactionLegacyExecuted"] = "transactionLegacyExecuted"
    transaction_hash_list: List[str]


class SuccessUpdate(_StatusUpdate):
    status_name: Literal["success"] = "success"
    transaction_receipts: List[Any]


class ErrorUpdate(_StatusUpdate):
    status_name: Literal["error"] = "error"
    code: str
    error: str
    message: str = ""

    def status_data(self) -> Dict[str, Any]:
        # error payload is always complete
        return {"code": self.code, "error": self.error, "message": self.message}


LifecycleStatusUpdate = Annotated[
    Union[
        InitUpdate,
        AmountChangeUpdate,
        TransactionPendingUpdate,
        TransactionLegacyExecutedUpdate,
        SuccessUpdate,
        ErrorUpdate,
    ],
    Field(discriminator="status_name"),
]

_update_adapter: TypeAdapter = TypeAdapter(LifecycleStatusUpdate)


def parse_status_update(payload: Mapping[str, Any]) -> _StatusUpdate:
    """Validate a raw ``{"status_name": ..., **data}`` mapping into a typed update."""
    return _update_adapter.validate_python(dict(payload))

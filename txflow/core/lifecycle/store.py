"""
Lifecycle Status Store

Single merge point for lifecycle transitions. Status data persists for the
full lifecycle; error fields never outlive the error variant.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from .models import (
    ERROR_STATUS_KEYS,
    LifecycleStatus,
    LifecycleStatusName,
    _StatusUpdate,
    parse_status_update,
)


StatusListener = Callable[[LifecycleStatus], None]
ErrorListener = Callable[[Dict[str, Any]], None]
SuccessListener = Callable[[List[Any]], None]


class LifecycleStatusStore:
    """
    Holds the current lifecycle status and merges incremental updates.

    Listeners:
    - on_status: every merge, with the new snapshot
    - on_error: every update into the ``error`` variant, with its payload
    - on_success: every update into the ``success`` variant, with the receipts
    """

    def __init__(
        self,
        initial_status: Optional[LifecycleStatus] = None,
        *,
        on_status: Optional[StatusListener] = None,
        on_error: Optional[ErrorListener] = None,
        on_success: Optional[SuccessListener] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._status = initial_status or LifecycleStatus(LifecycleStatusName.INIT, {})
        self.logger = logger or logging.getLogger(__name__)
        self._status_listeners: List[StatusListener] = []
        self._error_listeners: List[ErrorListener] = []
        self._success_listeners: List[SuccessListener] = []
        if on_status:
            self._status_listeners.append(on_status)
        if on_error:
            self._error_listeners.append(on_error)
        if on_success:
            self._success_listeners.append(on_success)

    @property
    def status(self) -> LifecycleStatus:
        """Current snapshot."""
        return self._status

    @property
    def status_name(self) -> LifecycleStatusName:
        return self._status.status_name

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener; returns a callable that removes it."""
        self._status_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._status_listeners:
                self._status_listeners.remove(listener)

        return unsubscribe

    def on_error(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def on_success(self, listener: SuccessListener) -> None:
        self._success_listeners.append(listener)

    def update(self, update: Union[_StatusUpdate, Mapping[str, Any]]) -> None:
        """Merge an update into the current status and notify listeners."""
        if not isinstance(update, _StatusUpdate):
            update = parse_status_update(update)

        previous = self._status
        persisted = dict(previous.status_data)
        if previous.status_name == LifecycleStatusName.ERROR:
            for key in ERROR_STATUS_KEYS:
                persisted.pop(key, None)

        self._status = LifecycleStatus(
            status_name=LifecycleStatusName(update.status_name),
            status_data={**persisted, **update.status_data()},
        )
        self.logger.debug(
            f"Lifecycle status {previous.status_name.value} -> {self._status.status_name.value}"
        )
        self._emit(self._status)

    def _emit(self, status: LifecycleStatus) -> None:
        if status.status_name == LifecycleStatusName.ERROR:
            payload = {key: status.status_data.get(key) for key in ERROR_STATUS_KEYS}
            for listener in list(self._error_listeners):
                self._call(listener, payload)
        elif status.status_name == LifecycleStatusName.SUCCESS:
            receipts = list(status.status_data.get("transaction_receipts") or [])
            for listener in list(self._success_listeners):
                self._call(listener, receipts)

        for listener in list(self._status_listeners):
            self._call(listener, status)

    def _call(self, listener: Callable[[Any], None], payload: Any) -> None:
        try:
            listener(payload)
        except Exception:
            name = getattr(listener, "__name__", repr(listener))
            self.logger.exception(f"Lifecycle listener {name} failed")

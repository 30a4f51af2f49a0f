"""
Tests for the Lifecycle Status Store

Tests for merge semantics, error stripping and listener notification.
"""

import pytest
from pydantic import ValidationError

from txflow.core.lifecycle import (
    AmountChangeUpdate,
    ErrorUpdate,
    InitUpdate,
    LifecycleStatus,
    LifecycleStatusName,
    LifecycleStatusStore,
    SuccessUpdate,
    TransactionLegacyExecutedUpdate,
    TransactionPendingUpdate,
    parse_status_update,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store() -> LifecycleStatusStore:
    return LifecycleStatusStore(
        LifecycleStatus(
            LifecycleStatusName.INIT,
            {"is_missing_required_field": True, "max_slippage": 3.0},
        )
    )


# =============================================================================
# Merge Semantics
# =============================================================================

class TestMerge:
    """Tests for shallow-merge of status data."""

    def test_initial_status(self, store: LifecycleStatusStore):
        assert store.status.status_name == LifecycleStatusName.INIT
        assert store.status.get("max_slippage") == 3.0

    def test_fields_persist_across_transitions(self, store: LifecycleStatusStore):
        store.update(AmountChangeUpdate(amount_from="1", amount_to="2", is_missing_required_field=False))
        store.update(TransactionPendingUpdate())

        assert store.status.status_name == LifecycleStatusName.TRANSACTION_PENDING
        assert store.status.get("max_slippage") == 3.0
        assert store.status.get("amount_from") == "1"
        assert store.status.get("is_missing_required_field") is False

    def test_new_fields_overwrite_old(self, store: LifecycleStatusStore):
        store.update(InitUpdate(max_slippage=1.5))
        assert store.status.get("max_slippage") == 1.5
        assert store.status.get("is_missing_required_field") is True

    def test_unset_fields_do_not_overwrite(self, store: LifecycleStatusStore):
        store.update(AmountChangeUpdate(amount_from="5"))
        store.update(AmountChangeUpdate(amount_to="7"))

        assert store.status.get("amount_from") == "5"
        assert store.status.get("amount_to") == "7"

    def test_explicit_none_token_is_recorded(self, store: LifecycleStatusStore):
        store.update(AmountChangeUpdate(token_from=None, is_missing_required_field=True))
        assert "token_from" in store.status.status_data
        assert "token_to" not in store.status.status_data

    def test_snapshot_is_read_only(self, store: LifecycleStatusStore):
        with pytest.raises(TypeError):
            store.status.status_data["max_slippage"] = 10  # type: ignore[index]

    def test_accepts_raw_mapping(self, store: LifecycleStatusStore):
        store.update({"status_name": "transactionLegacyExecuted", "transaction_hash_list": ["0x1", "0x2"]})

        assert store.status.status_name == LifecycleStatusName.TRANSACTION_LEGACY_EXECUTED
        assert store.status.get("transaction_hash_list") == ["0x1", "0x2"]

    def test_raw_mapping_is_validated(self):
        with pytest.raises(ValidationError):
            parse_status_update({"status_name": "error", "code": "X"})

        with pytest.raises(ValidationError):
            parse_status_update({"status_name": "bogus"})


# =============================================================================
# Error Stripping
# =============================================================================

class TestErrorStripping:
    """Errors never persist into a later non-error variant."""

    def test_error_fields_dropped_on_next_transition(self, store: LifecycleStatusStore):
        store.update(ErrorUpdate(code="TmSPc01", error="boom", message="Something went wrong."))
        assert store.status.is_error
        assert store.status.get("code") == "TmSPc01"

        store.update(AmountChangeUpdate(amount_from="1"))

        data = store.status.status_data
        assert "code" not in data
        assert "error" not in data
        assert "message" not in data
        assert data["max_slippage"] == 3.0

    @pytest.mark.parametrize(
        "follow_up",
        [
            InitUpdate(is_missing_required_field=True),
            AmountChangeUpdate(amount_to="3"),
            TransactionPendingUpdate(),
            TransactionLegacyExecutedUpdate(transaction_hash_list=["0xabc"]),
            SuccessUpdate(transaction_receipts=[]),
        ],
    )
    def test_no_error_leak_into_any_variant(self, store: LifecycleStatusStore, follow_up):
        store.update(ErrorUpdate(code="c", error="e", message="m"))
        store.update(follow_up)

        assert not store.status.is_error
        for key in ("code", "error", "message"):
            assert key not in store.status.status_data

    def test_long_sequence_never_leaks(self, store: LifecycleStatusStore):
        sequence = [
            ErrorUpdate(code="a", error="first", message=""),
            TransactionPendingUpdate(),
            ErrorUpdate(code="b", error="second", message="Request denied."),
            ErrorUpdate(code="c", error="third"),
            SuccessUpdate(transaction_receipts=["r"]),
            InitUpdate(max_slippage=2),
        ]
        for update in sequence:
            store.update(update)
            if not store.status.is_error:
                assert not {"code", "error", "message"} & set(store.status.status_data)

    def test_error_replaces_previous_error(self, store: LifecycleStatusStore):
        store.update(ErrorUpdate(code="a", error="first", message="m1"))
        store.update(ErrorUpdate(code="b", error="second"))

        assert store.status.get("code") == "b"
        assert store.status.get("error") == "second"
        assert store.status.get("message") == ""


# =============================================================================
# Listeners
# =============================================================================

class TestListeners:

    def test_on_status_fires_on_every_merge(self):
        seen = []
        store = LifecycleStatusStore(on_status=seen.append)

        store.update(TransactionPendingUpdate())
        store.update(TransactionPendingUpdate())

        assert [s.status_name for s in seen] == [
            LifecycleStatusName.TRANSACTION_PENDING,
            LifecycleStatusName.TRANSACTION_PENDING,
        ]

    def test_on_error_and_on_success_fire_once_per_entry(self):
        errors, successes = [], []
        store = LifecycleStatusStore(on_error=errors.append, on_success=successes.append)

        store.update(TransactionPendingUpdate())
        store.update(ErrorUpdate(code="c", error="e", message="m"))
        store.update(TransactionPendingUpdate())
        store.update(SuccessUpdate(transaction_receipts=["r1", "r2"]))

        assert errors == [{"code": "c", "error": "e", "message": "m"}]
        assert successes == [["r1", "r2"]]

    def test_unsubscribe(self):
        seen = []
        store = LifecycleStatusStore()
        unsubscribe = store.subscribe(seen.append)

        store.update(TransactionPendingUpdate())
        unsubscribe()
        store.update(TransactionPendingUpdate())

        assert len(seen) == 1

    def test_failing_listener_does_not_block_others(self):
        seen = []

        def broken(_status):
            raise RuntimeError("listener bug")

        store = LifecycleStatusStore(on_status=broken)
        store.subscribe(seen.append)
        store.update(TransactionPendingUpdate())

        assert len(seen) == 1
        assert store.status.status_name == LifecycleStatusName.TRANSACTION_PENDING

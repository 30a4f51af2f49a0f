"""Diagnostic codes for transaction submission failures.

Codes are unique per call site: Tm (transaction module), TP (transaction
provider), c## (call site).
"""

SWITCH_CHAIN_ERROR_CODE = "TmTPc01"
WRITE_CONTRACTS_ERROR_CODE = "TmTPc02"
WRITE_CONTRACT_ERROR_CODE = "TmTPc03"
CALLS_STATUS_ERROR_CODE = "TmTPc04"
RECEIPT_ERROR_CODE = "TmTPc05"

__all__ = [
    'SWITCH_CHAIN_ERROR_CODE',
    'WRITE_CONTRACTS_ERROR_CODE',
    'WRITE_CONTRACT_ERROR_CODE',
    'CALLS_STATUS_ERROR_CODE',
    'RECEIPT_ERROR_CODE',
]

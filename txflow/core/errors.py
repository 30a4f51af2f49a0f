"""
Error Classification

Defines the error taxonomy used by the submission and quote orchestrators.
Every fault is mapped to a category that decides the user-facing message and
whether the batch -> sequential fallback applies.
"""

from enum import Enum
from typing import Any, Optional


GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
USER_REJECTED_MESSAGE = "Request denied."

# Wallets reject wallet_sendCalls with this text when they cannot batch.
METHOD_NOT_SUPPORTED_ERROR_SUBSTRING = "this request method is not supported"

# EIP-1193 provider error codes
USER_REJECTED_RPC_CODE = 4001
UNSUPPORTED_METHOD_RPC_CODE = 4200


class ErrorCategory(str, Enum):
    """Categories of errors for status decisions."""

    USER_REJECTED = "user_rejected"                # Wallet-level denial
    METHOD_NOT_SUPPORTED = "method_not_supported"  # Triggers sequential fallback
    PROVIDER_QUOTE = "provider_quote"              # Structured quote/build error
    GENERIC = "generic"                            # Anything unclassified


class UserRejectedRequestError(Exception):
    """The user declined the request in their wallet."""

    def __init__(self, message: str = "User rejected the request."):
        super().__init__(message)
        self.message = message


class WalletRpcError(Exception):
    """Error object returned by the wallet JSON-RPC endpoint."""

    def __init__(self, code: Optional[int], message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return f"{self.message} (code={self.code})"


class MethodNotSupportedError(WalletRpcError):
    """The wallet does not implement the requested method."""

    def __init__(self, message: str = METHOD_NOT_SUPPORTED_ERROR_SUBSTRING, code: Optional[int] = UNSUPPORTED_METHOD_RPC_CODE):
        if METHOD_NOT_SUPPORTED_ERROR_SUBSTRING not in message.lower():
            message = f"{message}: {METHOD_NOT_SUPPORTED_ERROR_SUBSTRING}"
        super().__init__(code, message)


class ProviderQuoteError(Exception):
    """Structured quote or build failure raised by a swap provider; code and message pass through."""

    def __init__(self, code: str, error: str, message: str = ""):
        super().__init__(error)
        self.code = code
        self.error = error
        self.message = message


class ReceiptTimeoutError(Exception):
    """Receipt polling gave up before the transaction was mined."""

    def __init__(self, tx_hash: str, timeout_seconds: float):
        super().__init__(f"No receipt for {tx_hash} after {timeout_seconds}s")
        self.tx_hash = tx_hash
        self.timeout_seconds = timeout_seconds


def _error_chain(error: BaseException):
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def is_user_rejected_request_error(error: BaseException) -> bool:
    """Return ``True`` if the error, or anything in its cause chain, is a wallet denial."""

    for item in _error_chain(error):
        if isinstance(item, UserRejectedRequestError):
            return True
        if type(item).__name__ == "UserRejectedRequestError":
            return True
        if getattr(item, "code", None) == USER_REJECTED_RPC_CODE:
            return True
    return False


def is_method_not_supported_error(error: BaseException) -> bool:
    """Return ``True`` if the error message carries the not-supported marker."""

    return METHOD_NOT_SUPPORTED_ERROR_SUBSTRING in str(error).lower()


def classify_error(error: BaseException) -> ErrorCategory:
    """
    Classify an exception raised by a wallet or provider call.

    User rejection takes precedence over the not-supported marker.
    """
    if is_user_rejected_request_error(error):
        return ErrorCategory.USER_REJECTED
    if is_method_not_supported_error(error):
        return ErrorCategory.METHOD_NOT_SUPPORTED
    if isinstance(error, ProviderQuoteError):
        return ErrorCategory.PROVIDER_QUOTE
    return ErrorCategory.GENERIC


def user_facing_message(error: BaseException) -> str:
    category = classify_error(error)
    if category == ErrorCategory.USER_REJECTED:
        return USER_REJECTED_MESSAGE
    if category == ErrorCategory.PROVIDER_QUOTE and error.message:
        return error.message
    return GENERIC_ERROR_MESSAGE

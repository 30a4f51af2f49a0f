from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from ..core.swap.models import QuoteResult, SwapTransactionResult, Token
from ..core.transaction.models import BatchHandle, Call, CallsStatus, TransactionReceipt


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class WalletProvider(Provider):
    """Connected wallet capable of switching chains and sending calls"""

    address: Optional[str] = None
    chain_id: Optional[int] = None

    @abstractmethod
    async def switch_chain(self, chain_id: int) -> None:
        """Switch the wallet to ``chain_id``; raises if rejected or unsupported"""
        pass

    @abstractmethod
    async def submit_batch(
        self,
        calls: Sequence[Call],
        capabilities: Optional[Dict[str, Any]] = None,
    ) -> BatchHandle:
        """Submit all calls atomically (EIP-5792 wallet_sendCalls)"""
        pass

    @abstractmethod
    async def get_calls_status(self, batch_id: str) -> CallsStatus:
        """Settlement state of a batch previously returned by submit_batch"""
        pass

    @abstractmethod
    async def submit_single(self, call: Call) -> str:
        """Send one call as its own transaction and return its hash"""
        pass

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str, chain_id: Optional[int] = None) -> TransactionReceipt:
        """Block until the transaction is mined and return its receipt"""
        pass


class SwapQuoteProvider(Provider):
    """Provider for swap quotes and executable swap transactions"""

    @abstractmethod
    async def get_quote(
        self,
        amount_reference: str,
        amount: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ) -> QuoteResult:
        """Quote ``amount`` (human units) of ``from_token`` against ``to_token``"""
        pass

    @abstractmethod
    async def build_swap_transaction(
        self,
        amount: str,
        from_address: str,
        from_token: Token,
        to_token: Token,
        max_slippage: str,
        use_aggregator: bool = False,
    ) -> SwapTransactionResult:
        """Build the approval (if any) and swap transactions for ``from_address``"""
        pass

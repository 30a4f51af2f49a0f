"""SwapOrchestrator drives the two-sided amount entry and swap submission."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Coroutine, Dict, Optional, Set, Tuple

from ...config import settings
from ...services.amounts import format_token_amount, is_empty_amount
from ..errors import ErrorCategory, classify_error, user_facing_message
from ..lifecycle import (
    AmountChangeUpdate,
    ErrorUpdate,
    InitUpdate,
    LifecycleStatus,
    LifecycleStatusName,
    LifecycleStatusStore,
)
from ..transaction.orchestrator import TransactionOrchestrator
from .constants import QUOTE_FETCH_ERROR_CODE, SWAP_SUBMIT_ERROR_CODE, USDC_TOKEN
from .models import Quote, SwapSide, SwapSideName, Token, is_swap_error

if TYPE_CHECKING:
    from ...providers.base import SwapQuoteProvider, WalletProvider


class SwapOrchestrator:
    """Encapsulates amount entry, quoting, USD valuation and swap submission.

    Every amount change or toggle starts a new request generation. Responses
    that arrive for an older generation are dropped, so a slow quote can never
    overwrite the result of a newer one.
    """

    def __init__(
        self,
        quote_provider: "SwapQuoteProvider",
        wallet: Optional["WalletProvider"] = None,
        store: Optional[LifecycleStatusStore] = None,
        *,
        max_slippage: Optional[float] = None,
        use_aggregator: Optional[bool] = None,
        capabilities: Optional[Dict[str, Any]] = None,
        debounce_seconds: Optional[float] = None,
        usd_valuation_delays: Optional[Tuple[float, float]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.quote_provider = quote_provider
        self.wallet = wallet
        self.logger = logger or logging.getLogger(__name__)
        self._default_max_slippage = (
            max_slippage if max_slippage is not None else settings.default_max_slippage
        )
        self.use_aggregator = (
            use_aggregator if use_aggregator is not None else settings.use_aggregator
        )
        self.capabilities = capabilities
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.quote_debounce_seconds
        )
        # (quoted side, edited side)
        self.usd_valuation_delays = usd_valuation_delays or (
            settings.usd_valuation_to_delay_seconds,
            settings.usd_valuation_from_delay_seconds,
        )
        self.store = store or LifecycleStatusStore(
            LifecycleStatus(
                LifecycleStatusName.INIT,
                {
                    "is_missing_required_field": True,
                    "max_slippage": self._default_max_slippage,
                },
            )
        )

        self.from_side = SwapSide()
        self.to_side = SwapSide()
        self.last_submission: Optional[TransactionOrchestrator] = None
        self._generation = 0
        self._valuation_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def lifecycle_status(self) -> LifecycleStatus:
        return self.store.status

    @property
    def max_slippage(self) -> float:
        value = self.store.status.get("max_slippage")
        return self._default_max_slippage if value is None else value

    async def handle_amount_change(
        self,
        side: SwapSideName,
        amount: str,
        source_token: Optional[Token] = None,
        destination_token: Optional[Token] = None,
    ) -> None:
        """React to the user editing ``side``; quotes the opposite side."""

        source, destination = self._sides(side)
        generation = self._supersede()

        source.amount = amount
        if source_token is not None:
            source.token = source_token
        if destination_token is not None:
            destination.token = destination_token

        if source.token is None or destination.token is None:
            self._publish_amount_change(is_missing_required_field=True)
            return

        if is_empty_amount(amount):
            destination.amount = ""
            destination.amount_usd = ""
            return

        destination.loading = True
        self.store.update(
            AmountChangeUpdate(
                # the previous opposite amount is irrelevant while fetching
                amount_from=amount if side == "from" else "",
                amount_to=amount if side == "to" else "",
                token_from=self.from_side.token,
                token_to=self.to_side.token,
                is_missing_required_field=True,
            )
        )

        try:
            if self.debounce_seconds > 0:
                await asyncio.sleep(self.debounce_seconds)
                if self._is_stale(generation):
                    return

            response = await self.quote_provider.get_quote(
                "from",
                amount,
                source.token,
                destination.token,
                _format_slippage(self.max_slippage),
                self.use_aggregator,
            )
            if self._is_stale(generation):
                self.logger.debug(f"Dropping stale quote for generation {generation}")
                return

            if is_swap_error(response):
                self.store.update(
                    ErrorUpdate(code=response.code, error=response.error, message="")
                )
                return

            formatted_amount = format_token_amount(response.to_amount, response.to_token.decimals)
            destination.amount = formatted_amount
            self.store.update(
                AmountChangeUpdate(
                    amount_from=amount if side == "from" else formatted_amount,
                    amount_to=amount if side == "to" else formatted_amount,
                    token_from=self.from_side.token,
                    token_to=self.to_side.token,
                    is_missing_required_field=not formatted_amount,
                )
            )
            self._schedule_valuations(response, source, destination)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._is_stale(generation):
                return
            self.logger.error(f"Quote fetch failed: {e}")
            if classify_error(e) == ErrorCategory.PROVIDER_QUOTE:
                self.store.update(ErrorUpdate(code=e.code, error=e.error, message=""))
            else:
                self.store.update(
                    ErrorUpdate(code=QUOTE_FETCH_ERROR_CODE, error=repr(e), message="")
                )
        finally:
            if not self._is_stale(generation):
                destination.loading = False

    def handle_toggle(self) -> None:
        """Swap both sides' token and amount and publish the swapped state."""

        self._supersede()
        from_side, to_side = self.from_side, self.to_side
        from_side.token, to_side.token = to_side.token, from_side.token
        from_side.amount, to_side.amount = to_side.amount, from_side.amount
        from_side.amount_usd, to_side.amount_usd = to_side.amount_usd, from_side.amount_usd
        self._publish_amount_change(
            is_missing_required_field=not (
                from_side.token and to_side.token and from_side.amount and to_side.amount
            )
        )

    async def handle_submit(self) -> None:
        """Build the swap for the current inputs and submit it through the wallet."""

        address = self.wallet.address if self.wallet else None
        from_side, to_side = self.from_side, self.to_side
        if not address or not from_side.token or not to_side.token or not from_side.amount:
            return

        try:
            response = await self.quote_provider.build_swap_transaction(
                from_side.amount,
                address,
                from_side.token,
                to_side.token,
                _format_slippage(self.max_slippage),
                self.use_aggregator,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Swap build failed: {e}")
            if classify_error(e) == ErrorCategory.PROVIDER_QUOTE:
                code, error = e.code, e.error
            else:
                code, error = SWAP_SUBMIT_ERROR_CODE, repr(e)
            self.store.update(
                ErrorUpdate(code=code, error=error, message=user_facing_message(e))
            )
            return

        if is_swap_error(response):
            self.store.update(
                ErrorUpdate(code=response.code, error=response.error, message=response.message)
            )
            return

        submission = TransactionOrchestrator(
            self.wallet,
            self.store,
            calls=response.to_calls(),
            capabilities=self.capabilities,
            chain_id=from_side.token.chain_id,
        )
        self.last_submission = submission
        await submission.submit()

        if self.store.status.status_name == LifecycleStatusName.SUCCESS:
            self._reset_after_success()

    async def drain_valuations(self) -> None:
        """Wait for the pending USD valuation tasks to finish."""
        if self._valuation_tasks:
            await asyncio.gather(*list(self._valuation_tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel background valuation tasks."""
        tasks = list(self._valuation_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _sides(self, side: SwapSideName) -> Tuple[SwapSide, SwapSide]:
        if side == "from":
            return self.from_side, self.to_side
        if side == "to":
            return self.to_side, self.from_side
        raise ValueError(f"Unknown swap side: {side!r}")

    def _supersede(self) -> int:
        """Start a new request generation; older in-flight work becomes stale."""
        self._generation += 1
        for task in list(self._valuation_tasks):
            task.cancel()
        self.from_side.loading = False
        self.to_side.loading = False
        return self._generation

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def _publish_amount_change(self, *, is_missing_required_field: bool) -> None:
        self.store.update(
            AmountChangeUpdate(
                amount_from=self.from_side.amount,
                amount_to=self.to_side.amount,
                token_from=self.from_side.token,
                token_to=self.to_side.token,
                is_missing_required_field=is_missing_required_field,
            )
        )

    def _schedule_valuations(self, quote: Quote, source: SwapSide, destination: SwapSide) -> None:
        # staggered to stay under the quote API rate limit
        to_delay, from_delay = self.usd_valuation_delays
        self._spawn(self._fetch_amount_usd(destination, quote.to_token, quote.to_amount, to_delay))
        self._spawn(self._fetch_amount_usd(source, quote.from_token, quote.from_amount, from_delay))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._valuation_tasks.add(task)
        task.add_done_callback(self._valuation_tasks.discard)

    async def _fetch_amount_usd(self, side: SwapSide, token: Token, amount: str, delay: float) -> None:
        """Best-effort USD valuation; failures leave ``amount_usd`` empty."""
        await asyncio.sleep(delay)
        side.amount_usd = ""
        human_amount = format_token_amount(amount, token.decimals)

        if token.chain_id == USDC_TOKEN.chain_id and token.address.lower() == USDC_TOKEN.address:
            side.amount_usd = human_amount
            return

        try:
            response = await self.quote_provider.get_quote(
                "from",
                human_amount,
                token,
                USDC_TOKEN,
                "0",
                self.use_aggregator,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.debug(f"USD valuation for {token.symbol} failed: {e}")
            return

        if not is_swap_error(response):
            side.amount_usd = format_token_amount(response.to_amount, response.to_token.decimals)

    def _reset_after_success(self) -> None:
        self._supersede()
        self.store.update(
            InitUpdate(is_missing_required_field=True, max_slippage=self.max_slippage)
        )
        self.from_side.reset()
        self.to_side.reset()


def _format_slippage(value: float) -> str:
    return f"{value:g}"

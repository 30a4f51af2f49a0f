import os

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Ensure we pick up legacy environment variable aliases."""

        super().model_post_init(__context)

        if not self.swap_api_key:
            fallback = os.getenv("CDP_API_KEY") or os.getenv("ONCHAINKIT_API_KEY")
            if fallback:
                object.__setattr__(self, "swap_api_key", fallback)

    log_level: str = Field(default="INFO", description="Logging level")

    # Wallet JSON-RPC endpoint
    wallet_rpc_url: str = Field(default="", description="Wallet JSON-RPC endpoint (EIP-1193 bridge)")
    wallet_sendcalls_version: str = Field(default="1.0", description="wallet_sendCalls payload version")

    # Swap API
    swap_api_base_url: str = Field(
        default="https://api.developer.coinbase.com/rpc/v1/base",
        description="Base URL for the swap quote/trade JSON-RPC API",
    )
    swap_api_key: str = Field(
        default="",
        description="Swap API key appended to the base URL",
        validation_alias=AliasChoices("swap_api_key", "SWAP_API_KEY"),
    )

    # Swap defaults
    default_max_slippage: float = Field(default=3.0, ge=0, le=100, description="Default max slippage in percent")
    use_aggregator: bool = Field(default=False, description="Route swaps through the aggregator (v1) API")
    quote_debounce_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Delay before a quote fetch; newer amount changes within the window supersede it",
    )
    usd_valuation_to_delay_seconds: float = Field(
        default=1.5,
        ge=0,
        description="Delay before valuing the quoted side in USD",
    )
    usd_valuation_from_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Delay before valuing the edited side in USD",
    )

    # Polling / timeouts for the wallet primitives
    calls_status_poll_interval_seconds: float = Field(
        default=1.0,
        gt=0,
        description="Interval between wallet_getCallsStatus polls for a batch",
    )
    receipt_poll_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Interval between eth_getTransactionReceipt polls",
    )
    receipt_timeout_seconds: int = Field(default=300, ge=1, description="Max seconds to wait for a receipt")
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")

    @property
    def has_swap_api_key(self) -> bool:
        return bool(self.swap_api_key)

    @property
    def has_wallet_rpc(self) -> bool:
        return bool(self.wallet_rpc_url)


# Global settings instance
settings = Settings()

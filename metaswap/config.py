import os

from pathlib import Path
from typing import Any, List

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
        """Pick up the legacy project id variables used by the Li.Fi and Squid SDKs."""

        super().model_post_init(__context)

        if not self.lifi_integrator:
            fallback = os.getenv("LIFI_PROJECT_ID")
            if fallback:
                object.__setattr__(self, "lifi_integrator", fallback)

        if not self.squid_integrator_id:
            object.__setattr__(
                self,
                "squid_integrator_id",
                os.getenv("SQUID_PROJECT_ID") or "astrolab-api",
            )

    # Server Settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    log_level: str = Field(default="INFO", description="Logging level")
    provider_log_level: str = Field(
        default="",
        description="Level for the provider adapter loggers, empty to follow log_level",
    )

    # Transport
    request_timeout_seconds: int = Field(default=30, description="Per-request HTTP timeout")

    # Meta-aggregation defaults
    default_project: str = Field(default="astrolab", description="Integrator id sent to providers")
    default_max_slippage_bps: int = Field(
        default=2000,
        ge=1,
        le=10_000,
        description="Pessimistic slippage applied when a request carries none",
    )
    default_provider_ids: List[str] = Field(
        default_factory=lambda: ["LIFI", "SQUID", "SOCKET"],
        description="Providers queried when a request does not pick any",
    )
    contract_call_provider_ids: List[str] = Field(
        default_factory=lambda: ["LIFI", "SQUID"],
        description="Providers queried for requests carrying post-swap contract calls",
    )
    status_provider_ids: List[str] = Field(
        default_factory=lambda: ["LIFI", "SQUID", "SOCKET"],
        description="Providers polled for cross-chain status",
    )

    # Provider API keys
    lifi_api_key: str = Field(default="", description="Li.Fi API key")
    squid_api_key: str = Field(default="", description="Squid API key")
    socket_api_key: str = Field(default="", description="Socket (Bungee) API key")
    kyberswap_api_key: str = Field(default="", description="KyberSwap client id")
    one_inch_api_key: str = Field(
        default="",
        description="1inch developer portal key",
        validation_alias=AliasChoices("one_inch_api_key", "ONE_INCH_API_KEY", "ONEINCH_API_KEY"),
    )
    zero_x_api_key: str = Field(
        default="",
        description="0x API key",
        validation_alias=AliasChoices("zero_x_api_key", "ZERO_X_API_KEY", "ZEROX_API_KEY"),
    )
    unizen_api_key: str = Field(default="", description="Unizen API key")

    # Provider integrator ids
    lifi_integrator: str = Field(default="", description="Li.Fi integrator (falls back to the request project)")
    squid_integrator_id: str = Field(default="", description="Squid x-integrator-id header")

    # Provider base URL overrides
    lifi_base_url: str = Field(default="", description="Override the Li.Fi API root")
    squid_base_url: str = Field(default="", description="Override the Squid API root")
    socket_base_url: str = Field(default="", description="Override the Socket API root")
    kyberswap_base_url: str = Field(default="", description="Override the KyberSwap API root")
    one_inch_base_url: str = Field(default="", description="Override the 1inch API root")
    paraswap_base_url: str = Field(default="", description="Override the ParaSwap API root")
    sifi_base_url: str = Field(default="", description="Override the Sifi API root")
    unizen_base_url: str = Field(default="", description="Override the Unizen API root")

    @property
    def has_lifi_key(self) -> bool:
        return bool(self.lifi_api_key)

    @property
    def has_squid_key(self) -> bool:
        return bool(self.squid_api_key)

    @property
    def has_socket_key(self) -> bool:
        return bool(self.socket_api_key)

    @property
    def has_kyberswap_key(self) -> bool:
        return bool(self.kyberswap_api_key)

    @property
    def has_one_inch_key(self) -> bool:
        return bool(self.one_inch_api_key)

    @property
    def has_zero_x_key(self) -> bool:
        return bool(self.zero_x_api_key)

    @property
    def has_unizen_key(self) -> bool:
        return bool(self.unizen_api_key)


# Global settings instance
settings = Settings()

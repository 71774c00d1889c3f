"""Shared contract and HTTP plumbing for swap/bridge quoting providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import MalformedResponse, ProviderHttpError, ProviderUnavailable
from ..core.models import (
    ProviderId,
    StatusQuery,
    StatusResponse,
    SwapRequest,
    TransactionRequestWithEstimate,
)
from ..core.validation import ensure_valid
from ..logging_config import ADAPTER_LOGGER


def clean_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop None values and serialize booleans/lists the way query strings expect."""

    cleaned: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            if value:
                cleaned[key] = [str(v) for v in value]
        else:
            cleaned[key] = value
    return cleaned


def frozen_table(table: Mapping[int, str]) -> Mapping[int, str]:
    return MappingProxyType(dict(table))


class SwapProvider(ABC):
    """Adapter between the meta-aggregator and one provider's REST API.

    Subclasses map a SwapRequest to the provider's query shape, call its
    quote (and, where separate, build) endpoints and hand the raw amounts to
    the estimate normalizer. Errors are raised, never retried; the
    aggregator decides whether they are fatal.
    """

    provider_id: ProviderId
    api_root: str = ""
    api_key_env: Optional[str] = None
    requires_api_key: bool = False
    supports_cross_chain: bool = False
    supports_contract_calls: bool = False
    supports_status: bool = False
    router_by_chain_id: Mapping[int, str] = frozen_table({})

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.api_key = api_key if api_key is not None else self._configured_api_key()
        self.base_url = (base_url or self._configured_base_url() or self.api_root).rstrip("/")
        self.timeout_s = timeout_s or self.settings.request_timeout_seconds
        self._transport = transport
        self._logger = logging.getLogger(f"{ADAPTER_LOGGER}.{self.provider_id.value.lower()}")

    @property
    def name(self) -> str:
        return self.provider_id.value

    def _configured_api_key(self) -> str:
        return ""

    def _configured_base_url(self) -> str:
        return ""

    # ------------------------------------------------------------------
    # Capability checks
    # ------------------------------------------------------------------

    def supports(self, req: SwapRequest) -> bool:
        """False when the request needs an endpoint variant this provider lacks."""

        if req.is_cross_chain and not self.supports_cross_chain:
            return False
        if req.has_contract_calls and not self.supports_contract_calls:
            return False
        return True

    def supports_chain(self, chain_id: int) -> bool:
        return not self.router_by_chain_id or chain_id in self.router_by_chain_id

    def _check_api_key(self) -> None:
        if self.api_key:
            return
        if self.requires_api_key:
            raise ProviderUnavailable(self.name, env_var=self.api_key_env)
        self._logger.warning("missing env.%s, using public", self.api_key_env)

    def _prepare(self, req: SwapRequest) -> bool:
        """Key check and validation shared by every quoting entry point.

        Returns False when the provider cannot serve this request shape.
        """
        self._check_api_key()
        ensure_valid(req, provider=self.name)
        if not self.supports(req):
            self._logger.info(
                "%s does not support %s requests",
                self.name,
                "contract-call" if req.has_contract_calls else "cross-chain",
            )
            return False
        return True

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        return {"accept": "application/json"}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        base_url: Optional[str] = None,
    ) -> Any:
        """Issue one request and return the decoded JSON body.

        Raises:
            ProviderHttpError: status >= 400 or transport failure
            MalformedResponse: body is not JSON
        """
        merged_headers = {**self._headers(), **(headers or {})}
        url_root = (base_url or self.base_url).rstrip("/")
        try:
            async with httpx.AsyncClient(
                base_url=url_root,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    params=clean_params(params) if params else None,
                    json=json,
                    headers=merged_headers,
                )
        except httpx.RequestError as exc:
            raise ProviderHttpError(self.name, 0, type(exc).__name__, str(exc)) from exc

        if response.status_code >= 400:
            raise ProviderHttpError(
                self.name,
                response.status_code,
                response.reason_phrase,
                response.text,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponse(
                self.name,
                f"non-JSON body from {method} {path}: {response.text[:200]}",
            ) from exc

    def _malformed(self, message: str) -> MalformedResponse:
        return MalformedResponse(self.name, message)

    def _decimals(self, reported: Any, hint: Optional[int], side: str) -> int:
        """Provider-reported decimals, else the caller's hint."""

        if reported not in (None, ""):
            return int(reported)
        if hint is not None:
            return int(hint)
        raise self._malformed(f"{side} token decimals not reported and no hint given")

    # ------------------------------------------------------------------
    # Provider surface
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_quote(self, req: SwapRequest) -> Optional[Any]:
        """Fetch the provider's raw quote, or None when it has no route."""

    @abstractmethod
    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        """Quote, build and normalize a transaction for the request."""

    async def get_status(self, query: StatusQuery) -> Optional[StatusResponse]:
        return None

    def describe(self) -> Dict[str, Any]:
        if self.api_key:
            mode = "authenticated"
        elif self.requires_api_key:
            mode = "unavailable"
        else:
            mode = "public"
        return {
            "provider": self.name,
            "mode": mode,
            "cross_chain": self.supports_cross_chain,
            "contract_calls": self.supports_contract_calls,
            "status": self.supports_status,
            "chains": sorted(self.router_by_chain_id),
        }

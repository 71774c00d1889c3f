"""MetaAggregator fans a swap request out to providers and ranks the answers."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from ..config import Settings, settings as default_settings
from ..providers.base import SwapProvider
from ..providers.registry import ProviderRegistry, build_default_registry
from .errors import SwapperError
from .formatting import swap_request_to_string, wei_to_string
from .models import (
    ProviderId,
    StatusQuery,
    StatusResponse,
    SwapRequest,
    TransactionRequestWithEstimate,
)
from .validation import ensure_valid, is_address

logger = structlog.stdlib.get_logger(__name__)

_SELECTOR_HEX_LEN = 8
_WORD_HEX_LEN = 64
_ADDRESS_PAD = "0" * 24


def _as_list(selection: Any) -> List[Any]:
    if selection is None:
        return []
    if isinstance(selection, (str, ProviderId)):
        return [selection]
    return list(selection)


def rank_transaction_requests(
    results: Iterable[TransactionRequestWithEstimate],
) -> List[TransactionRequestWithEstimate]:
    """Best exchange rate first; cheaper gas breaks ties, then fan-out order."""

    return sorted(
        results,
        key=lambda tr: (-tr.estimated_exchange_rate, tr.total_gas_cost_usd),
    )


def replace_address_words(call_data: str, old: str, new: str) -> str:
    """Swap ABI-encoded address arguments equal to ``old`` for ``new``.

    Only 32-byte words following the 4-byte selector are considered, so the
    address bytes appearing inside unrelated arguments are left untouched.
    """
    if not call_data or not is_address(old) or not is_address(new):
        return call_data
    prefixed = call_data[:2].lower() == "0x"
    body = call_data[2:] if prefixed else call_data
    if len(body) < _SELECTOR_HEX_LEN + _WORD_HEX_LEN:
        return call_data

    old_word = _ADDRESS_PAD + old[2:].lower()
    new_word = _ADDRESS_PAD + new[2:].lower()
    chunks = [body[:_SELECTOR_HEX_LEN]]
    offset = _SELECTOR_HEX_LEN
    while offset + _WORD_HEX_LEN <= len(body):
        word = body[offset:offset + _WORD_HEX_LEN]
        chunks.append(new_word if word.lower() == old_word else word)
        offset += _WORD_HEX_LEN
    chunks.append(body[offset:])
    rewritten = "".join(chunks)
    return ("0x" + rewritten) if prefixed else rewritten


def replace_test_payer(
    tr: TransactionRequestWithEstimate,
    req: SwapRequest,
) -> TransactionRequestWithEstimate:
    """Return ``tr`` re-targeted from the request's test payer to its payer."""

    if not req.test_payer or req.test_payer.lower() == (req.payer or "").lower():
        return tr
    return replace(
        tr,
        data=replace_address_words(tr.data or "", req.test_payer, req.payer) or tr.data,
        from_address=req.payer,
    )


class MetaAggregator:
    """Queries several providers concurrently and returns the best routes.

    Provider failures are isolated: each branch logs and drops its own
    error so one broken provider never hides the others' routes.
    """

    def __init__(
        self,
        registry: Optional[ProviderRegistry] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or default_settings
        self.registry = registry or build_default_registry(self.settings)

    # ------------------------------------------------------------------
    # Request back-filling
    # ------------------------------------------------------------------

    def with_defaults(self, req: SwapRequest) -> SwapRequest:
        """Fill provider set, project, amount form and slippage once, on a copy."""

        if req.provider_ids is None:
            provider_ids = list(
                self.settings.contract_call_provider_ids
                if req.has_contract_calls
                else self.settings.default_provider_ids
            )
        else:
            provider_ids = _as_list(req.provider_ids)
        return replace(
            req,
            provider_ids=provider_ids,
            project=req.project or self.settings.default_project,
            amount_wei=wei_to_string(req.amount_wei),
            max_slippage=req.max_slippage or self.settings.default_max_slippage_bps,
        )

    def _resolve(self, selection: Any) -> List[Tuple[ProviderId, SwapProvider]]:
        resolved: List[Tuple[ProviderId, SwapProvider]] = []
        for item in _as_list(selection):
            try:
                provider_id = item if isinstance(item, ProviderId) else ProviderId(str(item).strip().upper())
            except ValueError:
                logger.warning("unknown_provider", provider=str(item))
                continue
            provider = self.registry.get(provider_id)
            if provider is None:
                logger.warning("provider_not_registered", provider=provider_id.value)
                continue
            if any(pid == provider_id for pid, _ in resolved):
                continue
            resolved.append((provider_id, provider))
        return resolved

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    async def _fetch_transaction_request(
        self,
        provider_id: ProviderId,
        provider: SwapProvider,
        req: SwapRequest,
    ) -> Optional[TransactionRequestWithEstimate]:
        try:
            tr = await provider.get_transaction_request(req)
        except SwapperError as exc:
            logger.warning(
                "provider_quote_failed",
                provider=provider_id.value,
                category=exc.category.value,
                error=exc.message,
            )
            return None
        except Exception as exc:
            logger.warning(
                "provider_quote_failed",
                provider=provider_id.value,
                error=str(exc),
                exc_info=True,
            )
            return None
        if tr is None:
            return None
        return replace(tr, provider_id=provider_id)

    async def get_all_transaction_requests(
        self,
        req: SwapRequest,
    ) -> Optional[List[TransactionRequestWithEstimate]]:
        """Every provider's transaction, best first, or None when none answered.

        Raises:
            InvalidInput: the request fails structural validation
        """
        ensure_valid(req)
        req = self.with_defaults(req)
        providers = self._resolve(req.provider_ids)

        results = await asyncio.gather(*(
            self._fetch_transaction_request(provider_id, provider, req)
            for provider_id, provider in providers
        ))
        found = [tr for tr in results if tr is not None]
        if not found:
            logger.error(f"No viable route found for {swap_request_to_string(req)}")
            return None

        ranked = [replace_test_payer(tr, req) for tr in rank_transaction_requests(found)]
        logger.info(
            f"{len(ranked)} routes found for {swap_request_to_string(req)}",
            order=" > ".join(tr.provider_id.value for tr in ranked if tr.provider_id),
        )
        return ranked

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        ranked = await self.get_all_transaction_requests(req)
        return ranked[0] if ranked else None

    async def get_call_data(self, req: SwapRequest) -> str:
        best = await self.get_transaction_request(req)
        return (best.data or "") if best else ""

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def _fetch_status(
        self,
        provider_id: ProviderId,
        provider: SwapProvider,
        query: StatusQuery,
    ) -> Optional[StatusResponse]:
        try:
            status = await provider.get_status(query)
        except Exception as exc:
            logger.warning("provider_status_failed", provider=provider_id.value, error=str(exc))
            return None
        if status is None:
            return None
        return replace(status, provider_id=provider_id)

    async def get_status(self, query: StatusQuery) -> Optional[StatusResponse]:
        """First answer in provider order, or None. Never raises."""

        selection = query.provider_ids
        if selection is None:
            selection = self.settings.status_provider_ids
        providers = [
            (provider_id, provider)
            for provider_id, provider in self._resolve(selection)
            if provider.supports_status
        ]
        if not providers:
            logger.warning("no_status_provider", transaction_id=query.transaction_id)
            return None

        results = await asyncio.gather(*(
            self._fetch_status(provider_id, provider, query)
            for provider_id, provider in providers
        ))
        return next((status for status in results if status is not None), None)

    # ------------------------------------------------------------------
    # Router tables
    # ------------------------------------------------------------------

    def router_by_chain_id(self, provider_id: Any) -> Mapping[int, str]:
        resolved = self._resolve(provider_id)
        if not resolved:
            raise KeyError(provider_id)
        return resolved[0][1].router_by_chain_id

    def get_router_address(self, provider_id: Any, chain_id: int) -> Optional[str]:
        return self.router_by_chain_id(provider_id).get(int(chain_id))

    def available_providers(self) -> Sequence[ProviderId]:
        return self.registry.ids


_default_aggregator: Optional[MetaAggregator] = None


def get_aggregator() -> MetaAggregator:
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = MetaAggregator()
    return _default_aggregator


async def get_all_transaction_requests(req: SwapRequest) -> Optional[List[TransactionRequestWithEstimate]]:
    return await get_aggregator().get_all_transaction_requests(req)


async def get_transaction_request(req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
    return await get_aggregator().get_transaction_request(req)


async def get_call_data(req: SwapRequest) -> str:
    return await get_aggregator().get_call_data(req)


async def get_status(query: StatusQuery) -> Optional[StatusResponse]:
    return await get_aggregator().get_status(query)

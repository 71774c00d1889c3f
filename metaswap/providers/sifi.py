"""Async adapter for the Sifi API (keyless, same- and cross-chain)."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional

from ..core.estimates import add_estimates_to_transaction_request
from ..core.models import (
    GasEstimate,
    ProviderId,
    SwapRequest,
    TransactionRequest,
    TransactionRequestWithEstimate,
)
from .base import SwapProvider, frozen_table

_ROUTER = "0x65c49E9996A877d062085B71E1460fFBe3C4c5Aa"

ROUTER_BY_CHAIN_ID = frozen_table({
    chain_id: _ROUTER for chain_id in (1, 10, 56, 137, 8453, 42161, 43114)
})


def convert_params(req: SwapRequest) -> Dict[str, Any]:
    return {
        "fromChain": req.input_chain_id,
        "fromToken": req.input,
        "toChain": req.output_chain_id,
        "toToken": req.output,
        "fromAmount": str(req.amount_wei),
        "disablePermit": 1,
    }


class SifiProvider(SwapProvider):
    provider_id = ProviderId.SIFI
    api_root = "https://api.sifi.org/v1"
    supports_cross_chain = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_base_url(self) -> str:
        return self.settings.sifi_base_url

    def _check_api_key(self) -> None:
        return None

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if req.input_chain_id not in self.router_by_chain_id:
            return None
        if not req.payer and req.test_payer:
            req = replace(req, payer=req.test_payer)
        if not self._prepare(req):
            return None
        return await self._request("GET", "/quote", params=convert_params(req))

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        if not quote:
            return None
        payer = req.payer or req.test_payer
        swap = await self._request(
            "POST",
            "/swap",
            json={
                "quote": quote,
                "fromAddress": payer,
                "toAddress": req.receiver or payer,
                # expected to be an EVM address
                "partner": req.referrer,
            },
        )
        raw_tx = (swap or {}).get("tx")
        if not raw_tx or not raw_tx.get("data"):
            raise self._malformed("swap returned no tx")
        try:
            output_amount = int(quote["toAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"quote missing {exc}") from exc

        tx = TransactionRequest(
            from_address=raw_tx.get("from") or payer,
            to=raw_tx.get("to"),
            data=raw_tx["data"],
            value=str(raw_tx.get("value", "0")),
            gas_limit=str(raw_tx["gasLimit"]) if raw_tx.get("gasLimit") else None,
            chain_id=int(raw_tx.get("chainId") or req.input_chain_id),
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=self._decimals(
                (quote.get("fromToken") or {}).get("decimals"), req.input_decimals, "input"
            ),
            output_decimals=self._decimals(
                (quote.get("toToken") or {}).get("decimals"), req.output_decimals, "output"
            ),
            gas_estimate=GasEstimate(),
            approval_address=quote.get("approveAddress") or raw_tx.get("to") or "",
            provider_id=self.provider_id,
        )

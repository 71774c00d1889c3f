"""Async adapter for the 0x swap API v1 (same-chain only).

Each network has its own host (``optimism.api.0x.org``). Without an API key
the adapter can go through Matcha's public proxy when ``matcha=True``.
"""

from __future__ import annotations

import json
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

_EXCHANGE_PROXY = "0xdef1c0ded9bec7f1a1670819833240f027b25eff"

# cf. https://github.com/0xProject/protocol/blob/development/docs/basics/addresses.rst
ROUTER_BY_CHAIN_ID = frozen_table({
    1: _EXCHANGE_PROXY,
    10: "0xdef1abe32c034e558cdd535791643c58a13acc10",
    56: _EXCHANGE_PROXY,
    137: _EXCHANGE_PROXY,
    250: "0xdef189deaef76e379df891899eb5a00a94cbc250",
    8217: _EXCHANGE_PROXY,
    8453: _EXCHANGE_PROXY,
    42161: _EXCHANGE_PROXY,
    42220: _EXCHANGE_PROXY,
    43114: _EXCHANGE_PROXY,
})

# network host prefixes
NETWORK_PREFIX_BY_ID: Dict[int, str] = {
    1: "",
    10: "optimism.",
    56: "bsc.",
    137: "polygon.",
    250: "fantom.",
    8453: "base.",
    42220: "celo.",
    43114: "avalanche.",
    42161: "arbitrum.",
}

MATCHA_API_ROOT = "https://matcha.xyz/api"


def api_root(chain_id: int) -> str:
    return f"https://{NETWORK_PREFIX_BY_ID[chain_id]}api.0x.org/swap/v1"


def convert_params(req: SwapRequest) -> Dict[str, Any]:
    return {
        "sellToken": req.input,
        "buyToken": req.output,
        "sellAmount": str(req.amount_wei),
        "slippagePercentage": req.slippage_bps / 10_000,
        "takerAddress": req.receiver or req.sender,
        "excludedSources": ",".join(req.deny_exchanges) or None,
        "skipValidation": True,
    }


class ZeroXProvider(SwapProvider):
    provider_id = ProviderId.ZERO_X
    api_key_env = "ZERO_X_API_KEY"
    requires_api_key = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def __init__(self, *, matcha: bool = False, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.matcha = matcha
        if matcha:
            self.requires_api_key = False

    def _configured_api_key(self) -> str:
        return self.settings.zero_x_api_key

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key and not self.matcha:
            headers["0x-api-key"] = self.api_key
        return headers

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        if req.input_chain_id not in NETWORK_PREFIX_BY_ID:
            return None
        params = convert_params(req)
        if self.matcha:
            return await self._request(
                "GET",
                "",
                params={
                    "chainId": req.input_chain_id,
                    "resource": "quote",
                    "params": json.dumps({k: v for k, v in params.items() if v is not None}),
                },
                base_url=MATCHA_API_ROOT,
            )
        return await self._request(
            "GET",
            "/quote",
            params=params,
            base_url=api_root(req.input_chain_id),
        )

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        if not quote:
            return None
        if not quote.get("data"):
            raise self._malformed("missing quote.data")
        gas = quote.get("gas") or quote.get("estimatedGas")
        gas_price = quote.get("gasPrice")
        tx = TransactionRequest(
            from_address=req.payer,
            to=quote.get("to"),
            data=quote["data"],
            value=str(quote.get("value", "0")),
            gas_limit=str(int(gas) * 2) if gas else None,
            chain_id=req.input_chain_id,
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=int(quote.get("sellAmount") or req.amount_int),
            output_amount_wei=int(quote.get("buyAmount") or 0),
            input_decimals=self._decimals(None, req.input_decimals, "input"),
            output_decimals=self._decimals(None, req.output_decimals, "output"),
            gas_estimate=GasEstimate(
                total_gas_cost_wei=str(int(gas) * int(gas_price)) if gas and gas_price else "0",
            ),
            approval_address=quote.get("allowanceTarget") or "",
            provider_id=self.provider_id,
        )

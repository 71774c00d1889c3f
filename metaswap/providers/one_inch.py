"""Async adapter for the 1inch swap API v5.2 (same-chain only, key required)."""

from __future__ import annotations

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

_AGGREGATION_ROUTER_V5 = "0x1111111254eeb25477b68fb85ed929f73a960582"

# cf. https://github.com/1inch/limit-order-protocol-utils/blob/master/src/limit-order-protocol.const.ts
ROUTER_BY_CHAIN_ID = frozen_table({
    1: _AGGREGATION_ROUTER_V5,
    10: _AGGREGATION_ROUTER_V5,
    56: _AGGREGATION_ROUTER_V5,
    100: _AGGREGATION_ROUTER_V5,
    137: _AGGREGATION_ROUTER_V5,
    250: _AGGREGATION_ROUTER_V5,
    324: "0x6e2b76966cbd9cf4cc2fa0d76d24d5241e0abc2f",
    8217: _AGGREGATION_ROUTER_V5,
    8453: _AGGREGATION_ROUTER_V5,
    42161: _AGGREGATION_ROUTER_V5,
    43114: _AGGREGATION_ROUTER_V5,
    1313161554: _AGGREGATION_ROUTER_V5,
})


def convert_params(req: SwapRequest) -> Dict[str, Any]:
    return {
        "src": req.input,
        "dst": req.output,
        "amount": str(req.amount_wei),
        "from": req.sender,
        "receiver": req.receiver,
        # percent, clamped to [1, 50]
        "slippage": max(min(round(req.slippage_bps / 100), 50), 1),
        "disableEstimate": True,
        "includeGas": True,
        "includeTokensInfo": True,
        "compatibility": False,
        "excludedProtocols": ",".join(req.deny_exchanges) or None,
    }


class OneInchProvider(SwapProvider):
    """1inch. The swap endpoint quotes and builds in a single call."""

    provider_id = ProviderId.ONE_INCH
    api_root = "https://api.1inch.dev/swap/v5.2"
    api_key_env = "ONE_INCH_API_KEY"
    requires_api_key = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_api_key(self) -> str:
        return self.settings.one_inch_api_key

    def _configured_base_url(self) -> str:
        return self.settings.one_inch_base_url

    def _headers(self) -> Dict[str, str]:
        return {"accept": "application/json", "Authorization": f"Bearer {self.api_key}"}

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        params = convert_params(req)
        params.pop("from")
        params.pop("receiver")
        return await self._request("GET", f"/{req.input_chain_id}/quote", params=params)

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        if not self._prepare(req):
            return None
        self._logger.debug("1inch swap %s", req.input_chain_id)
        body = await self._request("GET", f"/{req.input_chain_id}/swap", params=convert_params(req))
        raw_tx = (body or {}).get("tx")
        if not raw_tx:
            return None
        try:
            output_amount = int(body["toAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"swap missing {exc}") from exc

        gas = raw_tx.get("gas")
        gas_price = raw_tx.get("gasPrice")
        gas_wei = int(gas) * int(gas_price) if gas and gas_price else 0
        tx = TransactionRequest(
            from_address=req.payer,
            to=raw_tx.get("to"),
            data=raw_tx.get("data"),
            value=str(raw_tx.get("value", "0")),
            gas_limit=str(int(gas) * 2) if gas else None,
            gas_price=str(gas_price) if gas_price else None,
            chain_id=req.input_chain_id,
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=self._decimals(
                (body.get("fromToken") or {}).get("decimals"), req.input_decimals, "input"
            ),
            output_decimals=self._decimals(
                (body.get("toToken") or {}).get("decimals"), req.output_decimals, "output"
            ),
            gas_estimate=GasEstimate(total_gas_cost_wei=str(gas_wei)),
            approval_address=raw_tx.get("to") or "",
            provider_id=self.provider_id,
        )

"""Async adapter for the KyberSwap aggregator API (same-chain only).

``GET /routes`` returns a route summary which ``POST /route/build`` turns into
calldata. The summary carries no token decimals, so callers quoting through
KyberSwap pass ``input_decimals``/``output_decimals`` on the request.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from ..core.estimates import add_estimates_to_transaction_request
from ..core.models import (
    GasEstimate,
    ProviderId,
    RouteStep,
    SwapRequest,
    ToolDetails,
    TransactionRequest,
    TransactionRequestWithEstimate,
)
from .base import SwapProvider, frozen_table

_META_AGGREGATION_ROUTER = "0x6131B5fae19EA4f9D964eAc0408E4408b66337b5"

NETWORK_BY_ID: Dict[int, str] = {
    1: "ethereum",
    10: "optimism",
    56: "bsc",
    137: "polygon",
    250: "fantom",
    324: "zksync",
    1101: "polygon-zkevm",
    8453: "base",
    42161: "arbitrum",
    43114: "avalanche",
    59144: "linea",
    534352: "scroll",
    1313161554: "aurora",
}

# cf. https://docs.kyberswap.com/kyberswap-solutions/kyberswap-aggregator/contracts/aggregator-contract-addresses
ROUTER_BY_CHAIN_ID = frozen_table({
    1: _META_AGGREGATION_ROUTER,
    10: _META_AGGREGATION_ROUTER,
    25: _META_AGGREGATION_ROUTER,
    56: _META_AGGREGATION_ROUTER,
    137: _META_AGGREGATION_ROUTER,
    250: _META_AGGREGATION_ROUTER,
    324: "0x3F95eF3f2eAca871858dbE20A93c01daF6C2e923",
    1101: _META_AGGREGATION_ROUTER,
    8217: _META_AGGREGATION_ROUTER,
    8453: _META_AGGREGATION_ROUTER,
    42161: _META_AGGREGATION_ROUTER,
    42220: _META_AGGREGATION_ROUTER,
    43114: _META_AGGREGATION_ROUTER,
    59144: _META_AGGREGATION_ROUTER,
    534352: _META_AGGREGATION_ROUTER,
    1313161554: _META_AGGREGATION_ROUTER,
})

_BUILD_DEADLINE_S = 300


def convert_params(req: SwapRequest, source: str) -> Dict[str, Any]:
    return {
        "tokenIn": req.input,
        "tokenOut": req.output,
        "amountIn": str(req.amount_wei),
        "saveGas": False,
        "gasInclude": True,
        "excludedSources": ",".join(req.deny_exchanges) or None,
        "source": source,
    }


def parse_steps(summary: Dict[str, Any], chain_id: int) -> List[RouteStep]:
    steps = []
    for path in summary.get("route") or []:
        for pool in path:
            exchange = pool.get("exchange") or ""
            steps.append(RouteStep(
                type="swap",
                from_amount=pool.get("swapAmount"),
                to_amount=pool.get("amountOut"),
                from_chain=chain_id,
                to_chain=chain_id,
                tool=exchange,
                tool_details=ToolDetails(key=exchange, name=exchange),
            ))
    return steps


class KyberSwapProvider(SwapProvider):
    provider_id = ProviderId.KYBERSWAP
    api_root = "https://aggregator-api.kyberswap.com"
    api_key_env = "KYBERSWAP_API_KEY"
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_api_key(self) -> str:
        return self.settings.kyberswap_api_key

    def _configured_base_url(self) -> str:
        return self.settings.kyberswap_base_url

    def _source(self, req: SwapRequest) -> str:
        return self.api_key or req.project or self.settings.default_project

    def _path(self, chain_id: int, suffix: str) -> str:
        return f"/{NETWORK_BY_ID[chain_id]}/api/v1{suffix}"

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        if req.input_chain_id not in NETWORK_BY_ID:
            return None
        source = self._source(req)
        return await self._request(
            "GET",
            self._path(req.input_chain_id, "/routes"),
            params=convert_params(req, source),
            headers={"x-client-id": source},
        )

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        summary = ((quote or {}).get("data") or {}).get("routeSummary")
        if not summary:
            return None
        source = self._source(req)
        built = await self._request(
            "POST",
            self._path(req.input_chain_id, "/route/build"),
            json={
                "routeSummary": summary,
                "sender": req.sender,
                "recipient": req.recipient,
                "source": source,
                "skipSimulateTx": True,
                "slippageTolerance": req.slippage_bps,
                "deadline": int(time.time()) + _BUILD_DEADLINE_S,
            },
            headers={"x-client-id": source},
        )
        data = (built or {}).get("data") or {}
        if not data.get("data"):
            raise self._malformed("route/build returned no calldata")

        gas = data.get("gas") or summary.get("gas")
        tx = TransactionRequest(
            from_address=req.payer,
            to=data.get("routerAddress"),
            data=data["data"],
            value=data.get("transactionValue"),
            gas_limit=str(int(gas) * 2) if gas else None,
            chain_id=req.input_chain_id,
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=int(data.get("amountOut") or summary["amountOut"]),
            input_decimals=self._decimals(None, req.input_decimals, "input"),
            output_decimals=self._decimals(None, req.output_decimals, "output"),
            steps=parse_steps(summary, req.input_chain_id),
            gas_estimate=GasEstimate(total_gas_cost_usd=float(summary.get("gasUsd") or 0)),
            approval_address=data.get("routerAddress") or "",
            provider_id=self.provider_id,
        )

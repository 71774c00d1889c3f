"""Async adapter for the ParaSwap v5 API (same-chain only, keyless)."""

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

_AUGUSTUS_V5 = "0xDEF171Fe48CF0115B1d80b88dc8eAB59176FEe57"

ROUTER_BY_CHAIN_ID = frozen_table({
    chain_id: _AUGUSTUS_V5
    for chain_id in (1, 10, 56, 100, 137, 250, 324, 1101, 8217, 8453, 42161, 43114)
})

_DEADLINE_S = 300


def convert_params(req: SwapRequest, partner: str) -> Dict[str, Any]:
    return {
        "network": req.input_chain_id,
        "side": "SELL",
        "srcToken": req.input,
        "destToken": req.output,
        "srcDecimals": req.input_decimals,
        "destDecimals": req.output_decimals,
        "amount": str(req.amount_wei),
        "userAddress": req.receiver or req.sender,
        "partner": partner,
        "excludeDEXS": ",".join(req.deny_exchanges) or None,
        "otherExchangePrices": True,
    }


def build_body(req: SwapRequest, price_route: Dict[str, Any], partner: str) -> Dict[str, Any]:
    body = {
        "srcToken": price_route.get("srcToken", req.input),
        "srcDecimals": price_route.get("srcDecimals"),
        "destToken": price_route.get("destToken", req.output),
        "destDecimals": price_route.get("destDecimals"),
        "srcAmount": price_route.get("srcAmount", str(req.amount_wei)),
        "slippage": req.slippage_bps,
        "userAddress": req.sender,
        "receiver": req.receiver,
        "partner": partner,
        "deadline": req.deadline or int(time.time()) + _DEADLINE_S,
        "priceRoute": price_route,
    }
    return {k: v for k, v in body.items() if v is not None}


def parse_steps(price_route: Dict[str, Any]) -> List[RouteStep]:
    steps = []
    chain_id = price_route.get("network")
    for swap in (price_route.get("bestRoute") or [{}])[0].get("swaps") or []:
        for exchange in swap.get("swapExchanges") or []:
            name = exchange.get("exchange") or ""
            steps.append(RouteStep(
                type="swap",
                from_amount=str(exchange.get("srcAmount", "")),
                to_amount=str(exchange.get("destAmount", "")),
                from_chain=chain_id,
                to_chain=chain_id,
                tool=name,
                tool_details=ToolDetails(key=name, name=name),
            ))
    return steps


class ParaSwapProvider(SwapProvider):
    provider_id = ProviderId.PARASWAP
    api_root = "https://api.paraswap.io"
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_base_url(self) -> str:
        return self.settings.paraswap_base_url

    def _check_api_key(self) -> None:
        # keyless API
        return None

    def _partner(self, req: SwapRequest) -> str:
        return req.project or self.settings.default_project

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        body = await self._request(
            "GET",
            "/prices",
            params=convert_params(req, self._partner(req)),
        )
        return (body or {}).get("priceRoute")

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        price_route = await self.get_quote(req)
        if not price_route:
            return None
        built = await self._request(
            "POST",
            f"/transactions/{req.input_chain_id}",
            params={"ignoreChecks": True, "ignoreGasEstimate": True},
            json=build_body(req, price_route, self._partner(req)),
        )
        if not built or not built.get("data"):
            raise self._malformed("transactions returned no calldata")
        try:
            output_amount = int(price_route["destAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"priceRoute missing {exc}") from exc

        gas_cost = price_route.get("gasCost")
        gas_price = built.get("gasPrice")
        tx = TransactionRequest(
            from_address=req.payer,
            to=built.get("to"),
            data=built["data"],
            value=str(built.get("value", "0")),
            gas_limit=str(built["gas"]) if built.get("gas") else None,
            gas_price=str(gas_price) if gas_price else None,
            chain_id=int(built.get("chainId") or req.input_chain_id),
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=self._decimals(price_route.get("srcDecimals"), req.input_decimals, "input"),
            output_decimals=self._decimals(price_route.get("destDecimals"), req.output_decimals, "output"),
            steps=parse_steps(price_route),
            gas_estimate=GasEstimate(
                total_gas_cost_usd=float(price_route.get("gasCostUSD") or 0),
                total_gas_cost_wei=str(int(gas_cost) * int(gas_price)) if gas_cost and gas_price else "0",
            ),
            approval_address=price_route.get("tokenTransferProxy") or "",
            provider_id=self.provider_id,
        )

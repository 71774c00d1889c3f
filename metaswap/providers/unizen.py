"""Async adapter for the Unizen trade API.

Single-chain and cross-chain trades use separate quote and swap endpoints.
The swap response names a contract version; the spender for that version is
looked up separately and becomes both the call target and the approval
address.
"""

from __future__ import annotations

import json
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
from .base import SwapProvider

# curl https://api.zcx.com/trade/v1/info/chains
NETWORK_BY_ID: Dict[int, str] = {
    1: "ethereum",
    10: "optimism",
    56: "bsc",
    137: "polygon",
    250: "fantom",
    8453: "base",
    42161: "arbitrum",
    43114: "avax",
}


def excluded_dexes(req: SwapRequest) -> Optional[str]:
    if not req.deny_exchanges:
        return None
    denied = list(req.deny_exchanges) + list(req.deny_bridges)
    per_chain = {str(req.input_chain_id): denied}
    if req.is_cross_chain:
        per_chain[str(req.output_chain_id)] = denied
    return json.dumps(per_chain)


def convert_params(req: SwapRequest) -> Dict[str, Any]:
    return {
        "fromTokenAddress": req.input,
        "chainId": str(req.input_chain_id),
        "toTokenAddress": req.output,
        "destinationChainId": str(req.output_chain_id) if req.is_cross_chain else None,
        "amount": str(req.amount_wei),
        "sender": req.sender,
        "receiver": req.receiver,
        # fraction, 0.01 == 1%
        "slippage": req.slippage_bps / 10_000 if req.max_slippage else None,
        "deadline": req.deadline,
        "isSplit": False,
        "excludedDexes": excluded_dexes(req),
    }


def parse_steps(quote: Dict[str, Any], chain_id: int) -> List[RouteStep]:
    steps = []
    for protocol in quote.get("protocol") or []:
        name = protocol.get("name") or ""
        steps.append(RouteStep(
            type="swap",
            from_chain=chain_id,
            to_chain=chain_id,
            tool=name,
            tool_details=ToolDetails(key=name, name=name, logo_uri=protocol.get("logo") or ""),
        ))
    return steps


class UnizenProvider(SwapProvider):
    provider_id = ProviderId.UNIZEN
    api_root = "http://api.zcx.com/trade/v1"
    api_key_env = "UNIZEN_API_KEY"
    supports_cross_chain = True

    def _configured_api_key(self) -> str:
        return self.settings.unizen_api_key

    def _configured_base_url(self) -> str:
        return self.settings.unizen_base_url

    def supports_chain(self, chain_id: int) -> bool:
        return chain_id in NETWORK_BY_ID

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def get_quote(self, req: SwapRequest) -> Optional[List[Dict[str, Any]]]:
        """Ranked quotes from ``/quote/single`` or ``/quote/cross``."""

        if not self._prepare(req):
            return None
        if req.input_chain_id not in NETWORK_BY_ID:
            return None
        kind = "cross" if req.is_cross_chain else "single"
        quotes = await self._request(
            "GET",
            f"/{req.input_chain_id}/quote/{kind}",
            params=convert_params(req),
        )
        return quotes or None

    async def get_spender(self, contract_version: str, chain_id: int) -> Optional[str]:
        body = await self._request(
            "GET",
            f"/{chain_id}/approval/spender",
            params={"contractVersion": contract_version},
        )
        return (body or {}).get("address")

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quotes = await self.get_quote(req)
        if not quotes:
            return None
        best = quotes[0]
        body: Dict[str, Any] = {
            "transactionData": best.get("transactionData"),
            "nativeValue": best.get("nativeValue"),
            "account": req.sender,
            "receiver": req.recipient,
        }
        if req.is_cross_chain:
            kind = "cross"
        else:
            kind = "single"
            body["tradeType"] = best.get("tradeType")
        swap = await self._request("POST", f"/{req.input_chain_id}/swap/{kind}", json=body)
        if not swap or not swap.get("data"):
            raise self._malformed(f"swap/{kind} returned no calldata")

        spender = await self.get_spender(
            swap.get("contractVersion") or best.get("contractVersion") or "",
            req.input_chain_id,
        )
        if not spender:
            raise self._malformed("approval/spender returned no address")

        try:
            if req.is_cross_chain:
                output_amount = int(best["dstTrade"]["toTokenAmount"])
                token_info = best["tradeParams"]["tokenInfo"]
                input_decimals, output_decimals = token_info[0]["decimals"], token_info[1]["decimals"]
            else:
                output_amount = int(best["toTokenAmount"])
                input_decimals = best["tokenFrom"]["decimals"]
                output_decimals = best["tokenTo"]["decimals"]
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise self._malformed(f"quote missing {exc}") from exc

        gas = swap.get("estimateGas")
        gas_price = swap.get("gasPrice")
        tx = TransactionRequest(
            from_address=req.payer,
            to=spender,
            data=swap["data"],
            value=str(swap.get("nativeValue") or best.get("nativeValue") or "0"),
            gas_limit=str(int(gas) * 2) if gas else None,
            gas_price=str(gas_price) if gas_price else None,
            max_fee_per_gas=swap.get("maxFeePerGas") or None,
            max_priority_fee_per_gas=swap.get("maxPriorityFeePerGas") or None,
            chain_id=req.input_chain_id,
        )
        source_quote = (best.get("srcTrade") or best) if req.is_cross_chain else best
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=int(input_decimals),
            output_decimals=int(output_decimals),
            steps=parse_steps(source_quote, req.input_chain_id),
            gas_estimate=GasEstimate(
                total_gas_cost_wei=str(int(gas) * int(gas_price)) if gas and gas_price else "0",
            ),
            approval_address=spender,
            provider_id=self.provider_id,
        )

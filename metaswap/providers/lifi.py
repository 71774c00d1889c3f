"""Async adapter for the Li.Fi quote, contract-call and status API.

Li.Fi returns the executable transaction alongside the quote, so there is no
separate build call. Requests carrying post-swap contract calls go to
``POST /quote/contractCalls``; plain swaps and bridges use ``GET /quote``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.estimates import add_estimates_to_transaction_request, sum_costs
from ..core.models import (
    FeeCost,
    GasCost,
    GasEstimate,
    OperationStatus,
    ProviderId,
    RouteStep,
    StatusQuery,
    StatusResponse,
    StepEstimate,
    SwapRequest,
    Token,
    ToolDetails,
    TransactionRequest,
    TransactionRequestWithEstimate,
)
from .base import SwapProvider, frozen_table

_LIFI_DIAMOND = "0x1231DEB6f5749EF6cE6943a275A1D3E7486F4EaE"

# cf. https://li.quest/v1/chains
NETWORK_BY_ID: Dict[int, str] = {
    1: "eth",
    10: "opt",
    25: "cro",
    56: "bsc",
    66: "okt",
    100: "dai",
    106: "vel",
    122: "fus",
    137: "pol",
    250: "ftm",
    288: "bob",
    324: "era",
    1101: "pze",
    1284: "moo",
    1285: "mor",
    8453: "bas",
    59144: "lna",
    42161: "arb",
    42220: "cel",
    43114: "ava",
    1313161554: "aur",
}

ROUTER_BY_CHAIN_ID = frozen_table({chain_id: _LIFI_DIAMOND for chain_id in NETWORK_BY_ID})

# Li.Fi status vocabulary -> shared status
_STATUS_MAP: Dict[str, OperationStatus] = {
    "NOT_FOUND": OperationStatus.NOT_FOUND,
    "INVALID": OperationStatus.FAILED,
    "PENDING": OperationStatus.PENDING,
    "DONE": OperationStatus.DONE,
    "FAILED": OperationStatus.FAILED,
}


def convert_params(req: SwapRequest, integrator: str) -> Dict[str, Any]:
    slippage = req.slippage_bps / 10_000  # fraction, .001 = .1%
    params: Dict[str, Any] = {
        "fromToken": req.input,
        "fromChain": NETWORK_BY_ID.get(req.input_chain_id, req.input_chain_id),
        "toToken": req.output,
        "toChain": NETWORK_BY_ID.get(req.destination_chain_id, req.destination_chain_id),
        "fromAmount": str(req.amount_wei),
        "fromAddress": req.sender,
        "toAddress": req.recipient,
        "order": "RECOMMENDED",
        "slippage": slippage,
        "maxPriceImpact": slippage * 2,
        "integrator": integrator,
        "referrer": req.referrer,
        "allowDestinationCall": True,
        "denyBridges": list(req.deny_bridges),
        "denyExchanges": list(req.deny_exchanges),
    }
    if req.has_contract_calls:
        # toAmount is only meaningful when a destination call consumes it
        call = req.custom_contract_calls[0]
        params["toAmount"] = str(req.amount_wei)
        params["contractCalls"] = [{
            "fromAmount": str(req.amount_wei),
            "fromTokenAddress": req.output,
            "toContractAddress": call.to_address,
            "toContractCallData": call.call_data,
            "toContractGasLimit": call.gas_limit or "10000",
        }]
    return params


def parse_token(token: Optional[Dict[str, Any]]) -> Optional[Token]:
    if not token:
        return None
    price = token.get("priceUSD")
    return Token(
        chain_id=token.get("chainId"),
        address=token.get("address", ""),
        symbol=token.get("symbol", ""),
        decimals=int(token.get("decimals", 0)),
        name=token.get("name", ""),
        price_usd=float(price) if price not in (None, "") else None,
        logo_uri=token.get("logoURI"),
    )


def parse_estimate(estimate: Dict[str, Any]) -> StepEstimate:
    return StepEstimate(
        from_amount=estimate.get("fromAmount"),
        to_amount=estimate.get("toAmount"),
        to_amount_min=estimate.get("toAmountMin"),
        approval_address=estimate.get("approvalAddress"),
        fee_costs=[
            FeeCost(
                name=fee.get("name", ""),
                description=fee.get("description"),
                percentage=fee.get("percentage"),
                amount=str(fee.get("amount") or "0"),
                amount_usd=float(fee.get("amountUSD") or 0),
                included=bool(fee.get("included", False)),
                token=parse_token(fee.get("token")),
            )
            for fee in estimate.get("feeCosts") or []
        ],
        gas_costs=[
            GasCost(
                type=gas.get("type", ""),
                amount=str(gas.get("amount") or "0"),
                amount_usd=float(gas.get("amountUSD") or 0),
                limit=gas.get("limit"),
                price=gas.get("price"),
                token=parse_token(gas.get("token")),
            )
            for gas in estimate.get("gasCosts") or []
        ],
    )


def parse_steps(steps: List[Dict[str, Any]]) -> tuple[List[RouteStep], GasEstimate]:
    """Convert Li.Fi ``includedSteps`` and total their gas and fee costs."""

    route: List[RouteStep] = []
    gas_costs = []
    fee_costs = []
    for step in steps:
        estimate = parse_estimate(step.get("estimate") or {})
        gas_costs.extend((c.amount_usd, c.amount) for c in estimate.gas_costs)
        fee_costs.extend((c.amount_usd, c.amount) for c in estimate.fee_costs)
        action = step.get("action") or {}
        details = step.get("toolDetails") or {}
        route.append(RouteStep(
            id=step.get("id"),
            type=step.get("type", ""),
            from_token=parse_token(action.get("fromToken")),
            to_token=parse_token(action.get("toToken")),
            from_amount=action.get("fromAmount"),
            to_amount=estimate.to_amount,
            from_chain=action.get("fromChainId"),
            to_chain=action.get("toChainId"),
            from_address=action.get("fromAddress"),
            to_address=action.get("toAddress"),
            slippage=action.get("slippage"),
            tool=step.get("tool"),
            tool_details=ToolDetails(
                key=details.get("key", step.get("tool", "")),
                name=details.get("name", step.get("tool", "")),
                logo_uri=details.get("logoURI", ""),
            ),
            estimate=estimate,
        ))
    gas_usd, gas_wei = sum_costs(gas_costs)
    fee_usd, fee_wei = sum_costs(fee_costs)
    return route, GasEstimate(
        total_gas_cost_usd=gas_usd,
        total_gas_cost_wei=str(gas_wei),
        total_fee_cost_usd=fee_usd,
        total_fee_cost_wei=str(fee_wei),
    )


def parse_transaction_status(payload: Dict[str, Any]) -> StatusResponse:
    sending = payload.get("sending") or {}
    receiving = payload.get("receiving") or {}
    raw_status = str(payload.get("status", "")).upper()
    substatus = payload.get("substatus")
    status = _STATUS_MAP.get(raw_status, OperationStatus.PENDING)
    if status is OperationStatus.DONE and substatus == "PARTIAL":
        status = OperationStatus.PARTIAL_SUCCESS
    return StatusResponse(
        id=payload.get("transactionId") or sending.get("txHash") or "",
        status=status,
        tx_hash=receiving.get("txHash"),
        sending_tx=sending.get("txHash"),
        receiving_tx=receiving.get("txHash"),
        substatus=substatus,
        substatus_message=payload.get("substatusMessage"),
        provider_id=ProviderId.LIFI,
    )


class LifiProvider(SwapProvider):
    """Li.Fi (https://li.quest/v1). Works without a key at public rate limits."""

    provider_id = ProviderId.LIFI
    api_root = "https://li.quest/v1"
    api_key_env = "LIFI_API_KEY"
    supports_cross_chain = True
    supports_contract_calls = True
    supports_status = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_api_key(self) -> str:
        return self.settings.lifi_api_key

    def _configured_base_url(self) -> str:
        return self.settings.lifi_base_url

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    def _integrator(self, req: SwapRequest) -> str:
        return req.project or self.settings.lifi_integrator or self.settings.default_project

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        params = convert_params(req, self._integrator(req))
        if req.has_contract_calls:
            return await self._request("POST", "/quote/contractCalls", json=params)
        params.pop("contractCalls", None)
        return await self._request("GET", "/quote", params=params)

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        if not quote:
            return None
        raw_tx = quote.get("transactionRequest")
        if not raw_tx:
            return None
        try:
            action = quote["action"]
            estimate = quote["estimate"]
            input_decimals = int(action["fromToken"]["decimals"])
            output_decimals = int(action["toToken"]["decimals"])
            output_amount = int(estimate["toAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"quote missing {exc}") from exc

        steps, gas_estimate = parse_steps(quote.get("includedSteps") or [])
        tx = TransactionRequest(
            from_address=raw_tx.get("from"),
            to=raw_tx.get("to"),
            data=raw_tx.get("data"),
            value=raw_tx.get("value"),
            gas_limit=raw_tx.get("gasLimit"),
            gas_price=raw_tx.get("gasPrice"),
            chain_id=raw_tx.get("chainId"),
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=input_decimals,
            output_decimals=output_decimals,
            steps=steps,
            gas_estimate=gas_estimate,
            approval_address=estimate.get("approvalAddress") or "",
            provider_id=self.provider_id,
        )

    async def get_status(self, query: StatusQuery) -> Optional[StatusResponse]:
        if not self.api_key:
            self._logger.warning("missing env.%s", self.api_key_env)
        params = {
            "txHash": query.transaction_id,
            "bridge": query.bridge,
            "fromChain": query.from_chain_id,
            "toChain": query.to_chain_id,
        }
        payload = await self._request("GET", "/status", params=params)
        if not payload:
            return None
        return parse_transaction_status(payload)

    async def gas_suggestion(
        self,
        to_chain: int,
        *,
        from_chain: Optional[int] = None,
        from_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Suggested destination gas amount for a bridge into ``to_chain``."""

        params = {"fromChain": from_chain, "fromToken": from_token}
        return await self._request("GET", f"/gas/suggestion/{to_chain}", params=params)

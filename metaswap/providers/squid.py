"""Async adapter for the Squid router v2 API (Axelar-based swaps and bridges)."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Optional

from ..core.estimates import add_estimates_to_transaction_request, sum_costs
from ..core.models import (
    CustomContractCall,
    GasEstimate,
    OperationStatus,
    ProviderId,
    RouteStep,
    StatusQuery,
    StatusResponse,
    SwapRequest,
    Token,
    ToolDetails,
    TransactionRequest,
    TransactionRequestWithEstimate,
)
from .base import SwapProvider, frozen_table

_SQUID_ROUTER = "0xce16F69375520ab01377ce7B88f5BA8C48F8D666"

ROUTER_BY_CHAIN_ID = frozen_table({
    chain_id: _SQUID_ROUTER
    for chain_id in (
        1, 10, 56, 137, 250, 314, 1284, 2222, 5000, 8453,
        42161, 42220, 43114, 59144, 534352,
    )
})

_STATUS_MAP: Dict[str, OperationStatus] = {
    "success": OperationStatus.SUCCESS,
    "partial_success": OperationStatus.PARTIAL_SUCCESS,
    "needs_gas": OperationStatus.NEEDS_GAS,
    "ongoing": OperationStatus.ONGOING,
    "not_found": OperationStatus.NOT_FOUND,
    "refund": OperationStatus.FAILED,
    "failed": OperationStatus.FAILED,
}


class SquidCallType(IntEnum):
    DEFAULT = 0
    FULL_TOKEN_BALANCE = 1
    FULL_NATIVE_BALANCE = 2
    COLLECT_TOKEN_BALANCE = 3


def generate_hook(call: CustomContractCall, output_token: str) -> Dict[str, Any]:
    """Post-swap hook spending the full output balance on ``call``."""

    return {
        "chainType": "evm",
        "callType": int(SquidCallType.FULL_TOKEN_BALANCE),
        "target": call.to_address,
        "value": "0",
        "callData": call.call_data,
        "payload": {
            "tokenAddress": output_token,
            "inputPos": 1,
        },
        "estimatedGas": call.gas_limit or "20000",
    }


def convert_params(req: SwapRequest, integrator: str) -> Dict[str, Any]:
    params: Dict[str, Any] = {
        "enableBoost": True,
        "fromToken": req.input,
        "fromChain": str(req.input_chain_id),
        "toToken": req.output,
        "toChain": str(req.destination_chain_id),
        "fromAddress": req.sender,
        "fromAmount": str(req.amount_wei),
        "toAddress": req.recipient,
        "slippage": req.slippage_bps / 100,  # percent
        "slippageConfig": {"autoMode": 1},
        "quoteOnly": False,
        "receiveGasOnDestination": req.receive_gas_on_destination,
        "integrator": integrator,
    }
    if req.has_contract_calls:
        params["postHook"] = {
            "chainType": "evm",
            "calls": [generate_hook(req.custom_contract_calls[0], req.output)],
        }
    return params


def parse_token(token: Optional[Dict[str, Any]]) -> Optional[Token]:
    if not token:
        return None
    chain_id = token.get("chainId")
    return Token(
        chain_id=int(chain_id) if str(chain_id or "").isdigit() else None,
        address=token.get("address") or "",
        symbol=token.get("symbol") or "",
        decimals=int(token.get("decimals") or 0),
        name=token.get("name") or "",
        price_usd=float(token.get("usdPrice") or 0),
        logo_uri=token.get("logoURI") or "",
    )


def parse_steps(actions: List[Dict[str, Any]]) -> List[RouteStep]:
    steps = []
    for action in actions:
        provider = action.get("provider") or ""
        steps.append(RouteStep(
            type=action.get("type", ""),
            description=action.get("description") or "",
            from_token=parse_token(action.get("fromToken")),
            to_token=parse_token(action.get("toToken")),
            from_amount=action.get("fromAmount"),
            to_amount=action.get("toAmount"),
            from_chain=int(action.get("fromChain") or 0),
            to_chain=int(action.get("toChain") or 0),
            tool=provider,
            tool_details=ToolDetails(key=provider, name=provider),
        ))
    return steps


def parse_status(payload: Dict[str, Any]) -> StatusResponse:
    raw_status = str(payload.get("squidTransactionStatus") or "").lower()
    from_chain = payload.get("fromChain") or {}
    to_chain = payload.get("toChain") or {}
    return StatusResponse(
        id=payload.get("id") or "",
        status=_STATUS_MAP.get(raw_status, OperationStatus.PENDING),
        tx_hash=to_chain.get("transactionId"),
        sending_tx=from_chain.get("transactionId"),
        receiving_tx=to_chain.get("transactionId"),
        substatus=payload.get("status"),
        provider_id=ProviderId.SQUID,
    )


class SquidProvider(SwapProvider):
    """Squid (https://v2.api.squidrouter.com/v2). Route response carries the transaction."""

    provider_id = ProviderId.SQUID
    api_root = "https://v2.api.squidrouter.com/v2"
    api_key_env = "SQUID_API_KEY"
    supports_cross_chain = True
    supports_contract_calls = True
    supports_status = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_api_key(self) -> str:
        return self.settings.squid_api_key

    def _configured_base_url(self) -> str:
        return self.settings.squid_base_url

    def _headers(self, integrator: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "accept": "application/json",
            "x-integrator-id": integrator or self.settings.squid_integrator_id,
        }
        if self.api_key:
            headers["api-key"] = self.api_key
        return headers

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        params = convert_params(req, self.settings.squid_integrator_id)
        return await self._request("POST", "/route", json=params)

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        route = (quote or {}).get("route")
        if not route or not route.get("transactionRequest"):
            return None
        raw_tx = route["transactionRequest"]
        try:
            estimate = route["estimate"]
            input_decimals = int(estimate["fromToken"]["decimals"])
            output_decimals = int(estimate["toToken"]["decimals"])
            output_amount = int(estimate["toAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"route missing {exc}") from exc

        # Squid folds bridge fees into the gas figure; keep them apart here
        gas_usd, gas_wei = sum_costs(
            (c.get("amountUsd"), c.get("amount")) for c in estimate.get("gasCosts") or []
        )
        fee_usd, fee_wei = sum_costs(
            (c.get("amountUsd"), c.get("amount")) for c in estimate.get("feeCosts") or []
        )
        target = raw_tx.get("to") or raw_tx.get("target") or raw_tx.get("targetAddress")
        tx = TransactionRequest(
            from_address=req.sender,
            to=target,
            data=raw_tx.get("data"),
            value=raw_tx.get("value"),
            gas_limit=raw_tx.get("gasLimit"),
            gas_price=raw_tx.get("gasPrice"),
            max_fee_per_gas=raw_tx.get("maxFeePerGas"),
            max_priority_fee_per_gas=raw_tx.get("maxPriorityFeePerGas"),
            chain_id=req.input_chain_id,
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=input_decimals,
            output_decimals=output_decimals,
            steps=parse_steps(estimate.get("actions") or []),
            gas_estimate=GasEstimate(
                total_gas_cost_usd=gas_usd,
                total_gas_cost_wei=str(gas_wei),
                total_fee_cost_usd=fee_usd,
                total_fee_cost_wei=str(fee_wei),
            ),
            approval_address=target or "",
            provider_id=self.provider_id,
        )

    async def get_status(self, query: StatusQuery) -> Optional[StatusResponse]:
        if not self.api_key:
            self._logger.warning("missing env.%s", self.api_key_env)
        params = {
            "transactionId": query.transaction_id,
            "fromChainId": query.from_chain_id,
            "toChainId": query.to_chain_id,
        }
        payload = await self._request(
            "GET",
            "/status",
            params=params,
            headers=self._headers(query.integrator),
        )
        if not payload:
            return None
        return parse_status(payload)

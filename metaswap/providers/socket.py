"""Async adapter for the Socket (Bungee) v2 API.

Socket quotes and builds in two calls: ``GET /quote`` returns candidate
routes, ``POST /build-tx`` turns the first one into calldata. An API key is
mandatory.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple

from ..core.estimates import add_estimates_to_transaction_request, sum_costs
from ..core.models import (
    GasEstimate,
    OperationStatus,
    ProviderId,
    RouteStep,
    StatusQuery,
    StatusResponse,
    SwapRequest,
    ToolDetails,
    TransactionRequest,
    TransactionRequestWithEstimate,
)
from .base import SwapProvider, frozen_table

_SOCKET_GATEWAY = "0x3a23F943181408EAC424116Af7b7790c94Cb97a5"

ROUTER_BY_CHAIN_ID = frozen_table({
    1: _SOCKET_GATEWAY,
    10: _SOCKET_GATEWAY,
    56: _SOCKET_GATEWAY,
    100: _SOCKET_GATEWAY,
    122: _SOCKET_GATEWAY,
    137: _SOCKET_GATEWAY,
    250: _SOCKET_GATEWAY,
    324: "0xaDdE7028e7ec226777e5dea5D53F6457C21ec7D6",
    1101: _SOCKET_GATEWAY,
    8453: _SOCKET_GATEWAY,
    59144: _SOCKET_GATEWAY,
    42161: _SOCKET_GATEWAY,
    42220: _SOCKET_GATEWAY,
    43114: _SOCKET_GATEWAY,
    1313161554: _SOCKET_GATEWAY,
})


def convert_params(req: SwapRequest) -> Dict[str, Any]:
    # whole percent capped at 1%; halves round up
    percent = (Decimal(req.slippage_bps) / 100).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    slippage = min(int(percent), 1)
    return {
        "fromChainId": req.input_chain_id,
        "toChainId": req.destination_chain_id,
        "fromTokenAddress": req.input,
        "toTokenAddress": req.output,
        "fromAmount": str(req.amount_wei),
        "userAddress": req.sender,
        "recipient": req.recipient,
        "singleTxOnly": True,
        "uniqueRoutesPerBridge": True,
        "disableSwapping": False,
        "sort": "output",
        "maxUserTxs": 14,
        "bridgeWithGas": False,
        "bridgeWithInsurance": False,
        "isContractCall": True,
        "excludeBridges": list(req.deny_bridges),
        "excludeDexes": list(req.deny_exchanges),
        "defaultBridgeSlippage": slippage,
        "defaultSwapSlippage": slippage,
    }


def parse_steps(route: Dict[str, Any]) -> list[RouteStep]:
    steps = []
    for user_tx in route.get("userTxs") or []:
        protocol = (user_tx.get("protocol") or {}).get("name") or user_tx.get("routePath") or ""
        steps.append(RouteStep(
            type=user_tx.get("userTxType") or user_tx.get("txType") or "",
            from_amount=user_tx.get("fromAmount"),
            to_amount=user_tx.get("toAmount"),
            from_chain=user_tx.get("chainId"),
            to_chain=route.get("toChainId"),
            tool=protocol,
            tool_details=ToolDetails(key=protocol, name=protocol),
        ))
    return steps


def total_protocol_fees(route: Dict[str, Any]) -> Tuple[float, int]:
    """Sum ``protocolFees`` over every bridge step and single-step user transaction."""

    fees = []
    for user_tx in route.get("userTxs") or []:
        for step in user_tx.get("steps") or [user_tx]:
            fee = step.get("protocolFees")
            if fee:
                fees.append((fee.get("feesInUsd"), fee.get("amount")))
    return sum_costs(fees)


def _map_status(payload: Dict[str, Any]) -> OperationStatus:
    source = str(payload.get("sourceTxStatus") or "").upper()
    destination = str(payload.get("destinationTxStatus") or "").upper()
    if "FAILED" in (source, destination):
        return OperationStatus.FAILED
    if destination == "COMPLETED":
        return OperationStatus.DONE
    if source == "COMPLETED":
        return OperationStatus.PENDING
    return OperationStatus.WAITING


class SocketProvider(SwapProvider):
    """Socket (https://api.socket.tech/v2)."""

    provider_id = ProviderId.SOCKET
    api_root = "https://api.socket.tech/v2"
    api_key_env = "SOCKET_API_KEY"
    requires_api_key = True
    supports_cross_chain = True
    supports_status = True
    router_by_chain_id = ROUTER_BY_CHAIN_ID

    def _configured_api_key(self) -> str:
        return self.settings.socket_api_key

    def _configured_base_url(self) -> str:
        return self.settings.socket_base_url

    def _headers(self) -> Dict[str, str]:
        return {"accept": "application/json", "API-KEY": self.api_key}

    async def get_quote(self, req: SwapRequest) -> Optional[Dict[str, Any]]:
        if not self._prepare(req):
            return None
        body = await self._request("GET", "/quote", params=convert_params(req))
        return (body or {}).get("result")

    async def get_transaction_request(self, req: SwapRequest) -> Optional[TransactionRequestWithEstimate]:
        quote = await self.get_quote(req)
        routes = (quote or {}).get("routes") or []
        if not routes:
            return None
        route = routes[0]
        built = await self._request("POST", "/build-tx", json={"route": route})
        swap_data = (built or {}).get("result")
        if not swap_data or not swap_data.get("txData"):
            raise self._malformed("build-tx returned no txData")
        try:
            input_decimals = int(quote["fromAsset"]["decimals"])
            output_decimals = int(quote["toAsset"]["decimals"])
            output_amount = int(route["toAmount"])
        except (KeyError, TypeError, ValueError) as exc:
            raise self._malformed(f"quote missing {exc}") from exc

        fee_usd, fee_wei = total_protocol_fees(route)
        approval = swap_data.get("approvalData") or {}
        tx = TransactionRequest(
            from_address=req.payer,
            to=swap_data.get("txTarget"),
            data=swap_data.get("txData"),
            value=swap_data.get("value"),
            chain_id=int(swap_data.get("chainId") or req.input_chain_id),
        )
        return add_estimates_to_transaction_request(
            tx,
            input_amount_wei=req.amount_int,
            output_amount_wei=output_amount,
            input_decimals=input_decimals,
            output_decimals=output_decimals,
            steps=parse_steps(route),
            gas_estimate=GasEstimate(
                total_gas_cost_usd=float(route.get("totalGasFeesInUsd") or 0),
                total_fee_cost_usd=fee_usd,
                total_fee_cost_wei=str(fee_wei),
            ),
            approval_address=approval.get("allowanceTarget") or swap_data.get("txTarget") or "",
            provider_id=self.provider_id,
        )

    async def get_status(self, query: StatusQuery) -> Optional[StatusResponse]:
        self._check_api_key()
        params = {
            "transactionHash": query.transaction_id,
            "fromChainId": query.from_chain_id,
            "toChainId": query.to_chain_id,
            "bridgeName": query.bridge,
        }
        body = await self._request("GET", "/status", params=params)
        result = (body or {}).get("result")
        if not result:
            return None
        return StatusResponse(
            id=result.get("sourceTx") or query.transaction_id,
            status=_map_status(result),
            tx_hash=result.get("destinationTransactionHash"),
            sending_tx=result.get("sourceTx"),
            receiving_tx=result.get("destinationTransactionHash"),
            substatus=result.get("destinationTxStatus"),
            provider_id=self.provider_id,
        )

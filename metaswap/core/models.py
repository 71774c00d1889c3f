"""Core data models for the meta-aggregator.

This module defines:
- SwapRequest: provider-agnostic swap/bridge parameters
- Token, RouteStep and their cost breakdowns: normalized route data
- Estimate: comparable output/exchange rate attached to a transaction
- TransactionRequest(WithEstimate): chain-agnostic call descriptor
- StatusQuery / StatusResponse: cross-chain delivery polling
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union


class ProviderId(str, Enum):
    """Identity of a quoting provider."""

    LIFI = "LIFI"
    SQUID = "SQUID"
    SOCKET = "SOCKET"
    KYBERSWAP = "KYBERSWAP"
    ONE_INCH = "ONE_INCH"
    ZERO_X = "ZERO_X"
    PARASWAP = "PARASWAP"
    SIFI = "SIFI"
    UNIZEN = "UNIZEN"


class OperationStatus(str, Enum):
    """Shared vocabulary for cross-chain transfer status."""

    WAITING = "WAITING"
    PENDING = "PENDING"
    ONGOING = "ONGOING"
    DONE = "DONE"
    SUCCESS = "SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    NEEDS_GAS = "NEEDS_GAS"
    FAILED = "FAILED"
    NOT_FOUND = "NOT_FOUND"


ProviderSelection = Union[ProviderId, str, Sequence[Union[ProviderId, str]]]


@dataclass
class CustomContractCall:
    """Contract call executed with the swap output on the destination chain."""

    call_data: str
    to_address: Optional[str] = None
    gas_limit: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "toAddress": self.to_address,
            "callData": self.call_data,
            "gasLimit": self.gas_limit,
        }


@dataclass
class SwapRequest:
    """Parameters of a single swap or bridge request.

    Attributes:
        input: Input token address on ``input_chain_id``
        input_chain_id: Source chain
        output: Output token address on the destination chain
        amount_wei: Input amount in the input token's smallest unit
        payer: Address that will sign and pay for the transaction
        output_chain_id: Destination chain, None for a same-chain swap
        receiver: Recipient of the output (defaults to ``payer``)
        test_payer: Impersonated address quoted against during simulation
        max_slippage: Maximum slippage in basis points
        provider_ids: Providers to query, a single id or an ordered list
    """

    input: str
    input_chain_id: int
    output: str
    amount_wei: Union[str, int]
    payer: str
    output_chain_id: Optional[int] = None
    receiver: Optional[str] = None
    test_payer: Optional[str] = None
    referrer: Optional[str] = None
    project: Optional[str] = None
    deadline: Optional[int] = None
    max_slippage: Optional[int] = None
    custom_contract_calls: List[CustomContractCall] = field(default_factory=list)
    deny_bridges: List[str] = field(default_factory=list)
    deny_exchanges: List[str] = field(default_factory=list)
    provider_ids: Optional[ProviderSelection] = None
    receive_gas_on_destination: bool = False
    # Token decimals known to the caller; used when a provider omits them
    input_decimals: Optional[int] = None
    output_decimals: Optional[int] = None

    @property
    def destination_chain_id(self) -> int:
        return self.output_chain_id if self.output_chain_id is not None else self.input_chain_id

    @property
    def is_cross_chain(self) -> bool:
        return self.output_chain_id is not None and self.output_chain_id != self.input_chain_id

    @property
    def has_contract_calls(self) -> bool:
        return bool(self.custom_contract_calls)

    @property
    def sender(self) -> str:
        """Address quoted against: the impersonated payer when simulating."""
        return self.test_payer or self.payer

    @property
    def recipient(self) -> str:
        return self.receiver or self.payer

    @property
    def amount_int(self) -> int:
        return int(str(self.amount_wei))

    @property
    def slippage_bps(self) -> int:
        return int(self.max_slippage or 0)


@dataclass
class Token:
    chain_id: Optional[int]
    address: str
    symbol: str
    decimals: int
    name: str = ""
    price_usd: Optional[float] = None
    logo_uri: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "address": self.address,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "name": self.name,
            "priceUSD": self.price_usd,
            "logoURI": self.logo_uri,
        }


@dataclass
class ToolDetails:
    key: str
    name: str
    logo_uri: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "name": self.name, "logoURI": self.logo_uri}


@dataclass
class FeeCost:
    name: str
    amount: str = "0"
    amount_usd: float = 0.0
    percentage: Optional[str] = None
    included: bool = False
    token: Optional[Token] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "percentage": self.percentage,
            "amount": self.amount,
            "amountUSD": self.amount_usd,
            "included": self.included,
            "token": self.token.to_dict() if self.token else None,
        }


@dataclass
class GasCost:
    type: str
    amount: str = "0"
    amount_usd: float = 0.0
    limit: Optional[str] = None
    price: Optional[str] = None
    token: Optional[Token] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "amount": self.amount,
            "amountUSD": self.amount_usd,
            "limit": self.limit,
            "price": self.price,
            "token": self.token.to_dict() if self.token else None,
        }


@dataclass
class StepEstimate:
    """Per-step amounts and costs as reported by the provider."""

    from_amount: Optional[str] = None
    to_amount: Optional[str] = None
    to_amount_min: Optional[str] = None
    approval_address: Optional[str] = None
    fee_costs: List[FeeCost] = field(default_factory=list)
    gas_costs: List[GasCost] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromAmount": self.from_amount,
            "toAmount": self.to_amount,
            "toAmountMin": self.to_amount_min,
            "approvalAddress": self.approval_address,
            "feeCosts": [c.to_dict() for c in self.fee_costs],
            "gasCosts": [c.to_dict() for c in self.gas_costs],
        }


@dataclass
class RouteStep:
    """One hop (swap or bridge transfer) of a route, in execution order."""

    type: str
    id: Optional[str] = None
    description: str = ""
    from_token: Optional[Token] = None
    to_token: Optional[Token] = None
    from_amount: Optional[str] = None
    to_amount: Optional[str] = None
    from_chain: Optional[int] = None
    to_chain: Optional[int] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None
    tool: Optional[str] = None
    tool_details: Optional[ToolDetails] = None
    estimate: Optional[StepEstimate] = None
    slippage: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "fromToken": self.from_token.to_dict() if self.from_token else None,
            "toToken": self.to_token.to_dict() if self.to_token else None,
            "fromAmount": self.from_amount,
            "toAmount": self.to_amount,
            "fromChain": self.from_chain,
            "toChain": self.to_chain,
            "fromAddress": self.from_address,
            "toAddress": self.to_address,
            "tool": self.tool,
            "toolDetails": self.tool_details.to_dict() if self.tool_details else None,
            "estimate": self.estimate.to_dict() if self.estimate else None,
            "slippage": self.slippage,
        }


@dataclass
class GasEstimate:
    """Route-wide gas and fee totals. Zero when the provider reports none."""

    total_gas_cost_usd: float = 0.0
    total_gas_cost_wei: str = "0"
    total_fee_cost_usd: float = 0.0
    total_fee_cost_wei: str = "0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalGasCostUsd": self.total_gas_cost_usd,
            "totalGasCostWei": self.total_gas_cost_wei,
            "totalFeeCostUsd": self.total_fee_cost_usd,
            "totalFeeCostWei": self.total_fee_cost_wei,
        }


@dataclass
class Estimate:
    estimated_output: float
    estimated_output_wei: str
    estimated_exchange_rate: float
    gas_estimate: GasEstimate = field(default_factory=GasEstimate)
    approval_address: str = ""
    steps: List[RouteStep] = field(default_factory=list)
    provider_id: Optional[ProviderId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimatedOutput": self.estimated_output,
            "estimatedOutputWei": self.estimated_output_wei,
            "estimatedExchangeRate": self.estimated_exchange_rate,
            "gasEstimate": self.gas_estimate.to_dict(),
            "approvalAddress": self.approval_address,
            "steps": [s.to_dict() for s in self.steps],
            "aggregatorId": self.provider_id.value if self.provider_id else None,
        }


@dataclass
class TransactionRequest:
    """Call descriptor produced by a provider's build step."""

    from_address: Optional[str] = None
    to: Optional[str] = None
    data: Optional[str] = None
    value: Optional[str] = None
    gas_limit: Optional[str] = None
    gas_price: Optional[str] = None
    max_fee_per_gas: Optional[str] = None
    max_priority_fee_per_gas: Optional[str] = None
    chain_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "from": self.from_address,
            "to": self.to,
            "data": self.data,
            "value": self.value,
            "gasLimit": self.gas_limit,
            "gasPrice": self.gas_price,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "chainId": self.chain_id,
        }
        return {k: v for k, v in payload.items() if v is not None}


@dataclass
class TransactionRequestWithEstimate(TransactionRequest):
    estimate: Optional[Estimate] = None
    provider_id: Optional[ProviderId] = None

    @property
    def estimated_exchange_rate(self) -> float:
        return self.estimate.estimated_exchange_rate if self.estimate else 0.0

    @property
    def estimated_output(self) -> float:
        return self.estimate.estimated_output if self.estimate else 0.0

    @property
    def estimated_output_wei(self) -> str:
        return self.estimate.estimated_output_wei if self.estimate else "0"

    @property
    def approval_address(self) -> str:
        return self.estimate.approval_address if self.estimate else ""

    @property
    def steps(self) -> List[RouteStep]:
        return self.estimate.steps if self.estimate else []

    @property
    def total_gas_cost_usd(self) -> float:
        return self.estimate.gas_estimate.total_gas_cost_usd if self.estimate else 0.0

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.estimate:
            payload.update(self.estimate.to_dict())
        payload["aggregatorId"] = self.provider_id.value if self.provider_id else None
        return payload


@dataclass
class StatusQuery:
    """Cross-chain status lookup by source transaction hash or provider transfer id."""

    transaction_id: str
    from_chain_id: Optional[int] = None
    to_chain_id: Optional[int] = None
    bridge: Optional[str] = None
    integrator: Optional[str] = None
    provider_ids: Optional[ProviderSelection] = None


@dataclass
class StatusResponse:
    id: str
    status: OperationStatus
    tx_hash: Optional[str] = None
    sending_tx: Optional[str] = None
    receiving_tx: Optional[str] = None
    substatus: Optional[str] = None
    substatus_message: Optional[str] = None
    provider_id: Optional[ProviderId] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "txHash": self.tx_hash,
            "sendingTx": self.sending_tx,
            "receivingTx": self.receiving_tx,
            "substatus": self.substatus,
            "substatusMessage": self.substatus_message,
            "aggregatorId": self.provider_id.value if self.provider_id else None,
        }


def coerce_provider_ids(selection: Optional[ProviderSelection]) -> List[ProviderId]:
    """Normalize a single id or an ordered collection of ids into a list of ProviderId.

    Raises:
        ValueError: If an id is not a known provider.
    """
    if selection is None:
        return []
    if isinstance(selection, (ProviderId, str)):
        selection = [selection]
    ids: List[ProviderId] = []
    for item in selection:
        provider_id = item if isinstance(item, ProviderId) else ProviderId(str(item).strip().upper())
        if provider_id not in ids:
            ids.append(provider_id)
    return ids

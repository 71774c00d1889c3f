from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..core.aggregator import MetaAggregator, get_aggregator
from ..core.errors import NoRouteFound
from ..core.models import CustomContractCall, ProviderId, StatusQuery, SwapRequest


router = APIRouter(prefix="/swap")


class ContractCallModel(BaseModel):
    callData: str = Field(..., description="Hex calldata executed with the swap output")
    toAddress: Optional[str] = Field(default=None, description="Target contract")
    gasLimit: Optional[str] = None


class SwapQuoteRequest(BaseModel):
    input: str = Field(..., description="Input token address")
    inputChainId: int = Field(..., ge=0, description="Source chain ID")
    output: str = Field(..., description="Output token address")
    outputChainId: Optional[int] = Field(default=None, description="Destination chain ID, omit for a same-chain swap")
    amountWei: Union[str, int] = Field(..., description="Amount in smallest units")
    payer: str = Field(..., description="Address signing the transaction")
    receiver: Optional[str] = None
    testPayer: Optional[str] = Field(default=None, description="Impersonated payer used for simulation")
    referrer: Optional[str] = None
    project: Optional[str] = None
    deadline: Optional[int] = None
    maxSlippage: Optional[int] = Field(default=None, ge=0, le=10_000, description="Slippage in basis points")
    customContractCalls: List[ContractCallModel] = Field(default_factory=list)
    denyBridges: List[str] = Field(default_factory=list)
    denyExchanges: List[str] = Field(default_factory=list)
    aggregatorId: Optional[Union[str, List[str]]] = Field(default=None, description="Provider id or ordered list")
    receiveGasOnDestination: bool = False
    inputDecimals: Optional[int] = Field(default=None, ge=0)
    outputDecimals: Optional[int] = Field(default=None, ge=0)

    def to_swap_request(self) -> SwapRequest:
        return SwapRequest(
            input=self.input,
            input_chain_id=self.inputChainId,
            output=self.output,
            output_chain_id=self.outputChainId,
            amount_wei=self.amountWei,
            payer=self.payer,
            receiver=self.receiver,
            test_payer=self.testPayer,
            referrer=self.referrer,
            project=self.project,
            deadline=self.deadline,
            max_slippage=self.maxSlippage,
            custom_contract_calls=[
                CustomContractCall(call_data=c.callData, to_address=c.toAddress, gas_limit=c.gasLimit)
                for c in self.customContractCalls
            ],
            deny_bridges=list(self.denyBridges),
            deny_exchanges=list(self.denyExchanges),
            provider_ids=self.aggregatorId,
            receive_gas_on_destination=self.receiveGasOnDestination,
            input_decimals=self.inputDecimals,
            output_decimals=self.outputDecimals,
        )


class StatusRequest(BaseModel):
    transactionId: str = Field(..., description="Source tx hash or provider transfer id")
    fromChainId: Optional[int] = None
    toChainId: Optional[int] = None
    bridge: Optional[str] = None
    integrator: Optional[str] = None
    aggregatorId: Optional[Union[str, List[str]]] = None

    def to_status_query(self) -> StatusQuery:
        return StatusQuery(
            transaction_id=self.transactionId,
            from_chain_id=self.fromChainId,
            to_chain_id=self.toChainId,
            bridge=self.bridge,
            integrator=self.integrator,
            provider_ids=self.aggregatorId,
        )


@router.post("/quote")
async def post_swap_quote(
    req: SwapQuoteRequest,
    aggregator: MetaAggregator = Depends(get_aggregator),
) -> Dict[str, Any]:
    best = await aggregator.get_transaction_request(req.to_swap_request())
    if best is None:
        raise NoRouteFound()
    return best.to_dict()


@router.post("/quotes")
async def post_swap_quotes(
    req: SwapQuoteRequest,
    aggregator: MetaAggregator = Depends(get_aggregator),
) -> Dict[str, Any]:
    ranked = await aggregator.get_all_transaction_requests(req.to_swap_request())
    if not ranked:
        raise NoRouteFound()
    return {"routes": [tr.to_dict() for tr in ranked], "count": len(ranked)}


@router.post("/calldata")
async def post_call_data(
    req: SwapQuoteRequest,
    aggregator: MetaAggregator = Depends(get_aggregator),
) -> Dict[str, Any]:
    return {"data": await aggregator.get_call_data(req.to_swap_request())}


@router.post("/status")
async def post_status(
    req: StatusRequest,
    aggregator: MetaAggregator = Depends(get_aggregator),
) -> Dict[str, Any]:
    status = await aggregator.get_status(req.to_status_query())
    if status is None:
        raise HTTPException(status_code=404, detail=f"No status found for {req.transactionId}")
    return status.to_dict()


@router.get("/routers/{provider_id}")
async def get_routers(
    provider_id: str,
    aggregator: MetaAggregator = Depends(get_aggregator),
) -> Dict[str, Any]:
    try:
        table = aggregator.router_by_chain_id(ProviderId(provider_id.upper()))
    except (KeyError, ValueError):
        raise HTTPException(status_code=404, detail=f"Unknown provider '{provider_id}'")
    return {"aggregatorId": provider_id.upper(), "routers": {str(k): v for k, v in table.items()}}

"""
Estimate normalization.

Providers report amounts as integers in each token's smallest unit, often
well beyond the range a float holds exactly (18-decimal tokens). Amounts are
truncated with integer division first, keeping at most 8 fractional digits
and at least 3 digits of headroom, and only then converted to float. The
resulting exchange rate (human output / human input) is the ranking key used
by the meta-aggregator. Gas is reported alongside and never folded into it.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Iterable, Optional, Sequence, Tuple, Union

from .models import (
    Estimate,
    GasEstimate,
    ProviderId,
    RouteStep,
    TransactionRequest,
    TransactionRequestWithEstimate,
)

WeiLike = Union[int, str]


def round_exponent(decimals: int) -> int:
    return max(decimals - 8, 3)


def to_human_amount(amount_wei: WeiLike, decimals: int) -> float:
    """Scale a raw integer amount down to token units without float overflow.

    >>> to_human_amount(1_000000000000000000, 18)
    1.0
    >>> to_human_amount(999000, 6)
    0.999
    """
    decimals = int(decimals)
    exp = round_exponent(decimals)
    truncated = int(amount_wei) // 10 ** exp
    return truncated / 10 ** (decimals - exp)


def normalize(
    input_amount_wei: WeiLike,
    output_amount_wei: WeiLike,
    input_decimals: int,
    output_decimals: int,
    steps: Sequence[RouteStep] = (),
    gas_estimate: Optional[GasEstimate] = None,
    approval_address: str = "",
    provider_id: Optional[ProviderId] = None,
) -> Estimate:
    amount_in = to_human_amount(input_amount_wei, input_decimals)
    amount_out = to_human_amount(output_amount_wei, output_decimals)
    rate = amount_out / amount_in if amount_in else 0.0
    return Estimate(
        estimated_output=amount_out,
        estimated_output_wei=str(int(output_amount_wei)),
        estimated_exchange_rate=rate,
        gas_estimate=gas_estimate or GasEstimate(),
        approval_address=approval_address or "",
        steps=list(steps),
        provider_id=provider_id,
    )


def add_estimates_to_transaction_request(
    tx: TransactionRequest,
    *,
    input_amount_wei: WeiLike,
    output_amount_wei: WeiLike,
    input_decimals: int,
    output_decimals: int,
    steps: Sequence[RouteStep] = (),
    gas_estimate: Optional[GasEstimate] = None,
    approval_address: str = "",
    provider_id: Optional[ProviderId] = None,
) -> TransactionRequestWithEstimate:
    """Attach a normalized Estimate to a provider-built transaction."""

    estimate = normalize(
        input_amount_wei,
        output_amount_wei,
        input_decimals,
        output_decimals,
        steps=steps,
        gas_estimate=gas_estimate,
        approval_address=approval_address,
        provider_id=provider_id,
    )
    base = {f.name: getattr(tx, f.name) for f in fields(TransactionRequest)}
    return TransactionRequestWithEstimate(**base, estimate=estimate, provider_id=provider_id)


def _parse_float(value: Any) -> float:
    if value in (None, ""):
        return 0.0
    return float(value)


def _parse_int(value: Any) -> int:
    if value in (None, ""):
        return 0
    if isinstance(value, float):
        return int(value)
    return int(str(value), 0) if str(value).startswith("0x") else int(str(value))


def sum_costs(costs: Iterable[Tuple[Any, Any]]) -> Tuple[float, int]:
    """Total (amount_usd, amount_wei) pairs; blank entries count as zero."""

    total_usd = 0.0
    total_wei = 0
    for usd, wei in costs:
        total_usd += _parse_float(usd)
        total_wei += _parse_int(wei)
    return total_usd, total_wei

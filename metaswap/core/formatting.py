"""Helpers for printing wei amounts, addresses and swap requests in logs and the CLI."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from .models import SwapRequest, coerce_provider_ids


def wei_to_string(wei: Any) -> str:
    """Canonical decimal-string form of an integer amount.

    Strings pass through untouched, floats are rounded to the nearest integer.
    """
    if isinstance(wei, str):
        return wei.strip()
    if isinstance(wei, float):
        return str(int(round(wei)))
    if isinstance(wei, Decimal):
        return str(int(wei.to_integral_value()))
    return str(wei)


def compact_wei(wei: Any) -> str:
    """Round to 1e4 and print in exponential notation (``1e+9``)."""

    rounded = round(float(wei) / 1e4) * 1e4
    text = f"{rounded:e}"
    mantissa, exponent = text.split("e")
    mantissa = mantissa.rstrip("0").rstrip(".")
    return f"{mantissa}e{int(exponent):+d}"


def shorten_address(address: str, start: int = 4, end: int = 4, sep: str = ".") -> str:
    if not address:
        return ""
    return address[: 2 + start] + sep + address[len(address) - end:]


def swap_request_to_string(req: SwapRequest, call_data: Optional[str] = None) -> str:
    try:
        ids = coerce_provider_ids(req.provider_ids)
    except ValueError:
        ids = []
    label = ",".join(p.value for p in ids) if ids else "Meta"
    try:
        amount = compact_wei(req.amount_wei)
    except (TypeError, ValueError):
        amount = str(req.amount_wei)
    text = (
        f"{label} swap: {req.input_chain_id}:{shorten_address(req.input)} ({amount} wei) -> "
        f"{req.destination_chain_id}:{shorten_address(req.output)}"
    )
    if call_data:
        text += f" (callData: {call_data[:32]}... {len(call_data)}bytes)"
    return text

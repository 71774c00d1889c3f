"""Structural checks applied to a swap request before any provider is called."""

from __future__ import annotations

import re
from typing import Any, Optional

from .errors import InvalidInput
from .models import SwapRequest

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_EVM_ADDRESS_RE.fullmatch(value))


def _is_chain_id(value: Any) -> bool:
    # bool is an int subclass, reject it explicitly
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, str) and value.strip().isdigit():
        return True
    return False


def _parse_amount(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or not _INTEGER_RE.fullmatch(text):
        return None
    return int(text)


def validate_quote_params(req: SwapRequest) -> bool:
    """Return False when the request is structurally invalid. Never raises."""

    if any(not is_address(v) for v in (req.input, req.output, req.payer)):
        return False
    if not _is_chain_id(req.input_chain_id):
        return False
    amount = _parse_amount(req.amount_wei)
    if amount is None or amount < 0:
        return False
    return True


def ensure_valid(req: SwapRequest, provider: Optional[str] = None) -> None:
    if not validate_quote_params(req):
        raise InvalidInput("invalid input", provider=provider)

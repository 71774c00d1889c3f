from dataclasses import replace
from decimal import Decimal

from metaswap.core.formatting import compact_wei, shorten_address, swap_request_to_string, wei_to_string


def test_wei_to_string():
    assert wei_to_string("1000") == "1000"
    assert wei_to_string(1000) == "1000"
    assert wei_to_string(1000.6) == "1001"
    assert wei_to_string(Decimal("42")) == "42"
    assert wei_to_string(10 ** 30) == "1" + "0" * 30


def test_compact_wei():
    assert compact_wei(1_000_000_000) == "1e+9"
    assert compact_wei("1234567890") == "1.23457e+9"


def test_shorten_address():
    assert shorten_address("0xC373f2C4efFD31626c79eFCd891aA7759cF61886") == "0xC373.1886"
    assert shorten_address("") == ""


def test_swap_request_to_string(bridge_request):
    text = swap_request_to_string(bridge_request)

    assert text == "Meta swap: 10:0x0b2C.Ff85 (1e+9 wei) -> 42161:0xDA10.0da1"


def test_swap_request_to_string_with_providers_and_call_data(bridge_request):
    req = replace(bridge_request, provider_ids=["LIFI", "squid"])

    text = swap_request_to_string(req, call_data="0x" + "ab" * 40)

    assert text.startswith("LIFI,SQUID swap:")
    assert f"(callData: 0x{'ab' * 15}... 82bytes)" in text

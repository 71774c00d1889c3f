"""
Tests for request properties, wire serialization and provider id coercion.
"""

from dataclasses import replace

import pytest

from metaswap.core.errors import (
    ErrorCategory,
    MalformedResponse,
    NoRouteFound,
    ProviderHttpError,
    ProviderUnavailable,
)
from metaswap.core.models import (
    CustomContractCall,
    OperationStatus,
    ProviderId,
    StatusResponse,
    TransactionRequest,
    coerce_provider_ids,
)

from addresses import PAYER, TEST_PAYER


class TestSwapRequest:

    def test_cross_chain(self, bridge_request):
        assert bridge_request.is_cross_chain
        assert bridge_request.destination_chain_id == 42161

    def test_same_chain_when_output_chain_matches(self, bridge_request):
        req = replace(bridge_request, output_chain_id=10)

        assert not req.is_cross_chain
        assert req.destination_chain_id == 10

    def test_same_chain_when_output_chain_missing(self, swap_request):
        assert not swap_request.is_cross_chain
        assert swap_request.destination_chain_id == 42161

    def test_sender_prefers_test_payer(self, bridge_request):
        assert bridge_request.sender == PAYER
        assert replace(bridge_request, test_payer=TEST_PAYER).sender == TEST_PAYER

    def test_recipient_defaults_to_payer(self, bridge_request):
        assert bridge_request.recipient == PAYER
        assert replace(bridge_request, receiver=TEST_PAYER).recipient == TEST_PAYER

    def test_contract_calls(self, bridge_request):
        assert not bridge_request.has_contract_calls
        req = replace(bridge_request, custom_contract_calls=[CustomContractCall(call_data="0x1234")])
        assert req.has_contract_calls

    def test_amount_int(self, bridge_request):
        assert bridge_request.amount_int == 1_000_000_000
        assert bridge_request.slippage_bps == 100


class TestSerialization:

    def test_transaction_request_drops_none(self):
        payload = TransactionRequest(from_address=PAYER, to="0xabc", data="0x").to_dict()

        assert payload == {"from": PAYER, "to": "0xabc", "data": "0x"}

    def test_status_response(self):
        status = StatusResponse(
            id="0xhash",
            status=OperationStatus.PARTIAL_SUCCESS,
            sending_tx="0xhash",
            provider_id=ProviderId.LIFI,
        )

        payload = status.to_dict()

        assert payload["status"] == "PARTIAL_SUCCESS"
        assert payload["sendingTx"] == "0xhash"
        assert payload["aggregatorId"] == "LIFI"


class TestCoerceProviderIds:

    def test_none(self):
        assert coerce_provider_ids(None) == []

    def test_single_string(self):
        assert coerce_provider_ids("lifi") == [ProviderId.LIFI]

    def test_single_enum(self):
        assert coerce_provider_ids(ProviderId.SQUID) == [ProviderId.SQUID]

    def test_keeps_order_and_drops_duplicates(self):
        ids = coerce_provider_ids(["SQUID", ProviderId.LIFI, "squid", "ONE_INCH"])

        assert ids == [ProviderId.SQUID, ProviderId.LIFI, ProviderId.ONE_INCH]

    def test_unknown_id(self):
        with pytest.raises(ValueError):
            coerce_provider_ids(["LIFI", "UNISWAP"])


class TestErrors:

    def test_provider_http_error_message(self):
        error = ProviderHttpError("SOCKET", 429, "Too Many Requests", "slow down")

        assert str(error) == "429: Too Many Requests - slow down"
        assert error.status == 429
        assert error.category == ErrorCategory.PROVIDER_HTTP
        assert error.to_dict()["details"]["body"] == "slow down"

    def test_provider_http_error_empty_body(self):
        assert str(ProviderHttpError("SOCKET", 500, "Internal Server Error")).endswith("- ?")

    def test_provider_unavailable(self):
        error = ProviderUnavailable("ONE_INCH", env_var="ONE_INCH_API_KEY")

        assert error.message == "missing env.ONE_INCH_API_KEY"
        assert error.status_code == 503

    def test_status_codes(self):
        assert MalformedResponse("LIFI", "bad").status_code == 502
        assert NoRouteFound().status_code == 404

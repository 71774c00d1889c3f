"""
Tests for the Li.Fi adapter against a mocked HTTP transport.
"""

from dataclasses import replace

import pytest

from metaswap.core.errors import InvalidInput, MalformedResponse
from metaswap.core.models import CustomContractCall, OperationStatus, ProviderId, StatusQuery
from metaswap.providers.lifi import LifiProvider, convert_params, parse_transaction_status

from addresses import PAYER, TEST_PAYER
from mock_http import RecordingRouter
from provider_bodies import LIFI_DIAMOND, lifi_quote


class TestConvertParams:

    def test_plain_bridge(self, bridge_request):
        params = convert_params(bridge_request, "astrolab")

        assert params["fromChain"] == "opt"
        assert params["toChain"] == "arb"
        assert params["slippage"] == pytest.approx(0.01)
        assert params["maxPriceImpact"] == pytest.approx(0.02)
        assert params["fromAddress"] == PAYER
        assert params["integrator"] == "astrolab"
        assert "contractCalls" not in params
        assert "toAmount" not in params

    def test_quotes_against_test_payer(self, bridge_request):
        params = convert_params(replace(bridge_request, test_payer=TEST_PAYER), "astrolab")

        assert params["fromAddress"] == TEST_PAYER
        assert params["toAddress"] == PAYER

    def test_contract_calls(self, bridge_request):
        req = replace(
            bridge_request,
            custom_contract_calls=[CustomContractCall(call_data="0xabcdef", to_address=TEST_PAYER)],
        )

        params = convert_params(req, "astrolab")

        assert params["toAmount"] == "1000000000"
        assert params["contractCalls"][0]["toContractCallData"] == "0xabcdef"
        assert params["contractCalls"][0]["toContractGasLimit"] == "10000"


class TestGetTransactionRequest:

    @pytest.mark.asyncio
    async def test_normalizes_quote(self, bridge_request, offline_settings):
        router = RecordingRouter({("GET", "/v1/quote"): lifi_quote()})
        provider = LifiProvider(settings=offline_settings, transport=router.transport)

        tr = await provider.get_transaction_request(bridge_request)

        assert tr is not None
        assert tr.provider_id is ProviderId.LIFI
        assert tr.data == "0xdeadbeef"
        assert tr.to == LIFI_DIAMOND
        assert tr.estimated_output == pytest.approx(999.0)
        assert tr.estimated_exchange_rate == pytest.approx(0.999)
        assert tr.approval_address == LIFI_DIAMOND
        assert tr.estimate.gas_estimate.total_gas_cost_usd == pytest.approx(0.42)
        assert tr.estimate.gas_estimate.total_fee_cost_usd == pytest.approx(0.60)
        assert tr.steps[0].tool_details.name == "Stargate"

        request = router.calls[0]
        assert request.headers["x-lifi-api-key"] == "lifi-key"
        assert request.url.params["fromChain"] == "opt"
        assert request.url.params["allowDestinationCall"] == "true"

    @pytest.mark.asyncio
    async def test_contract_calls_use_post(self, bridge_request, offline_settings):
        router = RecordingRouter({("POST", "/v1/quote/contractCalls"): lifi_quote()})
        provider = LifiProvider(settings=offline_settings, transport=router.transport)
        req = replace(bridge_request, custom_contract_calls=[CustomContractCall(call_data="0x01", to_address=PAYER)])

        tr = await provider.get_transaction_request(req)

        assert tr is not None
        body = router.json_body(0)
        assert body["contractCalls"][0]["toContractAddress"] == PAYER

    @pytest.mark.asyncio
    async def test_no_transaction_means_no_route(self, bridge_request, offline_settings):
        quote = lifi_quote()
        del quote["transactionRequest"]
        router = RecordingRouter({("GET", "/quote"): quote})
        provider = LifiProvider(settings=offline_settings, transport=router.transport)

        assert await provider.get_transaction_request(bridge_request) is None

    @pytest.mark.asyncio
    async def test_missing_decimals_is_malformed(self, bridge_request, offline_settings):
        quote = lifi_quote()
        del quote["action"]["toToken"]["decimals"]
        router = RecordingRouter({("GET", "/quote"): quote})
        provider = LifiProvider(settings=offline_settings, transport=router.transport)

        with pytest.raises(MalformedResponse):
            await provider.get_transaction_request(bridge_request)

    @pytest.mark.asyncio
    async def test_invalid_input_never_hits_network(self, bridge_request, offline_settings):
        router = RecordingRouter({})
        provider = LifiProvider(settings=offline_settings, transport=router.transport)

        with pytest.raises(InvalidInput):
            await provider.get_transaction_request(replace(bridge_request, input="USDC"))
        assert router.calls == []

    @pytest.mark.asyncio
    async def test_public_mode_without_key(self, bridge_request, offline_settings, caplog):
        router = RecordingRouter({("GET", "/quote"): lifi_quote()})
        provider = LifiProvider(settings=offline_settings, api_key="", transport=router.transport)

        with caplog.at_level("WARNING"):
            tr = await provider.get_transaction_request(bridge_request)

        assert tr is not None
        assert "x-lifi-api-key" not in router.calls[0].headers
        assert "missing env.LIFI_API_KEY" in caplog.text


class TestStatus:

    def test_partial_done(self):
        status = parse_transaction_status({
            "status": "DONE",
            "substatus": "PARTIAL",
            "sending": {"txHash": "0xsrc"},
            "receiving": {"txHash": "0xdst"},
        })

        assert status.status is OperationStatus.PARTIAL_SUCCESS
        assert status.sending_tx == "0xsrc"
        assert status.receiving_tx == "0xdst"
        assert status.id == "0xsrc"

    def test_unknown_status_is_pending(self):
        assert parse_transaction_status({"status": "WHATEVER"}).status is OperationStatus.PENDING

    @pytest.mark.asyncio
    async def test_get_status(self, offline_settings):
        router = RecordingRouter({
            ("GET", "/status"): {"status": "DONE", "substatus": "COMPLETED", "sending": {"txHash": "0xsrc"}},
        })
        provider = LifiProvider(settings=offline_settings, transport=router.transport)

        status = await provider.get_status(StatusQuery(transaction_id="0xsrc", bridge="stargate"))

        assert status.status is OperationStatus.DONE
        assert router.params(0) == {"txHash": "0xsrc", "bridge": "stargate"}

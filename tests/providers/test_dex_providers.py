"""
Tests for the same-chain DEX aggregator adapters: KyberSwap, 1inch, 0x and ParaSwap.
"""

import json
from dataclasses import replace

import pytest

from metaswap.core.errors import MalformedResponse, ProviderUnavailable
from metaswap.core.models import ProviderId
from metaswap.providers.kyberswap import KyberSwapProvider
from metaswap.providers.one_inch import OneInchProvider
from metaswap.providers.paraswap import ParaSwapProvider
from metaswap.providers.zero_x import ZeroXProvider, api_root

from addresses import PAYER, USDC_ARBITRUM, WETH_ARBITRUM
from mock_http import RecordingRouter

HALF_ETH = "500000000000000000"


# =============================================================================
# KyberSwap
# =============================================================================

KYBER_ROUTER = "0x6131B5fae19EA4f9D964eAc0408E4408b66337b5"


def kyber_routes() -> dict:
    return {
        "code": 0,
        "data": {
            "routeSummary": {
                "tokenIn": USDC_ARBITRUM,
                "tokenOut": WETH_ARBITRUM,
                "amountOut": HALF_ETH,
                "gas": "200000",
                "gasUsd": "0.12",
                "route": [[{"exchange": "uniswap-v3", "swapAmount": "1000000000", "amountOut": HALF_ETH}]],
            },
            "routerAddress": KYBER_ROUTER,
        },
    }


def kyber_build() -> dict:
    return {
        "code": 0,
        "data": {
            "amountOut": HALF_ETH,
            "gas": "210000",
            "data": "0xe21fd0e9",
            "routerAddress": KYBER_ROUTER,
            "transactionValue": "0",
        },
    }


class TestKyberSwap:

    @pytest.mark.asyncio
    async def test_routes_then_build(self, swap_request, offline_settings):
        router = RecordingRouter({
            ("GET", "/arbitrum/api/v1/routes"): kyber_routes(),
            ("POST", "/arbitrum/api/v1/route/build"): kyber_build(),
        })
        provider = KyberSwapProvider(settings=offline_settings, transport=router.transport)

        tr = await provider.get_transaction_request(swap_request)

        assert tr.provider_id is ProviderId.KYBERSWAP
        assert tr.to == KYBER_ROUTER
        assert tr.gas_limit == "420000"
        assert tr.estimated_output == pytest.approx(0.5)
        assert tr.estimated_exchange_rate == pytest.approx(0.0005)
        assert tr.total_gas_cost_usd == pytest.approx(0.12)
        assert tr.steps[0].tool == "uniswap-v3"

        build = router.json_body(1)
        assert build["sender"] == PAYER
        assert build["slippageTolerance"] == 50
        assert router.calls[0].headers["x-client-id"] == "astrolab"

    @pytest.mark.asyncio
    async def test_decimals_required(self, swap_request, offline_settings):
        router = RecordingRouter({
            ("GET", "/routes"): kyber_routes(),
            ("POST", "/route/build"): kyber_build(),
        })
        provider = KyberSwapProvider(settings=offline_settings, transport=router.transport)

        with pytest.raises(MalformedResponse):
            await provider.get_transaction_request(replace(swap_request, output_decimals=None))

    @pytest.mark.asyncio
    async def test_cross_chain_is_skipped(self, bridge_request, offline_settings):
        router = RecordingRouter({})
        provider = KyberSwapProvider(settings=offline_settings, transport=router.transport)

        assert await provider.get_transaction_request(bridge_request) is None
        assert router.calls == []


# =============================================================================
# 1inch
# =============================================================================

ONE_INCH_ROUTER = "0x1111111254eeb25477b68fb85ed929f73a960582"


def one_inch_swap() -> dict:
    return {
        "fromToken": {"address": USDC_ARBITRUM, "decimals": 6},
        "toToken": {"address": WETH_ARBITRUM, "decimals": 18},
        "toAmount": HALF_ETH,
        "tx": {
            "from": PAYER,
            "to": ONE_INCH_ROUTER,
            "data": "0x12aa3caf",
            "value": "0",
            "gas": 150000,
            "gasPrice": "100000000",
        },
    }


class TestOneInch:

    @pytest.mark.asyncio
    async def test_swap(self, swap_request, offline_settings):
        router = RecordingRouter({("GET", "/swap/v5.2/42161/swap"): one_inch_swap()})
        provider = OneInchProvider(settings=offline_settings, transport=router.transport)

        tr = await provider.get_transaction_request(replace(swap_request, input_decimals=None, output_decimals=None))

        assert tr.to == ONE_INCH_ROUTER
        assert tr.gas_limit == "300000"
        assert tr.estimate.gas_estimate.total_gas_cost_wei == str(150000 * 100000000)
        assert tr.estimated_exchange_rate == pytest.approx(0.0005)

        request = router.calls[0]
        assert request.headers["Authorization"] == "Bearer 1inch-key"
        assert request.url.params["slippage"] == "1"
        assert request.url.params["from"] == PAYER

    @pytest.mark.asyncio
    async def test_requires_api_key(self, swap_request, offline_settings):
        provider = OneInchProvider(settings=offline_settings, api_key="", transport=RecordingRouter({}).transport)

        with pytest.raises(ProviderUnavailable):
            await provider.get_transaction_request(swap_request)

    @pytest.mark.asyncio
    async def test_quote_omits_addresses(self, swap_request, offline_settings):
        router = RecordingRouter({("GET", "/42161/quote"): {"toAmount": HALF_ETH}})
        provider = OneInchProvider(settings=offline_settings, transport=router.transport)

        quote = await provider.get_quote(swap_request)

        assert quote == {"toAmount": HALF_ETH}
        assert "from" not in router.calls[0].url.params


# =============================================================================
# 0x
# =============================================================================

EXCHANGE_PROXY = "0xdef1c0ded9bec7f1a1670819833240f027b25eff"


def zero_x_quote() -> dict:
    return {
        "to": EXCHANGE_PROXY,
        "data": "0x415565b0",
        "value": "0",
        "gas": "180000",
        "gasPrice": "10000000",
        "sellAmount": "1000000000",
        "buyAmount": HALF_ETH,
        "allowanceTarget": EXCHANGE_PROXY,
    }


class TestZeroX:

    def test_api_root_per_network(self):
        assert api_root(1) == "https://api.0x.org/swap/v1"
        assert api_root(42161) == "https://arbitrum.api.0x.org/swap/v1"

    @pytest.mark.asyncio
    async def test_quote(self, swap_request, offline_settings):
        router = RecordingRouter({("GET", "/swap/v1/quote"): zero_x_quote()})
        provider = ZeroXProvider(settings=offline_settings, transport=router.transport)

        tr = await provider.get_transaction_request(swap_request)

        assert tr.provider_id is ProviderId.ZERO_X
        assert tr.approval_address == EXCHANGE_PROXY
        assert tr.gas_limit == "360000"
        assert tr.estimated_output == pytest.approx(0.5)

        request = router.calls[0]
        assert request.url.host == "arbitrum.api.0x.org"
        assert request.headers["0x-api-key"] == "zerox-key"
        assert request.url.params["slippagePercentage"] == "0.005"

    @pytest.mark.asyncio
    async def test_matcha_proxy_without_key(self, swap_request, offline_settings):
        router = RecordingRouter({("GET", "/api/"): zero_x_quote()})
        provider = ZeroXProvider(matcha=True, settings=offline_settings, api_key="", transport=router.transport)

        tr = await provider.get_transaction_request(swap_request)

        assert tr.data == "0x415565b0"
        request = router.calls[0]
        assert request.url.host == "matcha.xyz"
        assert request.url.params["resource"] == "quote"
        assert json.loads(request.url.params["params"])["sellToken"] == USDC_ARBITRUM
        assert "0x-api-key" not in request.headers

    @pytest.mark.asyncio
    async def test_unknown_network(self, swap_request, offline_settings):
        router = RecordingRouter({})
        provider = ZeroXProvider(settings=offline_settings, transport=router.transport)

        assert await provider.get_quote(replace(swap_request, input_chain_id=324)) is None
        assert router.calls == []


# =============================================================================
# ParaSwap
# =============================================================================

AUGUSTUS = "0xDEF171Fe48CF0115B1d80b88dc8eAB59176FEe57"
TOKEN_TRANSFER_PROXY = "0x216B4B4Ba9F3e719726886d34a177484278Bfcae"


def paraswap_prices() -> dict:
    return {
        "priceRoute": {
            "network": 42161,
            "srcToken": USDC_ARBITRUM,
            "srcDecimals": 6,
            "srcAmount": "1000000000",
            "destToken": WETH_ARBITRUM,
            "destDecimals": 18,
            "destAmount": HALF_ETH,
            "gasCost": "150000",
            "gasCostUSD": "0.25",
            "tokenTransferProxy": TOKEN_TRANSFER_PROXY,
            "bestRoute": [{"swaps": [{"swapExchanges": [
                {"exchange": "UniswapV3", "srcAmount": "1000000000", "destAmount": HALF_ETH},
            ]}]}],
        },
    }


class TestParaSwap:

    @pytest.mark.asyncio
    async def test_prices_then_transactions(self, swap_request, offline_settings):
        router = RecordingRouter({
            ("GET", "/prices"): paraswap_prices(),
            ("POST", "/transactions/42161"): {
                "from": PAYER,
                "to": AUGUSTUS,
                "data": "0x54e3f31b",
                "value": "0",
                "gasPrice": "10000000",
                "chainId": 42161,
            },
        })
        provider = ParaSwapProvider(settings=offline_settings, transport=router.transport)

        tr = await provider.get_transaction_request(swap_request)

        assert tr.to == AUGUSTUS
        assert tr.approval_address == TOKEN_TRANSFER_PROXY
        assert tr.total_gas_cost_usd == pytest.approx(0.25)
        assert tr.estimate.gas_estimate.total_gas_cost_wei == str(150000 * 10000000)
        assert tr.steps[0].tool == "UniswapV3"

        assert router.params(0)["network"] == "42161"
        assert router.params(0)["side"] == "SELL"
        body = router.json_body(1)
        assert body["slippage"] == 50
        assert body["priceRoute"]["destAmount"] == HALF_ETH
        assert body["partner"] == "astrolab"

    @pytest.mark.asyncio
    async def test_no_price_route(self, swap_request, offline_settings):
        router = RecordingRouter({("GET", "/prices"): {"error": "No routes found with enough liquidity"}})
        provider = ParaSwapProvider(settings=offline_settings, transport=router.transport)

        assert await provider.get_transaction_request(swap_request) is None

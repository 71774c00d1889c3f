"""Shared fixtures: offline settings and canned swap requests."""

import pytest

from metaswap.config import Settings
from metaswap.core.models import SwapRequest

from addresses import DAI_ARBITRUM, PAYER, USDC_ARBITRUM, USDC_OPTIMISM, WETH_ARBITRUM


@pytest.fixture
def offline_settings() -> Settings:
    return Settings(
        lifi_api_key="lifi-key",
        squid_api_key="squid-key",
        socket_api_key="socket-key",
        one_inch_api_key="1inch-key",
        zero_x_api_key="zerox-key",
        squid_integrator_id="astrolab-api",
    )


@pytest.fixture
def bridge_request() -> SwapRequest:
    """USDC on Optimism to DAI on Arbitrum, 1000 USDC."""
    return SwapRequest(
        input=USDC_OPTIMISM,
        input_chain_id=10,
        output=DAI_ARBITRUM,
        output_chain_id=42161,
        amount_wei="1000000000",
        payer=PAYER,
        max_slippage=100,
    )


@pytest.fixture
def swap_request() -> SwapRequest:
    """1000 USDC to WETH on Arbitrum."""
    return SwapRequest(
        input=USDC_ARBITRUM,
        input_chain_id=42161,
        output=WETH_ARBITRUM,
        amount_wei="1000000000",
        payer=PAYER,
        max_slippage=50,
        input_decimals=6,
        output_decimals=18,
    )

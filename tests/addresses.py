"""Well-known addresses used across the test suite."""

PAYER = "0xC373f2C4efFD31626c79eFCd891aA7759cF61886"
TEST_PAYER = "0x000000000000000000000000000000000000dEaD"
USDC_OPTIMISM = "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85"
DAI_ARBITRUM = "0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1"
USDC_ARBITRUM = "0xaf88d065e77c8cC2239327C5EDb3A432268e5831"
WETH_ARBITRUM = "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"

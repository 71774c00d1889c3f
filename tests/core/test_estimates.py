"""
Tests for estimate normalization and cost totals.
"""

import pytest

from metaswap.core.estimates import (
    add_estimates_to_transaction_request,
    normalize,
    round_exponent,
    sum_costs,
    to_human_amount,
)
from metaswap.core.models import GasEstimate, ProviderId, TransactionRequest


class TestToHumanAmount:

    def test_round_exponent_floor(self):
        assert round_exponent(6) == 3
        assert round_exponent(11) == 3
        assert round_exponent(18) == 10

    def test_six_decimals(self):
        assert to_human_amount(999000, 6) == pytest.approx(0.999)

    def test_eighteen_decimals(self):
        assert to_human_amount(10 ** 18, 18) == 1.0

    def test_truncates_below_round_exponent(self):
        # 1.000999 USDC keeps only three fractional digits
        assert to_human_amount(1_000_999, 6) == 1.0

    def test_string_amount(self):
        assert to_human_amount("2500000000000000000", 18) == 2.5

    def test_large_amount_does_not_overflow(self):
        assert to_human_amount(10 ** 40, 18) == pytest.approx(1e22)

    def test_zero_decimals(self):
        # negative exponent divisor scales back up
        assert to_human_amount(12345, 0) == pytest.approx(12000)


class TestNormalize:

    def test_exchange_rate(self):
        estimate = normalize(1_000_000, 999_000, 6, 6)

        assert estimate.estimated_output == pytest.approx(0.999)
        assert estimate.estimated_output_wei == "999000"
        assert estimate.estimated_exchange_rate == pytest.approx(0.999)

    def test_cross_decimal_rate(self):
        # 1000 USDC -> 0.5 WETH
        estimate = normalize(1_000_000_000, 5 * 10 ** 17, 6, 18)

        assert estimate.estimated_exchange_rate == pytest.approx(0.0005)

    def test_zero_input_gives_zero_rate(self):
        estimate = normalize(0, 999_000, 6, 6)

        assert estimate.estimated_exchange_rate == 0.0
        assert estimate.estimated_output == pytest.approx(0.999)

    def test_zero_output(self):
        estimate = normalize(1_000_000, 0, 6, 6)

        assert estimate.estimated_output == 0.0
        assert estimate.estimated_exchange_rate == 0.0

    def test_defaults_to_empty_gas(self):
        estimate = normalize(1, 1, 6, 6)

        assert estimate.gas_estimate == GasEstimate()
        assert estimate.steps == []


class TestAddEstimates:

    def test_keeps_transaction_fields(self):
        tx = TransactionRequest(from_address="0xabc", to="0xdef", data="0x12", value="0", chain_id=10)

        tr = add_estimates_to_transaction_request(
            tx,
            input_amount_wei=1_000_000,
            output_amount_wei=2_000_000,
            input_decimals=6,
            output_decimals=6,
            approval_address="0xdef",
            provider_id=ProviderId.LIFI,
        )

        assert tr.to == "0xdef"
        assert tr.data == "0x12"
        assert tr.chain_id == 10
        assert tr.estimated_exchange_rate == pytest.approx(2.0)
        assert tr.approval_address == "0xdef"
        assert tr.provider_id is ProviderId.LIFI
        # source object untouched
        assert not hasattr(tx, "estimate")

    def test_to_dict_merges_estimate(self):
        tr = add_estimates_to_transaction_request(
            TransactionRequest(to="0xdef", data="0x12"),
            input_amount_wei=1_000_000,
            output_amount_wei=1_000_000,
            input_decimals=6,
            output_decimals=6,
            provider_id=ProviderId.SQUID,
        )

        payload = tr.to_dict()

        assert payload["to"] == "0xdef"
        assert payload["estimatedExchangeRate"] == 1.0
        assert payload["estimatedOutputWei"] == "1000000"
        assert payload["aggregatorId"] == "SQUID"
        assert "from" not in payload


class TestSumCosts:

    def test_mixed_inputs(self):
        usd, wei = sum_costs([("1.5", "100"), (None, "0x10"), ("", ""), (2, 5)])

        assert usd == pytest.approx(3.5)
        assert wei == 100 + 16 + 5

    def test_empty(self):
        assert sum_costs([]) == (0.0, 0)

"""Unit tests for the parking cost calculator."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from decimal import Decimal
from app.services.cost_calculator import (
    calculate_parking_cost, calculate_processing_fee, format_currency, format_duration, round2,
)
from app.services.exceptions import InvalidInputError


class TestCalculateParkingCost:
    def test_reference_receipt(self):
        cost = calculate_parking_cost(3.25, 2)
        assert cost.base_cost == Decimal("6.50")
        assert cost.tax_amount == Decimal("0.41")
        assert cost.processing_fee == Decimal("0.49")
        assert cost.total_cost == Decimal("7.40")

    def test_street_rate_one_hour(self):
        cost = calculate_parking_cost(Decimal("1.25"), Decimal("1"))
        assert cost.base_cost == Decimal("1.25")
        assert cost.tax_amount == Decimal("0.08")
        assert cost.processing_fee == Decimal("0.34")
        assert cost.total_cost == Decimal("1.67")

    @pytest.mark.parametrize("rate,hours", [(1, 0.5), (1.25, 3.5), (2.75, 7), (0.99, 1.5), (12.4, 24)])
    def test_total_is_sum_of_rounded_parts(self, rate, hours):
        cost = calculate_parking_cost(rate, hours)
        assert cost.total_cost == cost.base_cost + cost.tax_amount + cost.processing_fee
        for part in (cost.base_cost, cost.tax_amount, cost.processing_fee, cost.total_cost):
            assert part == part.quantize(Decimal("0.01"))

    def test_same_inputs_same_breakdown(self):
        assert calculate_parking_cost(3.25, 2) == calculate_parking_cost(3.25, 2)

    def test_reports_configured_rates(self):
        cost = calculate_parking_cost(1, 1)
        assert cost.tax_rate == Decimal("0.0635")
        assert cost.processing_fee_rate == Decimal("0.029")

    def test_tax_rate_override(self):
        cost = calculate_parking_cost(10, 1, tax_rate=Decimal("0.0625"))
        assert cost.tax_amount == Decimal("0.63")

    @pytest.mark.parametrize("rate,hours", [(0, 1), (-1, 1), (1, 0), (1, -0.5)])
    def test_non_positive_inputs_rejected(self, rate, hours):
        with pytest.raises(InvalidInputError):
            calculate_parking_cost(rate, hours)

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_parking_cost("abc", 1)

    def test_refundable_portion_excludes_fee(self):
        cost = calculate_parking_cost(3.25, 2)
        assert cost.refundable_portion == Decimal("6.91")


class TestHelpers:
    def test_round2_is_half_up(self):
        assert round2(Decimal("0.125")) == Decimal("0.13")
        assert round2(Decimal("1.625")) == Decimal("1.63")
        assert round2(Decimal("0.124")) == Decimal("0.12")

    def test_processing_fee(self):
        assert calculate_processing_fee(Decimal("6.50")) == Decimal("0.49")

    def test_format_currency(self):
        assert format_currency(Decimal("7.4")) == "$7.40"
        assert format_currency(1234.5) == "$1,234.50"

    def test_format_duration(self):
        assert format_duration(0.75) == "45 min"
        assert format_duration(2) == "2 hr"
        assert format_duration(1.5) == "1h 30m"

from datetime import date, timedelta
from decimal import Decimal

import pytest

from services.pricing import DayCountPolicy, PricingCalculator


@pytest.fixture
def calculator():
    return PricingCalculator(deposit_rate="0.5")


@pytest.mark.parametrize("nights", [1, 2, 7, 30])
def test_inclusive_policy_counts_both_ends(calculator, nights):
    start = date(2025, 2, 1)
    quote = calculator.compute_rental(start, start + timedelta(days=nights), Decimal("500000"))

    assert quote.rental_days == nights + 1
    assert quote.total_price == Decimal("500000") * (nights + 1)


@pytest.mark.parametrize("nights", [1, 2, 7, 30])
def test_exclusive_policy_skips_return_day(calculator, nights):
    start = date(2025, 2, 1)
    quote = calculator.compute_rental(
        start, start + timedelta(days=nights), Decimal("500000"), DayCountPolicy.EXCLUSIVE
    )

    assert quote.rental_days == nights
    assert quote.total_price == Decimal("500000") * nights


def test_three_day_inclusive_rental(calculator):
    quote = calculator.compute_rental(date(2025, 2, 1), date(2025, 2, 3), "500000")

    assert quote.rental_days == 3
    assert quote.total_price == Decimal("1500000")


def test_price_uses_exact_decimal_arithmetic(calculator):
    quote = calculator.compute_rental(date(2025, 2, 1), date(2025, 2, 3), 0.1)

    assert quote.total_price == Decimal("0.3")


@pytest.mark.parametrize("total, deposit", [
    (Decimal("1500000"), Decimal("750000")),
    (Decimal("0"), Decimal("0")),
    (Decimal("333.33"), Decimal("166.665")),
])
def test_deposit_is_half_of_total(calculator, total, deposit):
    assert calculator.compute_deposit(total) == deposit


def test_default_deposit_rate_comes_from_settings():
    assert PricingCalculator().deposit_rate == Decimal("0.5")


def test_custom_deposit_rate():
    assert PricingCalculator(deposit_rate="0.3").compute_deposit(Decimal("1000")) == Decimal("300")


@pytest.mark.parametrize("rate", ["-0.1", "1.5"])
def test_deposit_rate_out_of_range_is_rejected(rate):
    with pytest.raises(ValueError):
        PricingCalculator(deposit_rate=rate)

from decimal import Decimal

import pytest

from core.entities.rate import Rate
from core.use_cases.pricing import (
    commission_for, settle, minimum_deposit, convert_deposit, convert_bkash_deposit, to_cents,
    MINIMUM_DEPOSIT_TIERS,
)


@pytest.mark.parametrize("amount, expected", [
    ("1000", "25.00"),
    ("200", "5.00"),
    ("50", "1.25"),
    ("1", "0.03"),      # 0.025 -> 0.03
    ("0.2", "0.01"),    # 0.005 -> 0.01
    ("123.45", "3.09"),
])
def test_commission_is_two_and_half_percent_rounded_half_up(amount, expected):
    assert commission_for(Decimal(amount)) == Decimal(expected)


def test_settlement_total_includes_commission():
    s = settle(Decimal("1000"))
    assert s.commission == Decimal("25.00")
    assert s.total == Decimal("1025.00")
    assert s.total_cents == 102_500


def test_balance_equal_to_amount_is_not_enough():
    s = settle(Decimal("1000"))
    assert not s.covered_by(100_000)
    assert s.shortfall(100_000) == Decimal("25.00")


def test_balance_after_debit():
    s = settle(Decimal("1000"))
    assert s.covered_by(200_000)
    assert 200_000 - s.total_cents == 97_500


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_settle_rejects_non_positive(amount):
    with pytest.raises(ValueError):
        settle(Decimal(amount))


def test_minimum_deposit_tiers():
    assert [minimum_deposit(n) for n in range(6)] == [100, 500, 1000, 2000, 2000, 2000]


def test_minimum_deposit_is_monotonic():
    values = [minimum_deposit(n) for n in range(10)]
    assert values == sorted(values)
    assert max(values) == MINIMUM_DEPOSIT_TIERS[0][1]


def test_deposit_conversion_truncates():
    rate = Rate(country_code="US", original_rate=Decimal("121.50"), company_rate=Decimal("119.75"), updated_at="")
    assert convert_deposit(Decimal("100"), rate) == 11_975
    assert convert_deposit(Decimal("3"), rate) == 359  # 359.25


def test_bkash_conversion_uses_rate_ratio():
    rate = Rate(country_code="US", original_rate=Decimal("120"), company_rate=Decimal("118"), updated_at="")
    # 1000 / 120 * 118 = 983.33...
    assert convert_bkash_deposit(Decimal("1000"), rate) == 983


def test_conversion_without_rate_keeps_amount():
    assert convert_deposit(Decimal("250.75"), None) == 250
    assert convert_bkash_deposit(Decimal("99.99"), None) == 99


def test_to_cents():
    assert to_cents(Decimal("10.05")) == 1005
    assert to_cents(Decimal("0.01")) == 1

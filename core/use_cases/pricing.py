"""Money arithmetic shared by every send and deposit flow.

Amounts travel through the API as decimals with two fractional digits and are
stored as integer cents. Commission is rounded half-up to the cent; deposit
conversions are truncated to whole currency units.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, ROUND_FLOOR
from typing import Optional

from config.settings import settings
from core.entities.rate import Rate

CENT = Decimal("0.01")

# (минимальное число одобренных депозитов, минимальная сумма)
MINIMUM_DEPOSIT_TIERS = ((3, 2000), (2, 1000), (1, 500), (0, 100))


def to_cents(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: int) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(CENT)


def is_whole(amount: Decimal) -> bool:
    return Decimal(amount) == Decimal(amount).to_integral_value()


def commission_for(amount: Decimal, rate: Optional[Decimal] = None) -> Decimal:
    rate = settings.COMMISSION_RATE if rate is None else Decimal(rate)
    return (Decimal(amount) * rate).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Settlement:
    amount: Decimal
    commission: Decimal

    @property
    def total(self) -> Decimal:
        return self.amount + self.commission

    @property
    def amount_cents(self) -> int:
        return to_cents(self.amount)

    @property
    def commission_cents(self) -> int:
        return to_cents(self.commission)

    @property
    def total_cents(self) -> int:
        return self.amount_cents + self.commission_cents

    def shortfall(self, balance_cents: int) -> Decimal:
        return from_cents(max(0, self.total_cents - balance_cents))

    def covered_by(self, balance_cents: int) -> bool:
        return balance_cents >= self.total_cents


def settle(amount: Decimal, rate: Optional[Decimal] = None) -> Settlement:
    amount = Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValueError("Please enter a valid amount")
    return Settlement(amount=amount, commission=commission_for(amount, rate))


def minimum_deposit(approved_count: int) -> int:
    for threshold, minimum in MINIMUM_DEPOSIT_TIERS:
        if approved_count >= threshold:
            return minimum
    return MINIMUM_DEPOSIT_TIERS[-1][1]


def _floor_units(value: Decimal) -> int:
    return int(Decimal(value).to_integral_value(rounding=ROUND_FLOOR))


def convert_deposit(amount: Decimal, rate: Optional[Rate]) -> int:
    """Whole units credited for a bank or gift-card deposit."""
    if rate is None:
        return _floor_units(amount)
    return _floor_units(Decimal(amount) * rate.company_rate)


def convert_bkash_deposit(amount: Decimal, rate: Optional[Rate]) -> int:
    if rate is None or rate.original_rate <= 0:
        return _floor_units(amount)
    return _floor_units(Decimal(amount) / rate.original_rate * rate.company_rate)

"""Price calculation strategies and order quotes.

A quote applies the coupon discount to the raw subtotal first and the
service fee to whatever remains. Swapping the order changes the total.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from ticketing.domain.models import Event
from ticketing.domain.value_objects import Money

DEFAULT_SERVICE_FEE_RATE = Decimal("0.05")


class PriceStrategy(ABC):
    """Turns a base amount into an adjusted amount."""

    @abstractmethod
    def calculate(self, base: Decimal) -> Decimal:
        ...


class ServiceFeeStrategy(PriceStrategy):
    """Adds a flat-rate service fee on top of the amount."""

    def __init__(self, rate: Decimal = DEFAULT_SERVICE_FEE_RATE) -> None:
        if rate < 0:
            raise ValueError("Service fee rate cannot be negative")
        self.rate = rate

    def calculate(self, base: Decimal) -> Decimal:
        return base * (1 + self.rate)


class CouponDiscountStrategy(PriceStrategy):
    """Subtracts a fixed amount, never going below zero."""

    def __init__(self, discount: Decimal) -> None:
        if discount < 0:
            raise ValueError("Coupon discount cannot be negative")
        self.discount = discount

    def calculate(self, base: Decimal) -> Decimal:
        return max(Decimal("0"), base - self.discount)


@dataclass(frozen=True)
class PriceBreakdown:
    """Quote shown before a purchase and recorded on the order."""

    base_amount: Money
    discount_amount: Money
    fee_amount: Money
    total_amount: Money
    coupon_valid: bool


def quote(
    event: Event,
    quantity: int,
    coupon_code: str | None = None,
    fee_strategy: PriceStrategy | None = None,
) -> PriceBreakdown:
    """Price `quantity` tickets for `event`.

    The coupon discount is a flat amount per order, not per ticket.
    """
    if quantity <= 0:
        raise ValueError("Quantity must be positive")
    fee_strategy = fee_strategy or ServiceFeeStrategy()

    base = event.unit_price.amount * quantity
    coupon_valid = event.coupon_matches(coupon_code)

    discounted = base
    if coupon_valid:
        discounted = CouponDiscountStrategy(event.coupon_discount.amount).calculate(base)

    total = fee_strategy.calculate(discounted)

    return PriceBreakdown(
        base_amount=Money(base).quantize(),
        discount_amount=Money(base - discounted).quantize(),
        fee_amount=Money(total - discounted).quantize(),
        total_amount=Money(total).quantize(),
        coupon_valid=coupon_valid,
    )

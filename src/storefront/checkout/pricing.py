"""Price resolution and order totals.

Pure functions, no I/O. All arithmetic is done in Decimal and rounded half-up
to cents on the way out, so the total stored on an Order is exactly the sum of
its stored line totals plus shipping.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> float:
    return float(to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def resolve_unit_price(base_price, price_adjustment) -> float:
    """Canonical unit price of a variation: base price plus its adjustment."""
    unit_price = to_decimal(base_price) + to_decimal(price_adjustment)
    if unit_price < 0:
        raise ValidationError(
            {"unit_price": [f"Price adjustment {price_adjustment} takes base price {base_price} below zero"]}
        )
    return to_money(unit_price)


def line_total(unit_price, quantity: int) -> float:
    return to_money(to_decimal(unit_price) * quantity)


@dataclass(frozen=True)
class ShippingPolicy:
    """Flat shipping fee, waived when the subtotal reaches the threshold."""

    free_shipping_threshold: float = 5000.0
    flat_fee: float = 300.0

    def cost_for(self, subtotal) -> float:
        if to_decimal(subtotal) >= to_decimal(self.free_shipping_threshold):
            return 0.0
        return to_money(self.flat_fee)

    def amount_to_free_shipping(self, subtotal) -> float:
        remaining = to_decimal(self.free_shipping_threshold) - to_decimal(subtotal)
        return to_money(max(remaining, Decimal("0")))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    shipping_cost: float
    total_amount: float


def compute_totals(lines: Iterable[tuple[float, int]], shipping_policy: ShippingPolicy) -> OrderTotals:
    """Totals for `(unit_price, quantity)` pairs under a shipping policy."""
    subtotal = sum((to_decimal(line_total(price, qty)) for price, qty in lines), Decimal("0"))
    shipping_cost = to_decimal(shipping_policy.cost_for(subtotal))
    return OrderTotals(
        subtotal=to_money(subtotal),
        shipping_cost=to_money(shipping_cost),
        total_amount=to_money(subtotal + shipping_cost),
    )

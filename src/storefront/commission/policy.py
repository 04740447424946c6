"""Commission rate policy."""

from dataclasses import dataclass, field

from protean.exceptions import ValidationError

from storefront.checkout.pricing import line_total, to_decimal, to_money


def commission_amount(unit_price, quantity: int, rate) -> float:
    """`unit_price × quantity × rate`, rounded to cents."""
    return to_money(to_decimal(line_total(unit_price, quantity)) * to_decimal(rate))


@dataclass(frozen=True)
class CommissionPolicy:
    """A default commission rate with optional per-affiliate overrides."""

    default_rate: float = 0.08
    affiliate_rates: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        for affiliate, rate in [("default", self.default_rate), *self.affiliate_rates.items()]:
            if not 0 <= rate <= 1:
                raise ValidationError({"commission_rate": [f"Rate for {affiliate} must be between 0 and 1"]})

    def rate_for(self, affiliate_id) -> float:
        return self.affiliate_rates.get(str(affiliate_id), self.default_rate)

    def commission_for(self, affiliate_id, unit_price, quantity: int) -> float:
        return commission_amount(unit_price, quantity, self.rate_for(affiliate_id))

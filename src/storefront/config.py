"""Checkout policy configuration.

Shipping and commission figures are business policy, not code: they are read
from the environment so operators can change them without a release.

    STOREFRONT_FREE_SHIPPING_THRESHOLD  subtotal at/above which shipping is free
    STOREFRONT_SHIPPING_FEE             flat fee charged below the threshold
    STOREFRONT_COMMISSION_RATE          default affiliate commission rate
    STOREFRONT_AFFILIATE_RATES          JSON object of per-affiliate rate overrides
"""

import json
import os
from dataclasses import dataclass, field

from protean.exceptions import ValidationError

from storefront.checkout.pricing import ShippingPolicy
from storefront.commission.policy import CommissionPolicy

DEFAULT_FREE_SHIPPING_THRESHOLD = 5000.0
DEFAULT_SHIPPING_FEE = 300.0
DEFAULT_COMMISSION_RATE = 0.08


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError({name: [f"Expected a number, got {raw!r}"]}) from None


def _rates_from_env(name: str) -> dict[str, float]:
    raw = os.getenv(name)
    if not raw:
        return {}
    try:
        rates = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError({name: ["Affiliate rates must be valid JSON"]}) from None
    if not isinstance(rates, dict):
        raise ValidationError({name: ["Affiliate rates must be a JSON object"]})
    return {str(affiliate): float(rate) for affiliate, rate in rates.items()}


@dataclass(frozen=True)
class CheckoutSettings:
    free_shipping_threshold: float = DEFAULT_FREE_SHIPPING_THRESHOLD
    shipping_fee: float = DEFAULT_SHIPPING_FEE
    commission_rate: float = DEFAULT_COMMISSION_RATE
    affiliate_rates: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        return cls(
            free_shipping_threshold=_float_from_env(
                "STOREFRONT_FREE_SHIPPING_THRESHOLD", DEFAULT_FREE_SHIPPING_THRESHOLD
            ),
            shipping_fee=_float_from_env("STOREFRONT_SHIPPING_FEE", DEFAULT_SHIPPING_FEE),
            commission_rate=_float_from_env("STOREFRONT_COMMISSION_RATE", DEFAULT_COMMISSION_RATE),
            affiliate_rates=_rates_from_env("STOREFRONT_AFFILIATE_RATES"),
        )

    def shipping_policy(self) -> ShippingPolicy:
        return ShippingPolicy(
            free_shipping_threshold=self.free_shipping_threshold,
            flat_fee=self.shipping_fee,
        )

    def commission_policy(self) -> CommissionPolicy:
        return CommissionPolicy(
            default_rate=self.commission_rate,
            affiliate_rates=dict(self.affiliate_rates),
        )

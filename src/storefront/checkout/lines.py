"""Checkout line types: the buyer's intent and its re-derived, priced form.

These are ephemeral values that live only for one checkout attempt; nothing
here is persisted. A SelectionLine is what the browser-held cart says; a
ReconciledLine is the same line after re-reading the catalogue; an
AvailabilityVerdict is the stock check result for one reconciled line.
"""

from dataclasses import dataclass

from storefront.checkout.pricing import line_total


@dataclass(frozen=True)
class SelectionLine:
    """A buyer-chosen line that has not been committed yet.

    `cart_unit_price` and `product_name` are display hints carried from the
    cart; they are never used for money-affecting fields.
    """

    product_id: str
    requested_quantity: int
    variation_id: str | None = None
    color: str | None = None
    size: str | None = None
    cart_unit_price: float | None = None
    product_name: str | None = None
    affiliate_id: str | None = None


@dataclass(frozen=True)
class ReconciledLine:
    product_id: str
    variation_id: str | None
    color: str | None
    size: str | None
    sku: str | None
    unit_price: float
    requested_quantity: int
    available_quantity: int
    product_name: str | None = None
    category: str | None = None
    image: str | None = None
    affiliate_id: str | None = None
    verified: bool = True

    @property
    def display_quantity(self) -> int:
        """Quantity clamped to known stock, for display only."""
        return max(min(self.requested_quantity, self.available_quantity), 0)

    @property
    def line_total(self) -> float:
        return line_total(self.unit_price, self.requested_quantity)


@dataclass(frozen=True)
class AvailabilityVerdict:
    variation_id: str | None
    requested: int
    current_stock: int
    available: bool
    product_id: str | None = None
    color: str | None = None
    size: str | None = None

    @property
    def message(self) -> str:
        label = " ".join(part for part in (self.color, self.size) if part) or str(self.variation_id)
        return f"{label}: only {self.current_stock} available"

    def to_dict(self) -> dict:
        return {
            "variation_id": self.variation_id,
            "product_id": self.product_id,
            "color": self.color,
            "size": self.size,
            "requested": self.requested,
            "current_stock": self.current_stock,
            "available": self.available,
        }


@dataclass(frozen=True)
class AvailabilityReport:
    verdicts: tuple[AvailabilityVerdict, ...]

    @property
    def all_available(self) -> bool:
        return bool(self.verdicts) and all(verdict.available for verdict in self.verdicts)

    @property
    def shortfalls(self) -> list[AvailabilityVerdict]:
        return [verdict for verdict in self.verdicts if not verdict.available]

    def to_dict(self) -> dict:
        return {
            "all_available": self.all_available,
            "availability": [verdict.to_dict() for verdict in self.verdicts],
        }

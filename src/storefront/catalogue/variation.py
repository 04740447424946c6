"""ProductVariation aggregate — one purchasable color/size combination.

The variation carries the only stock figure checkout trusts. It is kept as
its own aggregate (not an entity inside Product) so an order can decrement
stock for several variations in one unit of work without loading, or
conflicting on, the whole product.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.catalogue.events import StockDecremented, StockReplenished, VariationSoldOut
from storefront.checkout.errors import InsufficientStockError
from storefront.checkout.lines import AvailabilityVerdict
from storefront.domain import storefront


@storefront.aggregate
class ProductVariation:
    product_id = Identifier(required=True)
    color = String(max_length=50)
    size = String(max_length=50)
    sku = String(max_length=100)
    quantity = Integer(default=0, min_value=0)
    price_adjustment = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def quantity_cannot_be_negative(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": ["Stock quantity cannot be negative"]})

    @classmethod
    def create(cls, product_id, color=None, size=None, sku=None, quantity=0, price_adjustment=0.0, created_at=None):
        now = created_at or datetime.now(UTC)
        return cls(
            product_id=product_id,
            color=color,
            size=size,
            sku=sku,
            quantity=quantity,
            price_adjustment=price_adjustment,
            created_at=now,
            updated_at=now,
        )

    def matches(self, color, size) -> bool:
        return self.color == color and self.size == size

    def can_supply(self, quantity: int) -> bool:
        return quantity > 0 and self.quantity >= quantity

    def verdict_for(self, quantity: int) -> AvailabilityVerdict:
        return AvailabilityVerdict(
            variation_id=str(self.id),
            requested=quantity,
            current_stock=self.quantity,
            available=self.can_supply(quantity),
            product_id=str(self.product_id),
            color=self.color,
            size=self.size,
        )

    def decrement_stock(self, quantity: int):
        """Take `quantity` units out of stock.

        The check and the mutation run against the same loaded state inside
        the caller's unit of work, so stock never goes below zero.
        """
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if not self.can_supply(quantity):
            raise InsufficientStockError([self.verdict_for(quantity)])

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous - quantity
        self.updated_at = now

        self.raise_(
            StockDecremented(
                variation_id=str(self.id),
                product_id=str(self.product_id),
                sku=self.sku,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                decremented_at=now,
            )
        )
        if self.quantity == 0:
            self.raise_(
                VariationSoldOut(
                    variation_id=str(self.id),
                    product_id=str(self.product_id),
                    sku=self.sku,
                    sold_out_at=now,
                )
            )

    def restock(self, quantity: int):
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous + quantity
        self.updated_at = now

        self.raise_(
            StockReplenished(
                variation_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                replenished_at=now,
            )
        )

"""Order aggregate (CQRS) — the immutable record of a committed checkout.

An Order is only ever built by `Order.place`, inside the same unit of work that
decrements stock for its lines. Unit prices are frozen on each OrderItem at
that moment; totals are derived from them once and never edited afterward.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.checkout.pricing import ShippingPolicy, compute_totals, line_total
from storefront.domain import storefront
from storefront.order.events import OrderPlaced


class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    variation_id = Identifier(required=True)
    product_name = String(max_length=255)
    color = String(max_length=50)
    size = String(max_length=50)
    sku = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    affiliate_id = String(max_length=100)
    commission_earned = Float(default=0.0, min_value=0.0)

    @property
    def line_total(self) -> float:
        return line_total(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "variation_id": str(self.variation_id),
            "product_name": self.product_name,
            "color": self.color,
            "size": self.size,
            "sku": self.sku,
            "unit_price": self.unit_price,
            "quantity": self.quantity,
            "line_total": self.line_total,
            "affiliate_id": self.affiliate_id,
            "commission_earned": self.commission_earned,
        }


@storefront.aggregate
class Order:
    checkout_id = Identifier(required=True)
    user_id = Identifier(required=True)
    phone_number = String(required=True, max_length=20)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    subtotal = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    total_amount = Float(default=0.0)
    items = HasMany(OrderItem)
    created_at = DateTime()

    @classmethod
    def place(cls, checkout_id, user_id, phone_number, items, shipping_policy: ShippingPolicy):
        """Build a Pending order from committed lines.

        `items` is a list of dicts with OrderItem fields; `unit_price` on each
        must already be the commit-time price.
        """
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        totals = compute_totals(((item["unit_price"], item["quantity"]) for item in items), shipping_policy)
        now = datetime.now(UTC)

        order = cls(
            checkout_id=checkout_id,
            user_id=user_id,
            phone_number=phone_number,
            status=OrderStatus.PENDING.value,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total_amount=totals.total_amount,
            created_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                checkout_id=str(checkout_id),
                user_id=str(user_id),
                items=json.dumps([i.to_dict() for i in order.items]),
                item_count=len(order.items),
                subtotal=order.subtotal,
                shipping_cost=order.shipping_cost,
                total_amount=order.total_amount,
                status=order.status,
                placed_at=now,
            )
        )
        return order

    def item(self, order_item_id) -> OrderItem | None:
        return next((i for i in self.items if str(i.id) == str(order_item_id)), None)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "checkout_id": str(self.checkout_id),
            "user_id": str(self.user_id),
            "phone_number": self.phone_number,
            "status": self.status,
            "subtotal": self.subtotal,
            "shipping_cost": self.shipping_cost,
            "total_amount": self.total_amount,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "items": [i.to_dict() for i in self.items],
        }

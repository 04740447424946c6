"""Tests for Order.place and the OrderItem entity."""

import json

import pytest
from protean.exceptions import ValidationError
from storefront.checkout.pricing import ShippingPolicy
from storefront.order.events import OrderPlaced
from storefront.order.order import Order, OrderStatus


def _item(**overrides):
    item = {
        "product_id": "prod-001",
        "variation_id": "var-001",
        "product_name": "Linen Shirt",
        "color": "Black",
        "size": "M",
        "sku": "SHIRT-BLK-M",
        "unit_price": 1200.0,
        "quantity": 2,
        "affiliate_id": None,
    }
    item.update(overrides)
    return item


def _place(items, policy=None):
    return Order.place(
        checkout_id="chk-001",
        user_id="user-001",
        phone_number="010-1234-5678",
        items=items,
        shipping_policy=policy or ShippingPolicy(),
    )


class TestOrderPlacement:
    def test_starts_pending(self):
        order = _place([_item()])
        assert order.status == OrderStatus.PENDING.value

    def test_creates_one_item_per_line(self):
        order = _place([_item(), _item(variation_id="var-002", unit_price=500.0, quantity=1)])
        assert len(order.items) == 2

    def test_totals_below_threshold_include_shipping(self):
        order = _place([_item(unit_price=1200.0, quantity=2)])
        assert order.subtotal == 2400.0
        assert order.shipping_cost == 300.0
        assert order.total_amount == 2700.0

    def test_totals_at_threshold_ship_free(self):
        order = _place([_item(unit_price=2500.0, quantity=2)])
        assert order.shipping_cost == 0.0
        assert order.total_amount == 5000.0

    def test_total_is_sum_of_item_line_totals_plus_shipping(self):
        order = _place([_item(unit_price=19.99, quantity=3), _item(variation_id="var-002", unit_price=7.5, quantity=1)])
        assert order.subtotal == round(sum(i.line_total for i in order.items), 2)
        assert order.total_amount == round(order.subtotal + order.shipping_cost, 2)

    def test_item_snapshot(self):
        order = _place([_item(affiliate_id="AFF1")])
        item = order.items[0]
        assert str(item.variation_id) == "var-001"
        assert item.unit_price == 1200.0
        assert item.quantity == 2
        assert item.affiliate_id == "AFF1"
        assert item.commission_earned == 0.0
        assert item.line_total == 2400.0

    def test_raises_order_placed(self):
        order = _place([_item()])
        event = order._events[-1]
        assert isinstance(event, OrderPlaced)
        assert str(event.checkout_id) == "chk-001"
        assert event.total_amount == order.total_amount
        assert event.item_count == 1
        assert json.loads(event.items)[0]["unit_price"] == 1200.0

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            _place([])

    def test_zero_quantity_item_rejected(self):
        with pytest.raises(ValidationError):
            _place([_item(quantity=0)])

    def test_item_lookup(self):
        order = _place([_item()])
        item = order.items[0]
        assert order.item(item.id) == item
        assert order.item("missing") is None

    def test_to_dict(self):
        data = _place([_item()]).to_dict()
        assert data["status"] == "Pending"
        assert data["items"][0]["line_total"] == 2400.0

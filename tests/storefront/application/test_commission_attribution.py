"""Application tests for commission attribution and its retry."""

import json
from unittest import mock

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.checkout.placement import PlaceOrder
from storefront.commission.attribution import AttributeCommission
from storefront.commission.attributor import CommissionAttributor
from storefront.commission.commission import CommissionEntry, CommissionStatus
from storefront.commission.events import CommissionRecorded
from storefront.commission.policy import CommissionPolicy


@pytest.fixture()
def order(seed_product, affiliates):
    product, [black, white] = seed_product(
        base_price=1000.0,
        variations=[
            {"color": "Black", "size": "M", "quantity": 5},
            {"color": "White", "size": "L", "quantity": 5, "price_adjustment": 250.0},
        ],
    )
    items = [
        {"product_id": str(product.id), "variation_id": str(black.id), "quantity": 1, "affiliate_id": "AFF1"},
        {"product_id": str(product.id), "variation_id": str(white.id), "quantity": 2, "affiliate_id": "AFF2"},
        {"product_id": str(product.id), "variation_id": str(black.id), "quantity": 1, "affiliate_id": None},
    ]
    return current_domain.process(
        PlaceOrder(
            checkout_id="chk-aff",
            user_id="user-001",
            phone_number="010-1234-5678",
            items=json.dumps(items),
            free_shipping_threshold=5000.0,
            shipping_fee=300.0,
        ),
        asynchronous=False,
    )


def _entries():
    return current_domain.repository_for(CommissionEntry)._dao.query.all().items


class TestAttributeCommissionCommand:
    def test_records_pending_entry(self, order):
        item = order.items[0]
        entry = current_domain.process(
            AttributeCommission(order_id=str(order.id), order_item_id=str(item.id), commission_rate=0.08),
            asynchronous=False,
        )
        stored = current_domain.repository_for(CommissionEntry).get(str(item.id))
        assert stored.amount == 80.0
        assert stored.status == CommissionStatus.PENDING.value
        assert stored.affiliate_id == "AFF1"
        assert stored.sale_amount == 1000.0
        assert isinstance(entry._events[-1], CommissionRecorded)

    def test_second_attribution_returns_existing_entry(self, order):
        item = order.items[0]
        command = AttributeCommission(order_id=str(order.id), order_item_id=str(item.id), commission_rate=0.08)
        current_domain.process(command, asynchronous=False)
        again = current_domain.process(
            AttributeCommission(order_id=str(order.id), order_item_id=str(item.id), commission_rate=0.5),
            asynchronous=False,
        )
        assert again.amount == 80.0
        assert len(_entries()) == 1

    def test_item_without_affiliate_rejected(self, order):
        item = order.items[2]
        with pytest.raises(ValidationError):
            current_domain.process(
                AttributeCommission(order_id=str(order.id), order_item_id=str(item.id), commission_rate=0.08),
                asynchronous=False,
            )

    def test_item_of_another_order_rejected(self, order):
        with pytest.raises(ValidationError):
            current_domain.process(
                AttributeCommission(order_id=str(order.id), order_item_id="not-an-item", commission_rate=0.08),
                asynchronous=False,
            )


class TestCommissionAttributor:
    def test_attributes_each_affiliate_item(self, order):
        attributor = CommissionAttributor(CommissionPolicy(default_rate=0.08, affiliate_rates={"AFF2": 0.1}))
        report = attributor.attribute_order(order)

        assert report.complete
        amounts = {entry.affiliate_id: entry.amount for entry in report.recorded}
        assert amounts == {"AFF1": 80.0, "AFF2": 250.0}
        assert len(_entries()) == 2

    def test_one_failure_does_not_stop_the_rest(self, order):
        attributor = CommissionAttributor(CommissionPolicy())
        original = attributor._attribute
        failing_item = str(order.items[0].id)

        def flaky(order_id, order_item_id, affiliate_id):
            if str(order_item_id) == failing_item:
                raise RuntimeError("ledger unavailable")
            return original(order_id, order_item_id, affiliate_id)

        with mock.patch.object(attributor, "_attribute", side_effect=flaky):
            report = attributor.attribute_order(order)

        assert report.failed == [failing_item]
        assert [entry.affiliate_id for entry in report.recorded] == ["AFF2"]
        assert report.to_dict()["failed"] == [failing_item]

    def test_retry_records_failed_item(self, order):
        attributor = CommissionAttributor(CommissionPolicy())
        item = order.items[0]
        entry = attributor.retry(order.id, item.id)
        assert entry.amount == 80.0
        assert str(entry.order_item_id) == str(item.id)

    def test_retry_is_idempotent(self, order):
        attributor = CommissionAttributor(CommissionPolicy())
        item = order.items[1]
        attributor.retry(order.id, item.id)
        attributor.retry(order.id, item.id)
        assert len(_entries()) == 1

    def test_order_item_commission_field_stays_zero(self, order):
        CommissionAttributor(CommissionPolicy()).attribute_order(order)
        assert all(item.commission_earned == 0.0 for item in order.items)

"""CommissionEntry aggregate — one ledger row per attributed order item.

The entry is identified by the order item it pays out on, so an item can be
attributed at most once no matter how often attribution is retried. Entries
live outside the Order aggregate and are written after the order commit, in
their own unit of work.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String

from storefront.commission.events import CommissionRecorded
from storefront.domain import storefront


class CommissionStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"


@storefront.aggregate
class CommissionEntry:
    order_item_id = Identifier(identifier=True)
    order_id = Identifier(required=True)
    affiliate_id = String(required=True, max_length=100)
    product_id = Identifier()
    sale_amount = Float(required=True, min_value=0.0)
    commission_rate = Float(required=True, min_value=0.0)
    amount = Float(required=True, min_value=0.0)
    status = String(choices=CommissionStatus, default=CommissionStatus.PENDING.value)
    recorded_at = DateTime()

    @classmethod
    def record(cls, order_item_id, order_id, affiliate_id, product_id, sale_amount, commission_rate, amount):
        if not affiliate_id:
            raise ValidationError({"affiliate_id": ["Commission needs an affiliate"]})

        now = datetime.now(UTC)
        entry = cls(
            order_item_id=str(order_item_id),
            order_id=str(order_id),
            affiliate_id=affiliate_id,
            product_id=str(product_id) if product_id else None,
            sale_amount=sale_amount,
            commission_rate=commission_rate,
            amount=amount,
            status=CommissionStatus.PENDING.value,
            recorded_at=now,
        )
        entry.raise_(
            CommissionRecorded(
                order_item_id=str(order_item_id),
                order_id=str(order_id),
                affiliate_id=affiliate_id,
                sale_amount=sale_amount,
                commission_rate=commission_rate,
                amount=amount,
                status=entry.status,
                recorded_at=now,
            )
        )
        return entry

    def to_dict(self) -> dict:
        return {
            "order_item_id": str(self.order_item_id),
            "order_id": str(self.order_id),
            "affiliate_id": self.affiliate_id,
            "product_id": str(self.product_id) if self.product_id else None,
            "sale_amount": self.sale_amount,
            "commission_rate": self.commission_rate,
            "amount": self.amount,
            "status": self.status,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }

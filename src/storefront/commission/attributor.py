"""Best-effort commission attribution after an order commit.

Attribution runs once per affiliate-tagged item, each in its own command. A
failure on one item is logged and reported back; it never undoes the order
and never stops the remaining items from being attributed. Failed items can
be retried one at a time with `CommissionAttributor.retry`.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from storefront.commission.attribution import AttributeCommission
from storefront.commission.commission import CommissionEntry
from storefront.commission.policy import CommissionPolicy
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@dataclass
class AttributionReport:
    order_id: str
    recorded: list[CommissionEntry] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "recorded": [entry.to_dict() for entry in self.recorded],
            "failed": list(self.failed),
        }


class CommissionAttributor:
    def __init__(self, policy: CommissionPolicy):
        self.policy = policy

    def attribute_order(self, order: Order) -> AttributionReport:
        report = AttributionReport(order_id=str(order.id))
        for item in order.items:
            if not item.affiliate_id:
                continue
            try:
                report.recorded.append(self._attribute(order.id, item.id, item.affiliate_id))
            except Exception:
                logger.error(
                    "commission_attribution_failed",
                    order_id=str(order.id),
                    order_item_id=str(item.id),
                    affiliate_id=item.affiliate_id,
                    exc_info=True,
                )
                report.failed.append(str(item.id))
        return report

    def retry(self, order_id, order_item_id) -> CommissionEntry:
        """Attribute a single item again; raises on failure."""
        order = current_domain.repository_for(Order).get(str(order_id))
        item = order.item(order_item_id)
        affiliate_id = item.affiliate_id if item is not None else None
        return self._attribute(order_id, order_item_id, affiliate_id)

    def _attribute(self, order_id, order_item_id, affiliate_id) -> CommissionEntry:
        entry = current_domain.process(
            AttributeCommission(
                order_id=str(order_id),
                order_item_id=str(order_item_id),
                commission_rate=self.policy.rate_for(affiliate_id),
            ),
            asynchronous=False,
        )
        logger.info(
            "commission_recorded",
            order_id=str(order_id),
            order_item_id=str(order_item_id),
            affiliate_id=entry.affiliate_id,
            amount=entry.amount,
        )
        return entry

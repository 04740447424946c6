"""AttributeCommission command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from storefront.commission.commission import CommissionEntry
from storefront.commission.policy import commission_amount
from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="CommissionEntry")
class AttributeCommission:
    order_id = Identifier(required=True)
    order_item_id = Identifier(required=True)
    commission_rate = Float(required=True, min_value=0.0, max_value=1.0)


@storefront.command_handler(part_of=CommissionEntry)
class AttributeCommissionHandler:
    @handle(AttributeCommission)
    def attribute_commission(self, command):
        repo = current_domain.repository_for(CommissionEntry)

        try:
            return repo.get(str(command.order_item_id))
        except ObjectNotFoundError:
            pass

        order = current_domain.repository_for(Order).get(str(command.order_id))
        item = order.item(command.order_item_id)
        if item is None:
            raise ValidationError({"order_item_id": [f"Item {command.order_item_id} is not part of this order"]})
        if not item.affiliate_id:
            raise ValidationError({"affiliate_id": ["Item carries no affiliate attribution"]})

        amount = commission_amount(item.unit_price, item.quantity, command.commission_rate)
        entry = CommissionEntry.record(
            order_item_id=item.id,
            order_id=order.id,
            affiliate_id=item.affiliate_id,
            product_id=item.product_id,
            sale_amount=item.line_total,
            commission_rate=command.commission_rate,
            amount=amount,
        )
        repo.add(entry)
        return entry

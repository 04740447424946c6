"""Domain events for the CommissionEntry aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="CommissionEntry")
class CommissionRecorded:
    """An affiliate commission was booked for one order item."""

    __version__ = 1

    order_item_id = Identifier(required=True)
    order_id = Identifier(required=True)
    affiliate_id = String(required=True)
    sale_amount = Float(required=True)
    commission_rate = Float(required=True)
    amount = Float(required=True)
    status = String(required=True)
    recorded_at = DateTime(required=True)


@storefront.event(part_of="Affiliate")
class AffiliateRegistered:
    """A referral code was issued to an affiliate."""

    __version__ = 1

    code = Identifier(required=True)
    name = String(required=True)
    registered_at = DateTime(required=True)

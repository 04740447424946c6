"""Domain events for the ProductVariation aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ProductVariation")
class StockDecremented:
    """Stock for a variation was consumed by a committed order."""

    __version__ = 1

    variation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String()
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    decremented_at = DateTime(required=True)


@storefront.event(part_of="ProductVariation")
class StockReplenished:
    """Units were added back to a variation's stock."""

    __version__ = 1

    variation_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    replenished_at = DateTime(required=True)


@storefront.event(part_of="ProductVariation")
class VariationSoldOut:
    """A variation's stock reached zero."""

    __version__ = 1

    variation_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String()
    sold_out_at = DateTime(required=True)

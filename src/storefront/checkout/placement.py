"""Order placement command and its handler.

The handler is the commit: it re-reads every variation inside its unit of
work, checks that all of them can supply what is asked, decrements stock and
creates the Order with commit-time prices. Nothing is written unless every
line passes, so a shortfall on any line leaves stock and orders untouched.
Referral codes are checked against the affiliate registry before anything is
read for update.

Placement is idempotent per `checkout_id`: if an order was already committed
for the checkout, it is returned as-is and stock is not touched again.
"""

import json
from collections import OrderedDict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.catalogue.variation import ProductVariation
from storefront.checkout.errors import InsufficientStockError
from storefront.checkout.pricing import ShippingPolicy, resolve_unit_price
from storefront.checkout.validation import validate_phone_number
from storefront.commission.affiliate import ensure_known_affiliates, normalize_affiliate_code
from storefront.domain import storefront
from storefront.order.history import find_order_by_checkout
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    checkout_id = Identifier(required=True)
    user_id = Identifier(required=True)
    phone_number = String(required=True, max_length=50)
    items = Text(required=True)  # JSON: list of {product_id, variation_id, quantity, affiliate_id}
    free_shipping_threshold = Float(required=True, min_value=0.0)
    shipping_fee = Float(required=True, min_value=0.0)


def _parse_items(raw) -> list[dict]:
    items = json.loads(raw) if isinstance(raw, str) else raw
    if not items:
        raise ValidationError({"items": ["Select at least one item"]})
    for item in items:
        if not item.get("variation_id"):
            raise ValidationError({"variation_id": ["Every item must have a selected variation"]})
        if int(item.get("quantity") or 0) < 1:
            raise ValidationError({"items": [f"Quantity for {item['variation_id']} must be at least 1"]})
    return items


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        existing = find_order_by_checkout(command.checkout_id)
        if existing is not None:
            logger.info("order_already_placed", checkout_id=str(command.checkout_id), order_id=str(existing.id))
            return existing

        phone_number = validate_phone_number(command.phone_number)
        items = _parse_items(command.items)
        ensure_known_affiliates(item.get("affiliate_id") for item in items)

        variation_repo = current_domain.repository_for(ProductVariation)
        product_repo = current_domain.repository_for(Product)

        variations: OrderedDict[str, ProductVariation] = OrderedDict()
        products: dict[str, Product] = {}
        requested: dict[str, int] = {}
        order_items = []

        for item in items:
            variation_id = str(item["variation_id"])
            quantity = int(item["quantity"])

            if variation_id not in variations:
                try:
                    variations[variation_id] = variation_repo.get(variation_id)
                except ObjectNotFoundError:
                    raise ValidationError({"variation_id": [f"Unknown variation {variation_id}"]}) from None
            variation = variations[variation_id]

            product_id = str(item.get("product_id") or variation.product_id)
            if product_id != str(variation.product_id):
                raise ValidationError({"variation_id": [f"Variation {variation_id} does not belong to {product_id}"]})
            if product_id not in products:
                products[product_id] = product_repo.get(product_id)
            product = products[product_id]

            requested[variation_id] = requested.get(variation_id, 0) + quantity
            order_items.append(
                {
                    "product_id": product_id,
                    "variation_id": variation_id,
                    "product_name": product.name,
                    "color": variation.color,
                    "size": variation.size,
                    "sku": variation.sku,
                    "unit_price": resolve_unit_price(product.base_price, variation.price_adjustment),
                    "quantity": quantity,
                    "affiliate_id": normalize_affiliate_code(item.get("affiliate_id")),
                }
            )

        shortfalls = [
            variations[variation_id].verdict_for(quantity)
            for variation_id, quantity in requested.items()
            if not variations[variation_id].can_supply(quantity)
        ]
        if shortfalls:
            logger.info(
                "order_rejected_insufficient_stock",
                checkout_id=str(command.checkout_id),
                shortfalls=[verdict.to_dict() for verdict in shortfalls],
            )
            raise InsufficientStockError(shortfalls)

        for variation_id, quantity in requested.items():
            variations[variation_id].decrement_stock(quantity)

        order = Order.place(
            checkout_id=command.checkout_id,
            user_id=command.user_id,
            phone_number=phone_number,
            items=order_items,
            shipping_policy=ShippingPolicy(
                free_shipping_threshold=command.free_shipping_threshold,
                flat_fee=command.shipping_fee,
            ),
        )

        for variation in variations.values():
            variation_repo.add(variation)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_placed",
            checkout_id=str(command.checkout_id),
            order_id=str(order.id),
            user_id=str(command.user_id),
            total=order.total_amount,
            items=len(order_items),
        )
        return order

"""Re-derive each selected cart line from the catalogue.

The cart held by the browser is only the buyer's intent. Every line is bound
to a current variation and re-priced from the product's current base price
and the variation's adjustment; the price the cart remembered is kept only as
a fallback when the catalogue cannot be read, and such lines are marked
unverified so the availability check rejects them until a fresh read works.
"""

from collections import OrderedDict

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.gateway import CatalogueGateway, CatalogueUnavailableError, VariationSnapshot
from storefront.checkout.lines import ReconciledLine, SelectionLine
from storefront.checkout.pricing import resolve_unit_price

logger = structlog.get_logger(__name__)


def resolve_variation(line: SelectionLine, variations: list[VariationSnapshot]) -> VariationSnapshot | None:
    """Pick the variation a line refers to.

    Explicit id first, then a (color, size) match, then the first variation
    still in stock, then the first variation at all.
    """
    if not variations:
        return None
    if line.variation_id:
        match = next((v for v in variations if v.id == str(line.variation_id)), None)
        if match is not None:
            return match
    if line.color is not None or line.size is not None:
        match = next((v for v in variations if v.color == line.color and v.size == line.size), None)
        if match is not None:
            return match
    return next((v for v in variations if v.quantity > 0), variations[0])


class CartReconciler:
    def __init__(self, gateway: CatalogueGateway):
        self.gateway = gateway

    def reconcile(self, lines: list[SelectionLine]) -> list[ReconciledLine]:
        by_product: OrderedDict[str, list[int]] = OrderedDict()
        for index, line in enumerate(lines):
            by_product.setdefault(str(line.product_id), []).append(index)

        reconciled: list[ReconciledLine | None] = [None] * len(lines)
        for product_id, indexes in by_product.items():
            try:
                product = self.gateway.get_product_details(product_id)
                variations = self.gateway.get_product_variations(product_id)
            except (ObjectNotFoundError, CatalogueUnavailableError) as exc:
                logger.warning("reconcile_degraded", product_id=product_id, reason=str(exc))
                for index in indexes:
                    reconciled[index] = self._unverified(lines[index])
                continue

            for index in indexes:
                line = lines[index]
                variation = resolve_variation(line, variations)
                if variation is None:
                    logger.warning("reconcile_no_variation", product_id=product_id)
                    reconciled[index] = self._unverified(line, product_name=product.name)
                    continue
                try:
                    unit_price = resolve_unit_price(product.base_price, variation.price_adjustment)
                except ValidationError as exc:
                    logger.warning(
                        "reconcile_bad_price", product_id=product_id, variation_id=variation.id, error=str(exc)
                    )
                    reconciled[index] = self._unverified(line, product_name=product.name)
                    continue

                reconciled[index] = ReconciledLine(
                    product_id=product_id,
                    variation_id=variation.id,
                    color=variation.color,
                    size=variation.size,
                    sku=variation.sku,
                    unit_price=unit_price,
                    requested_quantity=line.requested_quantity,
                    available_quantity=variation.quantity,
                    product_name=product.name,
                    category=product.category,
                    image=product.primary_image,
                    affiliate_id=line.affiliate_id,
                    verified=True,
                )
        return reconciled

    @staticmethod
    def _unverified(line: SelectionLine, product_name=None) -> ReconciledLine:
        return ReconciledLine(
            product_id=str(line.product_id),
            variation_id=str(line.variation_id) if line.variation_id else None,
            color=line.color,
            size=line.size,
            sku=None,
            unit_price=line.cart_unit_price or 0.0,
            requested_quantity=line.requested_quantity,
            available_quantity=0,
            product_name=product_name or line.product_name,
            affiliate_id=line.affiliate_id,
            verified=False,
        )

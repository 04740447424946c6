"""In-memory catalogue stand-ins for exercising failure paths."""

import pytest
from protean.exceptions import ObjectNotFoundError
from storefront.catalogue.gateway import CatalogueUnavailableError, ProductDetails, VariationSnapshot


class FakeCatalogue:
    def __init__(self):
        self.products: dict[str, ProductDetails] = {}
        self.variations: dict[str, VariationSnapshot] = {}
        self.unavailable: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    def add_product(self, product_id, base_price, name="Linen Shirt", category="Tops", images=()):
        self.products[product_id] = ProductDetails(
            id=product_id,
            name=name,
            base_price=base_price,
            original_price=base_price,
            images=tuple(images),
            category=category,
        )

    def add_variation(self, variation_id, product_id, color, size, quantity, price_adjustment=0.0):
        self.variations[variation_id] = VariationSnapshot(
            id=variation_id,
            product_id=product_id,
            color=color,
            size=size,
            sku=f"{product_id}-{color}-{size}",
            quantity=quantity,
            price_adjustment=price_adjustment,
        )

    def _guard(self, identifier):
        if identifier in self.unavailable:
            raise CatalogueUnavailableError(f"{identifier} unreachable")

    def get_product_details(self, product_id):
        self.calls.append(("product", product_id))
        self._guard(product_id)
        if product_id not in self.products:
            raise ObjectNotFoundError(f"Product {product_id} not found")
        return self.products[product_id]

    def get_product_variations(self, product_id):
        self.calls.append(("variations", product_id))
        self._guard(product_id)
        return [v for v in self.variations.values() if v.product_id == product_id]

    def get_variation(self, variation_id):
        self.calls.append(("variation", variation_id))
        self._guard(variation_id)
        if variation_id not in self.variations:
            raise ObjectNotFoundError(f"Variation {variation_id} not found")
        return self.variations[variation_id]


@pytest.fixture()
def make_catalogue():
    return FakeCatalogue

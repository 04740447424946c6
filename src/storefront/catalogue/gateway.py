"""Read-only boundary onto the catalogue.

Checkout never holds on to catalogue aggregates: every read returns an
immutable snapshot taken at call time. Unknown ids surface as Protean's
ObjectNotFoundError; any other failure of the underlying store is reported as
CatalogueUnavailableError so callers can degrade or reject per line.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.catalogue.variation import ProductVariation

logger = structlog.get_logger(__name__)


class CatalogueUnavailableError(Exception):
    """A catalogue read failed for reasons other than an unknown id."""


@dataclass(frozen=True)
class ProductDetails:
    id: str
    name: str
    base_price: float
    original_price: float
    images: tuple[str, ...]
    category: str | None

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "base_price": self.base_price,
            "original_price": self.original_price,
            "images": list(self.images),
            "category": self.category,
        }


@dataclass(frozen=True)
class VariationSnapshot:
    id: str
    product_id: str
    color: str | None
    size: str | None
    sku: str | None
    quantity: int
    price_adjustment: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "color": self.color,
            "size": self.size,
            "sku": self.sku,
            "quantity": self.quantity,
            "price_adjustment": self.price_adjustment,
        }


def _product_snapshot(product: Product) -> ProductDetails:
    return ProductDetails(
        id=str(product.id),
        name=product.name,
        base_price=product.base_price,
        original_price=product.original_price if product.original_price is not None else product.base_price,
        images=tuple(product.image_urls),
        category=product.category,
    )


def _variation_snapshot(variation: ProductVariation) -> VariationSnapshot:
    return VariationSnapshot(
        id=str(variation.id),
        product_id=str(variation.product_id),
        color=variation.color,
        size=variation.size,
        sku=variation.sku,
        quantity=variation.quantity or 0,
        price_adjustment=variation.price_adjustment or 0.0,
    )


class CatalogueGateway:
    def get_product_details(self, product_id) -> ProductDetails:
        product = self._read("product", product_id, lambda: current_domain.repository_for(Product).get(product_id))
        return _product_snapshot(product)

    def get_product_variations(self, product_id) -> list[VariationSnapshot]:
        """All variations of a product, oldest first."""
        variations = self._read(
            "variations",
            product_id,
            lambda: current_domain.repository_for(ProductVariation)
            ._dao.query.filter(product_id=str(product_id))
            .all()
            .items,
        )
        ordered = sorted(variations, key=lambda v: (v.created_at is None, v.created_at))
        return [_variation_snapshot(v) for v in ordered]

    def get_variation(self, variation_id) -> VariationSnapshot:
        variation = self._read(
            "variation", variation_id, lambda: current_domain.repository_for(ProductVariation).get(variation_id)
        )
        return _variation_snapshot(variation)

    @staticmethod
    def _read(kind, identifier, fetch):
        try:
            return fetch()
        except ObjectNotFoundError:
            raise
        except Exception as exc:
            logger.warning("catalogue_read_failed", kind=kind, identifier=str(identifier), error=str(exc))
            raise CatalogueUnavailableError(f"Could not read {kind} {identifier}") from exc

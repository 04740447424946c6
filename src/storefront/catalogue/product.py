"""Product aggregate (CQRS) — the catalogue entry a variation belongs to.

Catalogue editing happens elsewhere; checkout only reads the base price, the
display name, category and images from here.
"""

import json
from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    base_price = Float(required=True, min_value=0.0)
    original_price = Float(min_value=0.0)
    images = Text()  # JSON array of image URLs
    category = String(max_length=100)
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, name, base_price, original_price=None, images=None, category=None, is_active=True):
        return cls(
            name=name,
            base_price=base_price,
            original_price=original_price if original_price is not None else base_price,
            images=json.dumps(list(images or [])),
            category=category,
            is_active=is_active,
            created_at=datetime.now(UTC),
        )

    @property
    def image_urls(self) -> list[str]:
        return json.loads(self.images) if self.images else []

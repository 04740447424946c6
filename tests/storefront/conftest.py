from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def seed_product():
    """Factory that stores a product and its variations.

    Variations are given as dicts of ProductVariation.create arguments and get
    increasing creation times in the order listed.
    """
    from storefront.catalogue.product import Product
    from storefront.catalogue.variation import ProductVariation

    def _seed(name="Linen Shirt", base_price=1000.0, variations=(), **product_fields):
        product = Product.create(name=name, base_price=base_price, **product_fields)
        current_domain.repository_for(Product).add(product)

        start = datetime.now(UTC) - timedelta(hours=1)
        stored = []
        for offset, fields in enumerate(variations):
            variation = ProductVariation.create(
                product_id=product.id, created_at=start + timedelta(seconds=offset), **fields
            )
            current_domain.repository_for(ProductVariation).add(variation)
            stored.append(variation)
        return product, stored

    return _seed


@pytest.fixture()
def stock_of():
    from storefront.catalogue.variation import ProductVariation

    def _stock(variation) -> int:
        return current_domain.repository_for(ProductVariation).get(variation.id).quantity

    return _stock


@pytest.fixture()
def affiliates():
    """Registers the referral codes AFF1 and AFF2."""
    from storefront.commission.affiliate import RegisterAffiliate

    return [
        current_domain.process(RegisterAffiliate(code=code, name=name), asynchronous=False)
        for code, name in (("AFF1", "Mina Park"), ("AFF2", "Leo Han"))
    ]

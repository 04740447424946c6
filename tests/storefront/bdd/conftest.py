"""Shared BDD fixtures and step definitions for checkout scenarios."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.catalogue.product import Product
from storefront.catalogue.variation import ProductVariation
from storefront.checkout.service import CheckoutService
from storefront.commission.affiliate import RegisterAffiliate
from storefront.config import CheckoutSettings


@pytest.fixture()
def settings():
    return {"free_shipping_threshold": 5000.0, "shipping_fee": 300.0, "commission_rate": 0.08}


@pytest.fixture()
def catalogue():
    """Products and variations by name, as seeded by the scenario."""
    return {"products": {}, "variations": {}}


@pytest.fixture()
def outcome():
    """Container for the checkout result or the error it raised."""
    return {"result": None, "error": None, "availability": None}


@pytest.fixture()
def service(settings):
    return CheckoutService(settings=CheckoutSettings(**settings))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a free shipping threshold of {threshold:g} and a shipping fee of {fee:g}"))
def shipping_policy(settings, threshold, fee):
    settings["free_shipping_threshold"] = threshold
    settings["shipping_fee"] = fee


@given(parsers.cfparse("a commission rate of {rate:g}"))
def commission_rate(settings, rate):
    settings["commission_rate"] = rate


@given(parsers.cfparse('a product "{name}" priced at {price:g}'))
def a_product(catalogue, name, price):
    product = Product.create(name=name, base_price=price)
    current_domain.repository_for(Product).add(product)
    catalogue["products"][name] = product


@given(
    parsers.cfparse(
        'a "{color}" "{size}" variation of "{name}" adjusted by {adjustment:g} with {quantity:d} in stock'
    )
)
def a_variation(catalogue, color, size, name, adjustment, quantity):
    product = catalogue["products"][name]
    variation = ProductVariation.create(
        product_id=product.id,
        color=color,
        size=size,
        quantity=quantity,
        price_adjustment=adjustment,
    )
    current_domain.repository_for(ProductVariation).add(variation)
    catalogue["variations"][(name, color, size)] = variation


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is committed")
def order_committed(outcome):
    assert outcome["error"] is None, outcome["error"]
    assert outcome["result"].order is not None


@then(parsers.cfparse('"{name}" "{color}" "{size}" has {quantity:d} in stock'))
def stock_level(catalogue, name, color, size, quantity):
    variation = catalogue["variations"][(name, color, size)]
    assert current_domain.repository_for(ProductVariation).get(variation.id).quantity == quantity


@given(parsers.cfparse('an affiliate "{code}" is registered'))
def an_affiliate(code):
    current_domain.process(RegisterAffiliate(code=code, name=f"Affiliate {code}"), asynchronous=False)

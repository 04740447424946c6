"""Tests for checkout policy configuration from the environment."""

import pytest
from protean.exceptions import ValidationError
from storefront.config import CheckoutSettings


@pytest.fixture()
def clean_env(monkeypatch):
    for name in (
        "STOREFRONT_FREE_SHIPPING_THRESHOLD",
        "STOREFRONT_SHIPPING_FEE",
        "STOREFRONT_COMMISSION_RATE",
        "STOREFRONT_AFFILIATE_RATES",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestCheckoutSettings:
    def test_defaults(self, clean_env):
        settings = CheckoutSettings.from_env()
        assert settings.free_shipping_threshold == 5000.0
        assert settings.shipping_fee == 300.0
        assert settings.commission_rate == 0.08
        assert settings.affiliate_rates == {}

    def test_reads_overrides(self, clean_env):
        clean_env.setenv("STOREFRONT_FREE_SHIPPING_THRESHOLD", "30000")
        clean_env.setenv("STOREFRONT_SHIPPING_FEE", "2500")
        clean_env.setenv("STOREFRONT_COMMISSION_RATE", "0.05")
        clean_env.setenv("STOREFRONT_AFFILIATE_RATES", '{"AFF1": 0.1}')
        settings = CheckoutSettings.from_env()
        assert settings.shipping_policy().cost_for(29999) == 2500.0
        assert settings.shipping_policy().cost_for(30000) == 0.0
        assert settings.commission_policy().rate_for("AFF1") == 0.1
        assert settings.commission_policy().rate_for("AFF9") == 0.05

    def test_non_numeric_value_rejected(self, clean_env):
        clean_env.setenv("STOREFRONT_SHIPPING_FEE", "free")
        with pytest.raises(ValidationError):
            CheckoutSettings.from_env()

    def test_affiliate_rates_must_be_an_object(self, clean_env):
        clean_env.setenv("STOREFRONT_AFFILIATE_RATES", "[0.1]")
        with pytest.raises(ValidationError):
            CheckoutSettings.from_env()

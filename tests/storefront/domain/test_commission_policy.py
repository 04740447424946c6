"""Tests for commission rates and amounts."""

import pytest
from protean.exceptions import ValidationError
from storefront.commission.policy import CommissionPolicy, commission_amount


class TestCommissionAmount:
    def test_eight_percent_of_line_total(self):
        assert commission_amount(1000, 1, 0.08) == 80.0

    def test_uses_quantity(self):
        assert commission_amount(500, 2, 0.08) == 80.0

    def test_rounds_to_cents(self):
        assert commission_amount(33.33, 1, 0.08) == 2.67


class TestCommissionPolicy:
    def test_default_rate(self):
        assert CommissionPolicy().rate_for("AFF1") == 0.08

    def test_affiliate_override(self):
        policy = CommissionPolicy(default_rate=0.08, affiliate_rates={"AFF2": 0.1})
        assert policy.rate_for("AFF2") == 0.1
        assert policy.rate_for("AFF1") == 0.08

    def test_commission_for_uses_affiliate_rate(self):
        policy = CommissionPolicy(default_rate=0.08, affiliate_rates={"AFF2": 0.1})
        assert policy.commission_for("AFF2", 1000, 1) == 100.0

    def test_rate_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            CommissionPolicy(default_rate=1.5)
        with pytest.raises(ValidationError):
            CommissionPolicy(affiliate_rates={"AFF1": -0.1})

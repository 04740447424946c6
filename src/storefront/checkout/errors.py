"""Checkout failure types.

Malformed input is reported with Protean's ValidationError. The two failures
below are specific to placing an order: a stock shortfall (the buyer must
adjust the selection) and a storage failure whose outcome may be unknown (the
caller must look the order up by checkout id before retrying).
"""

from storefront.checkout.lines import AvailabilityVerdict


class CheckoutError(Exception):
    """Base class for checkout failures."""


class InsufficientStockError(CheckoutError):
    def __init__(self, shortfalls: list[AvailabilityVerdict]):
        self.shortfalls = list(shortfalls)
        super().__init__("; ".join(verdict.message for verdict in self.shortfalls) or "Insufficient stock")

    @property
    def messages(self) -> list[str]:
        return [verdict.message for verdict in self.shortfalls]


class PersistenceError(CheckoutError):
    def __init__(self, message: str, outcome_unknown: bool = True):
        self.outcome_unknown = outcome_unknown
        super().__init__(message)

"""Storefront bounded context: variation catalogue, checkout, orders and commission.

Handles the variation stock the storefront sells from (CQRS), the checkout
flow that turns a buyer's selection into an immutable Order while decrementing
stock in the same unit of work, and affiliate commission bookkeeping that runs
after a committed order.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)

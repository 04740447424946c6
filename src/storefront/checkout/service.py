"""CheckoutService: drives one checkout from cart lines to a committed order.

    reconcile → check availability → (all available) place order → commissions

A negative availability verdict stops the flow before any order is placed.
The placement itself is the PlaceOrder command, so its stock re-check,
decrements and order insert share one unit of work. Commission attribution
runs afterwards, outside that unit of work, and never fails the checkout.
"""

import json
from dataclasses import dataclass, field
from uuid import uuid4

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.gateway import CatalogueGateway
from storefront.checkout.availability import AvailabilityChecker
from storefront.checkout.errors import InsufficientStockError, PersistenceError
from storefront.checkout.lines import AvailabilityReport, ReconciledLine, SelectionLine
from storefront.checkout.placement import PlaceOrder
from storefront.checkout.pricing import OrderTotals, compute_totals
from storefront.checkout.reconciler import CartReconciler
from storefront.checkout.session import CheckoutSession
from storefront.checkout.validation import validate_order_lines, validate_phone_number, validate_selection
from storefront.commission.affiliate import ensure_known_affiliates
from storefront.commission.attributor import AttributionReport, CommissionAttributor
from storefront.config import CheckoutSettings
from storefront.order.history import find_order_by_checkout
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@dataclass
class CreateOrderResult:
    success: bool
    order: Order | None = None
    error: str | None = None
    error_type: str | None = None
    commissions: AttributionReport | None = None

    def to_dict(self) -> dict:
        result = {"success": self.success}
        if self.order is not None:
            result["order"] = self.order.to_dict()
        if self.error is not None:
            result["error"] = self.error
            result["error_type"] = self.error_type
        return result


@dataclass
class CheckoutResult:
    session: CheckoutSession
    lines: list[ReconciledLine] = field(default_factory=list)
    availability: AvailabilityReport | None = None
    order: Order | None = None
    commissions: AttributionReport | None = None


class CheckoutService:
    def __init__(self, gateway: CatalogueGateway | None = None, settings: CheckoutSettings | None = None):
        self.gateway = gateway or CatalogueGateway()
        self.settings = settings or CheckoutSettings.from_env()
        self.reconciler = CartReconciler(self.gateway)
        self.availability = AvailabilityChecker(self.gateway)
        self.attributor = CommissionAttributor(self.settings.commission_policy())

    # -------------------------------------------------------------------
    # Review-time reads
    # -------------------------------------------------------------------
    def reconcile(self, lines: list[SelectionLine]) -> list[ReconciledLine]:
        return self.reconciler.reconcile(lines)

    def preview_totals(self, lines: list[ReconciledLine]) -> OrderTotals:
        return compute_totals(
            ((line.unit_price, line.requested_quantity) for line in lines),
            self.settings.shipping_policy(),
        )

    def check_variation_availability(self, lines: list[ReconciledLine]) -> AvailabilityReport:
        return self.availability.check(lines)

    # -------------------------------------------------------------------
    # Full flow
    # -------------------------------------------------------------------
    def place_order(self, user_id, phone_number, selection: list[SelectionLine], checkout_id=None) -> CheckoutResult:
        """Reconcile, check and commit a selection.

        Raises ValidationError before reading the catalogue on bad input or
        an unknown referral code, InsufficientStockError when a line is short
        (at check or commit time) and PersistenceError when the commit
        outcome is unknown.
        """
        phone_number = validate_phone_number(phone_number)
        validate_selection(selection)
        ensure_known_affiliates(line.affiliate_id for line in selection)

        session = CheckoutSession(checkout_id)
        result = CheckoutResult(session=session)

        session.start_reconciling()
        try:
            result.lines = self.reconcile(selection)
        except Exception as exc:
            session.fail(str(exc))
            raise

        session.start_checking()
        try:
            result.availability = self.check_variation_availability(result.lines)
        except Exception as exc:
            session.fail(str(exc))
            raise
        if not result.availability.all_available:
            error = InsufficientStockError(result.availability.shortfalls)
            session.reject(str(error))
            raise error

        session.start_submitting()
        try:
            result.order = self._commit(session.checkout_id, user_id, phone_number, result.lines)
        except InsufficientStockError as exc:
            session.reject(str(exc))
            raise
        except Exception as exc:
            session.fail(str(exc))
            raise
        session.commit(result.order.id)

        result.commissions = self.attributor.attribute_order(result.order)
        return result

    # -------------------------------------------------------------------
    # Commit boundary
    # -------------------------------------------------------------------
    def create_order(
        self, user_id, phone_number, items: list[SelectionLine | ReconciledLine], checkout_id=None
    ) -> CreateOrderResult:
        """Commit lines that already have a variation, reporting instead of raising."""
        try:
            phone_number = validate_phone_number(phone_number)
            validate_order_lines(items)
            order = self._commit(checkout_id or uuid4(), user_id, phone_number, items)
        except ValidationError as exc:
            return CreateOrderResult(success=False, error=_messages(exc), error_type="validation")
        except ObjectNotFoundError as exc:
            return CreateOrderResult(success=False, error=str(exc), error_type="not_found")
        except InsufficientStockError as exc:
            return CreateOrderResult(success=False, error=str(exc), error_type="insufficient_stock")
        except PersistenceError as exc:
            return CreateOrderResult(success=False, error=str(exc), error_type="persistence")

        return CreateOrderResult(success=True, order=order, commissions=self.attributor.attribute_order(order))

    def find_order_for_checkout(self, checkout_id) -> Order | None:
        return find_order_by_checkout(checkout_id)

    def _commit(self, checkout_id, user_id, phone_number, lines) -> Order:
        shipping = self.settings.shipping_policy()
        command = PlaceOrder(
            checkout_id=str(checkout_id),
            user_id=str(user_id),
            phone_number=phone_number,
            items=json.dumps(
                [
                    {
                        "product_id": str(line.product_id),
                        "variation_id": str(line.variation_id),
                        "quantity": line.requested_quantity,
                        "affiliate_id": line.affiliate_id,
                    }
                    for line in lines
                ]
            ),
            free_shipping_threshold=shipping.free_shipping_threshold,
            shipping_fee=shipping.flat_fee,
        )
        try:
            return current_domain.process(command, asynchronous=False)
        except (InsufficientStockError, ValidationError, ObjectNotFoundError):
            raise
        except Exception as exc:
            logger.error("order_commit_failed", checkout_id=str(checkout_id), exc_info=True)
            raise PersistenceError(f"Order commit failed: {exc}") from exc


def _messages(exc: ValidationError) -> str:
    messages = exc.messages if isinstance(exc.messages, dict) else {"error": [str(exc)]}
    return "; ".join(f"{key}: {', '.join(map(str, value))}" for key, value in messages.items())

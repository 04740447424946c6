"""FastAPI routes for the storefront API."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AttributeCommissionRequest,
    AvailabilityRequest,
    AvailabilityResponse,
    CheckoutRequest,
    CheckoutResponse,
    CreateOrderRequest,
    ReconciledLineSchema,
    ReconcileRequest,
    ReconcileResponse,
    RegisterAffiliateRequest,
    TotalsSchema,
)
from storefront.catalogue.gateway import CatalogueGateway
from storefront.checkout.service import CheckoutService
from storefront.commission.affiliate import Affiliate, RegisterAffiliate
from storefront.commission.ledger import commissions_for_affiliate
from storefront.order.history import orders_for_user
from storefront.order.order import Order


def get_checkout_service() -> CheckoutService:
    return CheckoutService()


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return CatalogueGateway().get_product_details(product_id).to_dict()


@product_router.get("/{product_id}/variations")
async def get_product_variations(product_id: str) -> list[dict]:
    gateway = CatalogueGateway()
    gateway.get_product_details(product_id)
    return [variation.to_dict() for variation in gateway.get_product_variations(product_id)]


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(
    body: ReconcileRequest, service: CheckoutService = Depends(get_checkout_service)
) -> ReconcileResponse:
    lines = service.reconcile([item.to_line() for item in body.items])
    totals = service.preview_totals(lines)
    return ReconcileResponse(
        items=[
            ReconciledLineSchema(
                product_id=line.product_id,
                variation_id=line.variation_id,
                color=line.color,
                size=line.size,
                sku=line.sku,
                unit_price=line.unit_price,
                requested_quantity=line.requested_quantity,
                available_quantity=line.available_quantity,
                display_quantity=line.display_quantity,
                line_total=line.line_total,
                product_name=line.product_name,
                category=line.category,
                image=line.image,
                affiliate_id=line.affiliate_id,
                verified=line.verified,
            )
            for line in lines
        ],
        totals=TotalsSchema(
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total_amount=totals.total_amount,
            amount_to_free_shipping=service.settings.shipping_policy().amount_to_free_shipping(totals.subtotal),
        ),
    )


@checkout_router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    body: AvailabilityRequest, service: CheckoutService = Depends(get_checkout_service)
) -> AvailabilityResponse:
    lines = service.reconcile([item.to_line() for item in body.items])
    return AvailabilityResponse(**service.check_variation_availability(lines).to_dict())


@checkout_router.post("/orders", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest, service: CheckoutService = Depends(get_checkout_service)) -> CheckoutResponse:
    result = service.place_order(
        user_id=body.user_id,
        phone_number=body.phone_number,
        selection=[item.to_line() for item in body.items],
        checkout_id=body.checkout_id,
    )
    return CheckoutResponse(
        checkout_id=result.session.checkout_id,
        state=result.session.state.value,
        order=result.order.to_dict(),
        commissions_failed=result.commissions.failed if result.commissions else [],
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("")
async def create_order(body: CreateOrderRequest, service: CheckoutService = Depends(get_checkout_service)) -> dict:
    result = service.create_order(
        user_id=body.user_id,
        phone_number=body.phone_number,
        items=[item.to_line() for item in body.items],
        checkout_id=body.checkout_id,
    )
    return result.to_dict()


@order_router.get("")
async def list_orders(user_id: str) -> list[dict]:
    return [order.to_dict() for order in orders_for_user(user_id)]


@order_router.get("/by-checkout/{checkout_id}")
async def get_order_for_checkout(checkout_id: str, service: CheckoutService = Depends(get_checkout_service)) -> dict:
    order = service.find_order_for_checkout(checkout_id)
    if order is None:
        raise ObjectNotFoundError(f"No order for checkout {checkout_id}")
    return order.to_dict()


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return current_domain.repository_for(Order).get(order_id).to_dict()


# ---------------------------------------------------------------------------
# Commission Router
# ---------------------------------------------------------------------------
commission_router = APIRouter(prefix="/commissions", tags=["commissions"])


@commission_router.post("/attribute", status_code=201)
async def attribute_commission(
    body: AttributeCommissionRequest, service: CheckoutService = Depends(get_checkout_service)
) -> dict:
    return service.attributor.retry(body.order_id, body.order_item_id).to_dict()


@commission_router.get("")
async def list_commissions(affiliate_id: str, status: str | None = None, limit: int | None = None) -> list[dict]:
    return [entry.to_dict() for entry in commissions_for_affiliate(affiliate_id, status=status, limit=limit)]


# ---------------------------------------------------------------------------
# Affiliate Router
# ---------------------------------------------------------------------------
affiliate_router = APIRouter(prefix="/affiliates", tags=["affiliates"])


@affiliate_router.post("", status_code=201)
async def register_affiliate(body: RegisterAffiliateRequest) -> dict:
    affiliate = current_domain.process(RegisterAffiliate(code=body.code, name=body.name), asynchronous=False)
    return affiliate.to_dict()


@affiliate_router.get("/{code}")
async def get_affiliate(code: str) -> dict:
    return current_domain.repository_for(Affiliate).get(code).to_dict()

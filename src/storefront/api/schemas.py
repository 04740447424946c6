"""Pydantic request/response schemas for the storefront API.

These are the external contracts; they are mapped onto checkout line types
and commands in the routes and never passed into the domain as-is.
"""

from pydantic import BaseModel, Field

from storefront.checkout.lines import SelectionLine


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class SelectionLineSchema(BaseModel):
    product_id: str
    variation_id: str | None = None
    color: str | None = None
    size: str | None = None
    quantity: int = Field(ge=1)
    cart_unit_price: float | None = Field(default=None, ge=0)
    product_name: str | None = None
    affiliate_id: str | None = None

    def to_line(self) -> SelectionLine:
        return SelectionLine(
            product_id=self.product_id,
            requested_quantity=self.quantity,
            variation_id=self.variation_id,
            color=self.color,
            size=self.size,
            cart_unit_price=self.cart_unit_price,
            product_name=self.product_name,
            affiliate_id=self.affiliate_id,
        )


class ReconciledLineSchema(BaseModel):
    product_id: str
    variation_id: str | None
    color: str | None = None
    size: str | None = None
    sku: str | None = None
    unit_price: float
    requested_quantity: int
    available_quantity: int
    display_quantity: int
    line_total: float
    product_name: str | None = None
    category: str | None = None
    image: str | None = None
    affiliate_id: str | None = None
    verified: bool


class TotalsSchema(BaseModel):
    subtotal: float
    shipping_cost: float
    total_amount: float
    amount_to_free_shipping: float


class VerdictSchema(BaseModel):
    variation_id: str | None
    product_id: str | None = None
    color: str | None = None
    size: str | None = None
    requested: int
    current_stock: int
    available: bool


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------
class ReconcileRequest(BaseModel):
    items: list[SelectionLineSchema] = Field(min_length=1)


class AvailabilityRequest(BaseModel):
    items: list[SelectionLineSchema] = Field(min_length=1)


class CheckoutRequest(BaseModel):
    user_id: str
    phone_number: str
    items: list[SelectionLineSchema] = Field(min_length=1)
    checkout_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "phone_number": "+82 10-1234-5678",
                    "items": [{"product_id": "prod-001", "color": "Black", "size": "M", "quantity": 2}],
                }
            ]
        }
    }


class CreateOrderRequest(BaseModel):
    user_id: str
    phone_number: str
    items: list[SelectionLineSchema] = Field(min_length=1)
    checkout_id: str | None = None


class AttributeCommissionRequest(BaseModel):
    order_id: str
    order_item_id: str


class RegisterAffiliateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class ReconcileResponse(BaseModel):
    items: list[ReconciledLineSchema]
    totals: TotalsSchema


class AvailabilityResponse(BaseModel):
    all_available: bool
    availability: list[VerdictSchema]


class CheckoutResponse(BaseModel):
    checkout_id: str
    state: str
    order: dict
    commissions_failed: list[str] = []

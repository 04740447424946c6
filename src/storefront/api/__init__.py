from storefront.api.handlers import register_checkout_exception_handlers
from storefront.api.routes import affiliate_router, checkout_router, commission_router, order_router, product_router

__all__ = [
    "affiliate_router",
    "checkout_router",
    "commission_router",
    "order_router",
    "product_router",
    "register_checkout_exception_handlers",
]

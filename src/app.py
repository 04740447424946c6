"""Storefront FastAPI application.

Commands are processed synchronously within the request. Every request runs
inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay in storefront/domain.toml:
#   - "test"       → memory providers, sync processing
#   - "production" → PostgreSQL via DATABASE_URL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.domain import storefront
from storefront.utils.logging import bind_checkout_context, clear_checkout_context, configure_logging

configure_logging()
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Marketplace checkout: inventory-safe order placement with affiliate commission",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and tag logs with the request path."""
    bind_checkout_context(path=request.url.path, method=request.method)
    try:
        with storefront.domain_context():
            return await call_next(request)
    finally:
        clear_checkout_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    affiliate_router,
    checkout_router,
    commission_router,
    order_router,
    product_router,
    register_checkout_exception_handlers,
)

app.include_router(product_router)
app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(commission_router)
app.include_router(affiliate_router)

register_exception_handlers(app)
register_checkout_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})

"""HTTP mapping for checkout failures.

Validation and not-found errors are handled by Protean's FastAPI integration;
the two checkout-specific failures are mapped here.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.catalogue.gateway import CatalogueUnavailableError
from storefront.checkout.errors import InsufficientStockError, PersistenceError


async def _insufficient_stock(request: Request, exc: InsufficientStockError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": str(exc),
            "shortfalls": [verdict.to_dict() for verdict in exc.shortfalls],
        },
    )


async def _persistence_failed(request: Request, exc: PersistenceError) -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": str(exc), "outcome_unknown": exc.outcome_unknown},
    )


async def _catalogue_unavailable(request: Request, exc: CatalogueUnavailableError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": str(exc)})


def register_checkout_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InsufficientStockError, _insufficient_stock)
    app.add_exception_handler(PersistenceError, _persistence_failed)
    app.add_exception_handler(CatalogueUnavailableError, _catalogue_unavailable)

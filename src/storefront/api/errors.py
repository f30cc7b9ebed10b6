"""Translate domain failures into HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import StorefrontError

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    "invalid_quantity": 400,
    "cart_empty": 400,
    "unauthorized": 403,
    "product_not_found": 404,
    "cart_not_found": 404,
    "cart_item_not_found": 404,
    "order_not_found": 404,
    "product_unavailable": 409,
    "insufficient_stock": 409,
    "invalid_order_state": 409,
    "internal_failure": 500,
    "order_number_collision": 503,
}


def _storefront_error(request: Request, exc: StorefrontError) -> JSONResponse:
    status = STATUS_BY_CODE.get(exc.code, 400)
    if status >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.code)
    return JSONResponse(
        status_code=status,
        content={"error": exc.code, "message": exc.message, "details": exc.details},
    )


def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": "Invalid request", "details": exc.messages},
    )


def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "not_found", "message": str(exc), "details": {}},
    )


def register_error_handlers(app: FastAPI) -> None:
    # Registration order does not matter: Starlette picks the most specific class
    app.add_exception_handler(StorefrontError, _storefront_error)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ObjectNotFoundError, _not_found)

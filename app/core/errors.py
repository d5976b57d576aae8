# app/core/errors.py
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class CartError(Exception):
    """
    Base class for domain errors raised by the cart services.

    Services raise these instead of HTTPException so the same code
    can run outside a request (tests, scripts). `app.main` maps each
    kind to an HTTP status via `register_exception_handlers`.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(CartError):
    """Missing product, product option, or line item."""

    status_code = status.HTTP_404_NOT_FOUND


class InvalidArgument(CartError):
    """Non-positive quantity, malformed identifier, or a full guest cart."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamUnavailable(CartError):
    """Catalog or authoritative cart store could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


async def _cart_error_handler(request: Request, exc: CartError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the CartError -> JSON response mapping to the app."""
    app.add_exception_handler(CartError, _cart_error_handler)

# storefront/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures reported to the caller as ``{"kind", "message"}``."""

    status_code = 500
    kind = "error"
    message = "Internal server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# Malformed or missing input, detected before touching the store
class ValidationError(AppError):
    status_code = 400
    kind = "validation_error"
    message = "Invalid input"


class AuthError(AppError):
    status_code = 401
    kind = "auth_error"
    message = "Please login first."


class ForbiddenError(AppError):
    status_code = 403
    kind = "forbidden"
    message = "Unauthorized access. Admins only."


class NotFoundError(AppError):
    status_code = 404
    kind = "not_found"
    message = "Not found"


class ConflictError(AppError):
    status_code = 400
    kind = "conflict"
    message = "Resource already exists"


class EmptyCart(AppError):
    status_code = 400
    kind = "empty_cart"
    message = "Cart is empty"


class StoreFailure(AppError):
    status_code = 500
    kind = "store_failure"
    message = "Internal server error"


class CsrfError(AppError):
    status_code = 403
    kind = "csrf_error"
    message = "Invalid CSRF token"


def error_body(kind: str, message: str, **extra) -> dict:
    body = {"kind": kind, "message": message}
    body.update(extra)
    return body


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=error_body(ValidationError.kind, ValidationError.message, errors=errors),
    )


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    # Full details stay in the server log; the caller gets a generic message
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=StoreFailure.status_code,
        content=error_body(StoreFailure.kind, StoreFailure.message),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

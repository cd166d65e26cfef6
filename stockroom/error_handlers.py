"""Custom error handlers and exceptions for the application."""
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
from typing import Union

from .logging_config import get_logger

logger = get_logger("error_handlers")

# lock_not_available, serialization_failure, deadlock_detected
CONFLICT_SQLSTATES = {"55P03", "40001", "40P01"}


class AppException(Exception):
    """Base exception for application-specific errors."""

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundError(AppException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Union[int, str]):
        super().__init__(
            message=f"{resource} with identifier '{identifier}' not found",
            status_code=404,
            details={"resource": resource, "identifier": str(identifier)}
        )


class DuplicateResourceError(AppException):
    """Raised when attempting to create a duplicate resource."""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            message=f"{resource} with {field} '{value}' already exists",
            status_code=409,
            details={"resource": resource, "field": field, "value": value}
        )


class ValidationError(AppException):
    """Raised when data validation fails."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(
            message=message,
            status_code=422,
            details={"validation_errors": errors or []}
        )


class ResourceInUseError(AppException):
    """Raised when a resource cannot be removed because other records depend on it."""

    def __init__(self, resource: str, identifier: Union[int, str], reason: str):
        super().__init__(
            message=f"{resource} '{identifier}' cannot be deleted: {reason}",
            status_code=409,
            details={"resource": resource, "identifier": str(identifier)}
        )


# Stock ledger errors

class LedgerValidationError(ValidationError):
    """Malformed stock transaction input: bad quantity or unknown type."""

    def __init__(self, message: str, field: str):
        super().__init__(message, errors=[{"field": field, "message": message}])


class ProductNotFoundError(ResourceNotFoundError):
    """Product does not exist or belongs to another owner."""

    def __init__(self, product_id):
        super().__init__("Product", product_id)


class InsufficientStockError(AppException):
    """An ``out`` transaction asked for more units than are available."""

    def __init__(self, product_id, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            message=f"Insufficient stock. Available: {available}, Required: {requested}",
            status_code=400,
            details={
                "product_id": str(product_id),
                "available": available,
                "requested": requested
            }
        )


class ConflictError(AppException):
    """Lock contention or serialization failure. Nothing was committed; safe to retry."""

    def __init__(self, message: str = "The resource is busy, please retry", original_error: str = None):
        super().__init__(
            message=message,
            status_code=409,
            details={"retryable": True, "original_error": original_error}
        )


class StoreError(AppException):
    """Any other persistence failure. The operation was rolled back."""

    def __init__(self, message: str = "Storage is temporarily unavailable", original_error: str = None):
        super().__init__(
            message=message,
            status_code=503,
            details={"retryable": True, "original_error": original_error}
        )


async def app_exception_handler(request: Request, exc: AppException):
    """Handler for custom application exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application error: {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details
        }
    )

    details = exc.details
    if isinstance(exc, (ConflictError, StoreError)):
        # Driver messages stay in the logs
        details = {k: v for k, v in details.items() if k != "original_error"}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": details,
            "path": request.url.path
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"validation_errors": errors}
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({
            "error": "Validation failed",
            "validation_errors": errors,
            "path": request.url.path
        })
    )


def translate_store_error(exc: SQLAlchemyError) -> AppException:
    """Split driver failures into retryable lock conflicts and other store errors."""
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)

    if sqlstate in CONFLICT_SQLSTATES:
        return ConflictError(original_error=str(orig))

    # SQLite reports a busy write lock as an OperationalError
    if isinstance(exc, OperationalError) and "locked" in str(orig or exc).lower():
        return ConflictError(original_error=str(orig or exc))

    return StoreError(original_error=str(orig or exc))


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    Handler for database errors that escaped a route.

    Constraint violations map to 409; lock contention and connectivity
    failures go through ``translate_store_error`` like ledger writes do.
    """
    logger.error(
        f"Database error: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    if isinstance(exc, IntegrityError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "error": "Data integrity constraint violated",
                "details": {},
                "path": request.url.path
            }
        )

    return await app_exception_handler(request, translate_store_error(exc))


async def generic_exception_handler(request: Request, exc: Exception):
    """Handler for unexpected exceptions."""
    logger.critical(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please contact support if the issue persists.",
            "path": request.url.path
        }
    )

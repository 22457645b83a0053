"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from typing import Any, Dict, Optional

class StorefrontException(HTTPException):
    """Base exception class for the storefront application"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code

class BadRequestException(StorefrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )

class ValidationException(BadRequestException):
    """400 for malformed or inconsistent input"""

    def __init__(self, detail: str, error_code: str = "VALIDATION_ERROR"):
        super().__init__(detail=detail, error_code=error_code)

class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )

class ForbiddenException(StorefrontException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )

class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, detail: str = "Not found", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code
        )

class ConflictException(StorefrontException):
    """409 Conflict"""

    def __init__(self, detail: str, error_code: str = "CONFLICT"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code=error_code
        )

class InternalServerException(StorefrontException):
    """500 Internal Server Error"""

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )

class PaymentGatewayException(StorefrontException):
    """502 when the payment provider call fails"""

    def __init__(self, detail: str = "Payment provider error", error_code: str = "PAYMENT_GATEWAY_ERROR"):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            error_code=error_code
        )

# Business logic exceptions
class InsufficientStockException(ValidationException):
    """Product stock insufficient"""

    def __init__(self, product_name: str, available: int):
        super().__init__(
            detail=f"Insufficient stock for {product_name}. Only {available} available.",
            error_code="INSUFFICIENT_STOCK"
        )

class InvalidWebhookException(BadRequestException):
    """Webhook signature or payload rejected"""

    def __init__(self, detail: str = "Invalid webhook signature"):
        super().__init__(detail=detail, error_code="INVALID_WEBHOOK")

class DuplicateResourceException(ConflictException):
    """Resource already exists"""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )

class OrderNotCancellableException(BadRequestException):
    """Order cannot be cancelled"""

    def __init__(self, detail: str = "Order cannot be cancelled in current status"):
        super().__init__(
            detail=detail,
            error_code="ORDER_NOT_CANCELLABLE"
        )

class FulfillmentError(InternalServerException):
    """Raised when a paid order cannot be fulfilled; the order is rolled back and cancelled"""

    def __init__(self, detail: str):
        super().__init__(detail=detail, error_code="FULFILLMENT_FAILED")

def _error_body(request: Request, code: Optional[str], message: Any) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "request_id": getattr(request.state, "request_id", None)
        }
    }

async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.error_code, exc.detail),
        headers=exc.headers
    )

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query validation failures share the 400 VALIDATION_ERROR envelope"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, "VALIDATION_ERROR", "; ".join(messages))
    )

def register_exception_handlers(app) -> None:
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

from typing import Optional, Dict, Any, List


class BaseAPIException(Exception):
    def __init__(self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace('Error', '').upper()
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseAPIException):
    """Raised when request validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class NotFoundError(BaseAPIException):
    """Raised when a requested resource is not found"""

    def __init__(self, resource: str = "Resource", resource_id: Optional[Any] = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message += f" with ID: {resource_id}"
        super().__init__(message, 404, "NOT_FOUND")


class UnauthorizedError(BaseAPIException):
    """Raised when the caller is unauthenticated, or lacks the role or ownership required"""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, 401, "UNAUTHORIZED")


class ConflictError(BaseAPIException):
    """Raised when there's a conflict with the current state"""

    def __init__(self, message: str = "Resource conflict", conflict_field: Optional[str] = None):
        details = {"conflict_field": conflict_field} if conflict_field else {}
        super().__init__(message, 409, "CONFLICT", details)


class InsufficientStockError(BaseAPIException):
    """Raised when a requested quantity exceeds the product's stock"""

    def __init__(self, product_name: str, available: int, requested: int):
        details = {"product": product_name, "available": available, "requested": requested}
        super().__init__(
            f"Not enough stock for {product_name}",
            400,
            "INSUFFICIENT_STOCK",
            details,
        )


class EmptyCartError(BaseAPIException):
    """Raised when an order is placed without any cart lines"""

    def __init__(self, message: str = "No items in cart"):
        super().__init__(message, 400, "EMPTY_CART")


class DatabaseError(BaseAPIException):
    """Raised when database operations fail"""

    def __init__(self, message: str = "Database operation failed", operation: Optional[str] = None):
        # Don't expose internal database details to users
        user_message = "An internal error occurred. Please try again later."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "DATABASE_ERROR",
            details,
            internal_message=message  # Keep original message for logging
        )

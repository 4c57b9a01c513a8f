"""Unified error codes and custom exceptions.

Every error carries a stable ``kind`` (BAD_REQUEST / FORBIDDEN / NOT_FOUND /
UNAUTHORIZED / INTERNAL), a numeric ``code`` and a human-readable message.

Error code ranges:
  1xxx: Auth / identity
  3xxx: Product / stock
  4xxx: Order
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    kind: str = "INTERNAL"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class BadRequestError(AppError):
    kind = "BAD_REQUEST"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


class UnauthorizedError(AppError):
    kind = "UNAUTHORIZED"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 401)


class ForbiddenError(AppError):
    kind = "FORBIDDEN"

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(1002, message, 403)


class NotFoundError(AppError):
    kind = "NOT_FOUND"

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


# --- 1xxx: Auth ---

class InvalidCredentialsError(UnauthorizedError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token")


# --- 3xxx: Product / stock ---

class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: str) -> None:
        super().__init__(3001, f"Product not found: {product_id}")


class InsufficientStockError(BadRequestError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            3002,
            f"Insufficient product quantity available: requested {requested}, "
            f"available {available}",
        )


# --- 4xxx: Order ---

class RequestValidationFailedError(BadRequestError):
    def __init__(self, detail: str) -> None:
        super().__init__(4000, f"Validation failed: {detail}")


class InvalidOrderRequestError(BadRequestError):
    def __init__(self, detail: str) -> None:
        super().__init__(4001, detail)


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: str) -> None:
        super().__init__(4004, f"Order not found: {order_id}")


class InvalidStatusTransitionError(BadRequestError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            4006, f"Invalid order status transition: {current} -> {requested}"
        )


class OrderNotCancellableError(BadRequestError):
    def __init__(self, order_id: str, status: str) -> None:
        if status == "delivered":
            message = "Cannot cancel delivered orders"
        else:
            message = f"Order {order_id} is already {status}"
        super().__init__(4007, message)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)

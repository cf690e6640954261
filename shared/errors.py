"""Business-rule and infrastructure errors shared by every service.

Each error carries a machine-readable ``code`` and the HTTP status the
presentation layer should answer with. Services raise them; the handler
registered in ``main.py`` renders them into the error envelope.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StorefrontError):
    """Raised when a resource is absent or not visible to the caller.

    Orders owned by someone else are reported with this same error so that
    order ids cannot be probed by non-owners.
    """

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        self.resource = resource
        super().__init__(f"{resource} not found")


class EmptyCartError(StorefrontError):
    code = "EMPTY_CART"
    status_code = 400

    def __init__(self):
        super().__init__("Cart is empty")


class InsufficientStockError(StorefrontError):
    code = "INSUFFICIENT_STOCK"
    status_code = 400

    def __init__(self, product_name: str | None = None):
        self.product_name = product_name
        super().__init__(f"Insufficient stock for {product_name or 'product'}")


class CannotCancelError(StorefrontError):
    code = "CANNOT_CANCEL"
    status_code = 400

    def __init__(self, status: str):
        self.status = status
        super().__init__("Order cannot be cancelled")


class InvalidStatusTransitionError(StorefrontError):
    code = "INVALID_STATUS_TRANSITION"
    status_code = 400

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")


class AlreadyPaidError(StorefrontError):
    code = "ALREADY_PAID"
    status_code = 400

    def __init__(self):
        super().__init__("Order already paid")


class PaymentFailedError(StorefrontError):
    code = "PAYMENT_FAILED"
    status_code = 400

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__("Payment failed. Please try again.")


class ConflictError(StorefrontError):
    code = "CONFLICT"
    status_code = 409


class StorageUnavailableError(StorefrontError):
    """Raised when a transaction keeps failing on lock or serialization conflicts.

    Callers may retry once with backoff before giving up.
    """

    code = "STORAGE_UNAVAILABLE"
    status_code = 503

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Storage is busy, please retry")

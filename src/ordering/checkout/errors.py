"""Failures that abort a checkout.

Every checkout either places a complete order or raises exactly one of
these. None of them leave a partially written order behind.
"""


class CheckoutError(Exception):
    """Base class for checkout failures."""

    retryable = False

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class ProductNotFound(CheckoutError):
    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product {product_id} not found", product_id=product_id)
        self.product_id = product_id


class InvalidLineQuantity(CheckoutError):
    def __init__(self, product_id: str, quantity) -> None:
        super().__init__(
            f"Quantity for product {product_id} must be a positive integer, got {quantity!r}",
            product_id=product_id,
            quantity=quantity,
        )
        self.product_id = product_id
        self.quantity = quantity


class InvalidPaymentInput(CheckoutError):
    pass


class InvalidShippingAddress(CheckoutError):
    def __init__(self, errors) -> None:
        fields = sorted(errors) if isinstance(errors, dict) else []
        super().__init__(
            f"Shipping address is invalid: {', '.join(fields) or errors}",
            errors=errors,
        )
        self.errors = errors


class InexactAmount(CheckoutError):
    """A line or order total cannot be represented without rounding."""


class PersistenceFailure(CheckoutError):
    """The order store could not durably commit the order."""


class PersistenceTimeout(PersistenceFailure):
    """The commit did not finish in time and was abandoned, so no order was stored."""

    retryable = True

"""Exact decimal pricing for order lines and order totals.

All arithmetic runs in a decimal context that traps ``Inexact``: an
operation that would have to round raises InexactAmount instead of
silently drifting.
"""

from collections.abc import Iterable
from decimal import Decimal, DecimalException, localcontext

from ordering.checkout.errors import InexactAmount, InvalidLineQuantity
from ordering.checkout.lookup import Product
from ordering.order.money import EXACT, ZERO, exact_sum


def validate_quantity(product_id: str, quantity) -> int:
    """Return ``quantity`` if it is a positive int, else raise InvalidLineQuantity."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidLineQuantity(product_id, quantity)
    return quantity


def price_line(product: Product, quantity: int) -> Decimal:
    """Line total for ``quantity`` units of ``product`` at its current price."""
    validate_quantity(product.product_id, quantity)
    try:
        with localcontext(EXACT):
            return product.price * quantity
    except DecimalException as exc:
        raise InexactAmount(
            f"Line total for product {product.product_id} cannot be computed exactly",
            product_id=product.product_id,
            quantity=quantity,
        ) from exc


def sum_totals(line_totals: Iterable[Decimal]) -> Decimal:
    """Exact sum of line totals, in the given order. Empty input sums to 0.00."""
    try:
        return exact_sum(line_totals)
    except DecimalException as exc:
        raise InexactAmount("Order total cannot be computed exactly") from exc

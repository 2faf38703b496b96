"""Exact decimal context shared by line pricing and the order total check."""

from collections.abc import Iterable
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow, localcontext

ZERO = Decimal("0.00")

# Any operation that would have to round raises instead.
EXACT = Context(prec=200, traps=[Inexact, InvalidOperation, Overflow])


def exact_sum(amounts: Iterable[Decimal]) -> Decimal:
    """Sum ``amounts`` in order, starting from 0.00, without rounding."""
    with localcontext(EXACT):
        total = ZERO
        for amount in amounts:
            total += amount
        return total

"""Order aggregate: the immutable record of a completed checkout.

An Order owns its lines (entities) and embeds its payment (value object).
All of them are created together by ``Order.place()`` and persisted in one
unit of work; nothing about an Order changes afterwards.

Money is stored as canonical decimal text and read back as ``Decimal``
through the ``unit_price_amount``/``line_total_amount``/``total`` properties.
"""

from datetime import UTC, datetime
from decimal import Decimal, DecimalException, localcontext
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.order.events import OrderPlaced
from ordering.order.money import exact_sum


class OrderStatus(Enum):
    PLACED = "PLACED"


class PaymentMethod(Enum):
    CARD = "CARD"


class PaymentStatus(Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, copied from the checkout request.

    The order keeps its own copy; later changes to a customer's saved
    addresses never reach it.
    """

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@ordering.value_object(part_of="Order")
class Payment:
    """The card payment recorded with the order. Only the last 4 digits are kept."""

    method = String(required=True, max_length=10, choices=PaymentMethod)
    status = String(required=True, max_length=10, choices=PaymentStatus)
    cardholder_name = String(required=True, max_length=255)
    card_last4 = String(required=True, max_length=4)
    transaction_id = String(required=True, max_length=64)
    paid_at = DateTime(required=True)

    @invariant.post
    def card_must_be_masked_to_last_four(self):
        if self.card_last4 is None or len(self.card_last4) != 4:
            raise ValidationError({"card_last4": ["Must hold exactly the last 4 characters of the card number"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """One priced line of an order.

    ``unit_price`` is the catalogue price at checkout time; later catalogue
    price changes do not touch it.
    """

    product_id = Identifier(required=True)
    position = Integer(required=True, min_value=1)
    quantity = Integer(required=True, min_value=1)
    unit_price = String(required=True, max_length=64)
    line_total = String(required=True, max_length=64)

    @invariant.post
    def line_total_must_equal_unit_price_times_quantity(self):
        with localcontext() as ctx:
            ctx.prec = 200
            expected = Decimal(self.unit_price) * self.quantity
        if Decimal(self.line_total) != expected:
            raise ValidationError({"line_total": ["Line total must equal unit price times quantity"]})

    @property
    def unit_price_amount(self) -> Decimal:
        return Decimal(self.unit_price)

    @property
    def line_total_amount(self) -> Decimal:
        return Decimal(self.line_total)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.PLACED.value)
    placed_at = DateTime(required=True)
    shipping_address = ValueObject(ShippingAddress)
    lines = HasMany(OrderLine)
    total_amount = String(required=True, max_length=64)
    payment = ValueObject(Payment)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, lines, total_amount, shipping_address, payment, placed_at=None):
        """Create a placed order from priced lines and an authorized payment.

        Args:
            lines: OrderLine entities, in request order.
            total_amount: Decimal sum of the line totals.
            shipping_address: ShippingAddress value object.
            payment: Payment value object.
            placed_at: Placement timestamp, defaults to now (UTC).

        Raises:
            ValidationError: If ``total_amount`` differs from the sum of the
                line totals.
        """
        try:
            expected = exact_sum(line.line_total_amount for line in lines)
        except DecimalException as exc:
            raise ValidationError({"total_amount": ["Sum of line totals cannot be computed exactly"]}) from exc
        if Decimal(total_amount) != expected:
            raise ValidationError(
                {"total_amount": [f"Order total {total_amount} does not match sum of line totals {expected}"]}
            )

        placed_at = placed_at or datetime.now(UTC)
        order = cls(
            status=OrderStatus.PLACED.value,
            placed_at=placed_at,
            shipping_address=shipping_address,
            lines=list(lines),
            total_amount=str(total_amount),
            payment=payment,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                total_amount=str(total_amount),
                line_count=len(lines),
                transaction_id=payment.transaction_id,
                placed_at=placed_at,
            )
        )
        return order

    @property
    def total(self) -> Decimal:
        return Decimal(self.total_amount)

    def ordered_lines(self):
        """Lines in the order they were requested at checkout."""
        return sorted(self.lines or [], key=lambda line: line.position)

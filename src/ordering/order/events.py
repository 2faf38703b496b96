"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout completed: the order, its lines and its payment were recorded."""

    __version__ = 1

    order_id = Identifier(required=True)
    total_amount = String(required=True, max_length=64)  # decimal text
    line_count = Integer(required=True, min_value=0)
    transaction_id = String(required=True, max_length=64)
    placed_at = DateTime(required=True)

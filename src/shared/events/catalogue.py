"""Cross-domain event contracts for Catalogue domain events.

These classes define the event shape for consumption by other domains
(the Ordering domain keeps its catalogue price read model from them). They
are registered as external events via domain.register_external_event()
with matching __type__ strings so Protean's stream deserialization works
correctly.

Prices travel as decimal strings so that no binary floating point ever
touches a money amount.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class ProductListed(BaseEvent):
    """A product became available for sale at a price."""

    __version__ = 1

    product_id = Identifier(required=True)
    title = String(required=True)
    price = String(required=True)  # decimal text, e.g. "10.00"
    listed_at = DateTime(required=True)


class ProductPriceChanged(BaseEvent):
    """The sale price of a listed product changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = String()
    new_price = String(required=True)
    changed_at = DateTime(required=True)


class ProductDelisted(BaseEvent):
    """A product was removed from sale and can no longer be ordered."""

    __version__ = 1

    product_id = Identifier(required=True)
    delisted_at = DateTime(required=True)

"""Catalogue products projection: the prices checkout reads.

Populated by the Catalogue -> Ordering event handler from ProductListed,
ProductPriceChanged and ProductDelisted events. A product that has no
record here does not exist as far as checkout is concerned.
"""

from protean.fields import DateTime, Identifier, String

from ordering.domain import ordering


@ordering.projection
class CatalogueProduct:
    product_id = Identifier(identifier=True, required=True)
    title = String(max_length=255)
    price = String(required=True, max_length=64)  # decimal text
    updated_at = DateTime()

"""Inbound cross-domain event handler: Ordering reacts to Catalogue events.

Keeps the CatalogueProduct projection in step with the catalogue so that
checkout prices lines at the price currently on sale. Price reads at
checkout are not locked against these updates: an order snapshots whatever
price was recorded when its line was priced.

Cross-domain events are imported from shared.events.catalogue and registered
as external events via ordering.register_external_event().
"""

from decimal import Decimal

import structlog
from protean import current_domain, handle
from protean.exceptions import ObjectNotFoundError
from shared.events.catalogue import ProductDelisted, ProductListed, ProductPriceChanged

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.projections.catalogue_products import CatalogueProduct

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
ordering.register_external_event(ProductListed, "Catalogue.ProductListed.v1")
ordering.register_external_event(ProductPriceChanged, "Catalogue.ProductPriceChanged.v1")
ordering.register_external_event(ProductDelisted, "Catalogue.ProductDelisted.v1")


def _canonical_price(value) -> str:
    return str(Decimal(str(value)))


@ordering.event_handler(part_of=Order, stream_category="catalogue::product")
class CatalogueProductEventHandler:
    """Maintains the catalogue prices used to price checkout lines."""

    @handle(ProductListed)
    def on_product_listed(self, event: ProductListed) -> None:
        logger.info("Recording listed product", product_id=str(event.product_id), price=event.price)
        current_domain.repository_for(CatalogueProduct).add(
            CatalogueProduct(
                product_id=str(event.product_id),
                title=event.title,
                price=_canonical_price(event.price),
                updated_at=event.listed_at,
            )
        )

    @handle(ProductPriceChanged)
    def on_product_price_changed(self, event: ProductPriceChanged) -> None:
        repo = current_domain.repository_for(CatalogueProduct)
        try:
            record = repo.get(str(event.product_id))
        except ObjectNotFoundError:
            logger.warning("Price change for unknown product ignored", product_id=str(event.product_id))
            return

        logger.info(
            "Updating catalogue price",
            product_id=str(event.product_id),
            previous_price=record.price,
            new_price=event.new_price,
        )
        record.price = _canonical_price(event.new_price)
        record.updated_at = event.changed_at
        repo.add(record)

    @handle(ProductDelisted)
    def on_product_delisted(self, event: ProductDelisted) -> None:
        logger.info("Removing delisted product", product_id=str(event.product_id))
        repo = current_domain.repository_for(CatalogueProduct)
        try:
            record = repo.get(str(event.product_id))
            repo._dao.delete(record)
        except ObjectNotFoundError:
            pass  # Never listed or already removed

"""Checkout entry point wired to the ordering domain's repositories.

Card data is passed straight to the assembler rather than through a domain
command, so the full card number is never written to the event store.
"""

from protean import current_domain

from ordering.checkout.assembler import OrderAssembler
from ordering.checkout.lookup import CatalogueProductLookup
from ordering.checkout.payment import PaymentSimulator
from ordering.checkout.request import CheckoutRequest
from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.store import DEFAULT_TIMEOUT_SECONDS, RepositoryOrderStore
from ordering.projections.catalogue_products import CatalogueProduct


def order_store(persist_timeout: float | None = None) -> RepositoryOrderStore:
    return RepositoryOrderStore(
        ordering,
        timeout=DEFAULT_TIMEOUT_SECONDS if persist_timeout is None else persist_timeout,
    )


def place_order(request: CheckoutRequest, *, persist_timeout: float | None = None) -> Order:
    """Place an order and return it as persisted. See OrderAssembler.place()."""
    assembler = OrderAssembler(
        product_lookup=CatalogueProductLookup(current_domain.repository_for(CatalogueProduct)),
        order_store=order_store(persist_timeout),
        payment_simulator=PaymentSimulator(),
    )
    return assembler.place(request)

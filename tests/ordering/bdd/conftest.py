"""Shared BDD fixtures and step definitions for checkout."""

from datetime import UTC, datetime

import pytest
from ordering.checkout.errors import CheckoutError
from ordering.checkout.payment import CardInput
from ordering.checkout.request import AddressInput, CheckoutRequest, LineRequest
from ordering.checkout.service import place_order
from ordering.order.catalogue_events import CatalogueProductEventHandler
from ordering.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from shared.events.catalogue import ProductListed, ProductPriceChanged


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def cart():
    """Lines the shopper will check out, in order."""
    return []


@pytest.fixture()
def card():
    return {"number": None}


@pytest.fixture()
def outcome():
    """Container for the placed order or the checkout error."""
    return {"order": None, "exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalogue lists product "{product_id}" at {price}'))
def _(product_id, price):
    CatalogueProductEventHandler().on_product_listed(
        ProductListed(
            product_id=product_id,
            title=f"Product {product_id}",
            price=price,
            listed_at=datetime.now(UTC),
        )
    )


@given(parsers.cfparse('the shopper pays with card "{number}"'))
def _(card, number):
    card["number"] = number


@given(parsers.cfparse('the cart holds {quantity:d} of product "{product_id}"'))
def _(cart, quantity, product_id):
    cart.append(LineRequest(product_id=product_id, quantity=quantity))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shopper checks out")
def _(cart, card, outcome):
    request = CheckoutRequest(
        lines=tuple(cart),
        shipping_address=AddressInput(
            street="123 Main St",
            city="Springfield",
            state="IL",
            postal_code="62701",
            country="US",
        ),
        card=CardInput(cardholder_name="Jane Doe", card_number=card["number"], expiry="12/30", cvc="123"),
    )
    try:
        outcome["order"] = place_order(request)
    except CheckoutError as exc:
        outcome["exc"] = exc


@when(parsers.cfparse('the catalogue price of product "{product_id}" changes to {price}'))
def _(product_id, price):
    CatalogueProductEventHandler().on_product_price_changed(
        ProductPriceChanged(product_id=product_id, new_price=price, changed_at=datetime.now(UTC))
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the order is placed")
def _(outcome):
    assert outcome["exc"] is None
    assert outcome["order"] is not None
    assert outcome["order"].status == "PLACED"


@then(parsers.cfparse('the order total is "{total}"'))
def _(outcome, total):
    stored = current_domain.repository_for(Order).get(outcome["order"].id)
    assert stored.total_amount == total


@then(parsers.cfparse("the order has {count:d} lines"))
def _(outcome, count):
    assert len(outcome["order"].ordered_lines()) == count


@then(parsers.cfparse('the payment status is "{status}"'))
def _(outcome, status):
    assert outcome["order"].payment.status == status


@then(parsers.cfparse('the card last four is "{last4}"'))
def _(outcome, last4):
    assert outcome["order"].payment.card_last4 == last4


@then(parsers.cfparse('checkout fails because product "{product_id}" was not found'))
def _(outcome, product_id):
    assert outcome["order"] is None
    assert type(outcome["exc"]).__name__ == "ProductNotFound"
    assert outcome["exc"].product_id == product_id


@then("no order is saved")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().items == []

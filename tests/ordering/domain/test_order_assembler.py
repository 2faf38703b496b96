"""Domain tests for OrderAssembler: checkout orchestration in isolation.

Product lookup and order store are replaced with in-memory fakes so the
tests can observe exactly which products were looked up and whether the
store was ever asked to save.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from ordering.checkout.assembler import OrderAssembler
from ordering.checkout.errors import (
    InexactAmount,
    InvalidLineQuantity,
    InvalidPaymentInput,
    InvalidShippingAddress,
    PersistenceFailure,
    PersistenceTimeout,
    ProductNotFound,
)
from ordering.checkout.lookup import Found, NotFound, Product, ProductLookup
from ordering.checkout.payment import CardInput
from ordering.checkout.request import AddressInput, CheckoutRequest, LineRequest
from ordering.order.order import OrderStatus, PaymentStatus
from ordering.order.store import OrderStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


class FakeLookup(ProductLookup):
    def __init__(self, prices):
        self.prices = {key: Decimal(value) for key, value in prices.items()}
        self.calls = []

    def find(self, product_id):
        self.calls.append(product_id)
        if product_id not in self.prices:
            return NotFound(product_id=product_id)
        return Found(Product(product_id=product_id, price=self.prices[product_id]))


class FakeStore(OrderStore):
    def __init__(self, error=None):
        self.saved = []
        self.error = error

    def save(self, order):
        if self.error is not None:
            raise self.error
        self.saved.append(order)
        return order

    def find_by_id(self, order_id):
        return next((o for o in self.saved if str(o.id) == order_id), None)


def _request(lines=(("1", 2), ("2", 1)), card_number="4111111111111234", cardholder_name="Jane Doe", **address):
    fields = {"street": "123 Main St", "city": "Springfield", "state": "IL", "postal_code": "62701", "country": "US"}
    fields.update(address)
    return CheckoutRequest(
        lines=tuple(LineRequest(product_id=pid, quantity=qty) for pid, qty in lines),
        shipping_address=AddressInput(**fields),
        card=CardInput(cardholder_name=cardholder_name, card_number=card_number, expiry="12/30", cvc="123"),
    )


@pytest.fixture
def lookup():
    return FakeLookup({"1": "10.00", "2": "5.50", "3": "0.10", "4": "12345678901234567890.13"})


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def assembler(lookup, store):
    return OrderAssembler(product_lookup=lookup, order_store=store, clock=lambda: NOW)


class TestSuccessfulCheckout:
    def test_two_lines_total(self, assembler):
        order = assembler.place(_request())
        assert order.total == Decimal("25.50")
        assert len(order.lines) == 2
        assert order.payment.status == PaymentStatus.SUCCESS.value

    def test_order_is_placed_now(self, assembler):
        order = assembler.place(_request())
        assert order.status == OrderStatus.PLACED.value
        assert order.placed_at == NOW

    def test_card_masked_to_last_four(self, assembler):
        order = assembler.place(_request(card_number="4111111111111234"))
        assert order.payment.card_last4 == "1234"

    def test_zero_lines_is_permitted(self, assembler, store):
        order = assembler.place(_request(lines=()))
        assert str(order.total) == "0.00"
        assert order.ordered_lines() == []
        assert order.payment.status == PaymentStatus.SUCCESS.value
        assert store.saved == [order]

    def test_saves_exactly_once(self, assembler, store):
        order = assembler.place(_request())
        assert store.saved == [order]

    def test_lines_snapshot_prices_in_request_order(self, assembler):
        order = assembler.place(_request(lines=(("2", 3), ("1", 1), ("3", 7))))
        lines = order.ordered_lines()
        assert [line.product_id for line in lines] == ["2", "1", "3"]
        assert [line.position for line in lines] == [1, 2, 3]
        assert [line.unit_price for line in lines] == ["5.50", "10.00", "0.10"]
        assert [line.line_total for line in lines] == ["16.50", "10.00", "0.70"]

    def test_total_is_exact_for_many_lines(self, assembler):
        order = assembler.place(_request(lines=tuple(("3", 1) for _ in range(300))))
        assert order.total == Decimal("30.00")

    def test_later_price_change_does_not_touch_snapshot(self, assembler, lookup):
        order = assembler.place(_request(lines=(("1", 1),)))
        lookup.prices["1"] = Decimal("99.99")
        assert order.ordered_lines()[0].unit_price == "10.00"
        assert order.total == Decimal("10.00")

    def test_total_beyond_default_decimal_precision_is_exact(self, assembler, store):
        order = assembler.place(_request(lines=(("4", 1_000_000_007), ("4", 3))))
        assert order.total_amount == "12345679024691356902475678901.30"
        assert store.saved == [order]

    def test_checkout_is_not_idempotent(self, assembler, store):
        first = assembler.place(_request())
        second = assembler.place(_request())
        assert first.id != second.id
        assert first.payment.transaction_id != second.payment.transaction_id
        assert len(store.saved) == 2


class TestMissingProduct:
    def test_raises_product_not_found(self, assembler):
        with pytest.raises(ProductNotFound) as exc:
            assembler.place(_request(lines=(("1", 1), ("999", 1))))
        assert exc.value.product_id == "999"

    def test_store_is_never_called(self, assembler, store):
        with pytest.raises(ProductNotFound):
            assembler.place(_request(lines=(("999", 1), ("1", 1))))
        assert store.saved == []

    def test_stops_at_first_missing_product(self, assembler, lookup):
        with pytest.raises(ProductNotFound):
            assembler.place(_request(lines=(("999", 1), ("1", 1))))
        assert lookup.calls == ["999"]


class TestInvalidInput:
    def test_bad_quantity_rejected_before_any_lookup(self, assembler, lookup, store):
        with pytest.raises(InvalidLineQuantity):
            assembler.place(_request(lines=(("1", 1), ("2", 0))))
        assert lookup.calls == []
        assert store.saved == []

    def test_short_card_number_is_rejected(self, assembler, store):
        with pytest.raises(InvalidPaymentInput):
            assembler.place(_request(card_number="123"))
        assert store.saved == []

    def test_blank_cardholder_is_rejected(self, assembler, store):
        with pytest.raises(InvalidPaymentInput):
            assembler.place(_request(cardholder_name=" "))
        assert store.saved == []

    def test_overlong_cardholder_is_rejected(self, assembler, store):
        with pytest.raises(InvalidPaymentInput) as exc:
            assembler.place(_request(cardholder_name="x" * 300))
        assert "cardholder_name" in exc.value.message
        assert store.saved == []

    @pytest.mark.parametrize(
        "address",
        [{"street": ""}, {"city": ""}, {"postal_code": "9" * 21}, {"country": "x" * 101}, {"state": "x" * 101}],
    )
    def test_invalid_shipping_address_is_rejected_before_any_lookup(self, assembler, lookup, store, address):
        with pytest.raises(InvalidShippingAddress) as exc:
            assembler.place(_request(**address))
        assert set(address) <= set(exc.value.errors)
        assert exc.value.retryable is False
        assert lookup.calls == []
        assert store.saved == []

    def test_line_total_that_would_round_is_rejected(self, lookup, store):
        lookup.prices["5"] = Decimal("1." + "1" * 250)
        assembler = OrderAssembler(product_lookup=lookup, order_store=store)
        with pytest.raises(InexactAmount):
            assembler.place(_request(lines=(("5", 3),)))
        assert store.saved == []


class TestPersistenceErrors:
    def test_unexpected_store_error_becomes_persistence_failure(self, lookup):
        assembler = OrderAssembler(product_lookup=lookup, order_store=FakeStore(error=RuntimeError("disk full")))
        with pytest.raises(PersistenceFailure) as exc:
            assembler.place(_request())
        assert "disk full" in exc.value.message
        assert exc.value.retryable is False

    def test_timeout_passes_through(self, lookup):
        assembler = OrderAssembler(
            product_lookup=lookup,
            order_store=FakeStore(error=PersistenceTimeout("Order was not committed in time")),
        )
        with pytest.raises(PersistenceTimeout) as exc:
            assembler.place(_request())
        assert exc.value.retryable is True

"""Order assembler: turns a checkout request into a placed, persisted Order.

Steps, all or nothing:
    1. Copy the shipping address and check every line quantity.
    2. Look up and price each line in request order. A missing product
       aborts the whole checkout.
    3. Sum the line totals into the order total.
    4. Authorize the (simulated) card payment.
    5. Build the Order and hand it to the order store in one write.

A failure in steps 1-4 happens before any Order exists, so no identity is
generated and nothing reaches the store. The assembler never retries.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError

from ordering.checkout.errors import CheckoutError, InvalidShippingAddress, PersistenceFailure, ProductNotFound
from ordering.checkout.lookup import Found, NotFound, ProductLookup
from ordering.checkout.payment import PaymentSimulator
from ordering.checkout.pricing import price_line, sum_totals, validate_quantity
from ordering.checkout.request import CheckoutRequest
from ordering.order.order import Order, OrderLine, ShippingAddress
from ordering.order.store import OrderStore

logger = structlog.get_logger(__name__)


class OrderAssembler:
    def __init__(
        self,
        product_lookup: ProductLookup,
        order_store: OrderStore,
        payment_simulator: PaymentSimulator | None = None,
        clock=None,
    ) -> None:
        self.product_lookup = product_lookup
        self.order_store = order_store
        self.payment_simulator = payment_simulator or PaymentSimulator()
        self.clock = clock or (lambda: datetime.now(UTC))

    def place(self, request: CheckoutRequest) -> Order:
        """Place an order for ``request`` and return it as persisted.

        Raises:
            InvalidShippingAddress: An address field is missing or too long.
            InvalidLineQuantity: A line quantity is not a positive integer.
            ProductNotFound: A line references a product the catalogue does
                not know.
            InvalidPaymentInput: The card input is malformed.
            InexactAmount: A line or order total would have to be rounded.
            PersistenceFailure: The store could not commit the order
                (PersistenceTimeout if it did not answer in time).
        """
        lines = tuple(request.lines)
        log = logger.bind(line_count=len(lines))
        log.info("Checkout started")

        try:
            shipping_address = ShippingAddress(**request.shipping_address.as_dict())
        except ValidationError as exc:
            log.warning("Checkout aborted, invalid shipping address", errors=exc.messages)
            raise InvalidShippingAddress(exc.messages) from exc
        for line in lines:
            validate_quantity(line.product_id, line.quantity)

        order_lines = []
        line_totals = []
        for position, line in enumerate(lines, start=1):
            match self.product_lookup.find(line.product_id):
                case NotFound(product_id=product_id):
                    log.warning("Checkout aborted, product not found", product_id=product_id, position=position)
                    raise ProductNotFound(product_id)
                case Found(product=product):
                    line_total = price_line(product, line.quantity)

            order_lines.append(
                OrderLine(
                    product_id=product.product_id,
                    position=position,
                    quantity=line.quantity,
                    unit_price=str(product.price),
                    line_total=str(line_total),
                )
            )
            line_totals.append(line_total)

        total = sum_totals(line_totals)
        payment = self.payment_simulator.authorize(request.card)

        order = Order.place(
            lines=order_lines,
            total_amount=total,
            shipping_address=shipping_address,
            payment=payment,
            placed_at=self.clock(),
        )

        try:
            persisted = self.order_store.save(order)
        except CheckoutError:
            raise
        except Exception as exc:
            log.error("Checkout aborted, order could not be persisted", error=str(exc))
            raise PersistenceFailure(f"Order could not be persisted: {exc}") from exc

        log.info(
            "Order placed",
            order_id=str(persisted.id),
            total_amount=persisted.total_amount,
            transaction_id=payment.transaction_id,
        )
        return persisted

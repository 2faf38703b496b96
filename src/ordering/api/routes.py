"""FastAPI routes for the Ordering domain: checkout and orders."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ordering.api.schemas import (
    AddressSchema,
    CheckoutRequestSchema,
    ErrorResponse,
    OrderLineResponse,
    OrderResponse,
    PaymentResponse,
)
from ordering.checkout.errors import (
    CheckoutError,
    InexactAmount,
    InvalidLineQuantity,
    InvalidPaymentInput,
    InvalidShippingAddress,
    PersistenceTimeout,
    ProductNotFound,
)
from ordering.checkout.payment import CardInput
from ordering.checkout.request import AddressInput, CheckoutRequest, LineRequest
from ordering.checkout.service import order_store, place_order

logger = structlog.get_logger(__name__)

_ERROR_STATUS = {
    ProductNotFound: 404,
    InvalidLineQuantity: 422,
    InvalidPaymentInput: 422,
    InvalidShippingAddress: 422,
    InexactAmount: 422,
    PersistenceTimeout: 503,
}


def _to_response(order) -> OrderResponse:
    address = order.shipping_address
    payment = order.payment
    return OrderResponse(
        order_id=str(order.id),
        status=order.status,
        placed_at=order.placed_at,
        total_amount=order.total_amount,
        shipping_address=AddressSchema(
            street=address.street,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        ),
        lines=[
            OrderLineResponse(
                position=line.position,
                product_id=str(line.product_id),
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
            for line in order.ordered_lines()
        ],
        payment=PaymentResponse(
            method=payment.method,
            status=payment.status,
            cardholder_name=payment.cardholder_name,
            card_last4=payment.card_last4,
            transaction_id=payment.transaction_id,
            paid_at=payment.paid_at,
        ),
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", status_code=201, response_model=OrderResponse)
def checkout(body: CheckoutRequestSchema) -> OrderResponse:
    """Place an order for the posted cart lines.

    Prices come from the catalogue at the moment of checkout; the request
    carries product ids and quantities only. Runs in the threadpool since
    the store blocks until the commit finishes or times out.
    """
    request = CheckoutRequest(
        lines=tuple(LineRequest(product_id=item.product_id, quantity=item.quantity) for item in body.items),
        shipping_address=AddressInput(**body.shipping_address.model_dump()),
        card=CardInput(
            cardholder_name=body.payment.cardholder_name,
            card_number=body.payment.card_number,
            expiry=body.payment.expiry,
            cvc=body.payment.cvc,
        ),
    )
    order = place_order(request)
    return _to_response(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str) -> OrderResponse:
    order = order_store().find_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return _to_response(order)


# ---------------------------------------------------------------------------
# Error rendering
# ---------------------------------------------------------------------------
async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    status = next((code for cls, code in _ERROR_STATUS.items() if isinstance(exc, cls)), 500)
    logger.warning(
        "Checkout request failed",
        path=request.url.path,
        error=type(exc).__name__,
        status=status,
    )
    body = ErrorResponse(
        message=exc.message,
        status=status,
        retryable=exc.retryable,
        timestamp=datetime.now(UTC),
    )
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CheckoutError, checkout_error_handler)

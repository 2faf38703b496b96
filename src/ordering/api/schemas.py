"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), kept apart from the
internal checkout request shapes. Money is always rendered as decimal
strings, never as JSON numbers.
"""

from datetime import datetime

from pydantic import BaseModel, field_validator


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


# ---------------------------------------------------------------------------
# Checkout Request Schemas
# ---------------------------------------------------------------------------
class CheckoutItemSchema(BaseModel):
    product_id: str
    quantity: int  # positivity is checked by checkout itself

    @field_validator("product_id", mode="before")
    @classmethod
    def product_id_as_text(cls, value):
        """Catalogue ids are text; numeric ids are accepted and stringified."""
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class CardPaymentSchema(BaseModel):
    cardholder_name: str
    card_number: str
    expiry: str | None = None
    cvc: str | None = None


class CheckoutRequestSchema(BaseModel):
    items: list[CheckoutItemSchema] = []
    shipping_address: AddressSchema
    payment: CardPaymentSchema

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": "1", "quantity": 2},
                        {"product_id": "2", "quantity": 1},
                    ],
                    "shipping_address": {
                        "street": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62701",
                        "country": "US",
                    },
                    "payment": {
                        "cardholder_name": "Jane Doe",
                        "card_number": "4111111111111234",
                        "expiry": "12/30",
                        "cvc": "123",
                    },
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderLineResponse(BaseModel):
    position: int
    product_id: str
    quantity: int
    unit_price: str
    line_total: str


class PaymentResponse(BaseModel):
    method: str
    status: str
    cardholder_name: str
    card_last4: str
    transaction_id: str
    paid_at: datetime


class OrderResponse(BaseModel):
    order_id: str
    status: str
    placed_at: datetime
    total_amount: str
    shipping_address: AddressSchema
    lines: list[OrderLineResponse]
    payment: PaymentResponse


class ErrorResponse(BaseModel):
    message: str
    status: int
    retryable: bool = False
    timestamp: datetime

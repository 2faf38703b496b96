"""Checkout request shapes. They live only for the duration of one checkout."""

from dataclasses import dataclass, field

from ordering.checkout.payment import CardInput


@dataclass(frozen=True)
class LineRequest:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class AddressInput:
    street: str
    city: str
    postal_code: str
    country: str
    state: str | None = None

    def as_dict(self) -> dict:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }


@dataclass(frozen=True)
class CheckoutRequest:
    shipping_address: AddressInput
    card: CardInput
    lines: tuple[LineRequest, ...] = field(default_factory=tuple)

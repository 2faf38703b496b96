"""Simulated card payment.

No gateway is called: every well-formed card input is recorded as a
successful CARD payment. Only the cardholder name, the last four characters
of the card number and a fresh transaction id are kept. The full card
number, expiry and CVC never leave this module.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from protean.exceptions import ValidationError

from ordering.checkout.errors import InvalidPaymentInput
from ordering.order.order import Payment, PaymentMethod, PaymentStatus


@dataclass(frozen=True)
class CardInput:
    """Card details as entered at checkout."""

    cardholder_name: str
    card_number: str = field(repr=False)
    expiry: str | None = field(default=None, repr=False)
    cvc: str | None = field(default=None, repr=False)


class PaymentSimulator:
    """Authorizes card payments without an external gateway."""

    def __init__(self, clock=None) -> None:
        self.clock = clock or (lambda: datetime.now(UTC))

    def authorize(self, card: CardInput) -> Payment:
        """Record a successful card payment for ``card``.

        Raises:
            InvalidPaymentInput: If the card number is missing or shorter
                than four characters, or the cardholder name is blank or longer
                than the order can record.
        """
        number = card.card_number
        if not isinstance(number, str) or len(number) < 4:
            raise InvalidPaymentInput("Card number must be at least 4 characters long")
        if not isinstance(card.cardholder_name, str) or not card.cardholder_name.strip():
            raise InvalidPaymentInput("Cardholder name is required")

        try:
            return Payment(
                method=PaymentMethod.CARD.value,
                status=PaymentStatus.SUCCESS.value,
                cardholder_name=card.cardholder_name,
                card_last4=number[-4:],
                transaction_id=str(uuid4()),
                paid_at=self.clock(),
            )
        except ValidationError as exc:
            fields = sorted(exc.messages) if isinstance(exc.messages, dict) else []
            raise InvalidPaymentInput(f"Payment details are invalid: {', '.join(fields) or exc.messages}") from exc

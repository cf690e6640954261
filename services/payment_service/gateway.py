"""Payment decision seam.

Checkout never talks to a real processor. ``PaymentGateway`` is the hook a
real integration would implement; ``DeterministicGateway`` is the built-in
stand-in, which declines exactly one reserved test card and approves
everything else.
"""
from typing import Optional, Protocol

from pydantic import BaseModel

from shared.config.settings import DECLINE_CARD_NUMBER

from .schemas import PaymentDetails


class PaymentDecision(BaseModel):
    approved: bool
    reason: Optional[str] = None


class PaymentGateway(Protocol):
    def decide(self, order_id: int, amount, details: Optional[PaymentDetails]) -> PaymentDecision:
        ...


class DeterministicGateway:
    def __init__(self, decline_card_number: str = DECLINE_CARD_NUMBER):
        self.decline_card_number = decline_card_number

    def decide(self, order_id: int, amount, details: Optional[PaymentDetails]) -> PaymentDecision:
        card_number = details.card_number if details else None
        if card_number == self.decline_card_number:
            return PaymentDecision(approved=False, reason="card_declined")
        return PaymentDecision(approved=True)


_default_gateway = DeterministicGateway()


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency; override it to plug in another gateway."""
    return _default_gateway

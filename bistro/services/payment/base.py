"""
Payment Service Abstract Base Class

Defines the interface contract for all payment gateway implementations.
Both MockPaymentService and StripePaymentService implement these methods,
so checkout behaves the same whichever one is active.

Design Pattern: Strategy Pattern
    - Runtime switching between the mock gateway and Stripe
    - Tests run against the mock without network access
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


def to_minor_units(amount: float) -> int:
    """
    Convert a dollar amount to cents, truncating any fraction of a cent.

    Example:
        >>> to_minor_units(19.999)
        1999
    """
    return int(amount * 100)


@dataclass
class PaymentIntentResult:
    """
    Standardized result of creating a payment intent.

    Attributes:
        payment_intent_id: Provider identifier (Stripe format: pi_xxx)
        client_secret: Secret the browser uses to confirm the card payment
        amount: Amount requested, in minor units (cents)
        currency: Currency code (e.g., "usd")
        status: Provider status of the new intent
    """
    payment_intent_id: str
    client_secret: str
    amount: int
    currency: str = "usd"
    status: Optional[str] = None


class BasePaymentService(ABC):
    """
    Abstract base class for payment gateways.

    Implementations raise ``UpstreamError`` when the provider rejects or
    fails a request; there are no retries.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the payment provider (e.g., "mock", "stripe")."""

    @abstractmethod
    async def create_payment_intent(self, price: float) -> PaymentIntentResult:
        """
        Create a card-payable intent for ``price`` dollars.

        Args:
            price: Checkout amount in dollars; converted with ``to_minor_units``

        Returns:
            PaymentIntentResult: Contains the client_secret for the frontend

        Raises:
            UpstreamError: The provider call failed
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment provider.

        Returns:
            bool: True if the provider is reachable and operational
        """

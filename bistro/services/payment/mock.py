"""
Mock Payment Service Implementation

Simulates Stripe payment intents without making real API calls.
Used in development mode (ENV_MODE=development) and by the test suite.

Behavior:
    - Optional simulated latency
    - Optional random rejections (failure_rate) raised as UpstreamError
    - Generates Stripe-like ids (pi_mock_xxx) and client secrets
"""

import asyncio
import logging
import random
import uuid

from bistro.core.exceptions import UpstreamError
from bistro.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
    to_minor_units,
)

logger = logging.getLogger(__name__)


class MockPaymentService(BasePaymentService):
    """
    Mock implementation of the payment gateway.

    Attributes:
        currency: Currency stamped on every intent
        failure_rate: Probability of a simulated provider failure (0.0-1.0)
        latency: Simulated response time in seconds

    Example:
        >>> service = MockPaymentService()
        >>> result = await service.create_payment_intent(29.99)
        >>> result.amount
        2999
    """

    def __init__(
        self,
        currency: str = "usd",
        failure_rate: float = 0.0,
        latency: float = 0.0,
    ):
        self.currency = currency
        self.failure_rate = failure_rate
        self.latency = latency
        self.intents: list[PaymentIntentResult] = []

        logger.info(
            f"MockPaymentService initialized "
            f"(failure_rate={failure_rate:.0%}, latency={latency}s)"
        )

    @property
    def provider_name(self) -> str:
        return "mock"

    def _generate_payment_intent_id(self) -> str:
        """Generate a Stripe-like payment intent ID."""
        return f"pi_mock_{uuid.uuid4().hex[:24]}"

    def _should_fail(self) -> bool:
        return random.random() < self.failure_rate

    async def create_payment_intent(self, price: float) -> PaymentIntentResult:
        """
        Simulate creating a payment intent.

        The client_secret is fake and will not work with Stripe.js.
        """
        if self.latency:
            await asyncio.sleep(self.latency)

        if self._should_fail():
            logger.debug("Mock: Payment intent rejected")
            raise UpstreamError("Payment processor unavailable")

        payment_intent_id = self._generate_payment_intent_id()
        result = PaymentIntentResult(
            payment_intent_id=payment_intent_id,
            client_secret=f"{payment_intent_id}_secret_mock",
            amount=to_minor_units(price),
            currency=self.currency,
            status="requires_payment_method",
        )
        self.intents.append(result)

        logger.debug(f"Mock: Created payment intent {payment_intent_id} ({result.amount} cents)")
        return result

    async def health_check(self) -> bool:
        """The mock gateway is always available."""
        return True

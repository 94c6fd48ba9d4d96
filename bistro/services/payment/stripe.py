"""
Stripe Payment Service Implementation

Production implementation using the official Stripe Python SDK.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - STRIPE_SECRET_KEY must be set in environment

Security Notes:
    - Never log client secrets
    - The SDK call is blocking, so it runs in the threadpool
"""

import logging

import stripe
from starlette.concurrency import run_in_threadpool

from bistro.core.config import get_settings
from bistro.core.exceptions import UpstreamError
from bistro.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
    to_minor_units,
)

logger = logging.getLogger(__name__)


class StripePaymentService(BasePaymentService):
    """
    Stripe payment gateway.

    Creates card-only PaymentIntents in the configured currency and hands
    the client_secret back to the browser, which confirms the payment with
    Stripe.js.
    """

    def __init__(self):
        """
        Initialize Stripe with API key from settings.

        Raises:
            ValueError: If STRIPE_SECRET_KEY is not configured
        """
        settings = get_settings()

        if not settings.stripe_secret_key:
            raise ValueError(
                "STRIPE_SECRET_KEY is required outside development mode. "
                "Set it in your .env file or environment variables."
            )

        stripe.api_key = settings.stripe_secret_key
        stripe.api_version = "2023-10-16"  # Pin API version for stability

        self._currency = settings.stripe_currency

        logger.info(f"StripePaymentService initialized (api_version={stripe.api_version})")

    @property
    def provider_name(self) -> str:
        return "stripe"

    async def create_payment_intent(self, price: float) -> PaymentIntentResult:
        amount = to_minor_units(price)

        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                amount=amount,
                currency=self._currency,
                payment_method_types=["card"],
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe: Failed to create PaymentIntent - {e}")
            raise UpstreamError(f"Payment processor error: {e.user_message or 'request failed'}")

        logger.info(f"Stripe: PaymentIntent created - {intent.id} - status={intent.status}")

        return PaymentIntentResult(
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency,
            status=intent.status,
        )

    async def health_check(self) -> bool:
        """Make a lightweight API call to verify credentials and connectivity."""
        try:
            await run_in_threadpool(stripe.Account.retrieve)
            return True
        except stripe.StripeError as e:
            logger.error(f"Stripe: Health check failed - {e}")
            return False

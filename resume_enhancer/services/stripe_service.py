"""
Stripe client for customers, payment intents, and webhook verification.
"""
import json
import logging
from typing import Dict, Optional
import stripe

from resume_enhancer.core.exceptions import BillingError, ConfigurationError, WebhookSignatureError

logger = logging.getLogger(__name__)


class StripeBillingClient:
    """
    Thin wrapper over the Stripe SDK.

    The API key is passed on every call instead of being set on the stripe
    module, so two clients with different keys never interfere.
    """

    def __init__(self, secret_key: Optional[str], webhook_secret: Optional[str] = None):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def _require_key(self) -> str:
        if not self.secret_key:
            raise ConfigurationError("Stripe not configured - STRIPE_SECRET_KEY required")
        return self.secret_key

    def create_customer(self, email: str, name: Optional[str] = None):
        """Create a Stripe customer for a profile."""
        params = {"email": email}
        if name:
            params["name"] = name

        try:
            customer = stripe.Customer.create(api_key=self._require_key(), **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating customer: {e}")
            raise BillingError(f"Failed to create customer: {e}") from e

        logger.info(f"Created Stripe customer: customer_id={customer.id}")
        return customer

    def create_payment_intent(
        self,
        amount: int,
        currency: str = "usd",
        customer_id: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        """
        Create a one-time payment intent.

        Args:
            amount: Amount in minor units
            currency: ISO currency code
            customer_id: Stripe customer to attach the payment to
            metadata: Key/value pairs echoed back in webhook events

        Returns:
            Stripe PaymentIntent object
        """
        params = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods": {"enabled": True},
        }
        if customer_id:
            params["customer"] = customer_id
        if metadata:
            params["metadata"] = metadata

        try:
            intent = stripe.PaymentIntent.create(api_key=self._require_key(), **params)
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent: {e}")
            raise BillingError(f"Failed to create payment intent: {e}") from e

        logger.info(f"Created payment intent: payment_intent_id={intent.id}, amount={amount} {currency}")
        return intent

    def verify_webhook(self, request_body: bytes, signature: str) -> dict:
        """
        Verify and parse a Stripe webhook event.

        Args:
            request_body: Raw request body bytes
            signature: Stripe-Signature header value

        Returns:
            Parsed event dictionary

        Raises:
            ConfigurationError: If no webhook secret is configured
            WebhookSignatureError: If the signature or payload is invalid
        """
        if not self.webhook_secret:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET not configured")

        try:
            payload = request_body.decode("utf-8") if isinstance(request_body, bytes) else request_body
        except UnicodeDecodeError as e:
            logger.error(f"Webhook payload is not valid UTF-8: {e}")
            raise WebhookSignatureError("Invalid webhook payload encoding") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload, signature, self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
        except stripe.SignatureVerificationError as e:
            logger.error(f"Webhook signature verification failed: {e}")
            raise WebhookSignatureError(f"Invalid signature: {e}") from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            logger.error(f"Invalid webhook payload: {e}")
            raise WebhookSignatureError(f"Invalid webhook payload: {e}") from e

        logger.info(f"Verified webhook event: {event.get('type')}, id={event.get('id')}")
        return event

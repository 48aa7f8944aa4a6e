"""
Typed view of the Stripe webhook events this service reacts to.

Stripe delivers a loosely shaped JSON envelope; it is parsed into one variant
per handled event type, with UnhandledEvent catching everything else so new
event types never break the endpoint.
"""
from typing import Dict, Optional, Union
from pydantic import BaseModel


class PaymentIntentObject(BaseModel):
    id: str
    amount: Optional[int] = None
    currency: Optional[str] = None
    customer: Optional[str] = None
    status: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None

    class Config:
        extra = "ignore"


class CustomerObject(BaseModel):
    id: str
    email: Optional[str] = None

    class Config:
        extra = "ignore"


class StripeEventBase(BaseModel):
    id: str
    type: str


class PaymentIntentSucceeded(StripeEventBase):
    payment_intent: PaymentIntentObject


class PaymentIntentFailed(StripeEventBase):
    payment_intent: PaymentIntentObject


class CustomerCreated(StripeEventBase):
    customer: CustomerObject


class UnhandledEvent(StripeEventBase):
    pass


StripeEvent = Union[PaymentIntentSucceeded, PaymentIntentFailed, CustomerCreated, UnhandledEvent]


def parse_stripe_event(payload: dict) -> StripeEvent:
    """Build the variant for a verified event payload."""
    event_id = payload.get("id", "")
    event_type = payload.get("type", "")
    data_object = (payload.get("data") or {}).get("object") or {}

    if event_type == "payment_intent.succeeded":
        return PaymentIntentSucceeded(
            id=event_id, type=event_type,
            payment_intent=PaymentIntentObject.model_validate(data_object),
        )
    if event_type == "payment_intent.payment_failed":
        return PaymentIntentFailed(
            id=event_id, type=event_type,
            payment_intent=PaymentIntentObject.model_validate(data_object),
        )
    if event_type == "customer.created":
        return CustomerCreated(
            id=event_id, type=event_type,
            customer=CustomerObject.model_validate(data_object),
        )
    return UnhandledEvent(id=event_id, type=event_type)

"""
Stripe webhook event handlers.

Handles payment_intent.succeeded, payment_intent.payment_failed and
customer.created. Everything else is acknowledged and ignored.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy.orm import Session

from resume_enhancer.core.pricing import get_plan
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.payment import Payment, PAYMENT_PENDING, PAYMENT_SUCCEEDED, PAYMENT_FAILED
from resume_enhancer.schemas.stripe_events import (
    StripeEvent,
    PaymentIntentSucceeded,
    PaymentIntentFailed,
    CustomerCreated,
)

logger = logging.getLogger(__name__)


def _transition_payment(db: Session, payment_intent_id: str, new_status: str) -> Optional[Payment]:
    """Move a pending payment to its final status. Settled payments are left alone."""
    payment = db.query(Payment).filter(
        Payment.stripe_payment_intent_id == payment_intent_id
    ).first()

    if not payment:
        logger.warning(f"No payment row for payment_intent_id={payment_intent_id}")
        return None

    if payment.status != PAYMENT_PENDING:
        logger.warning(
            f"Payment already settled: payment_intent_id={payment_intent_id}, "
            f"status={payment.status}, ignored transition to {new_status}"
        )
        return payment

    payment.status = new_status
    return payment


def handle_payment_intent_succeeded(event: PaymentIntentSucceeded, db: Session, now: Optional[datetime] = None) -> None:
    """
    Handle payment_intent.succeeded webhook event.

    Marks the payment succeeded and grants the plan's entitlements. The
    subscription window always starts at processing time.
    """
    intent = event.payment_intent
    metadata = intent.metadata or {}
    user_id = metadata.get("user_id")
    subscription_type = metadata.get("subscription_type")

    if not user_id or not subscription_type:
        logger.error(f"payment_intent.succeeded: missing user_id or subscription_type in metadata, payment_intent_id={intent.id}")
        return

    plan = get_plan(subscription_type)
    if not plan:
        logger.error(f"payment_intent.succeeded: unknown subscription_type={subscription_type}, payment_intent_id={intent.id}")
        return

    _transition_payment(db, intent.id, PAYMENT_SUCCEEDED)

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        logger.warning(f"payment_intent.succeeded: profile not found for user_id={user_id}")
        db.commit()
        return

    started_at = now or datetime.now(timezone.utc)
    profile.subscription_type = plan.key
    profile.subscription_status = True
    profile.subscription_started_at = started_at
    profile.subscription_expires_at = started_at + timedelta(days=plan.duration_days)
    profile.resumes_limit = plan.features.resumes
    profile.ats_analyses_limit = plan.features.ats_analyses
    if intent.customer:
        profile.stripe_customer_id = intent.customer

    db.commit()

    logger.info(
        f"Payment succeeded: user_id={user_id}, plan={plan.key}, "
        f"expires_at={profile.subscription_expires_at.isoformat()}"
    )


def handle_payment_intent_failed(event: PaymentIntentFailed, db: Session) -> None:
    """
    Handle payment_intent.payment_failed webhook event.

    Only the payment row changes; the profile keeps its current entitlements.
    """
    _transition_payment(db, event.payment_intent.id, PAYMENT_FAILED)
    db.commit()

    logger.warning(f"Payment failed: payment_intent_id={event.payment_intent.id}")


def handle_customer_created(event: CustomerCreated, db: Session) -> None:
    logger.info(f"Customer created: customer_id={event.customer.id}")


def dispatch_event(event: StripeEvent, db: Session) -> None:
    """Route a parsed event to its handler."""
    if isinstance(event, PaymentIntentSucceeded):
        handle_payment_intent_succeeded(event, db)
    elif isinstance(event, PaymentIntentFailed):
        handle_payment_intent_failed(event, db)
    elif isinstance(event, CustomerCreated):
        handle_customer_created(event, db)
    else:
        logger.info(f"Unhandled event type: {event.type}")

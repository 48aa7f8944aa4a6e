"""
Billing service for one-time plan purchases.

Creates Stripe customers and payment intents and mirrors every intent in the
payments table so webhook events can be matched back to it.
"""
import logging
from sqlalchemy.orm import Session

from resume_enhancer.core.pricing import PricingPlan
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.payment import Payment, PAYMENT_PENDING
from resume_enhancer.services.stripe_service import StripeBillingClient

logger = logging.getLogger(__name__)


def get_or_create_customer(profile: Profile, billing: StripeBillingClient, db: Session) -> str:
    """
    Return the profile's Stripe customer id, creating the customer on first use.

    Args:
        profile: Purchasing profile
        billing: Stripe client
        db: Database session

    Returns:
        Stripe customer id
    """
    if profile.stripe_customer_id:
        return profile.stripe_customer_id

    customer = billing.create_customer(profile.email, profile.full_name or None)
    profile.stripe_customer_id = customer.id
    db.commit()

    logger.info(f"Linked Stripe customer: user_id={profile.id}, customer_id={customer.id}")
    return customer.id


def create_plan_payment_intent(
    profile: Profile,
    plan: PricingPlan,
    billing: StripeBillingClient,
    db: Session,
):
    """
    Create a payment intent for a plan and record it as a pending payment.

    Args:
        profile: Purchasing profile
        plan: Plan being bought
        billing: Stripe client
        db: Database session

    Returns:
        Stripe PaymentIntent object
    """
    customer_id = get_or_create_customer(profile, billing, db)

    intent = billing.create_payment_intent(
        plan.price,
        plan.currency,
        customer_id,
        {
            "user_id": str(profile.id),
            "subscription_type": plan.key,
            "plan_name": plan.name,
        },
    )

    payment = Payment(
        user_id=profile.id,
        stripe_payment_intent_id=intent.id,
        stripe_customer_id=customer_id,
        subscription_type=plan.key,
        amount=plan.price,
        currency=plan.currency,
        status=PAYMENT_PENDING,
    )
    db.add(payment)
    db.commit()

    logger.info(f"Created pending payment: user_id={profile.id}, plan={plan.key}, payment_intent_id={intent.id}")
    return intent

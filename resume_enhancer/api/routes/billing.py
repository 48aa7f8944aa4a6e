"""
Billing API routes for one-time plan purchases.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from resume_enhancer.api.dependencies import get_billing_client
from resume_enhancer.core import config
from resume_enhancer.core.exceptions import AppError
from resume_enhancer.core.pricing import PRICING_PLANS, format_price, get_plan
from resume_enhancer.db.session import get_db
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.schemas.billing import (
    CreatePaymentIntentRequest,
    CreatePaymentIntentResponse,
    PlanFeaturesResponse,
    PricingPlanResponse,
    PricingPlansResponse,
)
from resume_enhancer.services.billing_service import create_plan_payment_intent
from resume_enhancer.services.stripe_service import StripeBillingClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Billing"])


@router.post("/create-payment-intent", response_model=CreatePaymentIntentResponse, response_model_by_alias=True)
def create_payment_intent(
    request: CreatePaymentIntentRequest,
    db: Session = Depends(get_db),
    billing: StripeBillingClient = Depends(get_billing_client),
):
    """
    Start a plan purchase.

    Returns the client secret Stripe.js needs to confirm the payment. The
    purchase is recorded as a pending payment until the webhook settles it.
    """
    if not request.plan or not request.user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing plan or userId")

    plan = get_plan(request.plan)
    if not plan:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

    profile = db.query(Profile).filter(Profile.id == request.user_id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    try:
        intent = create_plan_payment_intent(profile, plan, billing, db)
    except AppError as e:
        db.rollback()
        logger.error(f"Error creating payment intent: user_id={profile.id}, plan={plan.key}, error={e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create payment intent",
        )

    return CreatePaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
    )


@router.get("/pricing-plans", response_model=PricingPlansResponse, response_model_by_alias=True)
def list_pricing_plans():
    plans = [
        PricingPlanResponse(
            key=plan.key,
            name=plan.name,
            price=plan.price,
            currency=plan.currency,
            display_price=format_price(plan.price, plan.currency),
            duration_days=plan.duration_days,
            features=PlanFeaturesResponse(
                resumes=plan.features.resumes,
                ats_analyses=plan.features.ats_analyses,
                edit_enabled=plan.features.edit_enabled,
            ),
        )
        for plan in PRICING_PLANS.values()
    ]
    return PricingPlansResponse(plans=plans, publishable_key=config.STRIPE_PUBLISHABLE_KEY)

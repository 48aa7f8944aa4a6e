"""
Stripe webhook endpoint.

The signature is checked against the raw body before anything touches the
database.
"""
import logging
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from resume_enhancer.api.dependencies import get_billing_client
from resume_enhancer.core.exceptions import WebhookSignatureError
from resume_enhancer.db.session import get_db
from resume_enhancer.schemas.billing import WebhookAck
from resume_enhancer.schemas.stripe_events import parse_stripe_event
from resume_enhancer.services.stripe_service import StripeBillingClient
from resume_enhancer.services.webhook_handlers import dispatch_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Billing Webhook"])


@router.post("/stripe", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    billing: StripeBillingClient = Depends(get_billing_client),
    db: Session = Depends(get_db),
):
    if not billing.webhook_secret:
        logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Stripe not configured")

    if not stripe_signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No signature")

    payload = await request.body()

    try:
        raw_event = billing.verify_webhook(payload, stripe_signature)
    except WebhookSignatureError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    try:
        event = parse_stripe_event(raw_event)
        dispatch_event(event, db)
    except Exception as e:
        db.rollback()
        logger.error(f"Webhook processing failed: event_id={raw_event.get('id')}, type={raw_event.get('type')}, error={e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook processing failed")

    return WebhookAck()

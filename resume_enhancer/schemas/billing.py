"""
Pydantic schemas for billing endpoints.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class CreatePaymentIntentRequest(BaseModel):
    """Request schema for creating a payment intent.

    Fields are optional so missing values surface as the API's own 400 error
    rather than a validation error.
    """
    plan: Optional[str] = Field(None, description="Plan key, e.g. 'job_hunt_2w'")
    user_id: Optional[str] = Field(None, alias="userId", description="Profile id of the purchaser")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "plan": "job_hunt_2w",
                "userId": "5b0b6a54-1f7e-4f7e-9d7e-8f2d0b1c2a3b"
            }
        }


class CreatePaymentIntentResponse(BaseModel):
    """Response schema for payment intent creation."""
    client_secret: str = Field(..., alias="clientSecret", description="Secret used by Stripe.js to confirm the payment")
    payment_intent_id: str = Field(..., alias="paymentIntentId", description="Stripe payment intent ID")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "clientSecret": "pi_3N..._secret_...",
                "paymentIntentId": "pi_3N..."
            }
        }


class PlanFeaturesResponse(BaseModel):
    resumes: int
    ats_analyses: int
    edit_enabled: bool


class PricingPlanResponse(BaseModel):
    """A purchasable plan as shown on the pricing page."""
    key: str
    name: str
    price: int = Field(..., description="Price in minor units")
    currency: str
    display_price: str = Field(..., alias="displayPrice")
    duration_days: int = Field(..., alias="durationDays")
    features: PlanFeaturesResponse

    class Config:
        populate_by_name = True


class PricingPlansResponse(BaseModel):
    plans: List[PricingPlanResponse]
    publishable_key: Optional[str] = Field(None, alias="publishableKey")

    class Config:
        populate_by_name = True


class WebhookAck(BaseModel):
    received: bool = True


class ErrorResponse(BaseModel):
    """Flat error body returned by every endpoint."""
    error: str = Field(..., description="Error message")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "Invalid plan"
            }
        }

import uuid
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from resume_enhancer.db.base import Base
from resume_enhancer.core.pricing import FREE_TIER_LIMITS


class Profile(Base):
    """
    User identity projection kept alongside the hosted auth user.

    Created on signup, mutated by the Stripe webhook on successful payment.
    """
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, index=True, nullable=False)
    full_name = Column(String, nullable=True)

    stripe_customer_id = Column(String, nullable=True, index=True)
    subscription_type = Column(String, nullable=False, default="free")
    subscription_status = Column(Boolean, nullable=False, default=False)
    subscription_started_at = Column(DateTime(timezone=True), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Entitlements
    resumes_limit = Column(Integer, nullable=False, default=FREE_TIER_LIMITS.resumes)
    resumes_used = Column(Integer, nullable=False, default=0)
    ats_analyses_limit = Column(Integer, nullable=False, default=FREE_TIER_LIMITS.ats_analyses)
    ats_analyses_used = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Profile(id={self.id}, subscription_type='{self.subscription_type}')>"

"""
Pricing plans and entitlement limits.

Single source of truth for what each one-time purchase costs and which
usage limits it grants. Prices are in the currency's minor unit (cents).
"""
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class PlanFeatures:
    resumes: int
    ats_analyses: int
    edit_enabled: bool = True


@dataclass(frozen=True)
class PricingPlan:
    key: str
    name: str
    price: int
    currency: str
    features: PlanFeatures
    duration_days: int
    interval: Optional[str] = None  # one-time payment


PRICING_PLANS: Dict[str, PricingPlan] = {
    "job_hunt_2w": PricingPlan(
        key="job_hunt_2w",
        name="2-Week Job Hunt",
        price=999,
        currency="usd",
        features=PlanFeatures(resumes=10, ats_analyses=25),
        duration_days=14,
    ),
    "premium_1m": PricingPlan(
        key="premium_1m",
        name="1-Month Premium",
        price=1999,
        currency="usd",
        features=PlanFeatures(resumes=25, ats_analyses=50),
        duration_days=30,
    ),
    "job_seeker_3m": PricingPlan(
        key="job_seeker_3m",
        name="3-Month Job Seeker",
        price=4999,  # 17% discount
        currency="usd",
        features=PlanFeatures(resumes=75, ats_analyses=150),
        duration_days=90,
    ),
}

# Limits every new profile starts with
FREE_TIER_LIMITS = PlanFeatures(resumes=1, ats_analyses=5, edit_enabled=False)

CURRENCY_SYMBOLS = {"usd": "$", "eur": "€", "gbp": "£"}


def get_plan(plan_key: Optional[str]) -> Optional[PricingPlan]:
    """Return the plan for a key, or None when the key is unknown."""
    if not plan_key:
        return None
    return PRICING_PLANS.get(plan_key)


def format_price(price: int, currency: str = "usd") -> str:
    """Format a minor-unit amount for display, e.g. 999 -> "$9.99"."""
    amount = f"{price / 100:,.2f}"
    symbol = CURRENCY_SYMBOLS.get(currency.lower())
    if symbol:
        return f"{symbol}{amount}"
    return f"{amount} {currency.upper()}"

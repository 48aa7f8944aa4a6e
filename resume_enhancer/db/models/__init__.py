"""
Database models module.

Imports every model so they are registered with Base.metadata before table creation.
"""
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.payment import Payment
from resume_enhancer.db.models.resume import Resume

__all__ = [
    "Profile",
    "Payment",
    "Resume",
]

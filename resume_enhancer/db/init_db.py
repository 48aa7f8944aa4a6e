"""
Create tables for local development.

In production the profiles, payments and resumes tables are owned by the
hosted Supabase database; this is only used against SQLite or a scratch
Postgres instance.
"""
import logging

from resume_enhancer.db.session import engine
from resume_enhancer.db.base import Base
from resume_enhancer.db import models  # noqa: F401  registers tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))

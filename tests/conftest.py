"""
Shared fixtures: in-memory database, auth tokens and fakes for the external
clients (Stripe, Supabase storage, Playwright, OpenAI).
"""
import os
import time
from types import SimpleNamespace

# Must be set before the app reads its config
os.environ["APP_ENV"] = "test"
os.environ["SUPABASE_URL"] = "https://project.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_PUBLISHABLE_KEY"] = "pk_test_123"
os.environ.pop("GOOGLE_PROCESSOR_ID", None)

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from resume_enhancer.main import app
from resume_enhancer.db.base import Base
from resume_enhancer.db.session import get_db
from resume_enhancer.db.models.profile import Profile
from resume_enhancer.db.models.resume import Resume
from resume_enhancer.core.exceptions import StorageError
from resume_enhancer.core.rate_limit import rate_limit_store

JWT_SECRET = "test-jwt-secret"

# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db
    rate_limit_store.clear()
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


def make_token(user_id: str, email: str = "test@example.com", secret: str = JWT_SECRET) -> str:
    """Access token shaped like the ones Supabase issues."""
    now = int(time.time())
    return jwt.encode(
        {"sub": user_id, "email": email, "aud": "authenticated", "role": "authenticated", "iat": now, "exp": now + 3600},
        secret,
        algorithm="HS256",
    )


@pytest.fixture
def profile(db_session):
    """Create a free-tier profile."""
    profile = Profile(email="test@example.com", full_name="Test User")
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def other_profile(db_session):
    profile = Profile(email="other@example.com", full_name="Other User")
    db_session.add(profile)
    db_session.commit()
    db_session.refresh(profile)
    return profile


@pytest.fixture
def auth_headers(profile):
    return {"Authorization": f"Bearer {make_token(profile.id)}"}


@pytest.fixture
def make_resume(db_session):
    def _make_resume(user_id, **fields):
        resume = Resume(user_id=user_id, **fields)
        db_session.add(resume)
        db_session.commit()
        db_session.refresh(resume)
        return resume
    return _make_resume


class FakeBillingClient:
    """Stands in for StripeBillingClient; records every call."""

    def __init__(self, webhook_secret=None, fail=None):
        self.webhook_secret = webhook_secret
        self.fail = fail
        self.customers = []
        self.intents = []

    def create_customer(self, email, name=None):
        if self.fail:
            raise self.fail
        self.customers.append({"email": email, "name": name})
        return SimpleNamespace(id=f"cus_test_{len(self.customers)}")

    def create_payment_intent(self, amount, currency="usd", customer_id=None, metadata=None):
        if self.fail:
            raise self.fail
        intent_id = f"pi_test_{len(self.intents) + 1}"
        self.intents.append({
            "id": intent_id,
            "amount": amount,
            "currency": currency,
            "customer": customer_id,
            "metadata": metadata,
        })
        return SimpleNamespace(id=intent_id, client_secret=f"{intent_id}_secret_abc")


class FakeStorage:
    """In-memory stand-in for SupabaseService."""

    def __init__(self, files=None, fail_upload=False):
        self.files = dict(files or {})
        self.uploads = []
        self.fail_upload = fail_upload
        self.exchanged_codes = []

    def upload(self, path, content, content_type, upsert=True):
        if self.fail_upload:
            raise StorageError(f"Failed to upload {path}")
        self.uploads.append({"path": path, "content_type": content_type, "upsert": upsert})
        self.files[path] = content
        return path

    def download(self, path):
        if path not in self.files:
            raise StorageError(f"Failed to download {path}")
        return self.files[path]

    def create_signed_url(self, path, expires_in=3600):
        return f"https://project.supabase.co/storage/v1/object/sign/resumes/{path}?token=signed&expires={expires_in}"

    def exchange_code_for_session(self, code):
        self.exchanged_codes.append(code)


class FakeRenderer:
    def __init__(self, pdf_bytes=b"%PDF-1.4 fake", error=None):
        self.pdf_bytes = pdf_bytes
        self.error = error
        self.rendered = []

    async def render(self, html):
        self.rendered.append(html)
        if self.error:
            raise self.error
        return self.pdf_bytes


@pytest.fixture
def storage():
    fake = FakeStorage()
    from resume_enhancer.api.dependencies import get_supabase_service
    app.dependency_overrides[get_supabase_service] = lambda: fake
    return fake


@pytest.fixture(scope="session")
def rsa_key():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def credentials(rsa_key):
    """Google service-account key file contents."""
    return {
        "type": "service_account",
        "project_id": "resume-project",
        "private_key_id": "key-1",
        "private_key": rsa_key[0],
        "client_email": "extractor@resume-project.iam.gserviceaccount.com",
    }

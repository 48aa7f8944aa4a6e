import os

from dotenv import load_dotenv

load_dotenv()

# ✅ App
APP_ENV = os.getenv("APP_ENV", "development")
APP_URL = os.getenv("APP_URL", "http://localhost:3000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", f"{APP_URL},http://127.0.0.1:3000").split(",")
    if origin.strip()
]

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./resume_enhancer.db")

# ✅ Supabase (auth + storage)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_STORAGE_BUCKET = os.getenv("SUPABASE_STORAGE_BUCKET", "resumes")

# ✅ Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

# ✅ Google Document AI
GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "google-credentials.json")
GOOGLE_PROCESSOR_ID = os.getenv("GOOGLE_PROCESSOR_ID")
GOOGLE_PROCESSOR_LOCATION = os.getenv("GOOGLE_PROCESSOR_LOCATION", "us")

# ✅ OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

REQUIRED_ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "SUPABASE_JWT_SECRET",
]


def is_production() -> bool:
    return APP_ENV == "production"


def validate_environment() -> list[str]:
    """Return the names of required environment variables that are not set."""
    return [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]

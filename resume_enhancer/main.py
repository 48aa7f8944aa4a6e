import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from resume_enhancer.core import config
from resume_enhancer.core.config import validate_environment
from resume_enhancer.core.edge_security import EdgeSecurityMiddleware
from resume_enhancer.core.exceptions import ConfigurationError
from resume_enhancer.core.logging_config import sanitize_log_data, setup_logging
from resume_enhancer.db.init_db import init_db

# ✅ Import All API Routes
from resume_enhancer.api.routes import ats, auth, billing, billing_webhook, health, resume

logger = logging.getLogger(__name__)


def integration_summary() -> dict:
    return {
        "database_url": config.DATABASE_URL,
        "supabase_url": config.SUPABASE_URL,
        "stripe_secret_key": bool(config.STRIPE_SECRET_KEY),
        "stripe_webhook": bool(config.STRIPE_WEBHOOK_SECRET),
        "document_ai_processor": config.GOOGLE_PROCESSOR_ID,
        "openai_model": config.OPENAI_MODEL if config.OPENAI_API_KEY else None,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)

    missing = validate_environment()
    if missing:
        message = f"Missing required environment variables: {', '.join(missing)}"
        if config.is_production():
            raise ConfigurationError(message)
        logger.error(message)

    logger.info(f"Resume Enhancer API starting (env={config.APP_ENV})")
    logger.info(f"Integrations: {sanitize_log_data(integration_summary())}")

    # Local SQLite gets its tables created; hosted Postgres is managed by Supabase
    if config.DATABASE_URL.startswith("sqlite"):
        init_db()

    yield
    logger.info("Resume Enhancer API shutting down")


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="Resume Enhancer API", version="1.0.0", lifespan=lifespan)

# ✅ CORS: ONLY ALLOW THE CONFIGURED FRONTENDS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Stripe-Signature"],
)

# Added last so it runs first
app.add_middleware(EdgeSecurityMiddleware, production=config.is_production())


# ============================================
# ✅ ERROR BODIES: {"error": "<message>"}
# ============================================

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(billing.router)
app.include_router(billing_webhook.router)
app.include_router(resume.router)
app.include_router(ats.router)


@app.get("/")
def root():
    return {"message": "Resume Enhancer API is running"}

from contextlib import asynccontextmanager
from dotenv import load_dotenv
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_api.api.routers import api_router
from portfolio_api.contact.rate_limit import create_rate_limiter
from portfolio_api.contact.service import create_contact_service
from portfolio_api.core.config import settings
from portfolio_api.core.errors import METHOD_NOT_ALLOWED_MESSAGE, NOT_FOUND_MESSAGE
from portfolio_api.core.logging_config import configure_logging
from portfolio_api.core.sentry import init_sentry
from portfolio_api.mail.transport import create_mail_transport
from portfolio_api.middleware import (
    OriginPolicyMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
)


# Load environment variables
load_dotenv()

# Configure logging with request_id support
configure_logging()

logger = logging.getLogger(__name__)

init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    On startup, report which mail settings are present (never their values).
    On shutdown, give in-flight contact emails a grace period, then close the
    SMTP pool.
    """
    logger.info(
        "Mail configuration check: "
        f"has_email_user={bool(settings.EMAIL_USER)}, "
        f"has_email_pass={bool(settings.EMAIL_PASS)}, "
        f"has_contact_email={bool(settings.CONTACT_EMAIL)}"
    )
    if not settings.mail_configured:
        logger.warning("Mail is not fully configured - contact submissions will fail")

    logger.info(f"Environment: {settings.ENVIRONMENT}")
    yield

    logger.info("Shutting down server gracefully...")
    try:
        await app.state.contact_service.aclose(settings.SHUTDOWN_GRACE_SECONDS)
        await app.state.mail_transport.close()
        logger.info("Mail transport closed")
    except Exception:
        logger.exception("Error during shutdown")


def init_state(app: FastAPI) -> None:
    """Attach the mail transport, contact service and rate limiter to app.state."""
    app.state.mail_transport = create_mail_transport()
    app.state.contact_service = create_contact_service(app.state.mail_transport)
    app.state.contact_rate_limiter = create_rate_limiter()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    openapi_url="/openapi.json" if settings.is_local else None,
)

init_state(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Runs before CORS so disallowed origins never reach a route
app.add_middleware(OriginPolicyMiddleware, allowed_origins=settings.ALLOWED_ORIGINS)

app.add_middleware(SecurityHeadersMiddleware)

# Outermost, so every response (including 403s) carries X-Request-ID
app.add_middleware(RequestIDMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"message": ...}."""
    if exc.status_code == 404:
        message = NOT_FOUND_MESSAGE
    elif exc.status_code == 405:
        message = METHOD_NOT_ALLOWED_MESSAGE
    else:
        message = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}")
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "health": f"{settings.API_PREFIX}/health",
            "contact": f"{settings.API_PREFIX}/contact",
        },
    }

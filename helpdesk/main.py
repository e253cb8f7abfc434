"""FastAPI application entry point."""
import logging
import os

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text

from helpdesk.core.config import settings
from helpdesk.core.cors import CORS_EXEMPT_PREFIXES, ScopedCORSMiddleware
from helpdesk.db.session import engine

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logging.info("Sentry initialized for error tracking")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="Helpdesk Notifications API",
    description="Ticket email notifications and notification preferences for the helpdesk",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# CORS middleware - must be added before routers
# /functions/v1 is exempt: the notification function sets its own "*" headers
app.add_middleware(
    ScopedCORSMiddleware,
    exempt_prefixes=CORS_EXEMPT_PREFIXES,
    allow_origins=settings.cors_origins_list,
    allow_credentials=False,  # Bearer tokens, no cookies
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# ============================================================================
# Routers
# ============================================================================

from helpdesk.routers import internal, notifications, settings as settings_router

# Ticket notification function
app.include_router(notifications.router)
app.add_exception_handler(RequestValidationError, notifications.validation_error_handler)

# Notification preferences (user-scoped)
app.include_router(settings_router.router)

# Database webhooks (protected by INTERNAL_SECRET)
app.include_router(internal.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}


def main() -> None:
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")
    uvicorn.run("helpdesk.main:app", host=host, port=port)


if __name__ == "__main__":
    main()

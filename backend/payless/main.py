"""
Payless Reconciliation — FastAPI Application Entry Point

Aggregates all routers, configures middleware and logging, and builds the
process-wide SMS client on startup.
"""
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from payless.config import get_settings
from payless.database import init_db
from payless.log_config import configure_logging
from payless.routes import payment_router, refund_router, notification_router
from payless.schemas.schemas import HealthResponse
from payless.services.notification_service import SMSService

settings = get_settings()
logger = logging.getLogger(__name__)

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Operator API for mobile-money utility-token payments: payment lookup with "
        "token data, token SMS resend, and refund extraction by date range or by "
        "reconciling an uploaded provider statement."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup / Shutdown ──────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Configure logging, create tables and build the SMS client."""
    configure_logging()
    init_db()
    app.state.sms_service = SMSService.from_settings(settings)
    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} started (debug={settings.DEBUG})")


@app.on_event("shutdown")
async def on_shutdown():
    sms = getattr(app.state, "sms_service", None)
    if sms is not None:
        await sms.close()


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "latency_ms": duration,
            },
        )

    return response


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(payment_router)
app.include_router(refund_router)
app.include_router(notification_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def deep_health():
    """Detailed health check including dependency statuses."""
    from payless.database import SessionLocal
    db_ok = False
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
    finally:
        db.close()

    sms = getattr(app.state, "sms_service", None)
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "sms": "configured" if sms is not None and sms.is_configured else "unconfigured",
        "version": settings.APP_VERSION,
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
    }

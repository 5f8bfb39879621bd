"""
FastAPI Main Application
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime
import logging
import requests
import sys
import os

# Path setup
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core import (
    get_settings,
    CommissionError,
    DuplicateError,
    IneligibleItemError,
    InvalidInputError,
    InvalidStatusTransition,
    NotFoundError,
)
from app.api import health, auth, commission, consignor, admin, orders, storefront

# Logging - Create logs directory if it doesn't exist
log_handlers = [logging.StreamHandler(sys.stdout)]
try:
    os.makedirs('logs', exist_ok=True)
    log_handlers.append(logging.FileHandler('logs/app.log', encoding='utf-8'))
except (OSError, PermissionError):
    # read-only filesystem: stdout only
    pass

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=log_handlers
)
logger = logging.getLogger(__name__)

# FastAPI App
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## Dutch Thrift Consignment API

    Consignors submit items, admins review, price and list them, and
    orders track items through intake, pricing, listing, sale and payout.

    **Commission (sliding scale):**
    - Under €50: not eligible
    - €50 → 50%, €100 → 40%, €200 → 30%, linear in between
    - €500 and above: flat 20%
    - Store credit payouts: +10%

    **Item lifecycle:** pending → analyzing → approved → listed → sold → paid
    """,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ERROR MAPPING
# ============================================================================

def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message, **extra})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, str(exc))


@app.exception_handler(InvalidStatusTransition)
async def transition_handler(request: Request, exc: InvalidStatusTransition):
    return _error(status.HTTP_409_CONFLICT, str(exc), current_status=exc.current)


@app.exception_handler(DuplicateError)
async def duplicate_handler(request: Request, exc: DuplicateError):
    return _error(status.HTTP_409_CONFLICT, str(exc))


@app.exception_handler(IneligibleItemError)
async def ineligible_handler(request: Request, exc: IneligibleItemError):
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, reason=exc.reason)


@app.exception_handler(CommissionError)
async def commission_handler(request: Request, exc: CommissionError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc))


@app.exception_handler(requests.exceptions.RequestException)
async def upstream_handler(request: Request, exc: requests.exceptions.RequestException):
    logger.error(f"Upstream request failed on {request.url.path}: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, "Shipping provider request failed")


# Startup
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    try:
        from database import Base, engine
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database initialized")
    except Exception as e:
        logger.error(f"❌ Database initialization error: {e}", exc_info=True)
        raise

    if settings.admin_email and settings.admin_password:
        from database import session_scope
        from services.auth import ensure_admin

        with session_scope() as db:
            ensure_admin(db, settings.admin_email, settings.admin_password)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down...")


# Root
@app.get("/", tags=["Root"])
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health",
        "timestamp": datetime.utcnow()
    }


# Include routers
app.include_router(health.router)  # No auth required
app.include_router(commission.router)  # Public calculator
app.include_router(storefront.router)  # Public listings
app.include_router(auth.router)
app.include_router(consignor.router)
app.include_router(orders.router)
app.include_router(admin.router)
logger.info("✅ Routers registered")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

"""
Health Check Endpoint
"""
from fastapi import APIRouter
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.models import HealthResponse
from app.core.config import get_settings
from app.api.deps import get_shipping_client
from database.connection import engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check():
    """
    Database and shipping connector status
    """
    settings = get_settings()

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_connection = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_connection = "disconnected"

    shipping = get_shipping_client().test_connection()
    shipping_connection = "connected" if shipping['success'] else "disconnected"

    overall_status = "healthy" if db_connection == "connected" else "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(),
        database_connection=db_connection,
        shipping_connection=shipping_connection,
        version=settings.app_version
    )

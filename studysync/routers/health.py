"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from datetime import datetime, timezone
import logging

from studysync.database import get_db
from studysync.models.schemas import HealthCheckResponse
from studysync.services.gemini import GeminiService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with status of the database and the Gemini API.
        Gemini reports "unconfigured" when no API key is set; that alone does
        not degrade the service since CRUD and timers work without it.
    """
    # Check database connection
    db_status = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        db_status = "error"

    # Check Gemini connection
    gemini = GeminiService()
    if not gemini.api_key:
        gemini_status = "unconfigured"
    elif await gemini.check_health():
        gemini_status = "ok"
    else:
        gemini_status = "error"

    # Overall status
    overall_status = "healthy" if db_status == "ok" and gemini_status != "error" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        gemini=gemini_status,
        timestamp=datetime.now(timezone.utc),
    )

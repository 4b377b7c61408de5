"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from datetime import datetime, timezone
import asyncio
import io
import logging
import platform
import sys
import time

from app.config import settings
from app.database import get_db
from app.models.schemas import DependencyCheck, HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()

REQUIRED_CHECKS = ("database", "imaging", "pdf")


async def _check_database(db: AsyncSession) -> DependencyCheck:
    try:
        await db.execute(text("SELECT 1"))
        return DependencyCheck(status="ok")
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return DependencyCheck(status="error", error=str(e))


def _check_imaging() -> DependencyCheck:
    """Render a tiny PNG with Pillow."""
    try:
        import PIL
        from PIL import Image, ImageDraw

        image = Image.new("RGB", (16, 16), "white")
        ImageDraw.Draw(image).text((2, 2), "ok", fill="black")
        image.save(io.BytesIO(), format="PNG")
        return DependencyCheck(status="ok", version=PIL.__version__)
    except Exception as e:
        logger.error(f"Imaging health check failed: {e}")
        return DependencyCheck(status="error", error=str(e))


def _check_pdf() -> DependencyCheck:
    """Build a one-page PDF with reportlab."""
    try:
        import reportlab
        from reportlab.pdfgen import canvas

        pdf = canvas.Canvas(io.BytesIO())
        pdf.drawString(72, 72, "health")
        pdf.save()
        return DependencyCheck(status="ok", version=reportlab.Version)
    except Exception as e:
        logger.error(f"PDF health check failed: {e}")
        return DependencyCheck(status="error", error=str(e))


def _check_llm() -> DependencyCheck:
    # Informational only: a missing key does not degrade the service.
    if settings.llm_configured:
        return DependencyCheck(status="ok")
    return DependencyCheck(status="not_configured", error="OpenAI API key not configured")


@router.get("", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with database, imaging, PDF and LLM checks.
        Status is "healthy" when database, imaging and PDF are all ok.
    """
    started = time.perf_counter()

    checks = {
        "database": await _check_database(db),
        "imaging": await asyncio.to_thread(_check_imaging),
        "pdf": await asyncio.to_thread(_check_pdf),
        "llm": _check_llm(),
    }

    healthy = all(checks[name].status == "ok" for name in REQUIRED_CHECKS)
    elapsed_ms = (time.perf_counter() - started) * 1000

    return HealthCheckResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc),
        response_time=f"{elapsed_ms:.2f}ms",
        checks=checks,
        environment={
            "python_version": sys.version.split()[0],
            "platform": platform.platform(),
        },
    )

"""
Brand voice template endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.models.database_models import BrandVoiceTemplate
from app.models.schemas import BrandVoiceTemplateResponse, TemplateListEnvelope

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TemplateListEnvelope)
async def list_templates(db: AsyncSession = Depends(get_db)):
    """
    Public brand voice templates, most used first.

    Templates are shared by every user, so no identity is required.
    """
    result = await db.execute(
        select(BrandVoiceTemplate)
        .where(BrandVoiceTemplate.is_public.is_(True))
        .order_by(BrandVoiceTemplate.usage_count.desc(), BrandVoiceTemplate.name)
    )
    templates = result.scalars().all()
    return TemplateListEnvelope(
        templates=[BrandVoiceTemplateResponse.model_validate(t) for t in templates]
    )

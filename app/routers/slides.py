"""
Slide endpoints. Ownership is checked through the slide's project.

Route summary
-------------
PUT    /api/slides/{id}    - update content/tone/title
DELETE /api/slides/{id}    - delete one slide
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies.auth import get_current_user_id
from app.models.database_models import CarouselProject, Slide
from app.models.schemas import SlideEnvelope, SlideResponse, SlideUpdateRequest, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_owned_slide(db: AsyncSession, slide_id: str, user_id: str) -> Slide:
    result = await db.execute(
        select(Slide)
        .join(CarouselProject, Slide.project_id == CarouselProject.id)
        .where(Slide.id == slide_id, CarouselProject.user_id == user_id)
    )
    slide = result.scalar_one_or_none()
    if slide is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Slide not found")
    return slide


@router.put("/{slide_id}", response_model=SlideEnvelope)
async def update_slide(
    slide_id: str,
    body: SlideUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SlideEnvelope:
    """Replace a slide's content; tone and title change only when given."""
    if body.content is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Content is required")

    slide = await _get_owned_slide(db, slide_id, user_id)
    slide.content = body.content
    slide.char_count = len(body.content)
    if body.tone is not None:
        slide.tone = body.tone
    if body.title is not None:
        slide.title = body.title
    await db.flush()

    logger.info("Updated slide id=%s (%d chars)", slide.id, slide.char_count)
    return SlideEnvelope(slide=SlideResponse.model_validate(slide))


@router.delete("/{slide_id}", response_model=SuccessResponse)
async def delete_slide(
    slide_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    slide = await _get_owned_slide(db, slide_id, user_id)
    await db.delete(slide)
    await db.flush()

    logger.info("Deleted slide id=%s", slide_id)
    return SuccessResponse(success=True)

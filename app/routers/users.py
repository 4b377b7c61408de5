"""
User settings and writing statistics.

Route summary
-------------
GET /api/user/settings    - stored settings, or defaults when none saved
PUT /api/user/settings    - upsert preferences and/or notification settings
GET /api/user/stats       - writing score plus document/project totals
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.dependencies.auth import get_current_user_id, get_or_create_user
from app.models.database_models import CarouselProject, Document, User, UserSettings
from app.models.schemas import (
    UserSettingsEnvelope,
    UserSettingsResponse,
    UserSettingsUpdateRequest,
    UserStatsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_PREFERENCES: Dict[str, Any] = {
    "theme": "light",
    "language": "en",
    "auto_save": True,
    "spell_check": True,
}

DEFAULT_NOTIFICATION_SETTINGS: Dict[str, Any] = {
    "email_notifications": True,
    "push_notifications": False,
    "weekly_reports": True,
    "carousel_completion": True,
    "document_processing": True,
    "system_updates": False,
}

STATS_RECENT_DOCUMENTS = 10


def calculate_writing_score(word_counts) -> int:
    """
    Score 0..100 from the word counts of recent documents.

    Average length contributes up to 60 points per 100 words; writing at
    least five documents adds a 20-point consistency bonus (4 per document
    below that).
    """
    counts = list(word_counts)
    if not counts:
        return 0
    avg_words = sum(c or 0 for c in counts) / len(counts)
    bonus = 20 if len(counts) >= 5 else len(counts) * 4
    # half-up rounding
    return min(100, int(avg_words / 100 * 60 + bonus + 0.5))


async def _get_settings_row(db: AsyncSession, user_id: str):
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    return result.scalar_one_or_none()


@router.get("/settings", response_model=UserSettingsEnvelope)
async def get_user_settings(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserSettingsEnvelope:
    row = await _get_settings_row(db, user_id)
    if row is None:
        return UserSettingsEnvelope(
            settings=UserSettingsResponse(
                preferences=copy.deepcopy(DEFAULT_PREFERENCES),
                notification_settings=copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS),
            )
        )
    return UserSettingsEnvelope(settings=UserSettingsResponse.model_validate(row))


@router.put("/settings", response_model=UserSettingsEnvelope)
async def update_user_settings(
    body: UserSettingsUpdateRequest,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
) -> UserSettingsEnvelope:
    """Given blobs replace the stored ones; a first save fills the other with defaults."""
    if body.preferences is None and body.notification_settings is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one of preferences or notification_settings is required",
        )

    row = await _get_settings_row(db, user.id)
    if row is None:
        row = UserSettings(
            user_id=user.id,
            preferences=(
                body.preferences if body.preferences is not None else copy.deepcopy(DEFAULT_PREFERENCES)
            ),
            notification_settings=(
                body.notification_settings
                if body.notification_settings is not None
                else copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS)
            ),
        )
        db.add(row)
        logger.info("Created settings for user=%s", user.id)
    else:
        if body.preferences is not None:
            row.preferences = body.preferences
        if body.notification_settings is not None:
            row.notification_settings = body.notification_settings
        logger.info("Updated settings for user=%s", user.id)

    await db.flush()
    return UserSettingsEnvelope(settings=UserSettingsResponse.model_validate(row))


@router.get("/stats", response_model=UserStatsResponse)
async def get_user_stats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserStatsResponse:
    recent = await db.execute(
        select(Document.word_count)
        .where(Document.user_id == user_id)
        .order_by(Document.updated_at.desc())
        .limit(STATS_RECENT_DOCUMENTS)
    )
    totals = await db.execute(
        select(func.count(Document.id), func.coalesce(func.sum(Document.word_count), 0))
        .where(Document.user_id == user_id)
    )
    document_count, total_words = totals.one()
    project_count = await db.scalar(
        select(func.count(CarouselProject.id)).where(CarouselProject.user_id == user_id)
    )

    return UserStatsResponse(
        writing_score=calculate_writing_score(recent.scalars().all()),
        document_count=document_count or 0,
        project_count=project_count or 0,
        total_words=int(total_words or 0),
    )

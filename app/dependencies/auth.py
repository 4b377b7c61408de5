"""
Authentication dependencies for FastAPI routes.

Extracts user identity from the X-User-Id header (set by the frontend after
the identity provider has signed the user in). When ALLOW_DEMO_USER is
enabled, requests without the header act as the shared demo user; otherwise
they are rejected with 401. Every data route goes through these
dependencies so the demo behaviour is the same everywhere.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.database import get_db
from app.models.database_models import CarouselProject, PlanType, User

logger = logging.getLogger(__name__)


async def get_current_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
) -> str:
    """Extract the authenticated user ID from the request header. Raises 401 if missing."""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()

    if settings.ALLOW_DEMO_USER:
        return settings.DEMO_USER_ID

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
    )


async def get_or_create_user(
    user_id: str = Depends(get_current_user_id),
    x_user_email: Optional[str] = Header(None, alias="X-User-Email"),
    x_user_name: Optional[str] = Header(None, alias="X-User-Name"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Ensure the user exists in the local users table. Creates if needed."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        is_demo = user_id == settings.DEMO_USER_ID
        if is_demo:
            email = settings.DEMO_USER_EMAIL
            name = "Demo User"
        else:
            fallback_email = f"{user_id}@wordwise.local"
            email = (x_user_email or "").strip()[:255] or fallback_email
            name = (x_user_name or "").strip()[:255] or "User"
            if email != fallback_email:
                taken = await db.scalar(select(User.id).where(User.email == email))
                if taken is not None:
                    logger.warning(
                        "Email %s already belongs to user=%s; using %s for user=%s",
                        email, taken, fallback_email, user_id,
                    )
                    email = fallback_email

        user = User(
            id=user_id,
            email=email,
            name=name,
            plan_type=PlanType.PRO if is_demo else PlanType.FREE,
        )
        db.add(user)
        await db.flush()
        logger.info("Created new user: id=%s email=%s", user_id, user.email)

    return user


async def get_authorized_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> CarouselProject:
    """
    Verify that the given carousel project belongs to the current user.
    Returns the project with its slides and template loaded, or raises 404.
    """
    result = await db.execute(
        select(CarouselProject)
        .options(
            selectinload(CarouselProject.slides),
            selectinload(CarouselProject.template),
        )
        .where(
            CarouselProject.id == project_id,
            CarouselProject.user_id == user_id,
        )
        .execution_options(populate_existing=True)
    )
    project = result.scalar_one_or_none()

    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )

    return project

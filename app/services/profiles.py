from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models import ProfileCreate, ProfileORM, ProfileRead
from app.services.errors import IntegrityException, NotFoundException

logger = logging.getLogger(__name__)


def create_profile(session: Session, payload: ProfileCreate) -> ProfileRead:
    profile = ProfileORM.model_validate(payload)
    session.add(profile)
    try:
        session.commit()
        session.refresh(profile)
        return ProfileRead.model_validate(profile)
    except IntegrityError as exc:
        session.rollback()
        raise IntegrityException(f"Profile already exists for user {payload.user_id}") from exc


def get_profile(session: Session, *, user_id: str) -> ProfileRead:
    if not (profile := session.exec(select(ProfileORM).where(ProfileORM.user_id == user_id)).one_or_none()):
        raise NotFoundException("Profile not found")
    return ProfileRead.model_validate(profile)


def increment_panel_creations(session: Session, *, user_id: str) -> bool:
    """Bump the caller's panel counter.

    Returns False when the user has no profile row, which is not an error.
    """
    profile = session.exec(select(ProfileORM).where(ProfileORM.user_id == user_id)).one_or_none()
    if profile is None:
        logger.debug("No profile for user_id=%s, counter not updated", user_id)
        return False
    profile.panel_creations_count += 1
    session.add(profile)
    session.commit()
    return True

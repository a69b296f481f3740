from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models import PanelCreate, PanelORM, PanelRead
from app.services.errors import NotFoundException, PersistenceException

logger = logging.getLogger(__name__)


def create_panel(session: Session, payload: PanelCreate) -> PanelRead:
    panel = PanelORM.model_validate(payload)
    session.add(panel)
    try:
        session.commit()
        session.refresh(panel)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Database error while saving panel for user_id=%s: %s", payload.user_id, exc)
        raise PersistenceException("Failed to save panel to database", details=str(exc)) from exc
    logger.info("Panel saved id=%s user_id=%s server_id=%s", panel.id, panel.user_id, panel.server_id)
    return PanelRead.model_validate(panel)


def list_panels(session: Session, *, user_id: str | None = None) -> list[PanelRead]:
    stmt = select(PanelORM).order_by(PanelORM.id)
    if user_id is not None:
        stmt = stmt.where(PanelORM.user_id == user_id)
    return [PanelRead.model_validate(p) for p in session.exec(stmt).all()]


def deactivate_panel(session: Session, *, panel_id: int) -> PanelRead:
    if not (panel := session.get(PanelORM, panel_id)):
        raise NotFoundException("Panel not found")
    panel.is_active = False
    session.add(panel)
    session.commit()
    session.refresh(panel)
    return PanelRead.model_validate(panel)

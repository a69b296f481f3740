from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models import ServerCreate, ServerORM, ServerRead, PanelORM
from app.pterodactyl import normalize_domain
from app.services.errors import IntegrityException, NotFoundException

logger = logging.getLogger(__name__)


def create_server(session: Session, payload: ServerCreate) -> ServerRead:
    server = ServerORM.model_validate(payload)
    server.domain = normalize_domain(server.domain)
    session.add(server)
    try:
        session.commit()
        session.refresh(server)
    except IntegrityError as exc:
        session.rollback()
        raise IntegrityException(f"A server with this name already exists: {payload.name}") from exc
    logger.info("Registered server id=%s name=%s domain=%s", server.id, server.name, server.domain)
    return ServerRead.model_validate(server)


def list_servers(session: Session) -> list[ServerRead]:
    return [ServerRead.model_validate(s) for s in session.exec(select(ServerORM).order_by(ServerORM.id)).all()]


def get_server_orm(session: Session, *, server_id: int) -> ServerORM:
    """Return the full record, API keys included. Never serialize this to a client."""
    if not (server := session.get(ServerORM, server_id)):
        raise NotFoundException("Server not found")
    return server


def get_server(session: Session, *, server_id: int) -> ServerRead:
    return ServerRead.model_validate(get_server_orm(session, server_id=server_id))


def delete_server(session: Session, *, server_id: int) -> ServerRead:
    server = get_server_orm(session, server_id=server_id)
    if session.exec(select(PanelORM).where(PanelORM.server_id == server_id)).first():
        raise IntegrityException(f"Server {server_id} still has panels")
    deleted = ServerRead.model_validate(server)
    session.delete(server)
    session.commit()
    logger.info("Deleted server id=%s", server_id)
    return deleted

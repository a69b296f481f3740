from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db import get_session
from app.models import ServerRead
from app.services import servers as server_service

router = APIRouter(prefix="/servers", tags=["servers"])


@router.get("", response_model=list[ServerRead])
def list_servers(session: Session = Depends(get_session)) -> list[ServerRead]:
    return server_service.list_servers(session)


@router.get("/{server_id}", response_model=ServerRead)
def get_server(server_id: int, session: Session = Depends(get_session)) -> ServerRead:
    return server_service.get_server(session, server_id=server_id)

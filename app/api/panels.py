from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlmodel import Session

from app.api.auth import get_current_claims
from app.db import get_session
from app.identity import Claims
from app.models import PanelRead, PanelRequest, ProvisionResponse
from app.pterodactyl import PterodactylClient
from app.services import panels as panel_service
from app.services.provisioning import ClientFactory, PanelProvisioner

router = APIRouter(tags=["panels"])


def get_client_factory() -> ClientFactory:
    return PterodactylClient


async def read_panel_request(request: Request, claims: Claims = Depends(get_current_claims)) -> PanelRequest:
    """Parse the body only once the caller is authenticated."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
        ) from exc
    try:
        return PanelRequest.model_validate(body)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False), body=body) from exc


@router.post(
    "/create-pterodactyl-panel",
    response_model=ProvisionResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": PanelRequest.model_json_schema(by_alias=True)}},
        }
    },
)
def create_pterodactyl_panel(
    payload: PanelRequest = Depends(read_panel_request),
    claims: Claims = Depends(get_current_claims),
    session: Session = Depends(get_session),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> ProvisionResponse:
    provisioner = PanelProvisioner(session=session, client_factory=client_factory)
    result = provisioner.provision(user_id=claims.sub, request=payload)
    return ProvisionResponse(
        panel=result.panel,
        ptero_user_id=result.user.ptero_user_id,
        ptero_server_id=result.server.ptero_server_id,
        message=result.message,
    )


@router.get("/panels", response_model=list[PanelRead])
def list_my_panels(
    claims: Claims = Depends(get_current_claims),
    session: Session = Depends(get_session),
) -> list[PanelRead]:
    return panel_service.list_panels(session, user_id=claims.sub)

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Literal

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.models import PanelCreate, PanelRead, PanelRequest, ServerORM
from app.pterodactyl import PanelAPIError, PterodactylClient
from app.services import panels as panel_service
from app.services import profiles as profile_service
from app.services import servers as server_service
from app.services.errors import ConflictException, UpstreamException

logger = logging.getLogger(__name__)

RemoteUserStatus = Literal["created", "reused"]
ProvisionOutcome = Literal["complete", "server_pending"]
ClientFactory = Callable[[str, str], PterodactylClient]

OUTCOME_MESSAGES: dict[str, str] = {
    "complete": "Panel created on Pterodactyl!",
    "server_pending": "User created on Pterodactyl. Server creation pending.",
}

# Pterodactyl answers a duplicate username or email with a validation error.
_VALIDATION_CONFLICT_STATUS = 422


@dataclass(frozen=True)
class RemoteUserResult:
    ptero_user_id: int
    status: RemoteUserStatus


@dataclass(frozen=True)
class RemoteServerResult:
    ptero_server_id: int | None
    error: str | None = None


@dataclass(frozen=True)
class ProvisionResult:
    panel: PanelRead
    user: RemoteUserResult
    server: RemoteServerResult

    @property
    def outcome(self) -> ProvisionOutcome:
        return "complete" if self.server.ptero_server_id is not None else "server_pending"

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]


class PanelProvisioner:
    """Provision a panel account for one caller on one Pterodactyl deployment.

    Steps run strictly in order and each declares its own failure policy:

    * remote user creation recovers locally from a 422 by looking the user up
      by email, and aborts on anything else;
    * remote server creation never aborts, it downgrades the outcome to
      ``server_pending``;
    * the panel insert aborts with a persistence error, leaving any remote
      resources in place;
    * the profile counter update only logs.
    """

    def __init__(self, *, session: Session, client_factory: ClientFactory | None = None) -> None:
        self._session = session
        self._client_factory = client_factory or PterodactylClient

    def provision(self, *, user_id: str, request: PanelRequest) -> ProvisionResult:
        logger.info(
            "Provisioning panel user_id=%s server_id=%s username=%s ram=%s cpu=%s disk=%s",
            user_id,
            request.server_id,
            request.username,
            request.ram,
            request.cpu,
            request.disk,
        )
        server = server_service.get_server_orm(self._session, server_id=request.server_id)
        logger.info("Server found: %s %s", server.name, server.domain)
        client = self._client_factory(server.domain, server.plta_key)

        remote_user = self._ensure_remote_user(client, request)
        remote_server = self._create_remote_server(client, server, remote_user, request)
        panel = panel_service.create_panel(
            self._session,
            PanelCreate(
                user_id=user_id,
                server_id=server.id,
                username=request.username,
                email=request.email,
                password=request.password,
                login_url=client.base_url,
                ram=request.ram,
                cpu=request.cpu,
                disk=request.disk,
                ptero_user_id=remote_user.ptero_user_id,
                ptero_server_id=remote_server.ptero_server_id,
                is_active=True,
            ),
        )
        self._count_panel_creation(user_id)

        result = ProvisionResult(panel=panel, user=remote_user, server=remote_server)
        logger.info(
            "Provisioned panel id=%s outcome=%s ptero_user_id=%s (%s) ptero_server_id=%s",
            panel.id,
            result.outcome,
            remote_user.ptero_user_id,
            remote_user.status,
            remote_server.ptero_server_id,
        )
        return result

    def _ensure_remote_user(self, client: PterodactylClient, request: PanelRequest) -> RemoteUserResult:
        try:
            ptero_user_id = client.create_user(
                email=request.email, username=request.username, password=request.password
            )
            logger.info("User created with ptero_user_id=%s", ptero_user_id)
            return RemoteUserResult(ptero_user_id=ptero_user_id, status="created")
        except PanelAPIError as exc:
            logger.error("Pterodactyl user creation error: %s", exc)
            if exc.status_code != _VALIDATION_CONFLICT_STATUS:
                raise UpstreamException(f"Pterodactyl API error: {exc.body}", status_code=exc.status_code) from exc

        try:
            existing_id = client.find_user_by_email(request.email)
        except PanelAPIError as exc:
            logger.error("Existing user lookup failed: %s", exc)
            raise UpstreamException("Failed to check existing user", status_code=500) from exc
        if existing_id is None:
            raise ConflictException("User creation failed: username or email already in use")
        logger.info("Found existing user ptero_user_id=%s", existing_id)
        return RemoteUserResult(ptero_user_id=existing_id, status="reused")

    def _create_remote_server(
        self,
        client: PterodactylClient,
        server: ServerORM,
        remote_user: RemoteUserResult,
        request: PanelRequest,
    ) -> RemoteServerResult:
        try:
            ptero_server_id = client.create_server(
                name=f"{request.username}-server",
                user_id=remote_user.ptero_user_id,
                egg_id=server.egg_id,
                location_id=server.location_id,
                memory=request.ram,
                cpu=request.cpu,
                disk=request.disk,
            )
        except (PanelAPIError, httpx.HTTPError) as exc:
            # TODO: reconcile panels left with ptero_server_id=None once allocations free up.
            logger.warning(
                "Server creation failed for ptero_user_id=%s, continuing with user only: %s",
                remote_user.ptero_user_id,
                exc,
            )
            return RemoteServerResult(ptero_server_id=None, error=str(exc))
        logger.info("Server created with ptero_server_id=%s", ptero_server_id)
        return RemoteServerResult(ptero_server_id=ptero_server_id)

    def _count_panel_creation(self, user_id: str) -> None:
        try:
            profile_service.increment_panel_creations(self._session, user_id=user_id)
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("Profile update error for user_id=%s", user_id)

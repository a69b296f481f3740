from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DOCKER_IMAGE = "ghcr.io/pterodactyl/yolks:nodejs_18"
STARTUP_COMMAND = "npm start"


class PanelAPIError(RuntimeError):
    """Non-2xx answer from the Pterodactyl Application API."""

    def __init__(self, *, message: str, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(self._build_message(message))

    def _build_message(self, message: str) -> str:
        detail = self.body.strip()
        if len(detail) > 400:
            detail = f"{detail[:397]}..."
        return f"{message} (status={self.status_code}, detail={detail!r})"


def normalize_domain(domain: str) -> str:
    return domain.rstrip("/")


class PterodactylClient:
    """Client for the Application API of a single Pterodactyl panel."""

    def __init__(self, domain: str, api_key: str, *, transport: httpx.BaseTransport | None = None) -> None:
        self.base_url = normalize_domain(domain)
        self._api_key = api_key
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        error_message: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        with httpx.Client(base_url=self.base_url, headers=self._headers(), transport=self._transport) as client:
            response = client.request(method, path, json=json, params=params)
        if not response.is_success:
            raise PanelAPIError(message=error_message, status_code=response.status_code, body=response.text)
        return response.json()

    def create_user(self, *, email: str, username: str, password: str) -> int:
        logger.info("Creating Pterodactyl user '%s' on %s", username, self.base_url)
        data = self._request(
            "POST",
            "/api/application/users",
            error_message=f"Failed to create user {username}",
            json={
                "email": email,
                "username": username,
                "first_name": username,
                "last_name": "User",
                "password": password,
            },
        )
        return data["attributes"]["id"]

    def find_user_by_email(self, email: str) -> int | None:
        logger.debug("Looking up Pterodactyl user by email on %s", self.base_url)
        data = self._request(
            "GET",
            "/api/application/users",
            error_message="Failed to look up user by email",
            params={"filter[email]": email},
        )
        if not (users := data.get("data")):
            return None
        return users[0]["attributes"]["id"]

    def create_server(
        self,
        *,
        name: str,
        user_id: int,
        egg_id: int,
        location_id: int,
        memory: int,
        cpu: int,
        disk: int,
    ) -> int:
        logger.info(
            "Creating Pterodactyl server '%s' for user_id=%s on %s (memory=%s cpu=%s disk=%s)",
            name,
            user_id,
            self.base_url,
            memory,
            cpu,
            disk,
        )
        data = self._request(
            "POST",
            "/api/application/servers",
            error_message=f"Failed to create server {name}",
            json={
                "name": name,
                "user": user_id,
                "egg": egg_id,
                "docker_image": DOCKER_IMAGE,
                "startup": STARTUP_COMMAND,
                "environment": {"STARTUP_CMD": STARTUP_COMMAND},
                "limits": {"memory": memory, "swap": 0, "disk": disk, "io": 500, "cpu": cpu},
                "feature_limits": {"databases": 1, "backups": 1, "allocations": 1},
                "allocation": {"default": 1},
                "deploy": {"locations": [location_id], "dedicated_ip": False, "port_range": []},
            },
        )
        return data["attributes"]["id"]
